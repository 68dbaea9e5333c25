"""
Benchmark driver: time repeated full-process invocations of each candidate.

Every iteration spawns a fresh process, so the measured cost includes process
start-up, runtime/interpreter initialisation, the transform itself and
teardown. This is the quantity that matters when comparing implementations
across languages.
"""
from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional

import numpy as np
import pandas as pd

from .config import BENCH_ITERS, BENCH_WARMUP, BENCH_WORKERS
from .runner import Candidate

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = [
    "candidate",
    "size",
    "iterations",
    "workers",
    "median_ms",
    "mean_ms",
    "min_ms",
    "max_ms",
    "std_ms",
    "runs_per_s",
]


class BenchmarkResult:
    """Container for benchmark results."""

    def __init__(
        self,
        candidate: str,
        size: Optional[int],
        workers: int,
        times: List[float],
        wall_time: float,
    ):
        self.candidate = candidate
        self.size = size
        self.workers = workers
        self.times = list(times)
        self.wall_time = wall_time

    @property
    def iterations(self) -> int:
        return len(self.times)

    @property
    def median_ms(self) -> float:
        return float(np.median(self.times)) * 1000

    @property
    def runs_per_s(self) -> float:
        return self.iterations / self.wall_time if self.wall_time > 0 else float("nan")

    def as_row(self) -> dict:
        times_ms = np.asarray(self.times) * 1000
        return {
            "candidate": self.candidate,
            "size": self.size,
            "iterations": self.iterations,
            "workers": self.workers,
            "median_ms": self.median_ms,
            "mean_ms": float(np.mean(times_ms)),
            "min_ms": float(np.min(times_ms)),
            "max_ms": float(np.max(times_ms)),
            "std_ms": float(np.std(times_ms)),
            "runs_per_s": self.runs_per_s,
        }

    def __repr__(self):
        return (
            f"BenchmarkResult(candidate={self.candidate}, size={self.size}, "
            f"iterations={self.iterations}, workers={self.workers}, "
            f"median={self.median_ms:.3f}ms)"
        )


def benchmark_candidate(
    candidate: Candidate,
    size: Optional[int] = None,
    iterations: int = BENCH_ITERS,
    warmup: int = BENCH_WARMUP,
    workers: int = BENCH_WORKERS,
) -> BenchmarkResult:
    """
    Run ``candidate`` to completion ``iterations`` times and record each run.

    Parameters
    ----------
    candidate : Candidate
        Already verified candidate
    size : int, optional
        Input size, used only when the candidate is fed its input file
    iterations : int
        Number of timed runs; must be positive
    warmup : int
        Untimed runs before measuring (file cache, JIT, page cache)
    workers : int
        Threads issuing runs concurrently. Runs of one candidate are still
        serialized by its lock; each recorded time covers only the process
        itself, never the wait for the lock.

    Returns
    -------
    BenchmarkResult
    """
    if iterations < 1:
        raise ValueError(f"iterations must be >= 1, got {iterations}")
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")

    for _ in range(warmup):
        candidate.run(size)

    logger.info("benchmarking the %s FFT demo (%d runs, %d workers)", candidate.name, iterations, workers)
    start = time.perf_counter()
    if workers == 1:
        times = [candidate.run(size).elapsed for _ in range(iterations)]
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            times = [r.elapsed for r in pool.map(lambda _: candidate.run(size), range(iterations))]
    wall_time = time.perf_counter() - start

    result = BenchmarkResult(candidate.name, size, workers, times, wall_time)
    logger.info("%s: median %.3f ms, %.2f runs/s", candidate.name, result.median_ms, result.runs_per_s)
    return result


def benchmark_all(
    candidates: Iterable[Candidate],
    sizes: Iterable[int],
    iterations: int = BENCH_ITERS,
    warmup: int = BENCH_WARMUP,
    workers: int = BENCH_WORKERS,
) -> List[BenchmarkResult]:
    """
    Benchmark each candidate.

    Candidates fed their input are benchmarked once per size; the others
    always compute the same transform and are benchmarked once.
    """
    sizes = sorted(sizes)
    results = []
    for candidate in candidates:
        run_sizes = sizes if candidate.stdin_dir is not None else [None]
        for size in run_sizes:
            results.append(benchmark_candidate(candidate, size, iterations, warmup, workers))
    return results


def summarize(results: Iterable[BenchmarkResult]) -> pd.DataFrame:
    """Collect results into a table, one row per (candidate, size), fastest first."""
    rows = [r.as_row() for r in results]
    df = pd.DataFrame(rows, columns=SUMMARY_COLUMNS)
    if df.empty:
        return df
    df["size"] = df["size"].astype("Int64")
    return df.sort_values("median_ms", kind="stable").reset_index(drop=True)
