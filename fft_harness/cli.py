"""
Command-line run controller.

Usage:
    python -m fft_harness generate [--sizes 4 64 ...] [--outputs]
    python -m fft_harness check    [--only MoonBit ...] [--stdin] [--timeout S]
    python -m fft_harness bench    [--iterations N] [--workers K] [--json PATH]

Setup (data generation, builds, artifact resolution) and verification run
strictly in order; the first failure aborts with a non-zero exit status.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from . import config
from .artifacts import resolve_all
from .benchmark import benchmark_all, summarize
from .dataset import INPUTS_DIR, generate_datasets
from .exceptions import HarnessError
from .runner import Candidate, check_all

logger = logging.getLogger("fft_harness")


def print_header(title: str, file=None):
    """Print a formatted header."""
    line = "=" * 80
    print(f"\n{line}\n{title:^80}\n{line}", file=file or sys.stdout)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fft-harness",
        description="Differential correctness and performance harness for FFT implementations.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="check",
        choices=("generate", "check", "bench"),
        help="what to run (default: check)",
    )
    parser.add_argument("--root", help=f"working root (default: ${config.ROOT_ENV} or the current directory)")

    sizes = parser.add_mutually_exclusive_group()
    sizes.add_argument("--sizes", type=int, nargs="+", metavar="N", help="power-of-two sizes to check")
    sizes.add_argument("--all-sizes", action="store_true", help=f"use {list(config.ALL_SIZES)}")

    parser.add_argument("--only", nargs="+", metavar="NAME", help="run only these candidates")
    parser.add_argument("--skip", nargs="+", metavar="NAME", help="skip these candidates")
    parser.add_argument("--outputs", action="store_true", help="also write data/outputs/{size}.dat")
    parser.add_argument("--stdin", action="store_true", help="feed data/inputs/{size}.dat to every candidate")
    parser.add_argument("--timeout", type=float, help="seconds before a candidate process is killed")

    parser.add_argument("--iterations", type=int, default=config.BENCH_ITERS, help="timed runs per candidate")
    parser.add_argument("--warmup", type=int, default=config.BENCH_WARMUP, help="untimed runs per candidate")
    parser.add_argument("--workers", type=int, default=config.BENCH_WORKERS, help="concurrent benchmark threads")
    parser.add_argument("--json", type=Path, metavar="PATH", help="write the benchmark report as JSON")

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="warnings and errors only")
    return parser


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(level=level, format=config.LOG_FORMAT, stream=sys.stderr)


def prepare_candidates(specs, root: Path, data_dir: Path, timeout, feed_stdin: bool):
    """Build and resolve every selected candidate, then wrap each in a ``Candidate``."""
    bins_dir = root / config.BINS_DIR_NAME
    artifacts = resolve_all(specs, root, bins_dir)
    return [
        Candidate.from_spec(
            spec,
            artifacts[spec.name],
            timeout=timeout,
            inputs_dir=data_dir / INPUTS_DIR,
            feed_stdin=feed_stdin,
        )
        for spec in specs
    ]


def write_report(path: Path, summary, args, sizes) -> None:
    report = {
        "generated_at": datetime.now().isoformat(timespec="seconds"),
        "config": {
            "sizes": list(sizes),
            "iterations": args.iterations,
            "warmup": args.warmup,
            "workers": args.workers,
            "stdin": args.stdin,
        },
        "results": json.loads(summary.to_json(orient="records")),
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        f.write(json.dumps(report, indent=2))
    logger.info("benchmark report written to %s", path)


def run(args) -> int:
    root = config.resolve_root(args.root)
    data_dir = root / config.DATA_DIR_NAME
    sizes = args.sizes or (config.ALL_SIZES if args.all_sizes else config.DEFAULT_SIZES)
    timeout = config.resolve_timeout(args.timeout)

    logger.info("generating test data...")
    reference_set = generate_datasets(data_dir, sizes, output_files=args.outputs)
    if args.command == "generate":
        print(f"Wrote {len(reference_set)} dataset(s) under {data_dir}")
        return 0

    specs = config.select_candidates(args.only, args.skip)
    candidates = prepare_candidates(specs, root, data_dir, timeout, args.stdin)
    checks = check_all(candidates, reference_set)

    print_header("DIFFERENTIAL CHECK")
    for name, results in checks.items():
        for result in results:
            print(f"{name:<10} size={result.size:<8} elapsed {result.elapsed * 1000:>10.3f} ms  OK")

    if args.command == "bench":
        results = benchmark_all(candidates, reference_set, args.iterations, args.warmup, args.workers)
        summary = summarize(results)
        print_header("BENCHMARK")
        print(summary.to_string(index=False, float_format=lambda v: f"{v:.3f}"))
        if args.json:
            write_report(args.json, summary, args, list(reference_set))
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose, args.quiet)

    try:
        return run(args)
    except HarnessError as exc:
        logger.error("%s", exc)
        return 1
    except ValueError as exc:
        parser.error(str(exc))


if __name__ == "__main__":
    raise SystemExit(main())
