"""
Differential runner: drive a candidate as a subprocess and compare its output.

A ``Candidate`` is an opaque program: it is spawned with a fixed command
line, its standard output is captured in full, parsed as ``re,im`` lines and
compared with exact equality against the rounded reference output for each
size. The first failing size aborts the check for that candidate.
"""
from __future__ import annotations

import logging
import subprocess
import threading
import time
from pathlib import Path
from typing import Dict, List, Optional

from .exceptions import (
    CandidateExecutionError,
    CandidateTimeoutError,
    MismatchError,
    OutputParseError,
)
from .utils import Signal, parity_assert, parse_samples

logger = logging.getLogger(__name__)


class RunResult:
    """Outcome of one candidate process."""

    def __init__(self, stdout: bytes, stderr: bytes, returncode: int, elapsed: float):
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode
        self.elapsed = elapsed

    def __repr__(self):
        return (
            f"RunResult(returncode={self.returncode}, stdout={len(self.stdout)} bytes, "
            f"elapsed={self.elapsed:.4f}s)"
        )


class CheckResult:
    """Elapsed wall time of one successful differential check."""

    def __init__(self, name: str, size: int, n_samples: int, elapsed: float):
        self.name = name
        self.size = size
        self.n_samples = n_samples
        self.elapsed = elapsed

    def __repr__(self):
        return f"CheckResult(name={self.name}, size={self.size}, elapsed={self.elapsed:.4f}s)"


class Candidate:
    """
    A named, reusable command line for one implementation under test.

    Parameters
    ----------
    name : str
        Used in every diagnostic
    command : list of str
        Executable and fixed arguments; never modified after construction
    timeout : float, optional
        Seconds to wait for each process before killing it; None waits forever
    stdin_dir : Path, optional
        When set, ``stdin_dir / f"{size}.dat"`` is fed to the process's
        standard input; otherwise standard input is empty

    Notes
    -----
    ``run`` holds a per-candidate lock for the whole lifetime of the child
    process, so concurrent benchmark workers never time two processes of the
    same candidate at once. The command is reused; every call spawns a new
    process.
    """

    def __init__(
        self,
        name: str,
        command: List[str],
        timeout: Optional[float] = None,
        stdin_dir: Optional[Path] = None,
    ):
        if not command:
            raise ValueError(f"{name}: command must not be empty")
        self.name = name
        self.command = tuple(str(token) for token in command)
        self.timeout = timeout
        self.stdin_dir = Path(stdin_dir) if stdin_dir is not None else None
        self._lock = threading.Lock()

    @classmethod
    def from_spec(cls, spec, artifact: Path, timeout=None, inputs_dir=None, feed_stdin=False):
        """Build a candidate from an ``ArtifactSpec`` and its resolved artifact path."""
        stdin_dir = inputs_dir if (feed_stdin or spec.reads_stdin) else None
        if stdin_dir is None:
            logger.warning("the %s demo reads no input; it only prints to stdout", spec.name)
        return cls(spec.name, spec.command_for(artifact), timeout=timeout, stdin_dir=stdin_dir)

    def __str__(self):
        return self.name

    def __repr__(self):
        return f"Candidate(name={self.name!r}, command={list(self.command)!r})"

    def stdin_path(self, size: Optional[int]) -> Optional[Path]:
        if self.stdin_dir is None or size is None:
            return None
        return self.stdin_dir / f"{size}.dat"

    def run(self, size: Optional[int] = None) -> RunResult:
        """
        Spawn the command once and wait for it to exit.

        The exit status is recorded but not interpreted.

        Raises
        ------
        CandidateExecutionError
            If the process cannot be started or its input cannot be opened
        CandidateTimeoutError
            If ``timeout`` is set and exceeded; the process is killed
        """
        stdin_path = self.stdin_path(size)
        with self._lock:
            logger.debug("running %s", " ".join(self.command))
            try:
                stdin = open(stdin_path, "rb") if stdin_path is not None else None
            except OSError as exc:
                raise CandidateExecutionError(self.name, size, f"cannot open input {stdin_path}: {exc}") from exc

            start = time.perf_counter()
            try:
                proc = subprocess.run(
                    list(self.command),
                    stdin=stdin if stdin is not None else subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    timeout=self.timeout,
                    check=False,
                )
            except subprocess.TimeoutExpired as exc:
                raise CandidateTimeoutError(self.name, size, self.timeout) from exc
            except OSError as exc:
                raise CandidateExecutionError(self.name, size, f"failed to execute: {exc}") from exc
            finally:
                if stdin is not None:
                    stdin.close()
            elapsed = time.perf_counter() - start

        if proc.returncode != 0:
            logger.warning("%s exited with status %d", self.name, proc.returncode)
        if proc.stderr:
            logger.debug("%s stderr:\n%s", self.name, proc.stderr.decode("utf-8", errors="replace"))
        return RunResult(proc.stdout, proc.stderr, proc.returncode, elapsed)

    def output(self, size: Optional[int] = None):
        """Run once and parse standard output; returns ``(samples, RunResult)``."""
        result = self.run(size)
        try:
            text = result.stdout.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CandidateExecutionError(self.name, size, f"stdout is not valid UTF-8: {exc}") from exc

        try:
            samples = parse_samples(text)
        except OutputParseError as exc:
            exc.name = self.name
            exc.size = size
            raise
        return samples, result

    def check(self, size: int, expected: Signal) -> CheckResult:
        """
        Run the differential check for one size.

        Raises
        ------
        OutputParseError
            If a stdout line is malformed
        MismatchError
            If the parsed output differs from ``expected`` in length or value
        """
        logger.info("testing the %s FFT demo where size=%s", self.name, size)
        actual, result = self.output(size)
        logger.info("elapsed %.3fs", result.elapsed)

        try:
            parity_assert(expected, actual, name=self.name, size=size)
        except MismatchError:
            logger.error("%s FFT demo where size=%s: FAILED", self.name, size)
            raise
        logger.info("%s FFT demo where size=%s: OK", self.name, size)
        return CheckResult(self.name, size, len(actual), result.elapsed)

    def assert_working(self, reference_set: Dict[int, Signal]) -> List[CheckResult]:
        """
        Check every size of ``reference_set`` in ascending order.

        Stops at the first failing size; the exception propagates.
        """
        return [self.check(size, reference_set[size]) for size in sorted(reference_set)]


def check_all(candidates: List[Candidate], reference_set: Dict[int, Signal]) -> Dict[str, List[CheckResult]]:
    """Check candidates one after another; the first failure aborts the run."""
    results = {}
    for candidate in candidates:
        logger.info("checking the correctness of the %s FFT demo...", candidate.name)
        results[candidate.name] = candidate.assert_working(reference_set)
    return results
