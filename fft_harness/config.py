"""
Run parameters and candidate descriptors.

Everything here is a plain module-level constant; the CLI and the
``FFT_HARNESS_*`` environment variables override them at run time.
"""
import os
import sys
from pathlib import Path

from .artifacts import ArtifactSpec

# =========================
# Parameters
# =========================
INPUT_PRECISION = 2

DEFAULT_SIZES = (16384,)
ALL_SIZES = (4, 64, 256, 1024, 4096, 16384)

DATA_DIR_NAME = "data"
BINS_DIR_NAME = "bins"

BENCH_WARMUP = 1
BENCH_ITERS = 10
BENCH_WORKERS = 1

RUN_TIMEOUT = None          # seconds; None waits forever

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

CANDIDATES_DIR = Path(__file__).resolve().parent / "candidates"

ROOT_ENV = "FFT_HARNESS_ROOT"
TIMEOUT_ENV = "FFT_HARNESS_TIMEOUT"


# =========================
# Candidates
# =========================
CANDIDATES = [
    ArtifactSpec(
        "MoonBit",
        build_command=["moon", "build", "--target=native"],
        build_cwd="mbt",
        search_dir="mbt/target/native/release/build/main",
        exact="main.exe",
        artifact_name="mbt.exe",
        command=["{artifact}"],
    ),
    ArtifactSpec(
        "OpenJDK",
        build_command=["mvn", "package"],
        build_cwd="java",
        search_dir="java/target",
        prefix="fft",
        suffix=".jar",
        artifact_name="java.jar",
        command=["java", "-jar", "{artifact}"],
    ),
    ArtifactSpec(
        "GraalVM",
        build_command=["mvn", "-Pnative", "package"],
        build_cwd="java",
        search_dir="java/target",
        exact="fft",
        artifact_name="java.exe",
        command=["{artifact}"],
    ),
    ArtifactSpec(
        "Python",
        search_dir=CANDIDATES_DIR,
        exact="cooley_tukey.py",
        artifact_name="python.py",
        command=[sys.executable, "{artifact}"],
    ),
]


def resolve_root(cli_root=None) -> Path:
    """Working root: the CLI value, else $FFT_HARNESS_ROOT, else the current directory."""
    if cli_root:
        return Path(cli_root).expanduser().resolve()
    env_root = os.environ.get(ROOT_ENV)
    if env_root:
        return Path(env_root).expanduser().resolve()
    return Path.cwd()


def resolve_timeout(cli_timeout=None):
    """Subprocess timeout in seconds: the CLI value, else $FFT_HARNESS_TIMEOUT, else RUN_TIMEOUT."""
    if cli_timeout is not None:
        return cli_timeout
    env_timeout = os.environ.get(TIMEOUT_ENV)
    if env_timeout:
        try:
            return float(env_timeout)
        except ValueError as exc:
            raise ValueError(f"{TIMEOUT_ENV} must be a number of seconds, got {env_timeout!r}") from exc
    return RUN_TIMEOUT


def select_candidates(only=None, skip=None, candidates=None):
    """
    Filter candidate descriptors by name (case-insensitive), keeping their order.

    Unknown names in ``only`` or ``skip`` raise ValueError.
    """
    candidates = CANDIDATES if candidates is None else candidates
    known = {spec.name.lower(): spec for spec in candidates}

    for wanted in list(only or []) + list(skip or []):
        if wanted.lower() not in known:
            raise ValueError(f"unknown candidate {wanted!r}; choose from {', '.join(s.name for s in candidates)}")

    only_set = {n.lower() for n in only} if only else None
    skip_set = {n.lower() for n in skip or []}
    return [
        spec for spec in candidates
        if (only_set is None or spec.name.lower() in only_set) and spec.name.lower() not in skip_set
    ]
