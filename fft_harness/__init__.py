"""
Differential correctness and benchmark harness for FFT implementations.
"""
from .exceptions import (
    HarnessError,
    InvalidSizeError,
    BuildError,
    ArtifactNotFoundError,
    AmbiguousArtifactError,
    DatasetIOError,
    CandidateExecutionError,
    CandidateTimeoutError,
    OutputParseError,
    MismatchError,
)
from .utils import (
    round_half_away,
    format_sample,
    parse_sample,
    parse_samples,
    parity_assert,
    is_power_of_two,
)
from .generator import generate_signal
from .transform import reference_transform, cooley_tukey
from .dataset import materialize_dataset, generate_datasets, load_dataset
from .artifacts import ArtifactSpec, find_artifact, resolve_artifact
from .runner import Candidate, check_all
from .benchmark import BenchmarkResult, benchmark_candidate, summarize

__version__ = "0.1.0"

__all__ = [
    "HarnessError",
    "InvalidSizeError",
    "BuildError",
    "ArtifactNotFoundError",
    "AmbiguousArtifactError",
    "DatasetIOError",
    "CandidateExecutionError",
    "CandidateTimeoutError",
    "OutputParseError",
    "MismatchError",
    "round_half_away",
    "format_sample",
    "parse_sample",
    "parse_samples",
    "parity_assert",
    "is_power_of_two",
    "generate_signal",
    "reference_transform",
    "cooley_tukey",
    "materialize_dataset",
    "generate_datasets",
    "load_dataset",
    "ArtifactSpec",
    "find_artifact",
    "resolve_artifact",
    "Candidate",
    "check_all",
    "BenchmarkResult",
    "benchmark_candidate",
    "summarize",
]
