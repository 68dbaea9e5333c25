"""
Custom exceptions for the differential harness.

Every failure is fatal to the run: nothing here is meant to be caught and
recovered from inside the harness, only reported by the run controller.
"""


class HarnessError(Exception):
    """Base class for all harness failures."""

    pass


class InvalidSizeError(HarnessError, ValueError):
    """
    Raised when a transform size is not a power of two.

    Examples
    --------
    - generate_signal(12)
    - materialize_dataset(data_dir, 0)
    """

    def __init__(self, size):
        self.size = size
        super().__init__(f"size must be a power of two, got {size!r}")


class BuildError(HarnessError):
    """Raised when a candidate's external build command exits non-zero."""

    def __init__(self, name: str, command: list, cwd, returncode: int):
        self.name = name
        self.command = list(command)
        self.cwd = cwd
        self.returncode = returncode
        super().__init__(
            f"building {name} failed ({returncode}): {' '.join(self.command)} (cwd={cwd})"
        )


class ArtifactNotFoundError(HarnessError, FileNotFoundError):
    """Raised when no build-output entry matches a candidate's naming predicate."""

    def __init__(self, name: str, search_dir, pattern: str):
        self.name = name
        self.search_dir = search_dir
        self.pattern = pattern
        super().__init__(f"{name}: artifact not found in {search_dir} (expected {pattern})")


class AmbiguousArtifactError(HarnessError):
    """Raised when more than one build-output entry matches a naming predicate."""

    def __init__(self, name: str, search_dir, pattern: str, matches: list):
        self.name = name
        self.search_dir = search_dir
        self.pattern = pattern
        self.matches = list(matches)
        listed = ", ".join(str(m) for m in self.matches)
        super().__init__(
            f"{name}: ambiguous artifact in {search_dir} (expected {pattern}), "
            f"{len(self.matches)} matches: {listed}"
        )


class DatasetIOError(HarnessError, OSError):
    """Raised when reading or writing a data file or directory fails."""

    def __init__(self, operation: str, path, cause: OSError):
        self.operation = operation
        self.path = path
        self.cause = cause
        super().__init__(f"failed to {operation} {path}: {cause}")


class CandidateExecutionError(HarnessError):
    """Raised when a candidate process cannot be spawned or its output cannot be read."""

    def __init__(self, name: str, size, message: str):
        self.name = name
        self.size = size
        super().__init__(f"{name} (size={size}): {message}")


class CandidateTimeoutError(CandidateExecutionError):
    """Raised when a candidate process outlives its configured timeout."""

    def __init__(self, name: str, size, timeout: float):
        self.timeout = timeout
        super().__init__(name, size, f"timed out after {timeout:g}s")


class OutputParseError(HarnessError, ValueError):
    """
    Raised when a line of candidate output is not two comma-separated floats.

    Attributes
    ----------
    lineno : int
        1-based line number of the offending line
    line : str
        The offending line, verbatim
    """

    def __init__(self, lineno: int, line: str, reason: str):
        self.lineno = lineno
        self.line = line
        self.reason = reason
        self.name = None
        self.size = None
        super().__init__(f"line {lineno}: {reason}: {line!r}")

    def __str__(self):
        prefix = ""
        if self.name is not None:
            prefix = f"{self.name} (size={self.size}): "
        return f"{prefix}line {self.lineno}: {self.reason}: {self.line!r}"


class MismatchError(HarnessError, AssertionError):
    """Raised when a candidate's output differs from the reference output."""

    def __init__(self, name: str, size: int, expected, actual, diff: str):
        self.name = name
        self.size = size
        self.expected = expected
        self.actual = actual
        self.diff = diff
        super().__init__(diff)
