"""
Utilities for rounding, text encoding and comparison of complex samples.

Rounding is the only tolerance mechanism in the harness: reference inputs and
reference outputs are rounded to ``INPUT_PRECISION`` fractional digits, and
candidate output is compared against them with exact float equality.
"""
from __future__ import annotations

import difflib
from typing import Iterable, List

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .config import INPUT_PRECISION
from .exceptions import MismatchError, OutputParseError

Signal = NDArray[np.complex128]


def is_power_of_two(n) -> bool:
    """Return True for 1, 2, 4, 8, ... and False for everything else (including 0 and bools)."""
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)):
        return False
    return n > 0 and (int(n) & (int(n) - 1)) == 0


def next_power_of_two(n: int) -> int:
    """Smallest power of two >= n (1 for n <= 1)."""
    if n <= 1:
        return 1
    return 1 << (int(n) - 1).bit_length()


def _round_real(x: NDArray[np.float64], scale: float) -> NDArray[np.float64]:
    # Half away from zero. y - trunc(y) is exact, so no double rounding on y + 0.5.
    y = x * scale
    with np.errstate(invalid="ignore"):
        whole = np.trunc(y)
        bump = np.where(np.abs(y - whole) >= 0.5, np.sign(y), 0.0)
    return (whole + bump) / scale


def round_half_away(values: ArrayLike, precision: int = INPUT_PRECISION):
    """
    Round real or complex values to ``precision`` fractional digits.

    Multiplies by 10**precision, rounds to the nearest integer with ties going
    away from zero, and divides back. Real and imaginary parts are rounded
    independently. The division (rather than multiplying by 10**-precision)
    guarantees the result is the double nearest to the decimal value, i.e. the
    same double that parsing its text form yields.

    Parameters
    ----------
    values : array-like
        Scalar or array, real or complex
    precision : int
        Number of fractional decimal digits

    Returns
    -------
    ndarray or scalar
        Same shape as the input; complex input gives complex output

    Examples
    --------
    >>> float(round_half_away(0.125))
    0.13
    >>> float(round_half_away(-0.125))
    -0.13
    """
    scale = 10.0 ** precision
    arr = np.asarray(values)
    if np.iscomplexobj(arr):
        out = np.empty(arr.shape, dtype=np.complex128)
        out.real = _round_real(arr.real.astype(np.float64), scale)
        out.imag = _round_real(arr.imag.astype(np.float64), scale)
    else:
        out = _round_real(arr.astype(np.float64), scale)
    return out[()] if out.ndim == 0 else out


def format_sample(sample: complex, precision: int = INPUT_PRECISION) -> str:
    """Render one sample as ``"re,im"`` with exactly ``precision`` fractional digits."""
    return f"{sample.real:.{precision}f},{sample.imag:.{precision}f}"


def format_samples(samples: Iterable[complex], precision: int = INPUT_PRECISION) -> List[str]:
    return [format_sample(s, precision) for s in samples]


def _parse_field(text: str) -> float:
    # float() also takes padding and underscores
    if text != text.strip() or "_" in text:
        raise ValueError(text)
    return float(text)


def parse_sample(line: str, lineno: int = 1) -> complex:
    """
    Parse one ``"re,im"`` line.

    The line is split once on the first comma; both halves must parse as plain
    floats, with no surrounding whitespace and no digit separators.

    Raises
    ------
    OutputParseError
        If the comma is missing or either half is not a number
    """
    re_text, sep, im_text = line.partition(",")
    if not sep:
        raise OutputParseError(lineno, line, "expected a comma")
    try:
        re_value = _parse_field(re_text)
        im_value = _parse_field(im_text)
    except ValueError:
        raise OutputParseError(lineno, line, "expected two floating-point numbers") from None
    return complex(re_value, im_value)


def parse_samples(text: str) -> Signal:
    """
    Parse newline-separated ``"re,im"`` lines into a complex128 array, in order.

    Lines end at a line feed only; a carriage return before it is dropped and a
    final line feed does not start an empty line.
    """
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    lines = [line[:-1] if line.endswith("\r") else line for line in lines]
    samples = [parse_sample(line, lineno) for lineno, line in enumerate(lines, start=1)]
    return np.array(samples, dtype=np.complex128)


def _render(samples) -> List[str]:
    # repr keeps digits beyond the rounding precision visible in diffs
    return [f"{z.real!r},{z.imag!r}" for z in (complex(s) for s in samples)]


def describe_mismatch(expected: Signal, actual: Signal, label: str = "") -> str:
    """
    Build a human-readable diagnostic for two differing sample sequences.

    The header names the label, both lengths and the first differing index;
    the body is a unified diff of the full sequences, one sample per line.
    """
    n_common = min(len(expected), len(actual))
    differs = np.nonzero(np.asarray(expected[:n_common]) != np.asarray(actual[:n_common]))[0]
    if len(differs):
        first = f"first difference at index {int(differs[0])}"
    else:
        first = f"first difference at index {n_common} (length)"

    header = [
        f"{label}: output differs from reference" if label else "output differs from reference",
        f"expected {len(expected)} samples, got {len(actual)}; {first}",
    ]
    body = difflib.unified_diff(
        _render(expected),
        _render(actual),
        fromfile="expected",
        tofile="actual",
        n=max(len(expected), len(actual)),
        lineterm="",
    )
    return "\n".join(header + list(body))


def parity_assert(expected: Signal, actual: Signal, name: str = "", size: int = None) -> None:
    """
    Assert two sample sequences are identical, by length and by exact value.

    No epsilon is applied: the expected values are already rounded, so a correct
    candidate must print values rounded to at least the same precision.

    Raises
    ------
    MismatchError
        With the full expected/actual sequences and a unified diff
    """
    expected = np.asarray(expected, dtype=np.complex128)
    actual = np.asarray(actual, dtype=np.complex128)

    if expected.shape == actual.shape and np.array_equal(expected, actual):
        return

    label = f"{name} (size={size})" if name else (f"size={size}" if size is not None else "")
    raise MismatchError(name, size, expected, actual, describe_mismatch(expected, actual, label))
