"""
Forward discrete Fourier transforms with unitary normalization.

``reference_transform`` is the oracle every candidate is checked against.
``cooley_tukey`` is an independent radix-2 implementation of the same
contract, used to cross-check the oracle and to drive the built-in Python
candidate.
"""
from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike
from scipy import fft as sp_fft

from .exceptions import InvalidSizeError
from .utils import Signal, is_power_of_two, next_power_of_two


def reference_transform(signal: ArrayLike) -> Signal:
    """
    Compute the forward DFT of ``signal`` scaled by 1/sqrt(n).

    The transform length n is the next power of two >= len(signal); shorter
    inputs are zero-padded. With unitary scaling the output energy equals the
    input energy (Parseval).

    Returns
    -------
    ndarray of complex128, shape (n,)
    """
    x = np.asarray(signal, dtype=np.complex128)
    n = next_power_of_two(len(x))
    return sp_fft.fft(x, n=n, norm="ortho")


def _cooley_tukey(x: Signal) -> Signal:
    n = len(x)
    if n == 1:
        return x.copy()

    even = _cooley_tukey(x[0::2])
    odd = _cooley_tukey(x[1::2])

    twiddle = np.exp(-2j * np.pi * np.arange(n // 2) / n) * odd
    return np.concatenate([even + twiddle, even - twiddle])


def cooley_tukey(signal: ArrayLike) -> Signal:
    """
    Recursive radix-2 decimation-in-time FFT, scaled by 1/sqrt(n).

    Raises
    ------
    InvalidSizeError
        If len(signal) is not a power of two
    """
    x = np.asarray(signal, dtype=np.complex128)
    if not is_power_of_two(len(x)):
        raise InvalidSizeError(len(x))
    return _cooley_tukey(x) / np.sqrt(len(x))
