"""Deterministic two-tone reference signal."""
from __future__ import annotations

import numpy as np

from .exceptions import InvalidSizeError
from .utils import Signal, is_power_of_two

# (amplitude, frequency) of each tone
TONES = ((1.0, 10.0), (0.5, 25.0))


def generate_signal(size: int) -> Signal:
    """
    Generate the unrounded reference input of length ``size``.

    For sample i, with theta = i / size * pi:
        re = 1.0 * cos(10 * theta) + 0.5 * cos(25 * theta)
        im = 1.0 * sin(10 * theta) + 0.5 * sin(25 * theta)

    Parameters
    ----------
    size : int
        Signal length; must be a power of two

    Returns
    -------
    ndarray of complex128, shape (size,)

    Raises
    ------
    InvalidSizeError
        If size is not a power of two
    """
    if not is_power_of_two(size):
        raise InvalidSizeError(size)

    theta = np.arange(size, dtype=np.float64) / size * np.pi
    re = np.zeros(size, dtype=np.float64)
    im = np.zeros(size, dtype=np.float64)
    for amplitude, freq in TONES:
        re = re + amplitude * np.cos(freq * theta)
        im = im + amplitude * np.sin(freq * theta)

    signal = np.empty(size, dtype=np.complex128)
    signal.real = re
    signal.imag = im
    return signal
