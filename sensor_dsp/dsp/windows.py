"""Window functions used prior to the range and Doppler FFT.

The choice of window influences leakage in the spectral domain.  This
module exposes one generator per supported window type, a simple factory
that selects a generator by name, and a length keyed cache so that a
pipeline processing many frames only builds each table once.

All windows are symmetric (`w[n] == w[N-1-n]`) with values in [0, 1]
and are defined for lengths `N >= 2`:

* Hamming:          0.54 - 0.46 cos(2 pi n / (N-1))
* Hann:             0.5 (1 - cos(2 pi n / (N-1)))
* Blackman:         0.42 - 0.5 cos(2 pi n / (N-1)) + 0.08 cos(4 pi n / (N-1))
* Blackman-Harris:  a0 - a1 cos(2 pi n/(N-1)) + a2 cos(4 pi n/(N-1)) - a3 cos(6 pi n/(N-1))
  with a = (0.35875, 0.48829, 0.14128, 0.01168)
"""

from __future__ import annotations

from functools import lru_cache
from typing import Callable, Dict

import numpy as np
from scipy import signal

from ..errors import ContractError


def _finish(win: np.ndarray) -> np.ndarray:
    # Cosine sums can land a few ulps below zero at the end points.
    return np.clip(win, 0.0, 1.0)


def _check_length(length: int) -> None:
    if length < 2:
        raise ContractError(f"window length must be at least 2, got {length}")


def hamming(length: int) -> np.ndarray:
    """Return a symmetric Hamming window of `length` taps."""
    _check_length(length)
    return _finish(signal.windows.hamming(length, sym=True))


def hann(length: int) -> np.ndarray:
    """Return a symmetric Hann window of `length` taps."""
    _check_length(length)
    return _finish(signal.windows.hann(length, sym=True))


def blackman(length: int) -> np.ndarray:
    """Return a symmetric Blackman window of `length` taps."""
    _check_length(length)
    return _finish(signal.windows.blackman(length, sym=True))


def blackmanharris(length: int) -> np.ndarray:
    """Return a symmetric four-term Blackman-Harris window of `length` taps."""
    _check_length(length)
    return _finish(signal.windows.blackmanharris(length, sym=True))


WINDOWS: Dict[str, Callable[[int], np.ndarray]] = {
    "hamming": hamming,
    "hann": hann,
    "hanning": hann,
    "blackman": blackman,
    "blackmanharris": blackmanharris,
    "blackman_harris": blackmanharris,
}


def get_window(name: str, length: int) -> np.ndarray:
    """Return a freshly generated window of a given type and length.

    Parameters
    ----------
    name : str
        The window type.  Supported values are 'hamming', 'hann',
        'blackman' and 'blackmanharris' (case insensitive).
    length : int
        The number of samples in the window.

    Returns
    -------
    np.ndarray
        A one-dimensional float64 array of `length` coefficients.
    """
    try:
        generator = WINDOWS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown window type: {name}") from None
    return generator(int(length))


@lru_cache(maxsize=32)
def cached_window(name: str, length: int) -> np.ndarray:
    """Return a read-only window table, generated once per (name, length).

    Frames of the same shape reuse the same table.  The array is marked
    read-only so that no caller can corrupt the shared copy.
    """
    win = get_window(name, length)
    win.setflags(write=False)
    return win
