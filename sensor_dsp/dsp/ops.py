"""Elementary in-place array operations.

These utilities operate on caller-owned NumPy buffers and modify them in
place.  Every function works along the last axis, so a 2-D buffer of
shape `(rows, length)` is processed row by row.
"""

from __future__ import annotations

import numpy as np

from ..errors import ContractError
from .checks import check_complex, check_real, check_writeable


def _check_inplace(name: str, v: np.ndarray) -> None:
    if not isinstance(v, np.ndarray):
        raise ContractError(f"{name} must be a numpy array, got {type(v).__name__}")
    if v.ndim == 0 or v.shape[-1] == 0:
        raise ContractError(f"{name} must hold at least one element along the last axis")
    check_writeable(name, v)


def mean_removal(v: np.ndarray) -> np.ndarray:
    """Subtract the arithmetic mean from every element of a real buffer.

    Parameters
    ----------
    v : np.ndarray
        Real floating point buffer.  Modified in place.

    Returns
    -------
    np.ndarray
        The same buffer, for chaining.
    """
    _check_inplace("v", v)
    check_real("v", v)
    v -= v.mean(axis=-1, keepdims=True)
    return v


def cmplx_mean_removal(v: np.ndarray) -> np.ndarray:
    """Subtract the complex mean from every element of a complex buffer.

    The mean is the complex sum divided by the (real) element count.
    Computed in two passes: a sum, then a subtraction.
    """
    _check_inplace("v", v)
    check_complex("v", v)
    total = v.sum(axis=-1, keepdims=True)
    v -= total / v.shape[-1]
    return v


def rotate(v: np.ndarray, k: int) -> np.ndarray:
    """Rotate `v` left by `k` positions in place (`v[0]` moves to `v[-k]`)."""
    _check_inplace("v", v)
    if k < 0:
        raise ContractError("k must be non-negative")
    v[...] = np.roll(v, -k, axis=-1)
    return v


def flip(v: np.ndarray) -> np.ndarray:
    """Reverse the order of the elements of `v` in place."""
    _check_inplace("v", v)
    v[...] = v[..., ::-1].copy()
    return v


def shift_cfft(v: np.ndarray) -> np.ndarray:
    """Move the zero frequency bin of each complex row to the centre.

    Equivalent to `np.fft.fftshift` along the last axis; odd lengths
    rotate by `(len + 1) // 2`.
    """
    _check_inplace("v", v)
    check_complex("v", v)
    length = v.shape[-1]
    return rotate(v, (length + 1) // 2)
