"""Validation helpers for caller-owned buffers.

Every stage receives NumPy arrays whose shape plays the role of a 2-D
buffer descriptor.  The helpers below make the shape, dtype and aliasing
requirements explicit and raise `ContractError` on violation.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from ..errors import ContractError


def check_shape(name: str, arr: np.ndarray, shape: Tuple[int, ...]) -> None:
    """Raise if `arr` is not an ndarray of exactly `shape`."""
    if not isinstance(arr, np.ndarray):
        raise ContractError(f"{name} must be a numpy array, got {type(arr).__name__}")
    if arr.shape != tuple(shape):
        raise ContractError(f"{name} must have shape {tuple(shape)}, got {arr.shape}")


def check_ndim(name: str, arr: np.ndarray, ndim: int) -> None:
    if not isinstance(arr, np.ndarray):
        raise ContractError(f"{name} must be a numpy array, got {type(arr).__name__}")
    if arr.ndim != ndim:
        raise ContractError(f"{name} must be {ndim}-D, got shape {arr.shape}")


def check_real(name: str, arr: np.ndarray) -> None:
    if not np.issubdtype(arr.dtype, np.floating):
        raise ContractError(f"{name} must have a real floating dtype, got {arr.dtype}")


def check_complex(name: str, arr: np.ndarray) -> None:
    if not np.issubdtype(arr.dtype, np.complexfloating):
        raise ContractError(f"{name} must have a complex dtype, got {arr.dtype}")


def check_writeable(name: str, arr: np.ndarray) -> None:
    if not arr.flags.writeable:
        raise ContractError(f"{name} must be writeable")


def check_distinct(name_a: str, a: np.ndarray, name_b: str, b: np.ndarray) -> None:
    """Raise if the two buffers share memory."""
    if np.shares_memory(a, b):
        raise ContractError(f"{name_a} and {name_b} must be separately allocated buffers")


def check_window(window: Optional[np.ndarray], length: int) -> None:
    """A window is optional, but when given it must be real with `length` taps."""
    if window is None:
        return
    check_shape("window", window, (length,))
    check_real("window", window)
