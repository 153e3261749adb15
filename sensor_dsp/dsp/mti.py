"""Moving target indication (MTI) clutter filter.

The filter keeps an exponential moving average of past inputs in a
history buffer and outputs the difference between the current input and
that average, which suppresses static background returns:

    y(t) = x(t) - h(t-1)
    h(t) = h(t-1) + alpha * y(t)  ==  (1 - alpha) * h(t-1) + alpha * x(t)

`alpha = 0` keeps the history frozen (highest historical influence),
`alpha = 1` replaces it by the latest input (lowest historical influence).
The history buffer may be supplied by the caller, in which case it must
outlive the filter.  It is only cleared by `init`.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from ..errors import ContractError
from .checks import check_distinct, check_shape, check_writeable


class MTIFilter:
    """Exponential-average clutter canceller with caller-owned history.

    Parameters
    ----------
    alpha : float
        Update factor in [0, 1].
    length : int
        Number of elements processed per call.
    history : np.ndarray, optional
        One-dimensional buffer of `length` elements used as filter memory.
        Real or complex, matching the data that will be filtered.  When
        omitted a float64 buffer is allocated.
    """

    def __init__(self, alpha: float, length: int, history: Optional[np.ndarray] = None) -> None:
        self.init(alpha, length, history)

    def init(self, alpha: float, length: int, history: Optional[np.ndarray] = None) -> None:
        """(Re)initialise the filter and zero-fill its history."""
        if not 0.0 <= alpha <= 1.0:
            raise ContractError(f"alpha must lie in [0, 1], got {alpha}")
        if length < 1:
            raise ContractError(f"length must be positive, got {length}")
        if history is None:
            history = np.zeros(length)
        check_shape("history", history, (length,))
        check_writeable("history", history)
        history.fill(0)
        self.alpha = float(alpha)
        self.len = int(length)
        self.history = history

    def apply(self, data: np.ndarray, out: Optional[np.ndarray] = None) -> np.ndarray:
        """Filter one block of `len` samples.

        Parameters
        ----------
        data : np.ndarray
            Current input, shape `(len,)`, whose dtype must fit the history.
            May be the same buffer as `out` but not the history.
        out : np.ndarray, optional
            Output buffer, shape `(len,)`.  Must not share memory with the
            history.  Allocated when omitted.

        Returns
        -------
        np.ndarray
            The output buffer holding `data - history`.
        """
        check_shape("data", data, (self.len,))
        result_type = np.result_type(data, self.history)
        if not np.can_cast(result_type, self.history.dtype, "same_kind"):
            raise ContractError(f"data of dtype {data.dtype} does not fit history of dtype {self.history.dtype}")
        if out is None:
            out = np.empty(self.len, dtype=result_type)
        check_shape("out", out, (self.len,))
        if not np.can_cast(result_type, out.dtype, "same_kind"):
            raise ContractError(f"out of dtype {out.dtype} cannot hold {result_type} results")
        check_distinct("data", data, "history", self.history)
        check_distinct("out", out, "history", self.history)
        # Subtraction must complete before the history accumulates.
        np.subtract(data, self.history, out=out)
        self.history += self.alpha * out
        return out

    __call__ = apply
