"""Peak search on one-dimensional profiles.

`peak_search` scans a real profile (range, Doppler or angle spectrum)
once from left to right and reports candidate target indices.  A sample
is a peak when it

1. exceeds `height`,
2. exceeds both immediate neighbours by at least `threshold`,
3. is not within `distance` of the previously accepted peak, unless it is
   higher, in which case it replaces that peak in place,
4. when `width > 1`, is at least `width` samples wide at half its
   topographic prominence.

The result is deterministic but greedy: replacement only compares with
the last accepted peak, so the returned set is not necessarily the set of
tallest peaks.  The first and last samples are never candidates.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np

from ..dsp.checks import check_ndim
from ..errors import ContractError

# Single precision machine epsilon, the default neighbour threshold.
FLT_EPSILON = float(np.finfo(np.float32).eps)


@dataclass
class PeakSearchOptions:
    """Acceptance criteria for `peak_search`.

    Attributes
    ----------
    height : float
        Minimum absolute amplitude; a peak must be strictly higher.
    threshold : float
        Minimum vertical distance to both neighbouring samples.
    distance : int
        Minimal index separation (>= 1) between neighbouring peaks.
    width : int
        Minimal peak width in samples at half prominence.  Values <= 1
        disable the width check.
    """

    height: float = float("-inf")
    threshold: float = FLT_EPSILON
    distance: int = 1
    width: int = 1

    def __post_init__(self) -> None:
        if self.distance < 1:
            raise ContractError(f"distance must be >= 1, got {self.distance}")

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> "PeakSearchOptions":
        """Build options from a configuration dictionary, ignoring unknown keys."""
        height = cfg.get("height")
        threshold = cfg.get("threshold")
        distance = cfg.get("distance")
        width = cfg.get("width")
        return cls(
            height=float("-inf") if height is None else float(height),
            threshold=FLT_EPSILON if threshold is None else float(threshold),
            distance=1 if distance is None else int(distance),
            width=1 if width is None else int(width),
        )


def prominence(x: np.ndarray, peak_index: int) -> float:
    """Topographic prominence of the sample at `peak_index`.

    Walks outwards on each side until a higher sample is met, tracking the
    lowest sample seen.  The prominence is measured from the higher of the
    two bases.
    """
    peak_val = x[peak_index]
    min_lhs = peak_val
    for i in range(peak_index - 1, -1, -1):
        if x[i] > peak_val:
            break
        min_lhs = min(min_lhs, x[i])
    min_rhs = peak_val
    for i in range(peak_index + 1, len(x)):
        if x[i] > peak_val:
            break
        min_rhs = min(min_rhs, x[i])
    return float(peak_val - max(min_lhs, min_rhs))


def peak_width(x: np.ndarray, peak_index: int, depth: float) -> int:
    """Width in samples of the peak at `depth` below its top.

    The width is the index distance between the nearest samples on either
    side that drop below `x[peak_index] - depth`.  A side without such a
    sample counts as index 0, so peaks running into the array edge may
    report an undersized (even negative) width.
    """
    level = x[peak_index] - depth
    right = next((i for i in range(peak_index + 1, len(x)) if x[i] < level), 0)
    left = next((i for i in range(peak_index - 1, -1, -1) if x[i] < level), 0)
    return right - left


def peak_search(
    x: np.ndarray,
    max_peaks: int,
    options: Optional[PeakSearchOptions] = None,
    out: Optional[np.ndarray] = None,
) -> np.ndarray:
    """Find up to `max_peaks` peaks in `x`.

    Parameters
    ----------
    x : np.ndarray
        One-dimensional real profile.
    max_peaks : int
        Maximum number of peaks to report.
    options : PeakSearchOptions, optional
        Acceptance criteria.  Defaults to `PeakSearchOptions()`.
    out : np.ndarray, optional
        Integer buffer of at least `max_peaks` elements receiving the
        indices.  Allocated when omitted.

    Returns
    -------
    np.ndarray
        View of the first `count` entries of `out`, in scan order.  Empty
        when no peak qualifies.
    """
    check_ndim("x", x, 1)
    if options is None:
        options = PeakSearchOptions()
    if out is None:
        out = np.zeros(max(max_peaks, 0), dtype=np.intp)
    elif out.shape[0] < max_peaks:
        raise ContractError(f"out holds {out.shape[0]} entries, fewer than max_peaks={max_peaks}")
    if max_peaks <= 0:
        return out[:0]

    count = 0
    last_peak = 0
    for i in range(1, len(x) - 1):
        if x[i] <= options.height:
            continue

        sample_thresh = x[i] - options.threshold
        if sample_thresh < x[i - 1] or sample_thresh < x[i + 1]:
            continue

        replace = False
        if count > 0 and last_peak > i - options.distance:
            if x[last_peak] < x[i]:
                replace = True
            else:
                continue

        if options.width > 1:
            half_prominence = 0.5 * prominence(x, i)
            if peak_width(x, i, half_prominence) < options.width:
                continue

        if not replace:
            count += 1
        out[count - 1] = i
        last_peak = i

        if count >= max_peaks:
            break
    return out[:count]
