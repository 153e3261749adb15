"""Range–Doppler map computation.

`FramePipeline` chains the processing stages applied to every frame:

    [mean removal] -> [window] -> range FFT -> [MTI] -> transpose
        -> [mean removal] -> [window] -> Doppler FFT -> [FFT shift]

The pipeline owns its stage objects (and therefore their FFT plans), its
MTI state and a window cache keyed by length, so one instance should be
used per sensor stream.  `compute_range_doppler_map` is a convenience
wrapper that builds one pipeline per antenna from a configuration, handles
multi-antenna cubes and returns a magnitude map.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np

from .fft import DopplerFFT, RangeCFFT, RangeFFT
from .mti import MTIFilter
from .ops import shift_cfft
from .windows import cached_window


def magnitude_db(x: np.ndarray, eps: float = 1e-6) -> np.ndarray:
    """Compute magnitude of a complex array in decibels.

    Adds a small epsilon before taking the log to avoid log of zero.
    """
    return 20.0 * np.log10(np.abs(x) + eps)


def magnitude_linear(x: np.ndarray) -> np.ndarray:
    """Compute linear magnitude of a complex array."""
    return np.abs(x)


class FramePipeline:
    """Range and Doppler processing of single-antenna frames.

    Parameters
    ----------
    range_window, doppler_window : str, optional
        Window names (see `sensor_dsp.dsp.windows`).  `None` disables
        windowing for that stage.
    range_mean_removal, doppler_mean_removal : bool
        Remove the mean before the respective FFT.
    mti_alpha : float, optional
        When set, an MTI filter with this alpha is applied to the range-bin
        buffer of every frame before the Doppler FFT.
    shift : bool
        Centre zero Doppler in the output.
    """

    def __init__(
        self,
        range_window: Optional[str] = None,
        doppler_window: Optional[str] = None,
        range_mean_removal: bool = False,
        doppler_mean_removal: bool = False,
        mti_alpha: Optional[float] = None,
        shift: bool = True,
    ) -> None:
        self.range_window = range_window
        self.doppler_window = doppler_window
        self.range_mean_removal = range_mean_removal
        self.doppler_mean_removal = doppler_mean_removal
        self.mti_alpha = mti_alpha
        self.shift = shift
        self.range_stage = RangeFFT()
        self.range_cstage = RangeCFFT()
        self.doppler_stage = DopplerFFT()
        self.mti: Optional[MTIFilter] = None

    @staticmethod
    def _window(name: Optional[str], length: int) -> Optional[np.ndarray]:
        if name is None:
            return None
        return cached_window(name, length)

    def range_transform(self, frame: np.ndarray) -> np.ndarray:
        """Run the range stage; `frame` is modified in place."""
        window = self._window(self.range_window, frame.shape[-1])
        if np.iscomplexobj(frame):
            return self.range_cstage(frame, mean_removal=self.range_mean_removal, window=window)
        return self.range_stage(frame, mean_removal=self.range_mean_removal, window=window)

    def _apply_mti(self, range_bins: np.ndarray) -> np.ndarray:
        size = range_bins.size
        if self.mti is None or self.mti.len != size:
            self.mti = MTIFilter(self.mti_alpha, size, np.zeros(size, dtype=range_bins.dtype))
        return self.mti(range_bins.ravel()).reshape(range_bins.shape)

    def process(self, frame: np.ndarray, out: Optional[np.ndarray] = None) -> np.ndarray:
        """Turn one frame `(chirps, samples)` into a range–Doppler buffer.

        Returns a complex array of shape `(range_bins, chirps)`.  `frame`
        is modified in place when mean removal or windowing is enabled.
        """
        range_bins = self.range_transform(frame)
        if self.mti_alpha is not None:
            range_bins = self._apply_mti(range_bins)
        window = self._window(self.doppler_window, range_bins.shape[0])
        rd = self.doppler_stage(range_bins, out=out, mean_removal=self.doppler_mean_removal, window=window)
        if self.shift:
            shift_cfft(rd)
        return rd

    __call__ = process


def pipeline_from_config(cfg: Dict[str, Any] | None = None) -> FramePipeline:
    """Instantiate a `FramePipeline` from the `dsp` section of a configuration.

    Recognised keys are `range` and `doppler` (each a dict with `window`
    and `mean_removal`), `mti_alpha` and `shift`.
    """
    cfg = cfg or {}
    range_cfg = cfg.get("range", {}) or {}
    doppler_cfg = cfg.get("doppler", {}) or {}
    mti_alpha = cfg.get("mti_alpha")
    return FramePipeline(
        range_window=range_cfg.get("window"),
        doppler_window=doppler_cfg.get("window"),
        range_mean_removal=bool(range_cfg.get("mean_removal", False)),
        doppler_mean_removal=bool(doppler_cfg.get("mean_removal", False)),
        mti_alpha=None if mti_alpha is None else float(mti_alpha),
        shift=bool(cfg.get("shift", True)),
    )


def compute_range_doppler_map(
    cube: np.ndarray,
    cfg: Dict[str, Any] | None = None,
    pipelines: Sequence[FramePipeline] | None = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """Compute the range–Doppler map and return both the map and the complex cube.

    Parameters
    ----------
    cube : np.ndarray
        Raw frame `(chirps, samples)` or cube `(antennas, chirps, samples)`.
        The input is copied, never modified.
    cfg : dict, optional
        `dsp` configuration section.  Besides the keys understood by
        `pipeline_from_config` it accepts `aggregate` (`'max'` or `'sum'`
        over antennas) and `magnitude` (`'db'` or `'linear'`).
    pipelines : sequence of FramePipeline, optional
        One pipeline per antenna, reused across frames so that FFT plans
        and MTI history persist.  Built from `cfg` when omitted.

    Returns
    -------
    tuple
        `(rd_map, rd_cube)` where `rd_map` is a real 2-D array with axes
        `[range_bin, doppler_bin]` and `rd_cube` is the complex cube of
        shape `(antennas, range_bins, doppler_bins)`.
    """
    cfg = cfg or {}
    frames = cube[np.newaxis] if cube.ndim == 2 else cube
    if frames.ndim != 3:
        raise ValueError(f"Expected a 2-D frame or 3-D cube, got shape {cube.shape}")
    if pipelines is None:
        pipelines = [pipeline_from_config(cfg) for _ in range(frames.shape[0])]
    if len(pipelines) != frames.shape[0]:
        raise ValueError(f"Need one pipeline per antenna, got {len(pipelines)} for {frames.shape[0]}")
    dtype = np.complex128 if np.iscomplexobj(frames) else np.float64
    rd_cube = np.stack(
        [pipeline.process(np.array(frame, dtype=dtype)) for pipeline, frame in zip(pipelines, frames)]
    )
    aggregate = cfg.get("aggregate", "max")
    # Aggregate over antennas
    if aggregate == "max":
        rd_agg = np.max(np.abs(rd_cube), axis=0)
    elif aggregate == "sum":
        rd_agg = np.sum(np.abs(rd_cube), axis=0)
    else:
        raise ValueError(f"Unsupported aggregation: {aggregate}")
    magnitude = cfg.get("magnitude", "db")
    if magnitude == "db":
        rd_map = magnitude_db(rd_agg)
    elif magnitude == "linear":
        rd_map = magnitude_linear(rd_agg)
    else:
        raise ValueError(f"Unsupported magnitude mode: {magnitude}")
    return rd_map, rd_cube
