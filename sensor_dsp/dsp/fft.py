"""FFT stages for range and Doppler processing.

This module provides the range transform (along the fast-time/sample
axis of a frame) and the Doppler transform (along the slow-time/chirp
axis of the range-bin buffer).  Each stage optionally removes the mean
and applies a window before transforming.

Every stage object owns an `FFTPlan` configured for one transform
length.  A frame of a different length reconfigures the plan; a length
outside the supported set raises `ArgumentError` before any buffer is
touched and leaves the plan on its previous length.  Stage objects are
not meant to be shared between threads.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import numpy as np

from ..errors import ArgumentError
from .checks import (
    check_complex,
    check_distinct,
    check_ndim,
    check_real,
    check_shape,
    check_window,
    check_writeable,
)
from .ops import cmplx_mean_removal, mean_removal as remove_mean

logger = logging.getLogger(__name__)

#: Lengths accepted by the real-to-complex transform.
REAL_FFT_LENGTHS: Tuple[int, ...] = tuple(2 ** n for n in range(5, 13))
#: Lengths accepted by the complex transform.
COMPLEX_FFT_LENGTHS: Tuple[int, ...] = tuple(2 ** n for n in range(4, 13))


class FFTPlan:
    """Forward FFT of a fixed, configurable length.

    Parameters
    ----------
    real : bool
        Plan a real-to-complex transform instead of a complex one.
    """

    def __init__(self, real: bool = False) -> None:
        self.real = real
        self.length = 0

    @property
    def supported_lengths(self) -> Tuple[int, ...]:
        return REAL_FFT_LENGTHS if self.real else COMPLEX_FFT_LENGTHS

    def configure(self, length: int) -> None:
        """Prepare the plan for `length` points; no-op if already configured."""
        if length == self.length:
            return
        if length not in self.supported_lengths:
            kind = "real" if self.real else "complex"
            raise ArgumentError(f"Unsupported {kind} FFT length: {length}")
        logger.debug("Reconfiguring %s FFT plan: %d -> %d", "real" if self.real else "complex", self.length, length)
        self.length = length

    def forward(self, x: np.ndarray) -> np.ndarray:
        """Transform `x` along its last axis."""
        if self.real:
            return np.fft.rfft(x, n=self.length, axis=-1)
        return np.fft.fft(x, n=self.length, axis=-1)


class RangeFFT:
    """Range transform of real raw radar data.

    The input frame has shape `(num_chirps_per_frame, num_samples_per_chirp)`
    and the output has `num_samples_per_chirp // 2` complex range bins per
    chirp.  The imaginary part of the DC bin is forced to zero.
    """

    def __init__(self) -> None:
        self.plan = FFTPlan(real=True)

    def __call__(
        self,
        frame: np.ndarray,
        out: Optional[np.ndarray] = None,
        mean_removal: bool = False,
        window: Optional[np.ndarray] = None,
    ) -> np.ndarray:
        """Compute the range FFT of `frame`.

        Parameters
        ----------
        frame : np.ndarray
            Real raw data of shape `(chirps, samples)`.  Modified in place
            when `mean_removal` is set or a window is given.
        out : np.ndarray, optional
            Complex destination of shape `(chirps, samples // 2)`.
            Allocated when omitted.
        mean_removal : bool
            Remove the mean of each chirp before the FFT.
        window : np.ndarray, optional
            Real window of `samples` taps applied before the FFT.

        Returns
        -------
        np.ndarray
            The range-bin buffer.
        """
        check_ndim("frame", frame, 2)
        check_real("frame", frame)
        num_chirps, num_samples = frame.shape
        num_bins = num_samples // 2
        check_window(window, num_samples)
        if out is None:
            out = np.empty((num_chirps, num_bins), dtype=np.result_type(frame.dtype, np.complex64))
        check_shape("out", out, (num_chirps, num_bins))
        check_complex("out", out)
        check_distinct("frame", frame, "out", out)
        if mean_removal or window is not None:
            check_writeable("frame", frame)
        self.plan.configure(num_samples)

        if mean_removal:
            remove_mean(frame)
        if window is not None:
            frame *= window
        out[...] = self.plan.forward(frame)[:, :num_bins]
        out.imag[:, 0] = 0.0
        return out


class RangeCFFT:
    """In-place range transform of complex raw radar data.

    The frame of shape `(chirps, samples)` is replaced by its range
    spectrum of `samples` bins per chirp.
    """

    def __init__(self) -> None:
        self.plan = FFTPlan(real=False)

    def __call__(
        self,
        frame: np.ndarray,
        mean_removal: bool = False,
        window: Optional[np.ndarray] = None,
    ) -> np.ndarray:
        check_ndim("frame", frame, 2)
        check_complex("frame", frame)
        check_writeable("frame", frame)
        num_samples = frame.shape[1]
        check_window(window, num_samples)
        self.plan.configure(num_samples)

        if mean_removal:
            cmplx_mean_removal(frame)
        if window is not None:
            frame *= window
        frame[...] = self.plan.forward(frame)
        return frame


class DopplerFFT:
    """Doppler transform of a range-bin buffer.

    The range buffer of shape `(chirps, range_bins)` is transposed into a
    separately allocated buffer of shape `(range_bins, chirps)`; each row,
    i.e. the chirp sequence of one range bin, is then transformed in place.
    """

    def __init__(self) -> None:
        self.plan = FFTPlan(real=False)

    def __call__(
        self,
        range_bins: np.ndarray,
        out: Optional[np.ndarray] = None,
        mean_removal: bool = False,
        window: Optional[np.ndarray] = None,
    ) -> np.ndarray:
        """Compute the Doppler FFT of `range_bins`.

        Parameters
        ----------
        range_bins : np.ndarray
            Complex range-bin buffer of shape `(chirps, range_bins)`.
            Not modified.
        out : np.ndarray, optional
            Complex destination of shape `(range_bins, chirps)`.  Must not
            share memory with `range_bins`.  Allocated when omitted.
        mean_removal : bool
            Remove the complex mean of each range bin across chirps.
        window : np.ndarray, optional
            Real window of `chirps` taps.

        Returns
        -------
        np.ndarray
            The range-Doppler buffer with axes `[range_bin, doppler_bin]`.
        """
        check_ndim("range_bins", range_bins, 2)
        check_complex("range_bins", range_bins)
        num_chirps, num_range_bins = range_bins.shape
        check_window(window, num_chirps)
        if out is None:
            out = np.empty((num_range_bins, num_chirps), dtype=range_bins.dtype)
        check_shape("out", out, (num_range_bins, num_chirps))
        check_complex("out", out)
        check_writeable("out", out)
        check_distinct("range_bins", range_bins, "out", out)
        self.plan.configure(num_chirps)

        out[...] = range_bins.T
        if mean_removal:
            cmplx_mean_removal(out)
        if window is not None:
            out *= window
        out[...] = self.plan.forward(out)
        return out


def range_fft(
    frame: np.ndarray,
    out: Optional[np.ndarray] = None,
    mean_removal: bool = False,
    window: Optional[np.ndarray] = None,
) -> np.ndarray:
    """One-shot range FFT of real data; see `RangeFFT`."""
    return RangeFFT()(frame, out=out, mean_removal=mean_removal, window=window)


def range_cfft(
    frame: np.ndarray,
    mean_removal: bool = False,
    window: Optional[np.ndarray] = None,
) -> np.ndarray:
    """One-shot in-place range FFT of complex data; see `RangeCFFT`."""
    return RangeCFFT()(frame, mean_removal=mean_removal, window=window)


def doppler_fft(
    range_bins: np.ndarray,
    out: Optional[np.ndarray] = None,
    mean_removal: bool = False,
    window: Optional[np.ndarray] = None,
) -> np.ndarray:
    """One-shot Doppler FFT; see `DopplerFFT`."""
    return DopplerFFT()(range_bins, out=out, mean_removal=mean_removal, window=window)
