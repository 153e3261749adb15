"""Angle of arrival estimation.

Two estimators are provided:

* **Digital beamforming** multiplies a precomputed steering matrix with
  antenna data (`angle_dbf`).  The steering matrix is generated once per
  antenna geometry and wavelength with `gen_steering_matrix`.
* **Monopulse** derives the angle from the phase difference between two
  closely spaced receive channels (`angle_monopulse`).
"""

from __future__ import annotations

import functools
import math
import operator
from typing import Optional, Tuple

import numpy as np

from ..errors import ArgumentError, ContractError, Status
from .checks import check_ndim, check_shape

PI_2 = math.pi / 2.0


def gen_steering_matrix(
    ang_est_range: float,
    num_angles: int,
    antenna_spacing_mm: float,
    lambda_mm: float,
    num_antennas: int,
) -> np.ndarray:
    """Generate the steering matrix for a uniform linear array.

    The beams span `-ang_est_range` to `+ang_est_range` in `num_angles`
    equal steps.  Row `k`, column `n` holds the conjugate steering phase
    `exp(-j * 2 pi * d * n * sin(theta_k) / lambda)` so that the matrix
    can be used directly by `angle_dbf`.

    Parameters
    ----------
    ang_est_range : float
        Single sided field of view in radians, in `(0, pi/2]`.  Zero is
        perpendicular to the antenna plane.
    num_angles : int
        Number of beams, at least 2.
    antenna_spacing_mm : float
        Distance between adjacent antennas.
    lambda_mm : float
        Wavelength at the operating frequency, same unit as the spacing.
    num_antennas : int
        Number of receive antennas, at least 2.

    Returns
    -------
    np.ndarray
        Complex matrix of shape `(num_angles, num_antennas)`.
    """
    if not 0.0 < ang_est_range <= PI_2:
        raise ContractError(f"ang_est_range must lie in (0, pi/2], got {ang_est_range}")
    if num_angles < 2:
        raise ContractError("num_angles must be at least 2")
    if num_antennas < 2:
        raise ContractError("num_antennas must be at least 2")
    if antenna_spacing_mm <= 0 or lambda_mm <= 0:
        raise ContractError("antenna spacing and wavelength must be positive")

    angles = steering_angles(ang_est_range, num_angles)
    coefficient = -math.pi * (2.0 * antenna_spacing_mm / lambda_mm)
    phase = coefficient * np.sin(angles)[:, None] * np.arange(num_antennas)[None, :]
    return np.cos(phase) + 1j * np.sin(phase)


def steering_angles(ang_est_range: float, num_angles: int) -> np.ndarray:
    """Return the beam angles (radians) of a matrix from `gen_steering_matrix`."""
    return np.linspace(-ang_est_range, ang_est_range, num_angles)


def angle_dbf(data: np.ndarray, steering: np.ndarray, out: Optional[np.ndarray] = None) -> np.ndarray:
    """Beamform antenna data with a steering matrix.

    Parameters
    ----------
    data : np.ndarray
        Complex matrix `(num_antennas, num_samples)`.
    steering : np.ndarray
        Complex matrix `(num_angles, num_antennas)`.
    out : np.ndarray, optional
        Complex matrix `(num_angles, num_samples)`.

    Returns
    -------
    np.ndarray
        `steering @ data`.
    """
    check_ndim("data", data, 2)
    check_ndim("steering", steering, 2)
    if steering.shape[1] != data.shape[0]:
        raise ContractError(
            f"steering has {steering.shape[1]} antenna columns but data has {data.shape[0]} rows"
        )
    if out is None:
        return np.matmul(steering, data)
    check_shape("out", out, (steering.shape[0], data.shape[1]))
    return np.matmul(steering, data, out=out)


def arcsin(x: float) -> Tuple[float, Status]:
    """Arc sine in radians, saturating at +-pi/2 for `|x| >= 1`.

    Inside the unit interval the value is `atan2(x, sqrt(1 - x**2))`.
    A square root argument that is not a finite non-negative number
    (NaN input) gives `(0.0, Status.ARGUMENT_ERROR)`.
    """
    if x >= 1.0:
        return PI_2, Status.OK
    if x <= -1.0:
        return -PI_2, Status.OK
    radicand = 1.0 - x * x
    if not radicand >= 0.0:
        return 0.0, Status.ARGUMENT_ERROR
    return math.atan2(x, math.sqrt(radicand)), Status.OK


def wrap_phase(delta: np.ndarray) -> np.ndarray:
    """Wrap phase differences into `(-pi, pi]` with a single 2 pi correction."""
    two_pi = 2.0 * math.pi
    return np.where(delta <= -math.pi, delta + two_pi, np.where(delta > math.pi, delta - two_pi, delta))


def angle_monopulse(
    rx1: np.ndarray,
    rx2: np.ndarray,
    wavelength: float,
    antenna_spacing: float,
    out: Optional[np.ndarray] = None,
) -> np.ndarray:
    """Estimate the direction of arrival from two antenna channels.

    For every sample the phases of `rx1` and `rx2` are taken with a four
    quadrant arctangent, their difference is wrapped once into
    `(-pi, pi]` and converted to an angle with
    `arcsin(dphi * wavelength / (2 pi * antenna_spacing))`.

    Parameters
    ----------
    rx1, rx2 : np.ndarray
        Complex vectors of equal, non-zero length.
    wavelength : float
        Wavelength in metres, positive.
    antenna_spacing : float
        Antenna distance in metres, positive.
    out : np.ndarray, optional
        Real output vector.  Allocated when omitted.

    Returns
    -------
    np.ndarray
        Angles in radians.

    Raises
    ------
    ArgumentError
        If the arc sine failed for any sample.  All samples are still
        evaluated and written to `out` before the error is raised.
    """
    check_ndim("rx1", rx1, 1)
    check_shape("rx2", rx2, rx1.shape)
    if rx1.size == 0:
        raise ContractError("rx1 and rx2 must not be empty")
    if wavelength <= 0 or antenna_spacing <= 0:
        raise ContractError("wavelength and antenna_spacing must be positive")
    if out is None:
        out = np.empty(rx1.shape, dtype=np.float64)
    check_shape("out", out, rx1.shape)

    ratio = wavelength / antenna_spacing / (2.0 * math.pi)
    delta_phi = wrap_phase(np.arctan2(rx1.imag, rx1.real) - np.arctan2(rx2.imag, rx2.real))

    statuses = []
    for i, value in enumerate(delta_phi * ratio):
        out[i], status = arcsin(float(value))
        statuses.append(status)
    status = functools.reduce(operator.or_, statuses, Status.OK)
    if status != Status.OK:
        failed = sum(1 for s in statuses if s != Status.OK)
        raise ArgumentError(f"monopulse arcsin failed for {failed} of {len(statuses)} samples")
    return out
