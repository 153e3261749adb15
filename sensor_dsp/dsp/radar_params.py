"""Radar performance figures derived from the chirp configuration."""

from __future__ import annotations

#: Speed of light in vacuum (m/s).
LIGHT_SPEED_M_S = 299792458.0


def range_resolution(bandwidth_hz: float) -> float:
    """Range resolution in metres for a sweep of `bandwidth_hz`."""
    return LIGHT_SPEED_M_S / (2.0 * bandwidth_hz)


def range_resolution_ex(num_samples: int, sample_rate_hz: float, freq_slope_hz_s: float) -> float:
    """Range resolution using the bandwidth actually sampled.

    The effective bandwidth is `freq_slope / sample_rate * num_samples`.
    """
    bandwidth = (freq_slope_hz_s / sample_rate_hz) * num_samples
    return range_resolution(bandwidth)


def max_range(sample_rate_hz: float, freq_slope_hz_s: float) -> float:
    """Maximum unambiguous range in metres."""
    return (sample_rate_hz * LIGHT_SPEED_M_S) / (2.0 * freq_slope_hz_s)


def doppler_resolution(bandwidth_hz: float, frame_time_s: float) -> float:
    return LIGHT_SPEED_M_S / (bandwidth_hz * frame_time_s)


def max_doppler(bandwidth_hz: float, chirp_time_s: float) -> float:
    return LIGHT_SPEED_M_S / (2.0 * bandwidth_hz * chirp_time_s)
