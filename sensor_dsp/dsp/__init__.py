"""Signal processing primitives for radar frame processing.

Modules in this package implement window functions, elementary in-place
array operations, the MTI clutter filter, the range and Doppler FFT
stages, angle estimation and the frame pipeline composing them.
"""

from . import windows, ops, mti, fft, angle, radar_params, rd_map

__all__ = ["windows", "ops", "mti", "fft", "angle", "radar_params", "rd_map"]
