"""Detection of candidate targets in range, Doppler and angle profiles."""

from . import peaks

__all__ = ["peaks"]
