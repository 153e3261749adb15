"""Exceptions and status flags shared by the processing stages.

Two kinds of failure are distinguished:

* **Contract errors** are precondition violations such as mismatched
  buffer shapes, aliased buffers or out of range parameters.  They are
  raised before any buffer is modified and indicate a bug in the caller.
* **Argument errors** are recoverable runtime conditions, for example an
  FFT length the transform plan does not support.

Loops that evaluate a primitive per element (monopulse) collect a
`Status` for every element and fold them with `|` so that a single
failure marks the whole batch.
"""

from __future__ import annotations

import enum


class SensorDSPError(Exception):
    """Base class for all errors raised by this package."""


class ContractError(SensorDSPError, ValueError):
    """A precondition on shapes, aliasing or parameter ranges was violated."""


class ArgumentError(SensorDSPError, ValueError):
    """An argument value is not supported, e.g. an unsupported FFT length."""


class Status(enum.IntFlag):
    """Result of a primitive evaluation, combinable with `|`."""

    OK = 0
    ARGUMENT_ERROR = 1
