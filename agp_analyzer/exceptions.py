"""
Error taxonomy for AGP analysis.

Configuration and unit errors are fatal and raised before any computation.
Degenerate input (empty periods, zero means) is absorbed with sentinel values
and reported through the ``warnings`` module using ``DegenerateInput``.
"""


class AGPError(Exception):
    """Base class for all AGP analyzer errors."""


class InvalidUnit(AGPError, ValueError):
    """Raised when a glucose unit is not mg/dL or mmol/L."""

    def __init__(self, unit: str, message: str = ""):
        self.unit = unit
        super().__init__(message or f"Invalid glucose unit: {unit!r}")


class InvalidConfiguration(AGPError, ValueError):
    """Raised for unusable configuration.

    Covers empty period lists, malformed period specs, non-monotonic
    breakpoints, and non-positive bucket or window widths.
    """


class DegenerateInput(AGPError, UserWarning):
    """Warning category for inputs that produce sentinel metric values.

    Emitted for empty analysis periods, a zero mean in the coefficient of
    variation, and fewer than two readings for a sample standard deviation.
    """
