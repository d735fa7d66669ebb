"""
Clinical glucose breakpoints.

Four thresholds split the glucose axis into the five consensus bands
(very low, low, target, high, very high).
"""

from dataclasses import dataclass
from typing import Dict, Optional

from agp_analyzer.config import GlucoseThresholds
from agp_analyzer.exceptions import InvalidConfiguration
from agp_analyzer.utils.units import MG_DL, convert_glucose_value, validate_unit


@dataclass(frozen=True)
class Breakpoints:
    """Band thresholds expressed in a display unit."""
    unit: str
    very_low: float
    low: float
    high: float
    very_high: float

    def validate(self) -> 'Breakpoints':
        """Check the unit and that thresholds strictly increase.

        Raises:
            InvalidUnit: If the unit is unsupported.
            InvalidConfiguration: If the thresholds are not monotonic.
        """
        validate_unit(self.unit)
        if not (0 <= self.very_low < self.low < self.high < self.very_high):
            raise InvalidConfiguration(
                "Breakpoints must satisfy 0 <= very_low < low < high < very_high, "
                f"got {self.very_low}/{self.low}/{self.high}/{self.very_high} {self.unit}"
            )
        return self

    def to(self, unit: str) -> 'Breakpoints':
        """Same thresholds expressed in another unit."""
        return Breakpoints(
            unit=unit,
            very_low=convert_glucose_value(self.very_low, self.unit, unit),
            low=convert_glucose_value(self.low, self.unit, unit),
            high=convert_glucose_value(self.high, self.unit, unit),
            very_high=convert_glucose_value(self.very_high, self.unit, unit),
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            'unit': self.unit,
            'very_low': self.very_low,
            'low': self.low,
            'high': self.high,
            'very_high': self.very_high,
        }


def make_breakpoints(unit: str = MG_DL, thresholds: Optional[GlucoseThresholds] = None) -> Breakpoints:
    """Build breakpoints in unit from the mg/dL reference thresholds.

    Args:
        unit: Display unit.
        thresholds: Reference thresholds in mg/dL. Consensus defaults
                    (54/70/180/250) if None.

    Returns:
        Validated Breakpoints in unit.
    """
    t = thresholds or GlucoseThresholds()
    reference = Breakpoints(
        unit=MG_DL,
        very_low=t.very_low,
        low=t.low,
        high=t.high,
        very_high=t.very_high,
    )
    return reference.validate().to(unit)
