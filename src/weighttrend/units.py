"""Weight units and conversion.

The two factors below are the ones the app has always shipped with. They are
not exact reciprocals (0.453592 * 2.20462 = 0.99999...), so converting back
and forth drifts by a few thousandths of a pound over many round trips.
Stored history and tests depend on these exact values, so leave them alone.
"""

from __future__ import annotations

import math
from enum import Enum

LB_TO_KG = 0.453592
KG_TO_LB = 2.20462


class WeightUnit(Enum):
    """Mass unit a weight value is recorded in."""

    LB = "lb"
    KG = "kg"

    @classmethod
    def parse(cls, value: str | "WeightUnit") -> "WeightUnit":
        """Parse a unit from a string such as 'lb', 'lbs', 'kg' or 'kilograms'."""
        if isinstance(value, WeightUnit):
            return value
        aliases = {
            "lb": cls.LB,
            "lbs": cls.LB,
            "pound": cls.LB,
            "pounds": cls.LB,
            "kg": cls.KG,
            "kgs": cls.KG,
            "kilogram": cls.KG,
            "kilograms": cls.KG,
        }
        key = str(value).strip().lower()
        if key not in aliases:
            raise ValueError(f"Unknown weight unit: '{value}'")
        return aliases[key]

    @property
    def default_weight(self) -> float:
        """Starting value offered by entry screens."""
        return 180.0 if self is WeightUnit.LB else 80.0

    @property
    def min_weight(self) -> float:
        return 1.0 if self is WeightUnit.LB else 0.5

    @property
    def max_weight(self) -> float:
        return 1500.0 if self is WeightUnit.LB else 680.0

    def is_valid_weight(self, value: float) -> bool:
        """Return True if value is finite and within this unit's bounds (inclusive)."""
        if not math.isfinite(value):
            return False
        return self.min_weight <= value <= self.max_weight

    def convert(self, value: float, to: "WeightUnit") -> float:
        """Convert value from this unit to `to`."""
        return convert(value, self, to)


def convert(value: float, from_unit: WeightUnit, to_unit: WeightUnit) -> float:
    """
    Convert a weight between units.

    No plausibility checks happen here; NaN and infinities pass straight
    through the multiplication.

    Args:
        value: Weight in `from_unit`
        from_unit: Unit the value is expressed in
        to_unit: Unit to express the result in

    Returns:
        The weight in `to_unit` (the same float when the units match)
    """
    if from_unit is to_unit:
        return value
    if from_unit is WeightUnit.LB:
        return value * LB_TO_KG
    return value * KG_TO_LB
