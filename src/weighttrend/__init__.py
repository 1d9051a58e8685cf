"""Weight trend and milestone analytics."""

from __future__ import annotations

from weighttrend.units import KG_TO_LB, LB_TO_KG, WeightUnit, convert

__version__ = "0.1.0"

__all__ = [
    "KG_TO_LB",
    "LB_TO_KG",
    "WeightUnit",
    "convert",
]
