"""Data models for milestone tracking and celebrations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from weighttrend.units import WeightUnit, convert


class MilestoneInterval(Enum):
    """User preference for spacing between milestones."""

    FIVE = "5"
    TEN = "10"
    FIFTEEN = "15"

    @classmethod
    def parse(cls, value: str | int | "MilestoneInterval") -> "MilestoneInterval":
        if isinstance(value, MilestoneInterval):
            return value
        try:
            return cls(str(value).strip())
        except ValueError:
            raise ValueError(
                f"milestone interval must be one of {[m.value for m in cls]}, got '{value}'"
            ) from None

    @property
    def pounds(self) -> float:
        return _POUND_INTERVALS[self]

    @property
    def kilograms(self) -> float:
        """Rounded to whole kilograms for cleaner targets (not 5 lb converted)."""
        return _KILOGRAM_INTERVALS[self]

    def value_for(self, unit: WeightUnit) -> float:
        """Interval size in the given unit."""
        return self.pounds if unit is WeightUnit.LB else self.kilograms

    def display_label(self, unit: WeightUnit) -> str:
        """Label such as '5 lb' or '2 kg'."""
        return f"{int(self.value_for(unit))} {unit.value}"


_POUND_INTERVALS = {
    MilestoneInterval.FIVE: 5.0,
    MilestoneInterval.TEN: 10.0,
    MilestoneInterval.FIFTEEN: 15.0,
}

_KILOGRAM_INTERVALS = {
    MilestoneInterval.FIVE: 2.0,  # ~2.27 kg
    MilestoneInterval.TEN: 5.0,  # ~4.54 kg
    MilestoneInterval.FIFTEEN: 7.0,  # ~6.80 kg
}


@dataclass
class CompletedMilestoneRecord:
    """
    A milestone the user has reached, as stored by the persistence layer.

    Only `celebration_shown` is expected to change after creation; it is
    flipped once the celebration has been displayed.
    """

    target_weight: float
    unit: WeightUnit
    start_weight: float
    achieved_date: datetime = field(default_factory=datetime.now)
    celebration_shown: bool = False

    def target_weight_in(self, unit: WeightUnit) -> float:
        return convert(self.target_weight, self.unit, unit)


@dataclass(frozen=True)
class MilestoneProgress:
    """Where the user sits between the previous and next milestone."""

    current_weight: float
    next_milestone: float
    previous_milestone: float
    goal_weight: float
    unit: WeightUnit
    completed_milestones: frozenset[float] = frozenset()
    # Direction of the journey. When None it is inferred from goal vs
    # previous milestone, which is ambiguous once the goal itself is passed.
    losing_weight: Optional[bool] = None

    @property
    def is_losing_weight(self) -> bool:
        if self.losing_weight is not None:
            return self.losing_weight
        return self.goal_weight < self.previous_milestone

    @property
    def progress_to_next_milestone(self) -> float:
        """
        Fraction of the way from previous to next milestone, 0.0 to 1.0.

        Returns 0.0 when the user has moved the wrong way from the previous
        milestone (gained on a loss goal, or lost on a gain goal).
        """
        total_distance = abs(self.previous_milestone - self.next_milestone)
        if total_distance == 0:
            return 1.0

        if self.is_losing_weight:
            if self.current_weight > self.previous_milestone:
                return 0.0
            traveled = self.previous_milestone - self.current_weight
        else:
            if self.current_weight < self.previous_milestone:
                return 0.0
            traveled = self.current_weight - self.previous_milestone

        return min(1.0, max(0.0, traveled / total_distance))

    @property
    def weight_to_next_milestone(self) -> float:
        return abs(self.current_weight - self.next_milestone)

    @property
    def has_reached_goal(self) -> bool:
        if self.is_losing_weight:
            return self.current_weight <= self.goal_weight
        return self.current_weight >= self.goal_weight


class CelebrationKind(Enum):
    """Why a celebration check came out the way it did."""

    NO_ENTRIES = "no_entries"
    UNCELEBRATED_EXISTING = "uncelebrated_existing"
    NEWLY_CROSSED = "newly_crossed"
    NO_CROSSED_MILESTONES = "no_crossed_milestones"
    ALL_MILESTONES_ALREADY_CELEBRATED = "all_milestones_already_celebrated"


@dataclass(frozen=True)
class CelebrationReason:
    """Reason for a celebration decision; the two 'show' kinds carry the weight."""

    kind: CelebrationKind
    weight: Optional[float] = None

    @classmethod
    def no_entries(cls) -> "CelebrationReason":
        return cls(CelebrationKind.NO_ENTRIES)

    @classmethod
    def uncelebrated_existing(cls, weight: float) -> "CelebrationReason":
        return cls(CelebrationKind.UNCELEBRATED_EXISTING, weight)

    @classmethod
    def newly_crossed(cls, weight: float) -> "CelebrationReason":
        return cls(CelebrationKind.NEWLY_CROSSED, weight)

    @classmethod
    def no_crossed_milestones(cls) -> "CelebrationReason":
        return cls(CelebrationKind.NO_CROSSED_MILESTONES)

    @classmethod
    def all_milestones_already_celebrated(cls) -> "CelebrationReason":
        return cls(CelebrationKind.ALL_MILESTONES_ALREADY_CELEBRATED)


@dataclass(frozen=True)
class CelebrationCheck:
    """Which milestone, if any, to celebrate next."""

    milestone_to_show: Optional[float]
    reason: CelebrationReason
