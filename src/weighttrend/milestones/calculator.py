"""Milestone generation, progress, crossing detection and celebration policy.

Milestones are round-number weights between the start and goal weight,
spaced by the user's interval preference (5/10/15 lb or 2/5/7 kg). The goal
is always the last milestone, even when it is not a round number.

All comparisons against milestone weights are exact and inclusive: reaching
195.0 on a loss journey counts as crossing the 195 milestone.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Sequence, Union

from weighttrend.milestones.models import (
    CelebrationCheck,
    CelebrationReason,
    CompletedMilestoneRecord,
    MilestoneInterval,
    MilestoneProgress,
)
from weighttrend.units import WeightUnit

logger = logging.getLogger(__name__)

CompletedInput = Iterable[Union[CompletedMilestoneRecord, float]]


def interval_for(unit: WeightUnit, preference: MilestoneInterval = MilestoneInterval.FIVE) -> float:
    """Milestone spacing in `unit` for the given preference."""
    return preference.value_for(unit)


def generate_milestones(
    start_weight: float,
    goal_weight: float,
    unit: WeightUnit,
    interval_preference: MilestoneInterval = MilestoneInterval.FIVE,
) -> list[float]:
    """
    Generate all milestone targets from start to goal.

    The first milestone is the nearest interval multiple past the start in
    the direction of travel (198 -> 195 when losing, 152 -> 155 when
    gaining). A start already on a boundary is not itself a milestone.

    Args:
        start_weight: Weight when the goal was set
        goal_weight: Target weight
        unit: Unit of both weights
        interval_preference: Spacing preference

    Returns:
        Milestones ordered from start towards goal, ending with goal_weight.
        Never empty.

    Example:
        >>> generate_milestones(200, 180, WeightUnit.LB)
        [195.0, 190.0, 185.0, 180]
    """
    interval = interval_for(unit, interval_preference)
    milestones: list[float] = []

    # Work in whole multiples of the interval to avoid accumulating
    # floating point error while stepping.
    if goal_weight < start_weight:
        step = math.floor(start_weight / interval)
        if step * interval >= start_weight:
            step -= 1
        while step * interval > goal_weight:
            milestones.append(step * interval)
            step -= 1
    else:
        step = math.ceil(start_weight / interval)
        if step * interval <= start_weight:
            step += 1
        while step * interval < goal_weight:
            milestones.append(step * interval)
            step += 1

    milestones.append(goal_weight)
    return milestones


def completed_weights(completed: CompletedInput, unit: WeightUnit) -> frozenset[float]:
    """Collect completed milestone weights in `unit` from records or plain weights."""
    weights = set()
    for item in completed:
        if isinstance(item, CompletedMilestoneRecord):
            weights.add(item.target_weight_in(unit))
        else:
            weights.add(float(item))
    return frozenset(weights)


def calculate_progress(
    current_weight: float,
    start_weight: float,
    goal_weight: float,
    unit: WeightUnit,
    completed_milestones: CompletedInput = (),
    interval_preference: MilestoneInterval = MilestoneInterval.FIVE,
) -> MilestoneProgress:
    """
    Find the milestone bracket around the current weight.

    If the current weight is further from the goal than the start weight
    (regained past the start, or the oldest entries were deleted), the
    current weight is used as the start so the next milestone is still the
    nearest round number rather than the goal.

    Args:
        current_weight: Latest weight in `unit`
        start_weight: Weight when the goal was set
        goal_weight: Target weight
        unit: Unit of all weights
        completed_milestones: CompletedMilestoneRecords or weights already in `unit`
        interval_preference: Spacing preference

    Returns:
        MilestoneProgress for the current position
    """
    losing = goal_weight < start_weight
    if losing:
        effective_start = max(start_weight, current_weight)
    else:
        effective_start = min(start_weight, current_weight)

    milestones = generate_milestones(effective_start, goal_weight, unit, interval_preference)

    if losing:
        next_milestone = next((m for m in milestones if m <= current_weight), goal_weight)
        passed = [m for m in milestones if m > current_weight]
    else:
        next_milestone = next((m for m in milestones if m >= current_weight), goal_weight)
        passed = [m for m in milestones if m < current_weight]
    previous_milestone = passed[-1] if passed else effective_start

    return MilestoneProgress(
        current_weight=current_weight,
        next_milestone=next_milestone,
        previous_milestone=previous_milestone,
        goal_weight=goal_weight,
        unit=unit,
        completed_milestones=completed_weights(completed_milestones, unit),
        losing_weight=losing,
    )


def detect_crossed_milestones(
    current_weight: float,
    start_weight: float,
    goal_weight: float,
    unit: WeightUnit,
    completed_milestone_weights: Iterable[float] = (),
    interval_preference: MilestoneInterval = MilestoneInterval.FIVE,
) -> list[float]:
    """
    Find milestones the current weight has reached that are not yet completed.

    Args:
        current_weight: Latest weight in `unit`
        start_weight: Weight when the goal was set
        goal_weight: Target weight
        unit: Unit of all weights
        completed_milestone_weights: Already-completed milestone weights in `unit`
        interval_preference: Spacing preference

    Returns:
        Newly crossed milestones, nearest to the start first
    """
    completed = set(completed_milestone_weights)
    milestones = generate_milestones(start_weight, goal_weight, unit, interval_preference)

    if goal_weight < start_weight:
        crossed = [m for m in milestones if current_weight <= m]
    else:
        crossed = [m for m in milestones if current_weight >= m]

    return [m for m in crossed if m not in completed]


def check_for_celebration(
    has_entries: bool,
    current_weight: float,
    start_weight: float,
    goal_weight: float,
    unit: WeightUnit,
    completed_milestones: Sequence[CompletedMilestoneRecord],
    interval_preference: MilestoneInterval = MilestoneInterval.FIVE,
) -> CelebrationCheck:
    """
    Decide which milestone, if any, to celebrate next.

    Priority:
    1. No weight entries: nothing to show.
    2. A stored milestone whose celebration was never shown (e.g. the app
       quit between saving it and showing it): show the first one.
    3. A newly crossed milestone: show the one nearest the start.
    4. Nothing crossed yet.
    5. Everything crossed has already been completed. Regaining past a
       celebrated milestone and losing again does not re-celebrate it.

    Args:
        has_entries: Whether any weight entries exist
        current_weight: Latest weight in `unit`
        start_weight: Weight when the goal was set
        goal_weight: Target weight
        unit: Unit of the weights above
        completed_milestones: Stored milestone records, in stored order
        interval_preference: Spacing preference

    Returns:
        CelebrationCheck with the milestone to show (in `unit`) and the reason
    """
    if not has_entries:
        return CelebrationCheck(None, CelebrationReason.no_entries())

    for record in completed_milestones:
        if not record.celebration_shown:
            weight = record.target_weight_in(unit)
            logger.debug("Found uncelebrated milestone %.2f %s", weight, unit.value)
            return CelebrationCheck(weight, CelebrationReason.uncelebrated_existing(weight))

    completed = completed_weights(completed_milestones, unit)
    newly_crossed = detect_crossed_milestones(
        current_weight, start_weight, goal_weight, unit, completed, interval_preference
    )
    if newly_crossed:
        weight = newly_crossed[0]
        return CelebrationCheck(weight, CelebrationReason.newly_crossed(weight))

    any_crossed = detect_crossed_milestones(
        current_weight, start_weight, goal_weight, unit, (), interval_preference
    )
    if not any_crossed:
        return CelebrationCheck(None, CelebrationReason.no_crossed_milestones())

    return CelebrationCheck(None, CelebrationReason.all_milestones_already_celebrated())
