"""Milestone targets between a start and goal weight.

Key components:
- Milestone generation at 5/10/15 lb (2/5/7 kg) spacing
- Progress between the previous and next milestone
- Crossing detection that never repeats a completed milestone
- Celebration policy deciding which milestone to show next
"""

from __future__ import annotations

from weighttrend.milestones.calculator import (
    calculate_progress,
    check_for_celebration,
    detect_crossed_milestones,
    generate_milestones,
)
from weighttrend.milestones.models import (
    CelebrationCheck,
    CelebrationKind,
    CelebrationReason,
    CompletedMilestoneRecord,
    MilestoneInterval,
    MilestoneProgress,
)

__all__ = [
    "CelebrationCheck",
    "CelebrationKind",
    "CelebrationReason",
    "CompletedMilestoneRecord",
    "MilestoneInterval",
    "MilestoneProgress",
    "calculate_progress",
    "check_for_celebration",
    "detect_crossed_milestones",
    "generate_milestones",
]
