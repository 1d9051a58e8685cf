"""Load a history snapshot (samples + completed milestones) from YAML.

The persistence layer hands the CLI a single file describing the state at
one point in time:

    samples:
      - {timestamp: 2026-01-05 07:30:00, weight: 182.4, unit: lb}
      - {timestamp: 2026-01-06 07:12:00, weight: 82.6, unit: kg}
    completed_milestones:
      - {target_weight: 180, unit: lb, start_weight: 185,
         achieved_date: 2026-01-20, celebration_shown: true}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Any

import yaml

from weighttrend.milestones.models import CompletedMilestoneRecord
from weighttrend.tracking.models import WeightSample
from weighttrend.units import WeightUnit


@dataclass
class Snapshot:
    """Consistent view of a user's history for one computation."""

    samples: list[WeightSample] = field(default_factory=list)
    completed_milestones: list[CompletedMilestoneRecord] = field(default_factory=list)


def _to_datetime(value: Any) -> datetime:
    """
    Accept YAML datetimes, bare dates, or ISO strings.

    Naive values are taken as UTC. Offset-aware values are converted to UTC
    and returned naive, so every timestamp in a snapshot compares against
    every other.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time())
    else:
        try:
            parsed = datetime.fromisoformat(str(value))
        except ValueError:
            raise ValueError(f"Invalid timestamp: '{value}'") from None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _to_float(value: Any, key: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"'{key}' must be a number, got {value!r}") from None


def _require_mapping(raw: Any, kind: str) -> dict:
    if not isinstance(raw, dict):
        raise ValueError(f"{kind} must be a mapping, got {type(raw).__name__}")
    return raw


def _entries(data: dict, key: str) -> list:
    entries = data.get(key) or []
    if not isinstance(entries, list):
        raise ValueError(f"'{key}' must be a list, got {type(entries).__name__}")
    return entries


def parse_sample(raw: dict) -> WeightSample:
    """Build a WeightSample from a mapping with timestamp/weight/unit keys."""
    raw = _require_mapping(raw, "Sample")
    missing = {"timestamp", "weight"} - set(raw)
    if missing:
        raise ValueError(f"Sample is missing required keys: {sorted(missing)}")
    return WeightSample(
        timestamp=_to_datetime(raw["timestamp"]),
        weight_value=_to_float(raw["weight"], "weight"),
        unit=WeightUnit.parse(raw.get("unit", "lb")),
    )


def parse_completed_milestone(raw: dict) -> CompletedMilestoneRecord:
    """Build a CompletedMilestoneRecord from a mapping."""
    raw = _require_mapping(raw, "Completed milestone")
    missing = {"target_weight", "start_weight"} - set(raw)
    if missing:
        raise ValueError(f"Completed milestone is missing required keys: {sorted(missing)}")
    record = CompletedMilestoneRecord(
        target_weight=_to_float(raw["target_weight"], "target_weight"),
        unit=WeightUnit.parse(raw.get("unit", "lb")),
        start_weight=_to_float(raw["start_weight"], "start_weight"),
        celebration_shown=bool(raw.get("celebration_shown", False)),
    )
    if raw.get("achieved_date") is not None:
        record.achieved_date = _to_datetime(raw["achieved_date"])
    return record


def load_snapshot(path: Path) -> Snapshot:
    """
    Read a snapshot file.

    Args:
        path: YAML file path

    Returns:
        Snapshot with samples and completed milestones in file order

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the YAML is malformed or an entry is invalid
    """
    with open(path) as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Malformed YAML: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Snapshot must be a mapping, got {type(data).__name__}")

    return Snapshot(
        samples=[parse_sample(s) for s in _entries(data, "samples")],
        completed_milestones=[
            parse_completed_milestone(m) for m in _entries(data, "completed_milestones")
        ],
    )
