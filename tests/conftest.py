"""Pytest fixtures for weighttrend tests."""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

import pytest
import yaml

from weighttrend.tracking.models import WeightSample
from weighttrend.units import WeightUnit

START = datetime(2026, 1, 1, 7, 0)


@pytest.fixture
def make_samples():
    """Build one sample per weight, spaced `step` apart starting at 2026-01-01 07:00."""

    def _build(
        weights,
        unit: WeightUnit = WeightUnit.LB,
        start: datetime = START,
        step: timedelta = timedelta(days=1),
    ) -> list[WeightSample]:
        return [
            WeightSample(timestamp=start + i * step, weight_value=w, unit=unit)
            for i, w in enumerate(weights)
        ]

    return _build


@pytest.fixture
def write_snapshot(tmp_path):
    """Write a snapshot mapping to a YAML file and return its path."""

    def _write(data: dict, name: str = "snapshot.yaml") -> Path:
        path = tmp_path / name
        with open(path, "w") as f:
            yaml.safe_dump(data, f, sort_keys=False)
        return path

    return _write


@pytest.fixture
def config_path(tmp_path) -> Path:
    """Config path that does not exist yet, so defaults apply."""
    return tmp_path / "config.yaml"
