"""Application settings and configuration management."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from weighttrend.milestones.models import MilestoneInterval
from weighttrend.tracking.ema import DEFAULT_SMOOTHING, DEFAULT_SPAN
from weighttrend.tracking.holt import DEFAULT_ALPHA, DEFAULT_BETA
from weighttrend.units import WeightUnit


def _default_config_dir() -> Path:
    """Return the default configuration directory."""
    return Path.home() / ".weighttrend"


def default_config_path() -> Path:
    return _default_config_dir() / "config.yaml"


@dataclass
class PreferencesConfig:
    """User preferences shared by every command."""

    unit: WeightUnit = WeightUnit.LB
    milestone_interval: MilestoneInterval = MilestoneInterval.FIVE
    start_weight: Optional[float] = None
    goal_weight: Optional[float] = None


@dataclass
class SmoothingConfig:
    """Smoothing constants for the trend line and forecast."""

    ewma_lambda: float = DEFAULT_SMOOTHING
    ema_span: int = DEFAULT_SPAN
    holt_alpha: float = DEFAULT_ALPHA
    holt_beta: float = DEFAULT_BETA


@dataclass
class Settings:
    """Main application settings."""

    preferences: PreferencesConfig = field(default_factory=PreferencesConfig)
    smoothing: SmoothingConfig = field(default_factory=SmoothingConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        """Load settings from YAML file or return defaults.

        Args:
            config_path: Path to config.yaml. If None, uses ~/.weighttrend/config.yaml

        Returns:
            Settings instance

        Raises:
            ValueError: If the file names an unknown unit or interval
        """
        if config_path is None:
            config_path = default_config_path()

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        settings = cls()

        # Parse preferences
        if "preferences" in data:
            pref_data = data["preferences"] or {}
            if "unit" in pref_data:
                settings.preferences.unit = WeightUnit.parse(pref_data["unit"])
            if "milestone_interval" in pref_data:
                settings.preferences.milestone_interval = MilestoneInterval.parse(
                    pref_data["milestone_interval"]
                )
            if pref_data.get("start_weight") is not None:
                settings.preferences.start_weight = float(pref_data["start_weight"])
            if pref_data.get("goal_weight") is not None:
                settings.preferences.goal_weight = float(pref_data["goal_weight"])

        # Parse smoothing constants
        if "smoothing" in data:
            smooth_data = data["smoothing"] or {}
            if "ewma_lambda" in smooth_data:
                settings.smoothing.ewma_lambda = float(smooth_data["ewma_lambda"])
            if "ema_span" in smooth_data:
                settings.smoothing.ema_span = int(smooth_data["ema_span"])
            if "holt_alpha" in smooth_data:
                settings.smoothing.holt_alpha = float(smooth_data["holt_alpha"])
            if "holt_beta" in smooth_data:
                settings.smoothing.holt_beta = float(smooth_data["holt_beta"])

        return settings

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save current settings to YAML file.

        Args:
            config_path: Path to save config.yaml. If None, uses ~/.weighttrend/config.yaml
        """
        if config_path is None:
            config_path = default_config_path()

        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "preferences": {
                "unit": self.preferences.unit.value,
                "milestone_interval": self.preferences.milestone_interval.value,
                "start_weight": self.preferences.start_weight,
                "goal_weight": self.preferences.goal_weight,
            },
            "smoothing": {
                "ewma_lambda": self.smoothing.ewma_lambda,
                "ema_span": self.smoothing.ema_span,
                "holt_alpha": self.smoothing.holt_alpha,
                "holt_beta": self.smoothing.holt_beta,
            },
        }

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


# Global settings instance (lazy loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance, loading from disk if needed."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reload_settings(config_path: Optional[Path] = None) -> Settings:
    """Force reload settings from disk."""
    global _settings
    _settings = Settings.load(config_path)
    return _settings
