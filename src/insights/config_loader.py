"""Load, validate, and hot-reload the check-in insights configuration.

The config lives in ``insights_config.yaml`` alongside this module.  It is
loaded once on first use and cached.  Call ``reload_insights_config()`` to
re-read from disk after an edit — no restart required.

Usage::

    from src.insights.config_loader import get_insights_config

    config = get_insights_config()
    config.period_days            # 30
    config.feeling_label("tired")  # "Tired"
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger("mumtaz.insights.config")

_CONFIG_PATH = Path(__file__).parent / "insights_config.yaml"


@dataclass(frozen=True)
class InsightsConfig:
    """Complete, validated insights configuration.

    Attributes:
        version:        Config schema version string.
        period_days:    Length of the current and previous comparison periods.
        week_days:      Number of daily buckets ending today.
        top_feelings:   How many most-common feelings the report lists.
        top_trends:     How many trend entries the report lists.
        top_per_phase:  How many feelings are listed under each phase.
        noise_floor:    Minimum count, in either period, for a trend to count.
        feelings:       Check-in vocabulary, id → display label.
    """

    version: str
    period_days: int = 30
    week_days: int = 7
    top_feelings: int = 5
    top_trends: int = 5
    top_per_phase: int = 3
    noise_floor: int = 2
    feelings: dict[str, str] = field(default_factory=dict)

    def feeling_label(self, category_id: str) -> str | None:
        """Return the display label for a vocabulary id, or None if unknown."""
        return self.feelings.get(category_id)


class ConfigValidationError(ValueError):
    """Raised when insights_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Insights config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


def _validate_and_build(raw: dict) -> InsightsConfig:
    """Validate the raw YAML dict and construct an InsightsConfig.

    Every problem is collected before raising, so one failed load reports
    all of them.

    Raises:
        ConfigValidationError: If any value is missing, non-numeric or out of range.
    """
    errors: list[str] = []

    def _positive_int(section: dict, key: str, default: int, path: str) -> int:
        value: Any = section.get(key, default)
        try:
            n = int(value)
        except (TypeError, ValueError):
            errors.append(f"{path}.{key} must be an integer, got {value!r}")
            return default
        if n < 1:
            errors.append(f"{path}.{key} = {n} must be at least 1")
        return n

    version = str(raw.get("version", "1.0"))

    # ── Windows ──
    windows_raw = raw.get("windows") or {}
    period_days = _positive_int(windows_raw, "period_days", 30, "windows")
    week_days = _positive_int(windows_raw, "week_days", 7, "windows")
    if week_days > period_days:
        errors.append(
            f"windows.week_days ({week_days}) cannot exceed windows.period_days ({period_days})"
        )

    # ── Ranking ──
    ranking_raw = raw.get("ranking") or {}
    top_feelings = _positive_int(ranking_raw, "top_feelings", 5, "ranking")
    top_trends = _positive_int(ranking_raw, "top_trends", 5, "ranking")
    top_per_phase = _positive_int(ranking_raw, "top_per_phase", 3, "ranking")

    # ── Trends ──
    trends_raw = raw.get("trends") or {}
    noise_floor = _positive_int(trends_raw, "noise_floor", 2, "trends")

    # ── Vocabulary ──
    feelings_raw = raw.get("feelings") or {}
    feelings: dict[str, str] = {}
    if not isinstance(feelings_raw, dict) or not feelings_raw:
        errors.append("'feelings' must be a non-empty mapping of id→label")
    else:
        for category_id, label in feelings_raw.items():
            if not isinstance(label, str) or not label.strip():
                errors.append(f"feelings.{category_id} must be a non-empty string")
                continue
            feelings[str(category_id)] = label.strip()

    if errors:
        raise ConfigValidationError(
            f"insights_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return InsightsConfig(
        version=version,
        period_days=period_days,
        week_days=week_days,
        top_feelings=top_feelings,
        top_trends=top_trends,
        top_per_phase=top_per_phase,
        noise_floor=noise_floor,
        feelings=feelings,
    )


def load_insights_config(path: Path | None = None) -> InsightsConfig:
    """Load and validate the insights config from disk.

    Args:
        path: Override path to YAML. Uses the bundled insights_config.yaml by default.
    """
    target = path or _CONFIG_PATH
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded insights config v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: InsightsConfig | None = None
_config_lock = threading.Lock()


def get_insights_config() -> InsightsConfig:
    """Return the global InsightsConfig singleton, loading it on first call.

    Thread-safe.  Use ``reload_insights_config()`` to refresh after YAML changes.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_insights_config()
    return _config


def reload_insights_config(path: Path | None = None) -> InsightsConfig:
    """Reload the config from disk and replace the global singleton.

    If validation fails the old config is retained and the error re-raised.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config
    new_config = load_insights_config(path)  # validate before acquiring lock
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info("Reloaded insights config: %s → %s", old_version, new_config.version)
    return new_config
