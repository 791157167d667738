"""Engine configuration loaded from YAML."""

import logging
from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigLoadError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config" / "engine.yaml"


class DuplicatePolicy(str, Enum):
    """How origination rows that share a date are reduced to one."""

    FIRST = "first"  # First row in scan order wins
    LAST = "last"  # Last row in scan order wins
    SUM = "sum"  # Rows are added together


@dataclass(frozen=True)
class EngineConfig:
    """Thresholds and knobs consumed by the analytics pipeline.

    Percent values are expressed on a 0-100 scale (10.0 = 10%).
    """

    # Anomaly: bucket share of cards below X%
    anomaly_threshold: float = 10.0
    anomalies_enabled: bool = True

    campaign_channels: frozenset[str] = frozenset({"Email", "SMS", "WhatsApp"})
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.FIRST

    # Projection pace
    recent_window: int = 7
    min_points_for_recent: int = 3
    trend_band: float = 0.05  # +/-5% band around overall pace

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EngineConfig":
        """Build config from a plain mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigLoadError(f"Unknown config keys: {sorted(unknown)}")

        values = dict(data)
        try:
            if "campaign_channels" in values:
                values["campaign_channels"] = frozenset(values["campaign_channels"])
            if "duplicate_policy" in values:
                values["duplicate_policy"] = DuplicatePolicy(values["duplicate_policy"])
        except (TypeError, ValueError) as e:
            raise ConfigLoadError(f"Invalid config value: {e}") from e
        return cls(**values)


def load_config(path: Path | None = None) -> EngineConfig:
    """Load engine configuration from YAML.

    The mapping may be top-level or nested under an ``engine`` key.
    Defaults to the bundled ``config/engine.yaml``.
    """
    path = path or DEFAULT_CONFIG_PATH
    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except Exception as e:
        raise ConfigLoadError(f"Failed to load config from {path}: {e}") from e

    if isinstance(raw, dict) and "engine" in raw:
        raw = raw["engine"]
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigLoadError(f"Config at {path} must be a mapping")

    config = EngineConfig.from_dict(raw)
    logger.debug("Loaded engine config from %s: %s", path, config)
    return config
