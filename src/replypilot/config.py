"""Summary: Application configuration for ReplyPilot.

Importance: Centralizes environment, .env, and config defaults for consistent behavior.
Alternatives: Use a dedicated settings library like Pydantic Settings.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from dataclasses import dataclass


class InvalidConfigurationError(ValueError):
    """Summary: Raised when analytics settings are out of range.

    Importance: Rejects bad configuration at construction instead of in the hot path.
    Alternatives: Clamp invalid values silently.
    """


@dataclass(frozen=True)
class AnalyticsSettings:
    """Summary: Tunables injected into the matcher, aggregator, and insight generator.

    Importance: Replaces process-wide analyzer settings with explicit values.
    Alternatives: Pass each tunable as a function argument.
    """

    matching_window_days: float = 7
    confidence_threshold: float = 0.7
    working_hours_start: int = 9
    working_hours_end: int = 17
    exclude_weekends: bool = True
    minimum_sample_size: int = 5
    max_insights: int = 8
    anomaly_ratio: float = 2.0
    anomaly_min_samples: int = 3
    vip_min_responses: int = 3
    default_goal_seconds: float = 3600

    def __post_init__(self) -> None:
        if self.matching_window_days <= 0:
            raise InvalidConfigurationError("matching_window_days must be positive")
        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise InvalidConfigurationError("confidence_threshold must be within [0, 1]")
        if not 0 <= self.working_hours_start < self.working_hours_end <= 24:
            raise InvalidConfigurationError("working hours must satisfy 0 <= start < end <= 24")
        if self.minimum_sample_size < 1:
            raise InvalidConfigurationError("minimum_sample_size must be at least 1")
        if self.max_insights < 1:
            raise InvalidConfigurationError("max_insights must be at least 1")
        if self.anomaly_ratio <= 1.0:
            raise InvalidConfigurationError("anomaly_ratio must be greater than 1")
        if self.anomaly_min_samples < 1 or self.vip_min_responses < 1:
            raise InvalidConfigurationError("sample minimums must be at least 1")
        if self.default_goal_seconds <= 0:
            raise InvalidConfigurationError("default_goal_seconds must be positive")


@dataclass(frozen=True)
class AppConfig:
    """Summary: Holds configuration values for the event source, API, and analytics.

    Importance: Ensures all services derive settings from a single source of truth.
    Alternatives: Store settings in a shared config file and parse at startup.
    """

    events_path: str
    api_host: str
    api_port: int
    api_key: str
    analytics: AnalyticsSettings

    @staticmethod
    def from_env() -> "AppConfig":
        """Summary: Build configuration from defaults, .env, and environment.

        Importance: Keeps all variables defined in config defaults while allowing overrides.
        Alternatives: Parse only environment variables without a defaults file.
        """

        defaults = load_defaults(Path("config") / "defaults.json")
        load_dotenv(Path(".env"))
        analytics = AnalyticsSettings(
            matching_window_days=float(
                os.getenv("REPLYPILOT_MATCHING_WINDOW_DAYS", defaults["matching_window_days"])
            ),
            confidence_threshold=float(
                os.getenv("REPLYPILOT_CONFIDENCE_THRESHOLD", defaults["confidence_threshold"])
            ),
            working_hours_start=int(
                os.getenv("REPLYPILOT_WORKING_HOURS_START", defaults["working_hours_start"])
            ),
            working_hours_end=int(
                os.getenv("REPLYPILOT_WORKING_HOURS_END", defaults["working_hours_end"])
            ),
            exclude_weekends=parse_bool(
                os.getenv("REPLYPILOT_EXCLUDE_WEEKENDS", defaults["exclude_weekends"])
            ),
            minimum_sample_size=int(
                os.getenv("REPLYPILOT_MINIMUM_SAMPLE_SIZE", defaults["minimum_sample_size"])
            ),
            max_insights=int(os.getenv("REPLYPILOT_MAX_INSIGHTS", defaults["max_insights"])),
            anomaly_ratio=float(os.getenv("REPLYPILOT_ANOMALY_RATIO", defaults["anomaly_ratio"])),
            anomaly_min_samples=int(
                os.getenv("REPLYPILOT_ANOMALY_MIN_SAMPLES", defaults["anomaly_min_samples"])
            ),
            vip_min_responses=int(
                os.getenv("REPLYPILOT_VIP_MIN_RESPONSES", defaults["vip_min_responses"])
            ),
            default_goal_seconds=float(
                os.getenv("REPLYPILOT_DEFAULT_GOAL_SECONDS", defaults["default_goal_seconds"])
            ),
        )
        return AppConfig(
            events_path=os.getenv("REPLYPILOT_EVENTS_PATH", defaults["events_path"]),
            api_host=os.getenv("REPLYPILOT_API_HOST", defaults["api_host"]),
            api_port=int(os.getenv("REPLYPILOT_API_PORT", defaults["api_port"])),
            api_key=os.getenv("REPLYPILOT_API_KEY", defaults["api_key"]),
            analytics=analytics,
        )


def parse_bool(value: str | bool) -> bool:
    """Summary: Interpret common truthy strings from env files."""

    if isinstance(value, bool):
        return value
    return value.strip().lower() in {"1", "true", "yes", "on"}


def load_defaults(path: Path) -> dict[str, str]:
    """Summary: Load configuration defaults from JSON.

    Importance: Ensures all variables exist in a single config file.
    Alternatives: Inline defaults in the AppConfig initializer.
    """

    if not path.exists():
        raise FileNotFoundError(f"Defaults file not found: {path}")
    return json.loads(path.read_text(encoding="utf-8"))


def load_dotenv(path: Path) -> None:
    """Summary: Load key-value pairs from a .env file into the environment.

    Importance: Keeps local overrides out of code while supporting local workflows.
    Alternatives: Use python-dotenv or OS-specific secret stores.
    """

    if not path.exists():
        return
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())
