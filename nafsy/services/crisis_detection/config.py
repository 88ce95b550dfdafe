"""Crisis detection configuration.

Behavioral knobs for the engine. Lexicon content lives in lexicon.py;
this module only decides how the engine uses it.
"""
import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from nafsy.shared.models import Severity

logger = logging.getLogger(__name__)

LEXICON_VERSION = "2025.06.01"


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class CrisisDetectionConfig:
    """Configuration for crisis detection behavior."""

    # Whether the optional AI classifier is consulted at all
    ai_enabled: bool = True

    # Bounded wait for the AI classifier (seconds); past this the call is abandoned
    ai_timeout_seconds: float = 8.0

    # Resources are only looked up at or above this severity
    resource_min_severity: Severity = Severity.HIGH

    # Cap on resources attached to a verdict
    max_resources: int = 5

    # Country used for resource lookup when the caller gives none
    default_country: Optional[str] = None

    # Version tracking for audit trail
    lexicon_version: str = LEXICON_VERSION

    def __post_init__(self):
        if self.ai_timeout_seconds <= 0:
            raise ValueError(f"ai_timeout_seconds must be positive, got {self.ai_timeout_seconds}")
        if self.max_resources < 0:
            raise ValueError(f"max_resources must be >= 0, got {self.max_resources}")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "CrisisDetectionConfig":
        """Build configuration from CRISIS_* environment variables.

        Unparseable values fall back to defaults with a warning rather than
        preventing the service from starting.
        """
        env = os.environ if env is None else env
        defaults = cls()

        timeout = defaults.ai_timeout_seconds
        raw_timeout = env.get("CRISIS_AI_TIMEOUT_SECONDS")
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                logger.warning(
                    "CRISIS_CONFIG_INVALID",
                    extra={"variable": "CRISIS_AI_TIMEOUT_SECONDS", "value": raw_timeout}
                )
            if timeout <= 0:
                timeout = defaults.ai_timeout_seconds

        min_severity = defaults.resource_min_severity
        raw_severity = env.get("CRISIS_RESOURCE_MIN_SEVERITY")
        if raw_severity:
            try:
                min_severity = Severity.parse(raw_severity)
            except ValueError:
                logger.warning(
                    "CRISIS_CONFIG_INVALID",
                    extra={"variable": "CRISIS_RESOURCE_MIN_SEVERITY", "value": raw_severity}
                )

        max_resources = defaults.max_resources
        raw_max = env.get("CRISIS_MAX_RESOURCES")
        if raw_max:
            try:
                max_resources = max(0, int(raw_max))
            except ValueError:
                logger.warning(
                    "CRISIS_CONFIG_INVALID",
                    extra={"variable": "CRISIS_MAX_RESOURCES", "value": raw_max}
                )

        return cls(
            ai_enabled=_env_bool(env, "CRISIS_AI_ENABLED", defaults.ai_enabled),
            ai_timeout_seconds=timeout,
            resource_min_severity=min_severity,
            max_resources=max_resources,
            default_country=env.get("CRISIS_DEFAULT_COUNTRY") or None,
        )
