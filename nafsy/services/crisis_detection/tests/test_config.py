"""Tests for CrisisDetectionConfig."""
import pytest

from nafsy.shared.models import Severity
from nafsy.services.crisis_detection.config import LEXICON_VERSION, CrisisDetectionConfig


class TestDefaults:
    def test_defaults(self):
        config = CrisisDetectionConfig()

        assert config.ai_enabled is True
        assert config.ai_timeout_seconds == 8.0
        assert config.resource_min_severity == Severity.HIGH
        assert config.max_resources == 5
        assert config.default_country is None
        assert config.lexicon_version == LEXICON_VERSION

    def test_invalid_timeout(self):
        with pytest.raises(ValueError):
            CrisisDetectionConfig(ai_timeout_seconds=0)

    def test_invalid_max_resources(self):
        with pytest.raises(ValueError):
            CrisisDetectionConfig(max_resources=-1)


class TestFromEnv:
    """Environment parsing."""

    def test_empty_env_gives_defaults(self):
        assert CrisisDetectionConfig.from_env({}) == CrisisDetectionConfig()

    def test_all_variables(self):
        config = CrisisDetectionConfig.from_env({
            "CRISIS_AI_ENABLED": "false",
            "CRISIS_AI_TIMEOUT_SECONDS": "2.5",
            "CRISIS_RESOURCE_MIN_SEVERITY": "Medium",
            "CRISIS_MAX_RESOURCES": "3",
            "CRISIS_DEFAULT_COUNTRY": "SA",
        })

        assert config.ai_enabled is False
        assert config.ai_timeout_seconds == 2.5
        assert config.resource_min_severity == Severity.MEDIUM
        assert config.max_resources == 3
        assert config.default_country == "SA"

    @pytest.mark.parametrize("raw", ["1", "true", "YES", "on"])
    def test_truthy_ai_enabled(self, raw):
        assert CrisisDetectionConfig.from_env({"CRISIS_AI_ENABLED": raw}).ai_enabled is True

    def test_invalid_values_fall_back(self, caplog):
        config = CrisisDetectionConfig.from_env({
            "CRISIS_AI_TIMEOUT_SECONDS": "soon",
            "CRISIS_RESOURCE_MIN_SEVERITY": "extreme",
            "CRISIS_MAX_RESOURCES": "many",
        })

        assert config == CrisisDetectionConfig()
        assert "CRISIS_CONFIG_INVALID" in caplog.text

    def test_non_positive_timeout_falls_back(self):
        assert CrisisDetectionConfig.from_env({"CRISIS_AI_TIMEOUT_SECONDS": "-1"}).ai_timeout_seconds == 8.0

    def test_negative_max_resources_clamped(self):
        assert CrisisDetectionConfig.from_env({"CRISIS_MAX_RESOURCES": "-4"}).max_resources == 0
