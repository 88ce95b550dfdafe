"""Tests for ResultMerger - monotonic combination of verdicts."""
import itertools

import pytest

from nafsy.shared.models import CrisisAnalysis, Language, Resource, Severity
from nafsy.services.crisis_detection.ai_classifier import AIVerdict, ClassificationFailure, FailureReason
from nafsy.services.crisis_detection.merger import DEFAULT_ACTIONS, ResultMerger, default_actions
from nafsy.services.crisis_detection.scorer import HeuristicVerdict


HOTLINE = Resource(title="Hotline", is_emergency=True, language="en", phone="123")


def heuristic(severity: Severity, indicators=None, phrases=None) -> HeuristicVerdict:
    return HeuristicVerdict(
        severity=severity,
        indicators=indicators or [],
        matched_phrases=phrases or [],
    )


@pytest.fixture
def merger():
    return ResultMerger()


class TestMonotonicMerge:
    """Final severity is never below the heuristic severity."""

    @pytest.mark.parametrize("h_sev,ai_sev", list(itertools.product(Severity, Severity)))
    def test_max_of_both(self, merger, h_sev, ai_sev):
        ai = AIVerdict(is_crisis=ai_sev != Severity.LOW, severity=ai_sev)

        result = merger.merge(heuristic(h_sev), ai, Language.EN)

        assert result.severity == max(h_sev, ai_sev)
        assert result.severity >= h_sev
        assert result.is_crisis == (result.severity != Severity.LOW)

    def test_ai_crisis_flag_floors_low_to_medium(self, merger):
        ai = AIVerdict(is_crisis=True, severity=Severity.LOW)

        result = merger.merge(heuristic(Severity.LOW), ai, Language.EN)

        assert result.severity == Severity.MEDIUM
        assert result.is_crisis is True

    def test_ai_no_crisis_does_not_lower(self, merger):
        ai = AIVerdict(is_crisis=False, severity=Severity.LOW)

        result = merger.merge(heuristic(Severity.CRITICAL, ["Immediate Risk Language"]), ai, Language.EN)

        assert result.severity == Severity.CRITICAL


class TestIndicatorsAndActions:
    """Indicator concatenation and action selection."""

    def test_indicators_concatenated_without_duplicates(self, merger):
        ai = AIVerdict(
            is_crisis=True,
            severity=Severity.HIGH,
            indicators=["High Risk Language", "AI detected hopelessness"],
        )

        result = merger.merge(heuristic(Severity.HIGH, ["High Risk Language"]), ai, Language.EN)

        assert result.indicators == ["High Risk Language", "AI detected hopelessness"]

    def test_ai_actions_replace_defaults(self, merger):
        ai = AIVerdict(is_crisis=True, severity=Severity.HIGH, suggested_actions=["Seek immediate help"])

        result = merger.merge(heuristic(Severity.MEDIUM), ai, Language.EN)

        assert result.suggested_actions == ["Seek immediate help"]

    def test_empty_ai_actions_use_defaults_for_final_severity(self, merger):
        ai = AIVerdict(is_crisis=True, severity=Severity.CRITICAL)

        result = merger.merge(heuristic(Severity.MEDIUM), ai, Language.AR)

        assert result.suggested_actions == DEFAULT_ACTIONS[Language.AR][Severity.CRITICAL]


class TestFallback:
    """Failures and skipped AI pass the heuristic verdict through."""

    @pytest.mark.parametrize("ai_result", [
        None,
        ClassificationFailure(FailureReason.TIMEOUT),
        ClassificationFailure(FailureReason.INVALID_JSON, "bad"),
    ])
    def test_heuristic_passthrough(self, merger, ai_result):
        h = heuristic(Severity.CRITICAL, ["Immediate Risk Language"], ["kill myself"])

        result = merger.merge(h, ai_result, Language.EN)

        assert result.severity == Severity.CRITICAL
        assert result.indicators == ["Immediate Risk Language", "kill myself"]
        assert result.suggested_actions == DEFAULT_ACTIONS[Language.EN][Severity.CRITICAL]

    def test_low_fallback(self, merger):
        result = merger.merge(heuristic(Severity.LOW), None, Language.EN)

        assert result == CrisisAnalysis(
            is_crisis=False,
            severity=Severity.LOW,
            indicators=[],
            suggested_actions=DEFAULT_ACTIONS[Language.EN][Severity.LOW],
        )


class TestAttachResources:
    """Resources only ride on crisis verdicts."""

    def test_attached_to_crisis(self):
        analysis = CrisisAnalysis(is_crisis=True, severity=Severity.HIGH)

        result = ResultMerger.attach_resources(analysis, [HOTLINE])

        assert result.resources == [HOTLINE]
        assert analysis.resources is None

    def test_not_attached_to_low(self):
        analysis = CrisisAnalysis(is_crisis=False, severity=Severity.LOW)

        assert ResultMerger.attach_resources(analysis, [HOTLINE]).resources == []

    def test_none_leaves_analysis_unchanged(self):
        analysis = CrisisAnalysis(is_crisis=True, severity=Severity.HIGH)

        assert ResultMerger.attach_resources(analysis, None) is analysis


class TestDefaultActions:
    """Default action tables."""

    @pytest.mark.parametrize("language", list(Language))
    def test_every_severity_covered(self, language):
        for severity in Severity:
            assert default_actions(severity, language)

    def test_returns_copy(self):
        actions = default_actions(Severity.LOW, Language.EN)
        actions.append("mutated")

        assert "mutated" not in DEFAULT_ACTIONS[Language.EN][Severity.LOW]
