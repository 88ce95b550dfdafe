"""Tests for ResponseComposer."""
import pytest

from nafsy.shared.models import Language, Resource, Severity
from nafsy.services.crisis_detection.composer import OPENINGS, ResponseComposer


SA_HOTLINE = Resource(
    title="الخط الوطني للوقاية من الانتحار",
    is_emergency=True,
    language="ar",
    country="SA",
    phone="920033360",
)
TEXT_LINE = Resource(
    title="Crisis Text Line",
    is_emergency=True,
    language="en",
    url="https://www.crisistextline.org",
)


@pytest.fixture
def composer():
    return ResponseComposer()


class TestOpenings:
    """Opening line depends on severity and language."""

    @pytest.mark.parametrize("severity,variant", [
        (Severity.CRITICAL, "critical"),
        (Severity.HIGH, "high"),
        (Severity.MEDIUM, "other"),
        (Severity.LOW, "other"),
    ])
    def test_english_variants(self, composer, severity, variant):
        body = composer.compose(severity, Language.EN, [], None)

        assert body == OPENINGS[Language.EN][variant]

    def test_arabic_opening(self, composer):
        body = composer.compose(Severity.CRITICAL, Language.AR, [], None)

        assert body.startswith(OPENINGS[Language.AR]["critical"])


class TestBody:
    """Actions and resources blocks."""

    def test_actions_one_per_line(self, composer):
        body = composer.compose(Severity.HIGH, Language.EN, ["Call a friend", "Breathe"], None)

        assert "• Call a friend\n• Breathe" in body

    def test_resources_block_with_phone(self, composer):
        body = composer.compose(Severity.CRITICAL, Language.AR, ["اتصل"], [SA_HOTLINE])

        assert body.endswith("موارد الطوارئ:\n• الخط الوطني للوقاية من الانتحار: 920033360")

    def test_resource_without_phone(self, composer):
        body = composer.compose(Severity.CRITICAL, Language.EN, [], [TEXT_LINE])

        assert body.endswith("Emergency resources:\n• Crisis Text Line")

    def test_no_resources_block_when_empty(self, composer):
        body = composer.compose(Severity.HIGH, Language.EN, ["Call a friend"], [])

        assert "Emergency resources:" not in body

    def test_sections_separated_by_blank_line(self, composer):
        body = composer.compose(Severity.HIGH, Language.EN, ["A"], [TEXT_LINE])

        assert body.count("\n\n") == 2

    def test_pure(self, composer):
        args = (Severity.HIGH, Language.EN, ["A"], [TEXT_LINE])
        assert composer.compose(*args) == composer.compose(*args)
