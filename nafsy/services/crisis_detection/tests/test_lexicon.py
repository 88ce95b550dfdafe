"""Tests for the crisis lexicons."""
from dataclasses import FrozenInstanceError

import pytest

from nafsy.shared.models import ContextFactor, Language, Tier
from nafsy.services.crisis_detection.lexicon import LEXICONS, LanguageLexicon, get_lexicon


class TestLexiconTables:
    """Shape and immutability of the bundled tables."""

    @pytest.mark.parametrize("language", [Language.EN, Language.AR])
    def test_every_tier_populated(self, language):
        lexicon = LEXICONS[language]
        for tier in Tier:
            assert lexicon.tier_phrases(tier), f"{language.value} {tier.value} is empty"

    @pytest.mark.parametrize("language", [Language.EN, Language.AR])
    def test_every_factor_populated(self, language):
        lexicon = LEXICONS[language]
        for factor in ContextFactor:
            assert lexicon.factor_phrases(factor), f"{language.value} {factor.value} is empty"

    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            LEXICONS[Language.EN].tiers[Tier.IMMEDIATE] = ("anything",)
        with pytest.raises(TypeError):
            LEXICONS[Language.EN] = LEXICONS[Language.AR]

    def test_lexicon_is_frozen(self):
        with pytest.raises(FrozenInstanceError):
            LEXICONS[Language.EN].language = Language.AR

    def test_phrases_unique_within_tier(self):
        for lexicon in LEXICONS.values():
            for tier in Tier:
                phrases = [p.lower() for p in lexicon.tier_phrases(tier)]
                assert len(phrases) == len(set(phrases))

    def test_phrase_count(self):
        lexicon = LEXICONS[Language.EN]
        expected = sum(len(lexicon.tier_phrases(t)) for t in Tier) + sum(
            len(lexicon.factor_phrases(f)) for f in ContextFactor
        )
        assert lexicon.phrase_count == expected

    def test_mild_words_not_in_tiers(self):
        """Everyday sadness words do not trigger a tier on their own."""
        lexicon = LEXICONS[Language.EN]
        all_tier_phrases = {p for t in Tier for p in lexicon.tier_phrases(t)}
        for word in ("sad", "worried", "alone"):
            assert word not in all_tier_phrases

    def test_cultural_distress_terms(self):
        assert "عار" in LEXICONS[Language.AR].factor_phrases(ContextFactor.CULTURAL_DISTRESS)
        assert "shame" in LEXICONS[Language.EN].factor_phrases(ContextFactor.CULTURAL_DISTRESS)


class TestGetLexicon:
    """Language resolution for lexicon lookup."""

    def test_by_enum(self):
        assert get_lexicon(Language.AR).language == Language.AR

    def test_by_code(self):
        assert get_lexicon("ar").language == Language.AR

    def test_by_role(self):
        assert get_lexicon("secondary").language == Language.AR
        assert get_lexicon("primary").language == Language.EN

    def test_unknown_falls_back_to_english(self, caplog):
        lexicon = get_lexicon("fr")

        assert lexicon.language == Language.EN
        assert "LEXICON_LANGUAGE_MISSING" in caplog.text

    def test_missing_table_falls_back_to_english(self):
        only_english = {Language.EN: LEXICONS[Language.EN]}
        assert get_lexicon(Language.AR, only_english).language == Language.EN

    def test_custom_lexicon(self):
        custom = LanguageLexicon(
            language=Language.EN,
            tiers={Tier.IMMEDIATE: ("test phrase",)},
            factors={},
        )
        assert custom.tier_phrases(Tier.HIGH) == ()
        assert custom.factor_phrases(ContextFactor.ISOLATION) == ()
