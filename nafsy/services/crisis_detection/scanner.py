"""Keyword scanner - matches message text against the crisis lexicons.

Two text variants are scanned and their hits unioned:
- the plain variant (lower-cased, Arabic-folded)
- the adversarial variant (leetspeak, styled unicode, separated letters)

Tiers and contextual factors are evaluated independently; a message can hit
several tiers at once. Factors are reported separately and never decide
severity on their own.
"""
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple, Union

from nafsy.shared.models import ContextFactor, Language, Tier
from .lexicon import LEXICONS, LanguageLexicon, get_lexicon
from .text_normalizer import TextNormalizer, fold_phrase, get_normalizer

logger = logging.getLogger(__name__)

# (original phrase, folded phrase)
_CompiledPhrases = Tuple[Tuple[str, str], ...]


@dataclass(frozen=True)
class ScanResult:
    """Result of scanning one message against one or more lexicons.

    Immutable - scan results cannot be modified after creation.
    """
    tier_matches: Mapping[Tier, Tuple[str, ...]] = field(default_factory=dict)
    factor_matches: Mapping[ContextFactor, Tuple[str, ...]] = field(default_factory=dict)
    languages: Tuple[Language, ...] = ()

    @property
    def tier_hits(self) -> FrozenSet[Tier]:
        return frozenset(t for t, phrases in self.tier_matches.items() if phrases)

    @property
    def factors(self) -> FrozenSet[ContextFactor]:
        return frozenset(f for f, phrases in self.factor_matches.items() if phrases)

    @property
    def matched_phrases(self) -> List[str]:
        """Matched tier phrases, most severe tier first, without duplicates."""
        phrases: List[str] = []
        for tier in Tier:
            for phrase in self.tier_matches.get(tier, ()):
                if phrase not in phrases:
                    phrases.append(phrase)
        return phrases

    @property
    def matched_factor_phrases(self) -> List[str]:
        phrases: List[str] = []
        for factor in ContextFactor:
            for phrase in self.factor_matches.get(factor, ()):
                if phrase not in phrases:
                    phrases.append(phrase)
        return phrases

    def hits_for(self, tier: Tier) -> Tuple[str, ...]:
        return self.tier_matches.get(tier, ())

    def merge(self, other: "ScanResult") -> "ScanResult":
        """Union of two scans of the same message (e.g. two lexicons)."""
        return ScanResult(
            tier_matches=_union(self.tier_matches, other.tier_matches),
            factor_matches=_union(self.factor_matches, other.factor_matches),
            languages=self.languages + tuple(
                lang for lang in other.languages if lang not in self.languages
            ),
        )

    def to_dict(self) -> Dict:
        return {
            "tier_hits": sorted(t.value for t in self.tier_hits),
            "factors": sorted(f.value for f in self.factors),
            "matched_phrases": self.matched_phrases,
            "languages": [lang.value for lang in self.languages],
        }


def _union(left: Mapping, right: Mapping) -> Mapping:
    merged: Dict = {}
    for key in list(left) + [k for k in right if k not in left]:
        combined = list(left.get(key, ()))
        combined.extend(p for p in right.get(key, ()) if p not in combined)
        merged[key] = tuple(combined)
    return MappingProxyType(merged)


class KeywordScanner:
    """Scans normalized text against per-language crisis lexicons.

    Lexicon phrases are folded once at construction; scanning itself is a
    pure function of (text, language).
    """

    def __init__(
        self,
        lexicons: Mapping[Language, LanguageLexicon] = LEXICONS,
        normalizer: Optional[TextNormalizer] = None,
    ):
        self.lexicons = lexicons
        self._normalizer = normalizer or get_normalizer()
        self._compiled: Dict[Language, Tuple[Dict[Tier, _CompiledPhrases], Dict[ContextFactor, _CompiledPhrases]]] = {
            language: self._compile(lexicon) for language, lexicon in lexicons.items()
        }

        logger.info(
            "KEYWORD_SCANNER_INITIALIZED",
            extra={
                "languages": [lang.value for lang in lexicons],
                "phrase_count": sum(lex.phrase_count for lex in lexicons.values()),
            }
        )

    @staticmethod
    def _compile(lexicon: LanguageLexicon):
        tiers = {
            tier: tuple((p, fold_phrase(p)) for p in lexicon.tier_phrases(tier))
            for tier in Tier
        }
        factors = {
            factor: tuple((p, fold_phrase(p)) for p in lexicon.factor_phrases(factor))
            for factor in ContextFactor
        }
        return tiers, factors

    def scan(self, text: str, language: Union[Language, str, None]) -> ScanResult:
        """Scan a message for tier phrases and contextual factors.

        Args:
            text: Raw message text (may be empty or very long)
            language: Language whose lexicon to use; unknown values fall back
                to the primary language tables

        Returns:
            ScanResult with per-tier and per-factor matched phrases
        """
        lexicon = get_lexicon(language, self.lexicons)
        if not text or not text.strip():
            return ScanResult(languages=(lexicon.language,))

        variants = (fold_phrase(text), self._normalizer.normalize(text))
        tiers, factors = self._compiled[lexicon.language]

        result = ScanResult(
            tier_matches=MappingProxyType(
                {tier: self._match(phrases, variants) for tier, phrases in tiers.items()}
            ),
            factor_matches=MappingProxyType(
                {factor: self._match(phrases, variants) for factor, phrases in factors.items()}
            ),
            languages=(lexicon.language,),
        )

        logger.debug(
            "KEYWORD_SCAN_COMPLETED",
            extra={
                "language": lexicon.language.value,
                "tier_hits": sorted(t.value for t in result.tier_hits),
                "factors": sorted(f.value for f in result.factors),
                "text_length": len(text),
            }
        )
        return result

    def scan_languages(self, text: str, languages: List[Language]) -> ScanResult:
        """Scan with several lexicons and union the hits."""
        result: Optional[ScanResult] = None
        for language in languages:
            scanned = self.scan(text, language)
            result = scanned if result is None else result.merge(scanned)
        return result if result is not None else self.scan(text, Language.primary())

    @staticmethod
    def _match(phrases: _CompiledPhrases, variants: Tuple[str, ...]) -> Tuple[str, ...]:
        return tuple(
            original for original, folded in phrases
            if folded and any(folded in variant for variant in variants)
        )
