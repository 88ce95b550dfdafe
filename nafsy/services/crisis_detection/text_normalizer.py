"""Text normalization for crisis scanning - handles evasion and spelling variants.

Normalizes text so crisis language is still caught when it is disguised
(leetspeak, styled unicode letters, separated letters, invisible characters)
or written with common Arabic orthographic variants (diacritics, tatweel,
alef/yaa/taa-marbuta forms).

Lexicon phrases are folded with fold_phrase() at load time so that both
sides of every substring comparison use the same orthography.
"""
import logging
import re
import unicodedata
from typing import Dict, FrozenSet, Optional

logger = logging.getLogger(__name__)


# Leetspeak character mappings (numbers/symbols -> letters)
LEETSPEAK_MAP: Dict[str, str] = {
    "0": "o",
    "1": "i",
    "3": "e",
    "4": "a",
    "5": "s",
    "7": "t",
    "8": "b",
    "9": "g",
    "@": "a",
    "$": "s",
    "!": "i",
    "+": "t",
    "|": "l",
}

# Characters to strip (zero-width, invisible, separators)
STRIP_CHARS: FrozenSet[str] = frozenset({
    "\u200b",  # Zero-width space
    "\u200c",  # Zero-width non-joiner
    "\u200d",  # Zero-width joiner
    "\ufeff",  # Byte order mark
    "\u00ad",  # Soft hyphen
    "\u2060",  # Word joiner
    "\u200f",  # Right-to-left mark
    "\u200e",  # Left-to-right mark
})

# Typographic apostrophes folded to ASCII ("can\u2019t" -> "can't")
APOSTROPHES: Dict[str, str] = {
    "\u2019": "'",
    "\u2018": "'",
    "\u02bc": "'",
    "`": "'",
}

# Arabic letter variants folded to a single form
ARABIC_LETTER_MAP: Dict[str, str] = {
    "\u0623": "\u0627",  # alef with hamza above -> alef
    "\u0625": "\u0627",  # alef with hamza below -> alef
    "\u0622": "\u0627",  # alef with madda -> alef
    "\u0671": "\u0627",  # alef wasla -> alef
    "\u0649": "\u064a",  # alef maqsura -> yaa
    "\u0629": "\u0647",  # taa marbuta -> haa
}

ARABIC_TATWEEL = "\u0640"

# Harakat, tanween, shadda, sukun and superscript alef
_ARABIC_DIACRITICS = re.compile("[\u064b-\u065f\u0670]")


def fold_arabic(text: str) -> str:
    """Fold Arabic orthographic variants; other scripts pass through."""
    if not text:
        return ""
    text = _ARABIC_DIACRITICS.sub("", text).replace(ARABIC_TATWEEL, "")
    return "".join(ARABIC_LETTER_MAP.get(c, c) for c in text)


def fold_phrase(text: str) -> str:
    """Basic fold used for lexicon phrases and the plain scan variant.

    Lowercase, typographic apostrophes, invisible characters and Arabic
    variants. No leetspeak or separator handling.
    """
    if not text:
        return ""
    text = "".join(APOSTROPHES.get(c, c) for c in text if c not in STRIP_CHARS)
    return fold_arabic(text.lower())


class TextNormalizer:
    """Normalizes text to defeat evasion techniques.

    Handles:
    - Leetspeak (K1LL -> kill)
    - Styled unicode letters (ⓚⓘⓛⓛ, 𝕜𝕚𝕝𝕝, fullwidth) via NFKC
    - Dot/dash/space/newline separated single letters (k.i.l.l -> kill)
    - Zero-width characters
    - Arabic diacritics, tatweel and letter variants
    """

    def __init__(self):
        # Runs of isolated single letters joined by separators. Punctuation
        # runs may be two letters long (k.i); whitespace runs need three
        # (k i l l) so ordinary "I a..." phrasing is left alone.
        self._punct_run_pattern = re.compile(r"(?<![a-zA-Z])[a-zA-Z](?:[\.\-_\n\r]+[a-zA-Z](?![a-zA-Z]))+")
        self._space_run_pattern = re.compile(r"(?<![a-zA-Z])[a-zA-Z](?:[ \t]+[a-zA-Z](?![a-zA-Z])){2,}")
        self._separator_chars = re.compile(r"[^a-zA-Z]+")

        logger.info(
            "TEXT_NORMALIZER_INITIALIZED",
            extra={
                "leetspeak_mappings": len(LEETSPEAK_MAP),
                "arabic_mappings": len(ARABIC_LETTER_MAP),
            }
        )

    def normalize(self, text: str) -> str:
        """Normalize text to catch evasion attempts.

        Applies normalization in order:
        1. Strip zero-width/invisible characters
        2. NFKC compatibility folding (styled and fullwidth letters)
        3. Apply leetspeak conversion
        4. Remove separator characters between single letters
        5. Collapse whitespace
        6. Lowercase and fold Arabic variants

        Args:
            text: Raw input text

        Returns:
            Normalized text for pattern matching
        """
        if not text:
            return ""

        result = "".join(c for c in text if c not in STRIP_CHARS)
        result = unicodedata.normalize("NFKC", result)
        result = "".join(APOSTROPHES.get(c, c) for c in result)
        result = "".join(LEETSPEAK_MAP.get(c, c) for c in result)
        result = self._remove_letter_separators(result)
        result = " ".join(result.split())
        return fold_arabic(result.lower())

    def _remove_letter_separators(self, text: str) -> str:
        """Remove separators between single letters (k.i.l.l -> kill)."""
        text = self._punct_run_pattern.sub(self._join_letters, text)
        return self._space_run_pattern.sub(self._join_letters, text)

    def _join_letters(self, match: "re.Match") -> str:
        return self._separator_chars.sub("", match.group(0))


_normalizer: Optional[TextNormalizer] = None


def get_normalizer() -> TextNormalizer:
    """Get the shared TextNormalizer instance."""
    global _normalizer
    if _normalizer is None:
        _normalizer = TextNormalizer()
    return _normalizer


def normalize_text(text: str) -> str:
    """Convenience wrapper around the shared normalizer."""
    return get_normalizer().normalize(text)
