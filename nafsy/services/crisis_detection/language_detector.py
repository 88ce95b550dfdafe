"""Message language detection (English / Arabic).

Script is a stronger signal than vocabulary: any Arabic-script character
decides immediately. Latin-script text is then checked against small
keyword lists, where the Arabic list holds common Arabizi (romanized
Arabic) words.
"""
import re
from typing import Tuple

from nafsy.shared.models import Language


# Arabic, Arabic Supplement, Arabic Extended-A, Presentation Forms A and B
ARABIC_SCRIPT_PATTERN = re.compile(
    "[\u0600-\u06ff\u0750-\u077f\u08a0-\u08ff\ufb50-\ufdff\ufe70-\ufefc]"
)

ARABIC_KEYWORDS: Tuple[str, ...] = (
    "inshallah",
    "insha allah",
    "wallah",
    "mashallah",
    "alhamdulillah",
    "habibi",
    "7abibi",
    "yalla",
    "shukran",
    "ya3ni",
    "3ashan",
    "ya rab",
    "mafi shi",
)

ENGLISH_KEYWORDS: Tuple[str, ...] = (
    "the",
    "and",
    "is",
    "are",
    "was",
    "have",
    "i'm",
    "you",
    "my",
    "me",
    "feel",
    "want",
    "can't",
    "don't",
    "with",
    "for",
)


class LanguageDetector:
    """Guesses the language of a message. Pure and deterministic."""

    def __init__(
        self,
        primary: Language = Language.EN,
        secondary: Language = Language.AR,
    ):
        self.primary = primary
        self.secondary = secondary

    def detect(self, text: str) -> Language:
        """Detect the language of text.

        Args:
            text: Raw message text, possibly empty

        Returns:
            The secondary language when Arabic script or Arabizi keywords are
            present, otherwise the primary language (also on ties/no signal)
        """
        if not text:
            return self.primary

        if ARABIC_SCRIPT_PATTERN.search(text):
            return self.secondary

        lower = text.lower()
        secondary_hits = sum(1 for k in ARABIC_KEYWORDS if k in lower)
        primary_hits = sum(1 for k in ENGLISH_KEYWORDS if k in lower)

        if secondary_hits > 0:
            return self.secondary
        if primary_hits > secondary_hits:
            return self.primary
        return self.primary


_detector = LanguageDetector()


def detect_language(text: str) -> Language:
    """Module-level convenience using the default English/Arabic detector."""
    return _detector.detect(text)
