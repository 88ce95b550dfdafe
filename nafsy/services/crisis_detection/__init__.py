"""Crisis Detection: bilingual crisis screening for user messages.

Every user message is screened before the chat reply is generated. The
keyword layer is deterministic and always answers; the AI layer can only
escalate its verdict.

Components:
- language_detector.py: English/Arabic language guess
- text_normalizer.py: Evasion-resistant text folding
- lexicon.py: Immutable per-language tier and factor phrase tables
- scanner.py: KeywordScanner, tier and factor matching
- scorer.py: SeverityScorer, escalation rules
- ai_classifier.py: Time-boxed AI second opinion
- merger.py: Monotonic merge of heuristic and AI verdicts
- composer.py: Localized safety replies
- resources.py: Emergency resource lookup
- engine.py: CrisisDetectionEngine, the entry point
- handler.py: Flask HTTP endpoints (/health, /detect)

Usage:
    # As HTTP service
    POST /detect {"message": "...", "language": "ar", "user_id": "..."}

    # Direct import
    from nafsy.services.crisis_detection import CrisisDetectionEngine
    engine = CrisisDetectionEngine()
    analysis = await engine.detect_crisis(text, "en")
"""

from .ai_classifier import AIClassifier, AIVerdict, ClassificationFailure, FailureReason
from .composer import ResponseComposer
from .config import CrisisDetectionConfig, LEXICON_VERSION
from .engine import CrisisDetectionEngine, should_suppress_chat
from .language_detector import LanguageDetector, detect_language
from .lexicon import LEXICONS, LanguageLexicon, get_lexicon
from .merger import ResultMerger, default_actions
from .resources import InMemoryResourceStore, ResourceLookup
from .scanner import KeywordScanner, ScanResult
from .scorer import HeuristicVerdict, SeverityScorer

__all__ = [
    "AIClassifier",
    "AIVerdict",
    "ClassificationFailure",
    "FailureReason",
    "ResponseComposer",
    "CrisisDetectionConfig",
    "LEXICON_VERSION",
    "CrisisDetectionEngine",
    "should_suppress_chat",
    "LanguageDetector",
    "detect_language",
    "LEXICONS",
    "LanguageLexicon",
    "get_lexicon",
    "ResultMerger",
    "default_actions",
    "InMemoryResourceStore",
    "ResourceLookup",
    "KeywordScanner",
    "ScanResult",
    "HeuristicVerdict",
    "SeverityScorer",
]
