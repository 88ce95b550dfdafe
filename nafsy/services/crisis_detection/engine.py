"""Crisis detection engine - the single entry point for message screening.

Pipeline for one message:
    language -> keyword scan -> heuristic score -> (optional) AI verdict
    -> monotonic merge -> (optional) emergency resources

The keyword path is synchronous and always produces a verdict. The AI layer
and the resource lookup can only add to it; when either fails the engine
degrades and still answers. detect_crisis() never raises.
"""
import logging
import time
from typing import Optional, Union

from nafsy.shared.models import ConversationContext, CrisisAnalysis, Language, Severity
from nafsy.shared.utils import hash_pii, hash_text_for_audit, is_pii_salt_configured
from nafsy.services.llm_service import BaseLLM
from .ai_classifier import AIClassifier, AIResult, ClassificationFailure, FailureReason
from .composer import ResponseComposer
from .config import CrisisDetectionConfig
from .language_detector import LanguageDetector
from .merger import ResultMerger, default_actions
from .resources import InMemoryResourceStore, ResourceLookup
from .scanner import KeywordScanner, ScanResult
from .scorer import HeuristicVerdict, SeverityScorer

logger = logging.getLogger(__name__)

SCANNER_ERROR_INDICATOR = "Scanner error"


def _hash_id(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if not is_pii_salt_configured():
        return "unconfigured"
    return hash_pii(value)


def should_suppress_chat(analysis: CrisisAnalysis) -> bool:
    """Whether the normal chat reply is replaced by the safety reply.

    Non-critical crises show the safety reply instead of chat. A critical
    verdict shows the safety reply and the caller may keep a supportive
    conversation going alongside it.
    """
    return analysis.is_crisis and analysis.severity != Severity.CRITICAL


class CrisisDetectionEngine:
    """Screens user messages for crisis signals.

    Usage:
        engine = CrisisDetectionEngine()
        analysis = await engine.detect_crisis("I feel hopeless", "en")
        if analysis.is_crisis:
            reply = engine.build_safety_reply(analysis, Language.EN)
    """

    def __init__(
        self,
        config: Optional[CrisisDetectionConfig] = None,
        llm: Optional[BaseLLM] = None,
        scanner: Optional[KeywordScanner] = None,
        scorer: Optional[SeverityScorer] = None,
        classifier: Optional[AIClassifier] = None,
        merger: Optional[ResultMerger] = None,
        resource_lookup: Optional[ResourceLookup] = None,
        detector: Optional[LanguageDetector] = None,
        composer: Optional[ResponseComposer] = None,
    ):
        """Initialize the engine.

        Args:
            config: Behavioral configuration
            llm: Completion client for the AI layer; ignored when classifier is given
            scanner: Keyword scanner (defaults to the bundled lexicons)
            scorer: Severity scorer
            classifier: AI classifier adapter
            merger: Verdict merger
            resource_lookup: Emergency resource source
            detector: Language detector
            composer: Safety reply composer
        """
        self.config = config or CrisisDetectionConfig()
        self.scanner = scanner or KeywordScanner()
        self.scorer = scorer or SeverityScorer()
        self.classifier = classifier or AIClassifier(
            llm=llm,
            timeout_seconds=self.config.ai_timeout_seconds,
        )
        self.merger = merger or ResultMerger()
        self.resource_lookup = resource_lookup or InMemoryResourceStore()
        self.detector = detector or LanguageDetector()
        self.composer = composer or ResponseComposer()

        logger.info(
            "CRISIS_ENGINE_INITIALIZED",
            extra={
                "ai_enabled": self.config.ai_enabled and self.classifier.enabled,
                "resource_min_severity": self.config.resource_min_severity.value,
                "lexicon_version": self.config.lexicon_version,
            }
        )

    def resolve_language(self, message: str, hint: Union[Language, str, None]) -> Language:
        """Language used for the response: the hint if valid, else detected."""
        language = Language.from_hint(hint)
        if language is None:
            language = self.detector.detect(message or "")
        return language

    def scan(self, message: str, language: Language) -> ScanResult:
        """Keyword scan with the response language plus the detected one.

        When the text looks like a different language than the hint, both
        lexicons are scanned and the hits unioned.
        """
        detected = self.detector.detect(message or "")
        if detected != language:
            return self.scanner.scan_languages(message, [language, detected])
        return self.scanner.scan(message, language)

    async def detect_crisis(
        self,
        message: str,
        language: Union[Language, str, None] = None,
        context: Optional[ConversationContext] = None,
    ) -> CrisisAnalysis:
        """Screen one message.

        Args:
            message: Raw user text; may be empty
            language: Language hint ("en", "ar", "primary", "secondary");
                detected from the text when missing or unknown
            context: Optional user/conversation scoping

        Returns:
            CrisisAnalysis. Never raises.
        """
        start_time = time.perf_counter()
        message = message or ""
        context = context or ConversationContext()

        try:
            resolved = self.resolve_language(message, language)
            scan = self.scan(message, resolved)
            heuristic = self.scorer.score(scan)
        except Exception as e:
            logger.error(
                "CRISIS_SCAN_ERROR",
                extra={
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "action": "DEFAULTING_TO_MEDIUM",
                }
            )
            return self._conservative_verdict(Language.from_hint(language) or Language.primary())

        self._log_scan(message, resolved, scan, heuristic)

        ai_result = await self._classify(message, resolved, context)
        analysis = self.merger.merge(heuristic, ai_result, resolved)
        analysis = self._attach_resources(analysis, resolved, context)

        try:
            self._log_verdict(analysis, resolved, context, ai_result, start_time)
        except Exception as e:
            logger.error("CRISIS_LOG_FAILED", extra={"stage": "verdict", "error_type": type(e).__name__})
        return analysis

    def _log_scan(
        self,
        message: str,
        language: Language,
        scan: ScanResult,
        heuristic: HeuristicVerdict,
    ) -> None:
        try:
            text_hash = hash_text_for_audit(message)
        except Exception as e:
            logger.error("CRISIS_LOG_FAILED", extra={"stage": "scan", "error_type": type(e).__name__})
            text_hash = None

        logger.info(
            "CRISIS_SCAN_COMPLETED",
            extra={
                "language": language.value,
                "scanned_languages": [lang.value for lang in scan.languages],
                "heuristic_severity": heuristic.severity.value,
                "rule": heuristic.rule,
                "text_hash": text_hash,
            }
        )

    async def _classify(
        self,
        message: str,
        language: Language,
        context: ConversationContext,
    ) -> Optional[AIResult]:
        if not self.config.ai_enabled or not self.classifier.enabled:
            return None
        try:
            return await self.classifier.classify(message, language, context)
        except Exception as e:
            # The adapter reports its own failures; this covers a replaced classifier
            logger.warning(
                "AI_CLASSIFIER_FAILED",
                extra={"reason": FailureReason.ERROR, "error_type": type(e).__name__}
            )
            return ClassificationFailure(FailureReason.ERROR, str(e))

    def _attach_resources(
        self,
        analysis: CrisisAnalysis,
        language: Language,
        context: ConversationContext,
    ) -> CrisisAnalysis:
        if not analysis.is_crisis or analysis.severity < self.config.resource_min_severity:
            return analysis

        country = context.country or self.config.default_country
        try:
            resources = self.resource_lookup.get_emergency_resources(
                language,
                country=country,
                limit=self.config.max_resources,
            )
        except Exception as e:
            logger.error(
                "RESOURCE_LOOKUP_FAILED",
                extra={
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "language": language.value,
                    "country": country,
                }
            )
            return analysis

        return self.merger.attach_resources(analysis, list(resources)[:self.config.max_resources])

    def _conservative_verdict(self, language: Language) -> CrisisAnalysis:
        return CrisisAnalysis(
            is_crisis=True,
            severity=Severity.MEDIUM,
            indicators=[SCANNER_ERROR_INDICATOR],
            suggested_actions=default_actions(Severity.MEDIUM, language),
        )

    def _log_verdict(
        self,
        analysis: CrisisAnalysis,
        language: Language,
        context: ConversationContext,
        ai_result: Optional[AIResult],
        start_time: float,
    ) -> None:
        fields = {
            "severity": analysis.severity.value,
            "language": language.value,
            "indicator_count": len(analysis.indicators),
            "resource_count": len(analysis.resources or []),
            "ai_used": ai_result is not None and not isinstance(ai_result, ClassificationFailure),
            "user_id_hash": _hash_id(context.user_id),
            "conversation_id_hash": _hash_id(context.conversation_id),
            "latency_ms": (time.perf_counter() - start_time) * 1000,
            "lexicon_version": self.config.lexicon_version,
        }

        if analysis.severity == Severity.CRITICAL:
            logger.critical("CRISIS_DETECTED", extra=fields)
        elif analysis.is_crisis:
            logger.warning("CRISIS_DETECTED", extra=fields)
        else:
            logger.debug("CRISIS_CHECK_CLEAR", extra=fields)

    def build_safety_reply(
        self,
        analysis: CrisisAnalysis,
        language: Union[Language, str, None] = None,
    ) -> Optional[str]:
        """Compose the localized safety message for a verdict.

        Returns:
            Message body, or None when the verdict is not a crisis
        """
        if not analysis.is_crisis:
            return None
        return self.composer.compose(
            analysis.severity,
            Language.from_hint(language) or Language.primary(),
            analysis.suggested_actions,
            analysis.resources,
        )
