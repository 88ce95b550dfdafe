"""AI classifier adapter - optional second opinion from a completion model.

The adapter never raises. Every failure (disabled, timeout, transport error,
non-2xx, unparseable JSON, wrong shape) comes back as a ClassificationFailure
value so the merge step can fall back to the heuristic verdict. There is no
retry: on the crisis path a fast usable verdict beats reaching the model.
"""
import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from nafsy.shared.models import ConversationContext, Language, Severity
from nafsy.services.llm_service import MAX_PROMPT_CHARS, BaseLLM, LLMError, LLMHTTPError

logger = logging.getLogger(__name__)

# Longest message excerpt sent to the model
MAX_MESSAGE_CHARS = 8000

# Longest excerpt of one prior turn
MAX_TURN_CHARS = 500

CONTEXT_HEADER = "Recent conversation:\n"
MESSAGE_HEADER = "\n\nMessage to assess:\n"

REQUIRED_FIELDS = ("isCrisis", "severity", "indicators", "suggestedActions")


SYSTEM_PROMPT_EN = """You are a mental health expert specializing in risk assessment. Analyze the following message to determine if it indicates a crisis or emergency situation.

You must respond with a JSON object containing exactly:
- isCrisis: true if the message indicates a crisis, otherwise false
- severity: "low", "medium", "high", or "critical"
- indicators: list of specific indicators found in the message
- suggestedActions: suggested response actions

Assessment criteria:
- critical: Immediate threats of self-harm or suicide
- high: Suicidal ideation, severe panic attacks, extreme hopelessness
- medium: Severe depression, severe anxiety, difficulty coping
- low: General distress without immediate risk"""

SYSTEM_PROMPT_AR = """أنت خبير في الصحة النفسية متخصص في تقييم المخاطر. قم بتحليل الرسالة التالية لتحديد ما إذا كانت تشير إلى أزمة أو حالة طوارئ.

يجب أن ترد بكائن JSON يحتوي على:
- isCrisis: true إذا كانت الرسالة تشير إلى أزمة، وإلا false
- severity: "low" أو "medium" أو "high" أو "critical"
- indicators: قائمة بالمؤشرات المحددة في الرسالة
- suggestedActions: إجراءات مقترحة للاستجابة

معايير التقييم:
- critical: تهديدات فورية بإيذاء النفس أو الانتحار
- high: أفكار انتحارية، نوبات هلع شديدة، يأس شديد
- medium: اكتئاب شديد، قلق شديد، صعوبة في التأقلم
- low: ضائقة عامة دون مخاطر فورية"""

SYSTEM_PROMPTS: Dict[Language, str] = {
    Language.EN: SYSTEM_PROMPT_EN,
    Language.AR: SYSTEM_PROMPT_AR,
}


class FailureReason:
    DISABLED = "disabled"
    EMPTY_INPUT = "empty_input"
    TIMEOUT = "timeout"
    NETWORK = "network"
    HTTP_STATUS = "http_status"
    INVALID_JSON = "invalid_json"
    INVALID_SHAPE = "invalid_shape"
    ERROR = "error"


class AIResponseError(ValueError):
    """The model answered, but not with the required JSON object."""

    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason = reason


@dataclass(frozen=True)
class AIVerdict:
    """A well-formed judgment returned by the model."""
    is_crisis: bool
    severity: Severity
    indicators: List[str] = field(default_factory=list)
    suggested_actions: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ClassificationFailure:
    """Any reason the AI verdict is unavailable for this call."""
    reason: str
    detail: str = ""


AIResult = Union[AIVerdict, ClassificationFailure]


def _string_list(data: Dict[str, Any], key: str) -> List[str]:
    value = data[key]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise AIResponseError(FailureReason.INVALID_SHAPE, f"{key} must be a list of strings")
    return [v.strip() for v in value if v.strip()]


def parse_ai_response(content: str) -> AIVerdict:
    """Validate the model's completion text against the response contract.

    Missing or mistyped fields fail the whole response; there is no partial
    success.

    Raises:
        AIResponseError: With reason invalid_json or invalid_shape
    """
    try:
        data = json.loads(content)
    except (TypeError, json.JSONDecodeError) as e:
        raise AIResponseError(FailureReason.INVALID_JSON, f"Unparseable JSON: {e}") from e

    if not isinstance(data, dict):
        raise AIResponseError(FailureReason.INVALID_SHAPE, "Response is not a JSON object")

    missing = [f for f in REQUIRED_FIELDS if f not in data]
    if missing:
        raise AIResponseError(FailureReason.INVALID_SHAPE, f"Missing fields: {missing}")

    if not isinstance(data["isCrisis"], bool):
        raise AIResponseError(FailureReason.INVALID_SHAPE, "isCrisis must be a boolean")

    try:
        severity = Severity.parse(data["severity"])
    except ValueError as e:
        raise AIResponseError(FailureReason.INVALID_SHAPE, f"Invalid severity: {data['severity']!r}") from e

    return AIVerdict(
        is_crisis=data["isCrisis"],
        severity=severity,
        indicators=_string_list(data, "indicators"),
        suggested_actions=_string_list(data, "suggestedActions"),
    )


class AIClassifier:
    """Time-boxed adapter around a completion client."""

    def __init__(
        self,
        llm: Optional[BaseLLM] = None,
        timeout_seconds: float = 8.0,
        max_context_messages: int = 5,
    ):
        """Initialize the adapter.

        Args:
            llm: Completion client; None disables the AI layer
            timeout_seconds: Bounded wait for one classification
            max_context_messages: Prior turns included from the conversation context
        """
        self.llm = llm
        self.timeout_seconds = timeout_seconds
        self.max_context_messages = max_context_messages

        logger.info(
            "AI_CLASSIFIER_INITIALIZED",
            extra={
                "enabled": llm is not None,
                "timeout_seconds": timeout_seconds,
            }
        )

    @property
    def enabled(self) -> bool:
        return self.llm is not None

    def build_prompt(
        self,
        text: str,
        context: Optional[ConversationContext] = None,
    ) -> str:
        """Build the user prompt, optionally prefixed with recent turns.

        The whole prompt stays within the client's MAX_PROMPT_CHARS. The
        message always goes in; prior turns fill what is left, newest first.
        """
        message = text[:MAX_MESSAGE_CHARS]
        if not context or self.max_context_messages <= 0:
            return message
        recent = list(context.recent_messages)[-self.max_context_messages:]

        budget = MAX_PROMPT_CHARS - len(message) - len(CONTEXT_HEADER) - len(MESSAGE_HEADER)
        lines: List[str] = []
        for turn in reversed(recent):
            line = f"- {turn[:MAX_TURN_CHARS]}"
            # +1 for the joining newline
            if len(line) + 1 > budget:
                break
            lines.insert(0, line)
            budget -= len(line) + 1

        if not lines:
            return message
        history = "\n".join(lines)
        return f"{CONTEXT_HEADER}{history}{MESSAGE_HEADER}{message}"

    async def classify(
        self,
        text: str,
        language: Language,
        context: Optional[ConversationContext] = None,
    ) -> AIResult:
        """Ask the model for its own crisis judgment.

        Args:
            text: Raw message text
            language: Language used to pick the system prompt
            context: Optional conversation scoping

        Returns:
            AIVerdict on success, ClassificationFailure otherwise. Never raises.
        """
        if self.llm is None:
            return ClassificationFailure(FailureReason.DISABLED)
        if not text or not text.strip():
            return ClassificationFailure(FailureReason.EMPTY_INPUT)

        system_prompt = SYSTEM_PROMPTS.get(language, SYSTEM_PROMPT_EN)
        start_time = time.perf_counter()

        try:
            response = await asyncio.wait_for(
                self.llm.generate(
                    self.build_prompt(text, context),
                    system_prompt=system_prompt,
                    json_mode=True,
                ),
                timeout=self.timeout_seconds,
            )
            verdict = parse_ai_response(response.text)
        except asyncio.TimeoutError:
            return self._failure(FailureReason.TIMEOUT, "timed out", "TimeoutError", start_time)
        except AIResponseError as e:
            return self._failure(e.reason, str(e), type(e).__name__, start_time)
        except LLMHTTPError as e:
            return self._failure(FailureReason.HTTP_STATUS, str(e), type(e).__name__, start_time)
        except LLMError as e:
            return self._failure(FailureReason.NETWORK, str(e), type(e).__name__, start_time)
        except Exception as e:
            # Any other client failure still must not reach message delivery
            return self._failure(FailureReason.ERROR, str(e), type(e).__name__, start_time)

        logger.info(
            "AI_CLASSIFICATION_COMPLETED",
            extra={
                "language": language.value,
                "severity": verdict.severity.value,
                "is_crisis": verdict.is_crisis,
                "latency_ms": (time.perf_counter() - start_time) * 1000,
            }
        )
        return verdict

    @staticmethod
    def _failure(reason: str, detail: str, error_type: str, start_time: float) -> ClassificationFailure:
        logger.warning(
            "AI_CLASSIFIER_FAILED",
            extra={
                "reason": reason,
                "error_type": error_type,
                "latency_ms": (time.perf_counter() - start_time) * 1000,
                "action": "HEURISTIC_FALLBACK",
            }
        )
        return ClassificationFailure(reason=reason, detail=detail)
