"""Crisis verdict and severity domain models.

This file defines the enums and immutable data structures shared by the
crisis detection engine and the services that consume its verdicts.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class Severity(Enum):
    """Output severity of a crisis verdict.

    Totally ordered: LOW < MEDIUM < HIGH < CRITICAL. Merges take the maximum.
    """
    LOW = "low"             # Ordinary distress, no crisis state
    MEDIUM = "medium"       # Concerning, needs close monitoring
    HIGH = "high"           # High risk, needs urgent support
    CRITICAL = "critical"   # Immediate danger to life

    @property
    def rank(self) -> int:
        """Position of this severity in the total order."""
        return _SEVERITY_ORDER.index(self.value)

    def __lt__(self, other: "Severity") -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: "Severity") -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: "Severity") -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: "Severity") -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank

    @classmethod
    def parse(cls, value: Union[str, "Severity"]) -> "Severity":
        """Parse a severity from its wire value, case-insensitively.

        Raises:
            ValueError: If value is not one of low/medium/high/critical
        """
        if isinstance(value, Severity):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Severity must be a string, got {type(value).__name__}")
        return cls(value.strip().lower())


_SEVERITY_ORDER: Tuple[str, ...] = ("low", "medium", "high", "critical")


class Language(Enum):
    """Supported message languages."""
    EN = "en"   # Primary
    AR = "ar"   # Secondary

    @classmethod
    def primary(cls) -> "Language":
        return cls.EN

    @classmethod
    def from_hint(cls, value: Any) -> Optional["Language"]:
        """Resolve a caller-supplied language hint.

        Accepts "en", "ar", "primary", "secondary" (any case) or a Language.
        Returns None for anything else so the caller can fall back to detection.
        """
        if isinstance(value, Language):
            return value
        if not isinstance(value, str):
            return None
        hint = value.strip().lower()
        if hint == "primary":
            return cls.EN
        if hint == "secondary":
            return cls.AR
        for language in cls:
            if language.value == hint:
                return language
        return None


class Tier(Enum):
    """Keyword lexicon buckets used for phrase classification."""
    IMMEDIATE = "immediate"
    HIGH = "high"
    MODERATE = "moderate"

    @property
    def label(self) -> str:
        return _TIER_LABELS[self.value]


_TIER_LABELS: Dict[str, str] = {
    "immediate": "Immediate Risk Language",
    "high": "High Risk Language",
    "moderate": "Emotional Distress Language",
}


class ContextFactor(Enum):
    """Secondary phrase categories that escalate but never trigger alone."""
    TIME_URGENCY = "time_urgency"
    METHOD_REFERENCE = "method_reference"
    ISOLATION = "isolation"
    CULTURAL_DISTRESS = "cultural_distress"
    FAMILY_HONOR = "family_honor"

    @property
    def label(self) -> str:
        return _FACTOR_LABELS[self.value]


# Labels for cultural and family-honor factors are matched literally downstream
_FACTOR_LABELS: Dict[str, str] = {
    "time_urgency": "Time Urgency",
    "method_reference": "Method Reference",
    "isolation": "Isolation/Hopelessness",
    "cultural_distress": "Religious/Cultural Distress",
    "family_honor": "Family/Honor Related Distress",
}


@dataclass(frozen=True)
class Resource:
    """An emergency or support resource owned by the resource store.

    Treated as opaque data by the engine and embedded in composed replies.
    """
    title: str
    is_emergency: bool
    language: str
    phone: Optional[str] = None
    url: Optional[str] = None
    country: Optional[str] = None
    description: str = ""
    resource_type: str = "hotline"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "type": self.resource_type,
            "title": self.title,
            "description": self.description,
            "phone": self.phone,
            "url": self.url,
            "isEmergency": self.is_emergency,
            "language": self.language,
            "country": self.country,
        }


@dataclass(frozen=True)
class ConversationContext:
    """Optional scoping for the AI layer and resource lookup.

    Unused by the pure scoring path.
    """
    user_id: Optional[str] = None
    conversation_id: Optional[str] = None
    country: Optional[str] = None
    recent_messages: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CrisisAnalysis:
    """The engine's verdict for a single message.

    Immutable and constructed fresh per call. The calling pipeline attaches
    its fields to the stored message; the verdict has no identity of its own.
    """
    is_crisis: bool
    severity: Severity
    indicators: List[str] = field(default_factory=list)
    suggested_actions: List[str] = field(default_factory=list)
    resources: Optional[List[Resource]] = None

    def __post_init__(self):
        if self.is_crisis != (self.severity != Severity.LOW):
            raise ValueError(
                f"is_crisis={self.is_crisis} inconsistent with severity={self.severity.value}"
            )
        if self.resources and not self.is_crisis:
            raise ValueError("Resources may only be attached to a crisis verdict")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase wire shape."""
        result: Dict[str, Any] = {
            "isCrisis": self.is_crisis,
            "severity": self.severity.value,
            "indicators": list(self.indicators),
            "suggestedActions": list(self.suggested_actions),
        }
        if self.resources is not None:
            result["resources"] = [r.to_dict() for r in self.resources]
        return result

    def to_message_metadata(self, language: Union[Language, str]) -> Dict[str, Any]:
        """Fields the message pipeline stores alongside the user's message."""
        if isinstance(language, Language):
            language = language.value
        return {
            "isEmergency": self.is_crisis,
            "language": language,
            "crisisSeverity": self.severity.value,
            "crisisIndicators": list(self.indicators),
        }
