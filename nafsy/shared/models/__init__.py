"""Shared domain models for the Nafsy platform."""
from .crisis import (
    Severity,
    Language,
    Tier,
    ContextFactor,
    Resource,
    ConversationContext,
    CrisisAnalysis,
)

__all__ = [
    "Severity",
    "Language",
    "Tier",
    "ContextFactor",
    "Resource",
    "ConversationContext",
    "CrisisAnalysis",
]
