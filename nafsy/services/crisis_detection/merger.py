"""Result merger - combines the heuristic and AI verdicts.

Safety-critical classification only escalates: the AI can raise severity
above the keyword verdict but can never lower it.
"""
import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from nafsy.shared.models import CrisisAnalysis, Language, Resource, Severity
from .ai_classifier import AIResult, AIVerdict
from .scorer import HeuristicVerdict

logger = logging.getLogger(__name__)


DEFAULT_ACTIONS: Dict[Language, Dict[Severity, List[str]]] = {
    Language.EN: {
        Severity.CRITICAL: [
            "Immediately contact emergency services (911) or crisis hotline",
            "Stay with someone you trust",
            "Remove any means of self-harm",
            "Go to the nearest emergency room if in immediate danger",
        ],
        Severity.HIGH: [
            "Contact a mental health professional today",
            "Call a crisis helpline for immediate support",
            "Reach out to a trusted friend or family member",
            "Practice emergency coping strategies",
        ],
        Severity.MEDIUM: [
            "Schedule an appointment with a mental health professional",
            "Use coping strategies and self-care techniques",
            "Connect with your support network",
            "Monitor your symptoms closely",
        ],
        Severity.LOW: [
            "Continue using self-care strategies",
            "Maintain regular check-ins with support system",
            "Consider preventive mental health care",
        ],
    },
    Language.AR: {
        Severity.CRITICAL: [
            "اتصل فوراً بخدمات الطوارئ أو خط الأزمات",
            "ابق مع شخص تثق به",
            "أزل أي وسائل لإيذاء النفس",
            "اذهب إلى أقرب غرفة طوارئ إذا كنت في خطر فوري",
        ],
        Severity.HIGH: [
            "اتصل بأخصائي صحة نفسية اليوم",
            "اتصل بخط المساعدة في الأزمات للحصول على دعم فوري",
            "تواصل مع صديق موثوق أو أحد أفراد العائلة",
            "مارس استراتيجيات التأقلم الطارئة",
        ],
        Severity.MEDIUM: [
            "حدد موعداً مع أخصائي صحة نفسية",
            "استخدم استراتيجيات التأقلم والرعاية الذاتية",
            "تواصل مع شبكة الدعم الخاصة بك",
            "راقب أعراضك عن كثب",
        ],
        Severity.LOW: [
            "استمر في استخدام استراتيجيات الرعاية الذاتية",
            "حافظ على التواصل المنتظم مع نظام الدعم",
            "فكر في الرعاية الصحية النفسية الوقائية",
        ],
    },
}


def default_actions(severity: Severity, language: Language) -> List[str]:
    """Suggested actions for a severity, in the given language."""
    table = DEFAULT_ACTIONS.get(language, DEFAULT_ACTIONS[Language.primary()])
    return list(table[severity])


def _dedup(items: Iterable[str]) -> List[str]:
    result: List[str] = []
    for item in items:
        if item not in result:
            result.append(item)
    return result


class ResultMerger:
    """Merges heuristic and AI verdicts into one CrisisAnalysis."""

    def merge(
        self,
        heuristic: HeuristicVerdict,
        ai_result: Optional[AIResult],
        language: Language,
    ) -> CrisisAnalysis:
        """Combine verdicts.

        Args:
            heuristic: Keyword-based verdict
            ai_result: AIVerdict, ClassificationFailure, or None when not consulted
            language: Language for default suggested actions

        Returns:
            CrisisAnalysis whose severity is never below heuristic.severity
        """
        if not isinstance(ai_result, AIVerdict):
            return self._heuristic_only(heuristic, language)

        severity = max(heuristic.severity, ai_result.severity)
        # isCrisis is the OR of both sides; a crisis flag with LOW severity
        # is floored to MEDIUM so severity and flag stay consistent
        if (heuristic.is_crisis or ai_result.is_crisis) and severity == Severity.LOW:
            severity = Severity.MEDIUM

        if severity > heuristic.severity:
            logger.info(
                "AI_SEVERITY_ESCALATION",
                extra={
                    "heuristic_severity": heuristic.severity.value,
                    "ai_severity": ai_result.severity.value,
                    "final_severity": severity.value,
                }
            )

        suggested_actions = ai_result.suggested_actions or default_actions(severity, language)
        return self._build(
            severity,
            _dedup(list(heuristic.indicators) + list(ai_result.indicators)),
            suggested_actions,
        )

    def _heuristic_only(
        self,
        heuristic: HeuristicVerdict,
        language: Language,
    ) -> CrisisAnalysis:
        # Matched phrases ride along as literal indicators for auditability
        indicators = _dedup(list(heuristic.indicators) + list(heuristic.matched_phrases))
        return self._build(
            heuristic.severity,
            indicators,
            default_actions(heuristic.severity, language),
        )

    @staticmethod
    def _build(
        severity: Severity,
        indicators: List[str],
        suggested_actions: List[str],
    ) -> CrisisAnalysis:
        return CrisisAnalysis(
            is_crisis=severity != Severity.LOW,
            severity=severity,
            indicators=indicators,
            suggested_actions=list(suggested_actions),
        )

    @staticmethod
    def attach_resources(
        analysis: CrisisAnalysis,
        resources: Optional[List[Resource]],
    ) -> CrisisAnalysis:
        """Return a copy carrying resources; non-crisis verdicts get an empty list."""
        if resources is None:
            return analysis
        return replace(analysis, resources=list(resources) if analysis.is_crisis else [])
