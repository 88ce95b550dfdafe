"""Response composer - localized safety message bodies.

Pure formatting, no I/O. A body is:
    opening line (by severity)
    suggested actions, one per line
    resources block (title and phone), only when resources were given
"""
from typing import Dict, List, Optional, Sequence

from nafsy.shared.models import Language, Resource, Severity


OPENINGS: Dict[Language, Dict[str, str]] = {
    Language.EN: {
        "critical": (
            "I'm very concerned about you right now. You don't have to go through "
            "this alone, and help is available immediately."
        ),
        "high": (
            "I can hear you're in significant emotional pain right now. Your feelings "
            "are valid, and I want to make sure you have support."
        ),
        "other": (
            "I notice you're going through a difficult time. It's important to "
            "acknowledge these feelings, and seeking help is a sign of strength."
        ),
    },
    Language.AR: {
        "critical": (
            "أنا قلق جداً عليك الآن. لست مضطراً لمواجهة هذا وحدك، والمساعدة متاحة فوراً."
        ),
        "high": (
            "أستطيع أن أسمع أنك تعاني من ألم عاطفي كبير الآن. مشاعرك مبررة، "
            "وأريد التأكد من حصولك على الدعم."
        ),
        "other": (
            "ألاحظ أنك تمر بوقت صعب. من المهم الاعتراف بهذه المشاعر، "
            "وطلب المساعدة علامة على القوة."
        ),
    },
}

RESOURCES_HEADER: Dict[Language, str] = {
    Language.EN: "Emergency resources:",
    Language.AR: "موارد الطوارئ:",
}

BULLET = "• "


def _variant(severity: Severity) -> str:
    if severity == Severity.CRITICAL:
        return "critical"
    if severity == Severity.HIGH:
        return "high"
    return "other"


class ResponseComposer:
    """Builds the message body shown instead of (or before) normal chat."""

    def compose(
        self,
        severity: Severity,
        language: Language,
        suggested_actions: Sequence[str],
        resources: Optional[Sequence[Resource]] = None,
    ) -> str:
        """Compose a localized safety message.

        Args:
            severity: Final verdict severity
            language: Output language; unknown languages use English
            suggested_actions: Actions listed after the opening line
            resources: Emergency resources to list, if any

        Returns:
            Message body text
        """
        if language not in OPENINGS:
            language = Language.primary()

        sections: List[str] = [OPENINGS[language][_variant(severity)]]

        actions = [a for a in suggested_actions if a]
        if actions:
            sections.append("\n".join(f"{BULLET}{a}" for a in actions))

        if resources:
            lines = [RESOURCES_HEADER[language]]
            for resource in resources:
                line = f"{BULLET}{resource.title}"
                if resource.phone:
                    line += f": {resource.phone}"
                lines.append(line)
            sections.append("\n".join(lines))

        return "\n\n".join(sections)
