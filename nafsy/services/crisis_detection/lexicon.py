"""Crisis lexicons - per-language phrase tables.

Tier phrases decide severity; contextual-factor phrases only escalate.
Matching is case-insensitive substring containment, so phrases are chosen
to avoid collisions inside unrelated words (e.g. "a gun" rather than "gun",
which would match "begun").

Tables are built once at import and exposed read-only. Review with the
clinical advisors before changing any tier membership and bump
LEXICON_VERSION in config.py.
"""
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Tuple, Union

from nafsy.shared.models import ContextFactor, Language, Tier

logger = logging.getLogger(__name__)


# =============================================================================
# ENGLISH
# =============================================================================

_EN_TIERS: Dict[Tier, Tuple[str, ...]] = {
    Tier.IMMEDIATE: (
        # Direct suicide and self-harm statements
        "suicide",
        "suicidal",
        "kill myself",
        "end my life",
        "take my life",
        "want to die",
        "better off dead",
        "no reason to live",
        "not worth living",
        "end it all",
        "ready to die",
        "planning to die",
        "going to hurt myself",
        "hurt myself",
        "harm myself",
        "self harm",
        "self-harm",
        "cut myself",
        "cutting myself",
        "hang myself",
        "overdose",
        "pills to end it",
        # Farewell and plan language
        "goodbye forever",
        "final message",
        "last words",
        "won't be here tomorrow",
        "wont be here tomorrow",
        "doing it tonight",
        "do it tonight",
        "made my choice",
        "unalive",
    ),
    Tier.HIGH: (
        # Severe hopelessness and despair
        "hopeless",
        "worthless",
        "no point",
        "give up",
        "can't go on",
        "cant go on",
        "can't take it",
        "cant take it",
        "unbearable",
        "too much pain",
        "nobody cares",
        "no one cares",
        "burden to everyone",
        "i'm a burden",
        "everyone hates me",
        "waste of space",
        "failed at everything",
        "nothing left",
        "empty inside",
        "meaningless life",
        # Acute physical/emotional crisis
        "panic attack",
        "can't breathe",
        "cant breathe",
        "completely broken",
        "broken inside",
        "destroyed inside",
        "lost my mind",
        "losing my mind",
        "going crazy",
        "going insane",
        "mental breakdown",
        "hearing voices",
        # Abandonment
        "no one understands",
        "nobody understands",
        "completely alone",
        "all alone",
        "abandoned by everyone",
        "everyone left me",
        "family hates me",
    ),
    Tier.MODERATE: (
        "depressed",
        "depression",
        "anxious",
        "anxiety",
        "panic",
        "scared",
        "overwhelmed",
        "breaking down",
        "falling apart",
        "can't cope",
        "cant cope",
        "losing control",
        "desperate",
        "struggling",
        "feel numb",
        "emotionally drained",
        "no energy",
        "sleepless nights",
        "burning out",
        "burnt out",
        "stressed out",
        "too much stress",
        "at breaking point",
        "losing hope",
        "don't know what to do",
        "dont know what to do",
    ),
}

_EN_FACTORS: Dict[ContextFactor, Tuple[str, ...]] = {
    ContextFactor.TIME_URGENCY: (
        "tonight",
        "right now",
        "today is the day",
        "this is it",
        "very soon",
        "immediately",
        "before morning",
        "any minute",
        "this week",
    ),
    ContextFactor.METHOD_REFERENCE: (
        "pills",
        "overdose",
        "noose",
        "a rope",
        "the rope",
        "razor",
        "blade",
        "knife",
        "knives",
        "a gun",
        "my gun",
        "the gun",
        "gun to my head",
        "the bridge",
        "off a bridge",
        "jump off",
        "train tracks",
        "in front of a train",
        "hang myself",
        "hanging myself",
        "slit my wrists",
        "poison",
        "bleach",
        "carbon monoxide",
    ),
    ContextFactor.ISOLATION: (
        "alone",
        "lonely",
        "isolated",
        "abandoned",
        "nobody understands",
        "no one understands",
        "nobody cares",
        "no one cares",
        "no friends",
        "by myself",
        "no point",
        "pointless",
        "no hope",
        "hopeless",
        "worthless",
        "meaningless",
        "no purpose",
    ),
    ContextFactor.CULTURAL_DISTRESS: (
        "god hates me",
        "god has abandoned me",
        "cursed",
        "punishment from god",
        "sinful",
        "shame",
        "disgrace",
        "dishonor",
        "condemned",
        "rejected",
    ),
    ContextFactor.FAMILY_HONOR: (
        "family shame",
        "shamed my family",
        "disappointed my family",
        "dishonored my family",
        "failed my parents",
        "let my family down",
        "let down my family",
        "embarrassed my family",
    ),
}


# =============================================================================
# ARABIC
# Phrases are folded (diacritics, tatweel, alef/yaa/taa-marbuta variants)
# when the scanner loads them, so either spelling may be listed here.
# =============================================================================

_AR_TIERS: Dict[Tier, Tuple[str, ...]] = {
    Tier.IMMEDIATE: (
        "انتحار",
        "انتحر",
        "أقتل نفسي",
        "أنهي حياتي",
        "إنهاء حياتي",
        "أريد أن أموت",
        "أريد الموت",
        "الأفضل أن أموت",
        "لا أريد العيش",
        "الحياة لا تستحق",
        "سأؤذي نفسي",
        "أؤذي نفسي",
        "أجرح نفسي",
        "أقطع نفسي",
        "أشنق نفسي",
        "جرعة زائدة",
        "مستعد للموت",
        "حبوب لإنهاء",
        "وداعاً للأبد",
        "رسالة أخيرة",
        "رسالتي الأخيرة",
        "كلمات أخيرة",
        "لن أكون هنا غداً",
        "سأفعلها الليلة",
        "اتخذت قراري",
    ),
    Tier.HIGH: (
        "يائس",
        "اليأس",
        "لا أمل",
        "لا قيمة",
        "بلا قيمة",
        "لا معنى",
        "لا أتحمل",
        "لا أستطيع المتابعة",
        "ألم شديد",
        "لا أحد يهتم",
        "عبء على الجميع",
        "الجميع يكرهني",
        "عائلتي تكرهني",
        "فارغ من الداخل",
        "نوبة هلع",
        "لا أستطيع التنفس",
        "منكسر",
        "مدمر من الداخل",
        "فقدت عقلي",
        "أفقد عقلي",
        "انهيار عصبي",
        "أسمع أصواتاً",
        "لا أحد يفهم",
        "وحيد تماماً",
        "هجرني الجميع",
        "الجميع تركني",
    ),
    Tier.MODERATE: (
        "مكتئب",
        "اكتئاب",
        "قلق",
        "خائف",
        "مرهق",
        "مضغوط",
        "منهار",
        "أنهار",
        "لا أستطيع التأقلم",
        "أكافح",
        "تحت ضغط",
        "ضغط كبير",
        "أفقد الأمل",
        "أفقد السيطرة",
        "أشعر بالخدر",
        "منهك",
        "لا أعرف ماذا أفعل",
    ),
}

_AR_FACTORS: Dict[ContextFactor, Tuple[str, ...]] = {
    ContextFactor.TIME_URGENCY: (
        "الليلة",
        "هذه الليلة",
        "حالاً",
        "فوراً",
        "قبل الصباح",
        "قريباً جداً",
    ),
    ContextFactor.METHOD_REFERENCE: (
        "الحبوب",
        "لدي حبوب",
        "حبوب منومة",
        "حبوب نوم",
        "علبة حبوب",
        "حبل",
        "شفرة",
        "مسدس",
        "سكين",
        "الجسر",
        "القطار",
        "غاز",
        "أشنق",
        "جرعة زائدة",
    ),
    ContextFactor.ISOLATION: (
        "وحيد",
        "وحدي",
        "الوحدة",
        "بمفردي",
        "معزول",
        "مهجور",
        "لا أحد يفهم",
        "لا أحد يهتم",
        "لا أصدقاء",
        "لا أمل",
        "لا معنى",
        "لا فائدة",
        "لا جدوى",
    ),
    ContextFactor.CULTURAL_DISTRESS: (
        "الله لا يريدني",
        "لعنة",
        "ملعون",
        "معاقب",
        "مذنب",
        "حرام",
        "عار",
        "خجل",
        "فضيحة",
        "عيب",
        "مرفوض",
    ),
    ContextFactor.FAMILY_HONOR: (
        "عار العائلة",
        "خجل الأهل",
        "فضيحة الأسرة",
        "سمعة العائلة",
        "شرف العائلة",
        "خذلت أهلي",
        "أهانت عائلتي",
        "أهنت عائلتي",
    ),
}


@dataclass(frozen=True)
class LanguageLexicon:
    """Immutable phrase tables for one language."""
    language: Language
    tiers: Mapping[Tier, Tuple[str, ...]]
    factors: Mapping[ContextFactor, Tuple[str, ...]]

    def tier_phrases(self, tier: Tier) -> Tuple[str, ...]:
        return self.tiers.get(tier, ())

    def factor_phrases(self, factor: ContextFactor) -> Tuple[str, ...]:
        return self.factors.get(factor, ())

    @property
    def phrase_count(self) -> int:
        return sum(len(p) for p in self.tiers.values()) + sum(
            len(p) for p in self.factors.values()
        )


def _ordered_unique(phrases: Iterable[str]) -> Tuple[str, ...]:
    seen = set()
    result = []
    for phrase in phrases:
        key = phrase.strip().lower()
        if key and key not in seen:
            seen.add(key)
            result.append(phrase.strip())
    return tuple(result)


def _build(language: Language, tiers: Dict, factors: Dict) -> LanguageLexicon:
    return LanguageLexicon(
        language=language,
        tiers=MappingProxyType({t: _ordered_unique(tiers.get(t, ())) for t in Tier}),
        factors=MappingProxyType(
            {f: _ordered_unique(factors.get(f, ())) for f in ContextFactor}
        ),
    )


LEXICONS: Mapping[Language, LanguageLexicon] = MappingProxyType({
    Language.EN: _build(Language.EN, _EN_TIERS, _EN_FACTORS),
    Language.AR: _build(Language.AR, _AR_TIERS, _AR_FACTORS),
})


def get_lexicon(
    language: Union[Language, str, None],
    lexicons: Mapping[Language, LanguageLexicon] = LEXICONS,
) -> LanguageLexicon:
    """Return the lexicon for a language.

    Unknown or missing languages get the primary (English) tables: detecting
    with a best-effort default is safer than not detecting at all.
    """
    resolved = Language.from_hint(language)
    if resolved is not None and resolved in lexicons:
        return lexicons[resolved]

    logger.warning(
        "LEXICON_LANGUAGE_MISSING",
        extra={
            "requested_language": getattr(language, "value", language),
            "fallback_language": Language.primary().value,
        }
    )
    return lexicons[Language.primary()]
