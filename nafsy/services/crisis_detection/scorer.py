"""Severity scorer - turns scanner hits into a heuristic verdict.

Rules, evaluated in order (first match wins; indicators accumulate from all
matched evidence):

1. Any IMMEDIATE hit -> CRITICAL. A METHOD_REFERENCE or TIME_URGENCY
   factor together with any tier hit -> CRITICAL.
2. Any HIGH hit -> HIGH.
3. Two or more distinct MODERATE hits, or one MODERATE hit plus any
   contextual factor -> HIGH.
4. Exactly one MODERATE hit -> MEDIUM.
5. No tier hits -> LOW, whatever factors matched.

The lattice saturates at HIGH for moderate evidence: three or more moderate
hits are still HIGH unless rule 1 applies.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List

from nafsy.shared.models import ContextFactor, Severity, Tier
from .scanner import ScanResult

logger = logging.getLogger(__name__)

# Factors that force CRITICAL once any tier phrase matched
CRITICAL_FACTORS = frozenset({ContextFactor.METHOD_REFERENCE, ContextFactor.TIME_URGENCY})


@dataclass(frozen=True)
class HeuristicVerdict:
    """Verdict produced from keyword evidence only."""
    severity: Severity
    indicators: List[str] = field(default_factory=list)
    matched_phrases: List[str] = field(default_factory=list)
    rule: str = "no_tier_hits"

    @property
    def is_crisis(self) -> bool:
        return self.severity != Severity.LOW

    def to_dict(self) -> Dict:
        return {
            "isCrisis": self.is_crisis,
            "severity": self.severity.value,
            "indicators": list(self.indicators),
            "matchedPhrases": list(self.matched_phrases),
            "rule": self.rule,
        }


class SeverityScorer:
    """Applies the escalation rules to a ScanResult."""

    def score(self, scan: ScanResult) -> HeuristicVerdict:
        """Score scanner output.

        Args:
            scan: Result from KeywordScanner.scan()

        Returns:
            HeuristicVerdict with severity, indicator labels and matched phrases
        """
        severity, rule = self._apply_rules(scan)
        logger.debug(
            "SEVERITY_SCORED",
            extra={"severity": severity.value, "rule": rule},
        )
        return HeuristicVerdict(
            severity=severity,
            indicators=self._indicators(scan),
            matched_phrases=scan.matched_phrases,
            rule=rule,
        )

    @staticmethod
    def _apply_rules(scan: ScanResult):
        tier_hits = scan.tier_hits
        factors = scan.factors

        if Tier.IMMEDIATE in tier_hits:
            return Severity.CRITICAL, "immediate_tier"
        if tier_hits and factors & CRITICAL_FACTORS:
            return Severity.CRITICAL, "method_or_time_factor"
        if Tier.HIGH in tier_hits:
            return Severity.HIGH, "high_tier"

        moderate_hits = len(scan.hits_for(Tier.MODERATE))
        if moderate_hits >= 2:
            return Severity.HIGH, "multiple_moderate"
        if moderate_hits == 1 and factors:
            return Severity.HIGH, "moderate_with_factor"
        if moderate_hits == 1:
            return Severity.MEDIUM, "single_moderate"

        return Severity.LOW, "no_tier_hits"

    @staticmethod
    def _indicators(scan: ScanResult) -> List[str]:
        indicators = [tier.label for tier in Tier if tier in scan.tier_hits]
        indicators.extend(f.label for f in ContextFactor if f in scan.factors)
        return indicators
