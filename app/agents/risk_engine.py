import logging
import math
from typing import Dict, Iterable, List, Optional, Tuple

from app.models.schemas import (
    ContentInput,
    ContentKind,
    ReputationResult,
    RiskLevel,
    RiskOutcome,
    RiskTier,
    Severity,
    SignalSet,
)
from app.services.domain_reputation import DomainReputationChecker
from app.services.explanation_builder import build_explanation, build_indicators
from app.services.hostname_resolver import detect_target_institution, extract_hostname
from app.services.playbooks import resolve_playbook
from app.services.signal_extractor import extract_signals

logger = logging.getLogger(__name__)

TRUSTED_DISCOUNT_REASON = "Trusted domain lowered risk"


def _round(value: float) -> int:
    # Half-up, so 2.5 scores as 3 rather than Python's banker's 2.
    return int(math.floor(value + 0.5))


def normalize_score(value: Optional[float]) -> int:
    """Coerce an external score to an int in [0, 100]; anything unusable becomes 0."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number) or number < 0 or number > 100:
        return 0
    return _round(number)


def to_risk_tier(score: int) -> RiskTier:
    if score >= 86:
        return RiskTier.CRITICAL
    if score >= 61:
        return RiskTier.HIGH
    if score >= 31:
        return RiskTier.SUSPICIOUS
    return RiskTier.SAFE


def to_risk_level(score: int) -> RiskLevel:
    if score >= 61:
        return RiskLevel.HIGH
    if score >= 31:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


class RiskEngine:
    # (high, medium) points per signal; low always scores 0.
    signal_weights: Dict[str, Tuple[int, int]] = {
        "credentialIntent": (35, 20),
        "bankImpersonation": (25, 12),
        "suspiciousLinks": (25, 12),
        "shortenedLinks": (15, 8),
        "urgencyLanguage": (15, 8),
        "grammarSpelling": (5, 3),
    }

    blend_weights = {"domain": 0.35, "content": 0.45, "external": 0.20}

    trusted_discount = 20
    no_urgency_discount = 5
    no_link_discount = 10
    credential_floor = 55
    escalation_high_signals = 3

    def __init__(self, reputation_checker: Optional[DomainReputationChecker] = None) -> None:
        self.reputation_checker = reputation_checker or DomainReputationChecker()

    def score_from_signals(self, signals: SignalSet) -> int:
        total = 0
        for name, (high, medium) in self.signal_weights.items():
            severity = getattr(signals, name)
            if severity is Severity.HIGH:
                total += high
            elif severity is Severity.MEDIUM:
                total += medium
        return min(100, total)

    def blend(self, domain_score: int, content_score: int, external_score: int) -> Tuple[int, int]:
        weighted = (
            domain_score * self.blend_weights["domain"]
            + content_score * self.blend_weights["content"]
            + external_score * self.blend_weights["external"]
        )
        risk_score = _round(min(100, weighted))
        confidence = min(100, _round(content_score * 0.6 + external_score * 0.4))
        return risk_score, confidence

    def adjust(
        self,
        base_score: int,
        signals: SignalSet,
        is_trusted: bool,
        has_urgency: bool,
        has_link: bool,
    ) -> Tuple[int, List[str]]:
        """Apply de-escalation, the credential floor and the high-signal escalation, in that order."""
        score = base_score
        reasons: List[str] = []

        if is_trusted:
            score = max(0, score - self.trusted_discount)
            reasons.append(TRUSTED_DISCOUNT_REASON)
        if not has_urgency:
            score = max(0, score - self.no_urgency_discount)
        if not has_link:
            score = max(0, score - self.no_link_discount)

        if signals.credentialIntent is not Severity.LOW:
            score = max(score, self.credential_floor)

        if signals.high_count() >= self.escalation_high_signals:
            score = 100

        return score, reasons

    def score(
        self,
        content: ContentInput,
        trusted_domains: Iterable[str] = (),
        external_score: Optional[float] = None,
    ) -> RiskOutcome:
        kind = ContentKind(content.kind)
        text = content.text or ""
        hostname = extract_hostname(text) if kind is ContentKind.URL else ""
        institution = detect_target_institution(hostname, text)

        reasons: List[str] = []
        reputation: Optional[ReputationResult] = None
        is_trusted = False
        if kind is ContentKind.URL:
            reputation = self.reputation_checker.check(hostname, text, trusted_domains)
            reasons.extend(reputation.reasons)
            is_trusted = reputation.isTrusted

        report = extract_signals(kind, text, hostname, is_trusted)
        reasons.extend(report.reasons)

        ai_score = normalize_score(external_score)
        content_score = self.score_from_signals(report.signals)
        domain_score = reputation.domainRiskScore if reputation else 0
        base_score, base_confidence = self.blend(domain_score, content_score, ai_score)

        risk_score, adjustment_reasons = self.adjust(
            base_score, report.signals, is_trusted, report.has_urgency, report.has_link
        )
        reasons.extend(adjustment_reasons)

        tier = to_risk_tier(risk_score)
        confidence = min(100, max(base_confidence, _round((risk_score + ai_score) / 2)))
        explanation, explanation_am = build_explanation(reasons)

        logger.info(
            "Scored content",
            extra={
                "kind": kind.value,
                "riskScore": risk_score,
                "riskTier": tier.value,
                "highSignals": report.signals.high_count(),
                "institution": institution,
                "trusted": is_trusted,
            },
        )

        return RiskOutcome(
            riskScore=risk_score,
            riskTier=tier,
            riskLevel=to_risk_level(risk_score),
            confidence=confidence,
            targetInstitution=institution,
            signals=report.signals,
            indicators=build_indicators(report.signals),
            reasons=tuple(dict.fromkeys(reasons)),
            explanation=explanation,
            explanationAmharic=explanation_am,
            playbook=resolve_playbook(tier, institution),
            trustedDomain=is_trusted,
            reputation=reputation,
        )
