from app.models.schemas import Playbook, RiskTier
from app.services.hostname_resolver import UNCLASSIFIED

_IMMEDIATE_ACTIONS = (
    "Block sender/domain and isolate affected endpoints.",
    "Notify the targeted bank security contact within 15 minutes.",
    "Preserve evidence and initiate incident response workflow.",
    "Monitor related accounts for anomalous access attempts.",
)

_VERIFICATION_ACTIONS = (
    "Validate the sender or URL using official bank channels.",
    "Flag affected accounts for heightened monitoring.",
    "Educate recipients to avoid OTP/PIN sharing.",
)

_ADVISORY_ACTIONS = (
    "No immediate action required.",
    "Continue routine monitoring for similar patterns.",
    "Encourage verification for sensitive requests.",
)


def resolve_playbook(risk_tier: RiskTier, institution: str) -> Playbook:
    target = institution or UNCLASSIFIED
    tier = RiskTier(risk_tier)

    if tier in (RiskTier.CRITICAL, RiskTier.HIGH):
        return Playbook(
            id="pg-bank-001",
            name=f"Immediate Bank Response ({target})",
            rationale=(
                f"High-confidence phishing indicators targeting {target} and elevated risk "
                "require immediate containment."
            ),
            actions=_IMMEDIATE_ACTIONS,
        )
    if tier is RiskTier.SUSPICIOUS:
        return Playbook(
            id="pg-bank-002",
            name=f"Verification & Monitoring ({target})",
            rationale=f"Moderate indicators against {target} require validation and monitoring before escalation.",
            actions=_VERIFICATION_ACTIONS,
        )
    return Playbook(
        id="pg-bank-003",
        name=f"Advisory Monitoring ({target})",
        rationale=f"No high-risk indicators detected for {target}; continue baseline monitoring.",
        actions=_ADVISORY_ACTIONS,
    )
