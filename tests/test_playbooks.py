import pytest

from app.models.schemas import RiskTier
from app.services.playbooks import resolve_playbook


@pytest.mark.parametrize("tier", [RiskTier.CRITICAL, RiskTier.HIGH])
def test_high_tiers_get_immediate_response(tier):
    playbook = resolve_playbook(tier, "CBE")

    assert playbook.id == "pg-bank-001"
    assert playbook.name == "Immediate Bank Response (CBE)"
    assert "CBE" in playbook.rationale
    assert len(playbook.actions) == 4


def test_suspicious_tier_gets_verification_playbook():
    playbook = resolve_playbook(RiskTier.SUSPICIOUS, "Dashen Bank")

    assert playbook.id == "pg-bank-002"
    assert playbook.name == "Verification & Monitoring (Dashen Bank)"


def test_safe_tier_gets_advisory_playbook():
    playbook = resolve_playbook(RiskTier.SAFE, "")

    assert playbook.id == "pg-bank-003"
    assert playbook.name == "Advisory Monitoring (Unclassified)"


def test_actions_depend_on_tier_not_institution():
    telebirr = resolve_playbook(RiskTier.HIGH, "Telebirr")
    awash = resolve_playbook(RiskTier.HIGH, "Awash Bank")

    assert telebirr.actions == awash.actions
    assert telebirr.name != awash.name


def test_plain_string_tiers_are_accepted():
    assert resolve_playbook("critical", "CBE").id == "pg-bank-001"
