import logging

from app.agents.risk_engine import TRUSTED_DISCOUNT_REASON
from app.models.schemas import Severity, SignalSet
from app.services.domain_reputation import REPUTATION_REASONS
from app.services.explanation_builder import (
    NO_INDICATORS,
    NO_INDICATORS_AM,
    build_explanation,
    build_indicators,
    missing_translations,
)
from app.services.signal_extractor import SIGNAL_REASONS


def test_every_engine_reason_has_an_amharic_translation():
    emitted = SIGNAL_REASONS + REPUTATION_REASONS + (TRUSTED_DISCOUNT_REASON,)
    assert missing_translations(emitted) == []


def test_explanation_deduplicates_in_first_seen_order():
    explanation, explanation_am = build_explanation(
        ["Trusted official domain", "No links detected", "Trusted official domain"]
    )

    assert explanation == "Trusted official domain; No links detected"
    assert explanation_am == "የታመነ መደበኛ ጎራ; ሊንክ አልተገኘም"


def test_untranslated_reason_falls_back_to_english_and_is_logged(caplog):
    caplog.set_level(logging.WARNING, logger="app.services.explanation_builder")

    explanation, explanation_am = build_explanation(["Sender spoofed", "No links detected"])

    assert explanation == "Sender spoofed; No links detected"
    assert explanation_am == "Sender spoofed; ሊንክ አልተገኘም"
    gaps = [record for record in caplog.records if getattr(record, "reason", None) == "Sender spoofed"]
    assert len(gaps) == 1
    assert gaps[0].levelno == logging.WARNING


def test_empty_reasons_use_the_no_indicator_text():
    assert build_explanation([]) == (NO_INDICATORS, NO_INDICATORS_AM)


def test_indicators_are_fixed_order_and_follow_severity():
    signals = SignalSet(credentialIntent=Severity.MEDIUM, shortenedLinks=Severity.HIGH)
    indicators = build_indicators(signals)

    assert [indicator.name for indicator in indicators] == [
        "Credential Intent",
        "Bank Impersonation",
        "Suspicious Links",
        "Shortened Links",
        "Urgency Language",
        "Grammar & Spelling",
    ]
    credential, bank, _, shortened, _, grammar = indicators
    assert credential.detected is True
    assert credential.description.startswith("Implicit account verification")
    assert credential.nameAm == "የመረጃ መጠየቅ"
    assert bank.detected is False
    assert bank.description == "No bank impersonation signals detected."
    assert shortened.severity is Severity.HIGH
    assert shortened.descriptionAm == "አቀናበረ ሊንክ መዳረሻን ይደብቃል።"
    assert grammar.detected is False
