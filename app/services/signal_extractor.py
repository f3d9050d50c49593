import re
from typing import NamedTuple, Tuple

from app.models.schemas import ContentKind, Severity, SignalSet

BANK_KEYWORDS: Tuple[str, ...] = (
    "telebirr",
    "cbe",
    "commercial bank",
    "cbe birr",
    "dashen",
    "awash",
    "bank of abyssinia",
    "abyssinia",
    "ethio telecom",
    "ethiotelecom",
    "ቴሌብር",
    "ሲቢኢ",
)

URGENCY_KEYWORDS: Tuple[str, ...] = (
    "blocked",
    "verify",
    "unblock",
    "urgent",
    "immediately",
    "suspended",
    "confirm",
    "reactivate",
    "otp",
    "pin",
    "password",
    "አስቸኳይ",
    "ታግዷል",
    "ያረጋግጡ",
)

SHORTENERS: Tuple[str, ...] = ("bit.ly", "tinyurl", "t.co", "rebrand.ly", "goo.gl", "ow.ly", "is.gd")

EXPLICIT_CREDENTIAL_TERMS: Tuple[str, ...] = ("otp", "pin", "password", "code", "login", "auth", "verify")

IMPLICIT_CREDENTIAL_PHRASES: Tuple[str, ...] = (
    "verify account",
    "unlock account",
    "confirm information",
    "reactivate account",
    "restore account",
    "update account",
    "account verification",
    "confirm your details",
    "confirm your information",
    "ሂሳብ ያረጋግጡ",
    "መለያዎን ያረጋግጡ",
    "መለያዎን ያድሱ",
)

_LINK = re.compile(r"https?://|www\.", re.IGNORECASE)
# An IP literal counts only as the host of a link.
_IP_LINK = re.compile(r"(?:https?://|www\.)\d{1,3}(?:\.\d{1,3}){3}\b", re.IGNORECASE)
_GRAMMAR = re.compile(r"\s{2,}|\.{2,}|\b(?:ur|u r|pls|plz)\b", re.IGNORECASE)

CREDENTIAL_INTENT_REASON = "Credential intent detected"
BANK_IMPERSONATION_REASON = "Bank impersonation likely"
SUSPICIOUS_LINKS_REASON = "Suspicious links detected"
SHORTENED_LINK_REASON = "Shortened link detected"
URGENT_LANGUAGE_REASON = "Urgent language detected"
GRAMMAR_REASON = "Grammar/spelling anomalies detected"
NO_URGENCY_REASON = "No urgency language detected"
NO_LINKS_REASON = "No links detected"
NO_CREDENTIAL_INTENT_REASON = "No credential intent detected"

# Every reason string extract_signals can emit, in emission order.
SIGNAL_REASONS: Tuple[str, ...] = (
    CREDENTIAL_INTENT_REASON,
    BANK_IMPERSONATION_REASON,
    SUSPICIOUS_LINKS_REASON,
    SHORTENED_LINK_REASON,
    URGENT_LANGUAGE_REASON,
    GRAMMAR_REASON,
    NO_URGENCY_REASON,
    NO_LINKS_REASON,
    NO_CREDENTIAL_INTENT_REASON,
)


class SignalReport(NamedTuple):
    signals: SignalSet
    reasons: Tuple[str, ...]
    has_link: bool
    has_urgency: bool
    has_bank: bool
    has_grammar_issues: bool


def _contains_any(lower: str, terms: Tuple[str, ...]) -> bool:
    return any(term in lower for term in terms)


def extract_signals(kind: ContentKind, text: str, hostname: str, is_trusted_domain: bool) -> SignalReport:
    lower = (text or "").lower()

    has_shortener = _contains_any(lower, SHORTENERS)
    has_urgency = _contains_any(lower, URGENCY_KEYWORDS)
    has_bank = _contains_any(lower, BANK_KEYWORDS)
    has_link = bool(_LINK.search(text)) or has_shortener
    has_ip_url = bool(_IP_LINK.search(text))
    explicit_creds = _contains_any(lower, EXPLICIT_CREDENTIAL_TERMS)
    implicit_creds = _contains_any(lower, IMPLICIT_CREDENTIAL_PHRASES)
    has_grammar_issues = bool(_GRAMMAR.search(text))

    if explicit_creds:
        credential_intent = Severity.HIGH
    elif implicit_creds:
        credential_intent = Severity.MEDIUM
    else:
        credential_intent = Severity.LOW

    if has_bank and not is_trusted_domain:
        bank_impersonation = Severity.HIGH
    elif has_bank:
        bank_impersonation = Severity.MEDIUM
    else:
        bank_impersonation = Severity.LOW

    if has_shortener or has_ip_url:
        suspicious_links = Severity.HIGH
    elif has_link:
        suspicious_links = Severity.MEDIUM
    else:
        suspicious_links = Severity.LOW

    shortened_links = Severity.HIGH if has_shortener else Severity.LOW

    if has_urgency and has_bank:
        urgency_language = Severity.HIGH
    elif has_urgency:
        urgency_language = Severity.MEDIUM
    else:
        urgency_language = Severity.LOW

    # Grammar anomalies are reported but never raise the severity above low.
    grammar_spelling = Severity.LOW

    signals = SignalSet(
        credentialIntent=credential_intent,
        bankImpersonation=bank_impersonation,
        suspiciousLinks=suspicious_links,
        shortenedLinks=shortened_links,
        urgencyLanguage=urgency_language,
        grammarSpelling=grammar_spelling,
    )

    reasons = []
    if credential_intent is not Severity.LOW:
        reasons.append(CREDENTIAL_INTENT_REASON)
    if bank_impersonation is not Severity.LOW:
        reasons.append(BANK_IMPERSONATION_REASON)
    if suspicious_links is not Severity.LOW:
        reasons.append(SUSPICIOUS_LINKS_REASON)
    if shortened_links is not Severity.LOW:
        reasons.append(SHORTENED_LINK_REASON)
    if urgency_language is not Severity.LOW:
        reasons.append(URGENT_LANGUAGE_REASON)
    if has_grammar_issues:
        reasons.append(GRAMMAR_REASON)
    if not has_urgency:
        reasons.append(NO_URGENCY_REASON)
    if not has_link:
        reasons.append(NO_LINKS_REASON)
    if credential_intent is Severity.LOW:
        reasons.append(NO_CREDENTIAL_INTENT_REASON)

    return SignalReport(
        signals=signals,
        reasons=tuple(reasons),
        has_link=has_link,
        has_urgency=has_urgency,
        has_bank=has_bank,
        has_grammar_issues=has_grammar_issues,
    )
