import re
from typing import List, Pattern, Tuple

from app.models.schemas import ContentKind, LocalIntelMatch, Severity
from app.services.hostname_resolver import extract_hostname, matches_domain

BANK_DOMAINS: Tuple[str, ...] = (
    "cbe.com.et",
    "telebirr.com.et",
    "ethiotelecom.et",
    "dashenbanksc.com",
    "awashbank.com",
    "bankofabyssinia.com",
    "boabank.com",
    "zemenbank.com",
    "wegagenbanksc.com",
    "abaybank.com.et",
)

TELECOM_SHORTCODES: Tuple[str, ...] = ("127", "128", "129", "7070", "8100", "8455")

SCAM_PATTERNS: Tuple[Tuple[str, Pattern[str], Severity], ...] = (
    ("OTP Request", re.compile(r"\b(otp|one time password|verification code|pin)\b", re.IGNORECASE), Severity.HIGH),
    ("Account Locked", re.compile(r"(account|መለያ).*(blocked|locked|suspended|ታግዷል)", re.IGNORECASE), Severity.MEDIUM),
    (
        "Urgent Bank Alert",
        re.compile(r"(urgent|immediately|አስቸኳይ).*(bank|telebirr|cbe|dashen|awash)", re.IGNORECASE),
        Severity.HIGH,
    ),
    ("Amharic PIN Request", re.compile(r"(ፒን|የይለፍ ቃል|OTP)", re.IGNORECASE), Severity.HIGH),
)


def match_local_intel(kind: ContentKind, text: str) -> List[LocalIntelMatch]:
    matches: List[LocalIntelMatch] = []
    lower = (text or "").lower()
    hostname = extract_hostname(text) if ContentKind(kind) is ContentKind.URL else ""

    if hostname:
        for domain in BANK_DOMAINS:
            if matches_domain(hostname, domain):
                matches.append(
                    LocalIntelMatch(type="domain", label="Ethiopian Bank Domain", detail=domain, severity=Severity.LOW)
                )

    for code in TELECOM_SHORTCODES:
        if code in lower:
            matches.append(
                LocalIntelMatch(type="shortcode", label="Telecom Shortcode Mention", detail=code, severity=Severity.MEDIUM)
            )

    for label, pattern, severity in SCAM_PATTERNS:
        if pattern.search(text or ""):
            matches.append(LocalIntelMatch(type="pattern", label=label, detail="pattern", severity=severity))

    return matches
