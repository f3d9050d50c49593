"""Bilingual explanation text and the per-signal indicator list."""

import logging
from types import MappingProxyType
from typing import Iterable, List, Mapping, Tuple

from app.models.schemas import Indicator, Severity, SignalSet

logger = logging.getLogger(__name__)

NO_INDICATORS = "No significant risk indicators detected."
NO_INDICATORS_AM = "ግልጽ የስጋት ምልክቶች አልተገኙም።"

REASON_TRANSLATIONS: Mapping[str, str] = MappingProxyType(
    {
        "Trusted official domain": "የታመነ መደበኛ ጎራ",
        "Domain looks like a bank impersonation": "የባንክ መስመስል ይመስላል",
        "Non-Ethiopian TLD for bank-related content": "የባንክ ይዘት ጋር የማይዛመድ የቲኤልዲ",
        "Shortened link detected": "አቀናበረ ሊንክ ተገኘ",
        "Urgent language detected": "አስቸኳይ ቋንቋ ተገኘ",
        "Bank keywords present": "የባንክ ቁልፍ ቃላት ተገኙ",
        "Credential request indicators": "የማረጋገጫ መረጃ ጥያቄ",
        "Implicit credential harvesting intent detected": "የተሸሸገ የመረጃ መጠየቅ እሴት ተገኘ",
        "Unusual sender pattern": "ያልተለመደ የላኪ መለያ",
        "Domain age unknown": "የጎራ ዕድሜ ያልታወቀ",
        "Domain missing": "ጎራ አልተገኘም",
        "Trusted domain lowered risk": "ታመነ ጎራ ስጋትን ቀነሰ",
        "No urgency language detected": "አስቸኳይ ቋንቋ አልተገኘም",
        "No links detected": "ሊንክ አልተገኘም",
        "Credential intent detected": "የመረጃ መጠየቅ እሴት ተገኘ",
        "No credential intent detected": "የመረጃ መጠየቅ እሴት አልተገኘም",
        "Bank impersonation likely": "የባንክ መስመስል እድል ከፍቶ ነው",
        "Suspicious links detected": "አጠራጣሪ ሊንኮች ተገኙ",
        "Grammar/spelling anomalies detected": "የሰዋስው ወይም ፊደል ችግኝ ተገኘ",
    }
)


def translate_reason(reason: str) -> str:
    translated = REASON_TRANSLATIONS.get(reason)
    if translated is None:
        logger.warning("Missing Amharic translation for reason", extra={"reason": reason})
        return reason
    return translated


def missing_translations(reasons: Iterable[str]) -> List[str]:
    return [reason for reason in reasons if reason not in REASON_TRANSLATIONS]


def build_explanation(reasons: Iterable[str]) -> Tuple[str, str]:
    unique = list(dict.fromkeys(reasons))
    if not unique:
        return NO_INDICATORS, NO_INDICATORS_AM
    explanation = "; ".join(unique)
    explanation_am = "; ".join(translate_reason(reason) for reason in unique)
    return explanation, explanation_am


# (name, nameAm, signal field, {severity: (description, descriptionAm)})
_INDICATOR_TABLE = (
    (
        "Credential Intent",
        "የመረጃ መጠየቅ",
        "credentialIntent",
        {
            Severity.HIGH: (
                "Explicit credential harvesting language detected (PIN/OTP/password).",
                "ፒን/OTP/የይለፍ ቃል እንደሚጠየቅ ግልጽ ቃላት ተገኙ።",
            ),
            Severity.MEDIUM: (
                "Implicit account verification language suggests credential harvesting intent.",
                "የመለያ ማረጋገጫ የሚመስል ቋንቋ ተገኝቷል።",
            ),
            Severity.LOW: ("No credential harvesting intent detected.", "የመረጃ መጠየቅ እሴት አልተገኘም።"),
        },
    ),
    (
        "Bank Impersonation",
        "ባንክ መስመስል",
        "bankImpersonation",
        {
            Severity.HIGH: (
                "Content references Ethiopian banks but uses suspicious context or domains.",
                "የባንክ ስሞች ከማጭበርበር ጋር የሚጣመሩ ተመልከቱ።",
            ),
            Severity.MEDIUM: (
                "Bank-related keywords detected; verify authenticity.",
                "የባንክ ቁልፍ ቃላት ተገኙ። በመደበኛ መንገድ ያረጋግጡ።",
            ),
            Severity.LOW: ("No bank impersonation signals detected.", "የባንክ መስመስል ምልክት አልተገኘም።"),
        },
    ),
    (
        "Suspicious Links",
        "አጠራጣሪ ሊንኮች",
        "suspiciousLinks",
        {
            Severity.HIGH: (
                "Links point to shortened or IP-based destinations commonly used in phishing.",
                "አጠራጣሪ ወይም አይፒ መሰረት ሊንኮች ተገኙ።",
            ),
            Severity.MEDIUM: ("Links present; verify destination legitimacy.", "ሊንኮች ተገኙ፣ ተደራሽነታቸውን ያረጋግጡ።"),
            Severity.LOW: ("No suspicious links detected.", "አጠራጣሪ ሊንክ አልተገኘም።"),
        },
    ),
    (
        "Shortened Links",
        "አቀናበረ ሊንኮች",
        "shortenedLinks",
        {
            Severity.HIGH: ("Shortened links hide destination URLs.", "አቀናበረ ሊንክ መዳረሻን ይደብቃል።"),
            Severity.MEDIUM: ("Shortened links hide destination URLs.", "አቀናበረ ሊንክ መዳረሻን ይደብቃል።"),
            Severity.LOW: ("No shortened links detected.", "አቀናበረ ሊንኮች አልተገኙም።"),
        },
    ),
    (
        "Urgency Language",
        "አስቸኳይ ቋንቋ",
        "urgencyLanguage",
        {
            Severity.HIGH: ("Urgency language is used to pressure the recipient.", "አስቸኳይ ቋንቋ ተጠቃሚውን ለመጫን ተጠቃሚ ነው።"),
            Severity.MEDIUM: ("Urgency language is used to pressure the recipient.", "አስቸኳይ ቋንቋ ተጠቃሚውን ለመጫን ተጠቃሚ ነው።"),
            Severity.LOW: ("No urgency language detected.", "አስቸኳይ ቋንቋ አልተገኘም።"),
        },
    ),
    (
        "Grammar & Spelling",
        "ሰዋስው እና ፊደል",
        "grammarSpelling",
        {
            Severity.HIGH: ("Language quality issues often appear in phishing.", "የቋንቋ ጉድለት በፊሺንግ ተደጋጋሚ ነው።"),
            Severity.MEDIUM: ("Language quality issues often appear in phishing.", "የቋንቋ ጉድለት በፊሺንግ ተደጋጋሚ ነው።"),
            Severity.LOW: ("No language anomalies detected.", "የቋንቋ ጉድለት አልተገኘም።"),
        },
    ),
)


def build_indicators(signals: SignalSet) -> Tuple[Indicator, ...]:
    indicators = []
    for name, name_am, field, descriptions in _INDICATOR_TABLE:
        severity = getattr(signals, field)
        description, description_am = descriptions[severity]
        indicators.append(
            Indicator(
                name=name,
                nameAm=name_am,
                severity=severity,
                detected=severity is not Severity.LOW,
                description=description,
                descriptionAm=description_am,
            )
        )
    return tuple(indicators)
