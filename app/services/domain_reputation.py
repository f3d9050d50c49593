import logging
import re
from typing import Iterable, List, Optional, Protocol, Tuple

from app.models.schemas import ReputationResult
from app.services.hostname_resolver import matches_domain
from app.services.signal_extractor import BANK_KEYWORDS

logger = logging.getLogger(__name__)

OFFICIAL_DOMAINS: Tuple[str, ...] = (
    "cbe.com.et",
    "dashenbanksc.com",
    "awashbank.com",
    "ethiotelecom.et",
    "telebirr.com.et",
    "boabank.com",
    "zemenbank.com",
    "bankofabyssinia.com",
    "amharabank.com.et",
    "hibretbank.com.et",
    "coopbankoromia.com.et",
    "oromiabank.com",
    "wegagenbanksc.com",
    "abaybank.com.et",
)

DOMAIN_MISSING_REASON = "Domain missing"
TRUSTED_DOMAIN_REASON = "Trusted official domain"
IMPERSONATION_REASON = "Domain looks like a bank impersonation"
FOREIGN_TLD_REASON = "Non-Ethiopian TLD for bank-related content"
DOMAIN_AGE_UNKNOWN_REASON = "Domain age unknown"

# Every reason DomainReputationChecker can emit with the default age provider.
REPUTATION_REASONS: Tuple[str, ...] = (
    DOMAIN_MISSING_REASON,
    TRUSTED_DOMAIN_REASON,
    IMPERSONATION_REASON,
    FOREIGN_TLD_REASON,
    DOMAIN_AGE_UNKNOWN_REASON,
)

IMPERSONATION_THRESHOLD = 0.75
IMPERSONATION_POINTS = 35
FOREIGN_TLD_POINTS = 15

_ETHIOPIAN_TLD = re.compile(r"\.(et|com\.et|gov\.et|edu\.et|org\.et)$", re.IGNORECASE)


def levenshtein(a: str, b: str) -> int:
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    if not a or not b:
        return 0.0
    return 1 - levenshtein(a, b) / max(len(a), len(b))


def is_ethiopian_tld(hostname: str) -> bool:
    return bool(_ETHIOPIAN_TLD.search(hostname))


def trust_set(tenant_domains: Iterable[str] = ()) -> Tuple[str, ...]:
    """Built-in official domains followed by caller-supplied ones, de-duplicated in order."""
    seen = dict.fromkeys(OFFICIAL_DOMAINS)
    for domain in tenant_domains:
        normalised = (domain or "").strip().lower()
        if normalised:
            seen.setdefault(normalised)
    return tuple(seen)


class DomainAgeProvider(Protocol):
    def estimate(self, hostname: str) -> Tuple[int, str]:
        ...


class UnknownDomainAge:
    """Placeholder until a WHOIS/registrar source is wired in."""

    def estimate(self, hostname: str) -> Tuple[int, str]:
        return 0, DOMAIN_AGE_UNKNOWN_REASON


class DomainReputationChecker:
    def __init__(self, age_provider: Optional[DomainAgeProvider] = None) -> None:
        self.age_provider = age_provider or UnknownDomainAge()

    def check(self, hostname: str, text: str, trusted_domains: Iterable[str] = ()) -> ReputationResult:
        if not hostname:
            return ReputationResult(domainRiskScore=0, isTrusted=False, reasons=(DOMAIN_MISSING_REASON,))

        whitelist = trust_set(trusted_domains)
        reasons: List[str] = []
        score = 0

        matched_domain = next((domain for domain in whitelist if matches_domain(hostname, domain)), None)
        is_trusted = matched_domain is not None
        if is_trusted:
            reasons.append(TRUSTED_DOMAIN_REASON)

        lower = (text or "").lower()
        bank_mention = any(keyword in lower for keyword in BANK_KEYWORDS)

        if not is_trusted and bank_mention:
            best_domain, best_similarity = self._closest(hostname, whitelist)
            if best_similarity >= IMPERSONATION_THRESHOLD:
                reasons.append(IMPERSONATION_REASON)
                score += IMPERSONATION_POINTS
                matched_domain = best_domain

        if bank_mention and not is_ethiopian_tld(hostname):
            reasons.append(FOREIGN_TLD_REASON)
            score += FOREIGN_TLD_POINTS

        age_score, age_reason = self._domain_age(hostname)
        if age_score > 0:
            score += age_score
        else:
            reasons.append(age_reason)

        return ReputationResult(
            domainRiskScore=max(0, min(100, score)),
            isTrusted=is_trusted,
            matchedDomain=matched_domain,
            reasons=tuple(reasons),
        )

    def _closest(self, hostname: str, whitelist: Tuple[str, ...]) -> Tuple[Optional[str], float]:
        best_domain: Optional[str] = None
        best_similarity = 0.0
        for domain in whitelist:
            value = similarity(hostname, domain)
            if value > best_similarity:
                best_domain, best_similarity = domain, value
        return best_domain, best_similarity

    def _domain_age(self, hostname: str) -> Tuple[int, str]:
        try:
            age_score, reason = self.age_provider.estimate(hostname)
            return max(0, int(age_score)), reason
        except Exception as exc:
            logger.warning("Domain age lookup failed", extra={"hostname": hostname, "error": str(exc)})
            return 0, DOMAIN_AGE_UNKNOWN_REASON
