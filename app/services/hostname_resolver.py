import re
from typing import Iterable, Optional, Tuple
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict

UNCLASSIFIED = "Unclassified"

_HOST_PATTERN = re.compile(r"^[a-z0-9._\-\[\]:]+$")


class InstitutionProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    keywords: Tuple[str, ...]
    domains: Tuple[str, ...]


# Order is the tie-break when text names more than one institution: the first
# profile that matches wins, so Telebirr beats CBE on "cbe birr via telebirr".
INSTITUTION_PROFILES: Tuple[InstitutionProfile, ...] = (
    InstitutionProfile(
        name="Telebirr",
        keywords=("telebirr", "ቴሌብር"),
        domains=("telebirr.com.et", "ethiotelecom.et"),
    ),
    InstitutionProfile(
        name="CBE",
        keywords=("cbe", "commercial bank", "cbe birr", "ሲቢኢ"),
        domains=("cbe.com.et",),
    ),
    InstitutionProfile(
        name="Dashen Bank",
        keywords=("dashen",),
        domains=("dashenbanksc.com",),
    ),
    InstitutionProfile(
        name="Awash Bank",
        keywords=("awash",),
        domains=("awashbank.com",),
    ),
    InstitutionProfile(
        name="Bank of Abyssinia",
        keywords=("abyssinia", "bank of abyssinia"),
        domains=("bankofabyssinia.com", "boabank.com"),
    ),
)


def matches_domain(hostname: str, domain: str) -> bool:
    """True when ``hostname`` is ``domain`` or one of its subdomains."""
    return hostname == domain or hostname.endswith("." + domain)


def extract_hostname(text: str) -> str:
    """Return the lower-cased hostname of ``text`` read as a URL, or "" if it is not one."""
    candidate = (text or "").strip()
    if not candidate.lower().startswith("http"):
        candidate = f"https://{candidate}"
    try:
        hostname = urlsplit(candidate).hostname or ""
        hostname = hostname.encode("idna").decode("ascii").lower()
    except (ValueError, UnicodeError):
        return ""
    if not _HOST_PATTERN.match(hostname):
        return ""
    return hostname


def detect_target_institution(
    hostname: str,
    text: str,
    profiles: Optional[Iterable[InstitutionProfile]] = None,
) -> str:
    catalog = tuple(profiles) if profiles is not None else INSTITUTION_PROFILES
    if hostname:
        for profile in catalog:
            if any(matches_domain(hostname, domain) for domain in profile.domains):
                return profile.name

    lower = (text or "").lower()
    for profile in catalog:
        if any(keyword in lower for keyword in profile.keywords):
            return profile.name
    return UNCLASSIFIED
