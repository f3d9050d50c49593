from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ContentKind(str, Enum):
    URL = "url"
    SMS = "sms"
    EMAIL = "email"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RiskTier(str, Enum):
    SAFE = "safe"
    SUSPICIOUS = "suspicious"
    HIGH = "high"
    CRITICAL = "critical"


class RiskLevel(str, Enum):
    """Three-level mapping kept for stored records that predate the four tiers."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


ClassifierMode = Literal["none", "heuristic", "llm", "remote"]


class ContentInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: ContentKind
    text: str


class SignalSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    credentialIntent: Severity = Severity.LOW
    bankImpersonation: Severity = Severity.LOW
    suspiciousLinks: Severity = Severity.LOW
    shortenedLinks: Severity = Severity.LOW
    urgencyLanguage: Severity = Severity.LOW
    grammarSpelling: Severity = Severity.LOW

    def severities(self) -> Tuple[Severity, ...]:
        return tuple(getattr(self, name) for name in type(self).model_fields)

    def high_count(self) -> int:
        return sum(1 for severity in self.severities() if severity is Severity.HIGH)


class ReputationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    domainRiskScore: int = Field(default=0, ge=0, le=100)
    isTrusted: bool = False
    matchedDomain: Optional[str] = None
    reasons: Tuple[str, ...] = ()


class Indicator(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    nameAm: str
    severity: Severity
    detected: bool
    description: str
    descriptionAm: str


class Playbook(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    rationale: str
    actions: Tuple[str, ...]


class RiskOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    riskScore: int = Field(ge=0, le=100)
    riskTier: RiskTier
    riskLevel: RiskLevel
    confidence: int = Field(ge=0, le=100)
    targetInstitution: str
    signals: SignalSet
    indicators: Tuple[Indicator, ...]
    reasons: Tuple[str, ...]
    explanation: str
    explanationAmharic: str
    playbook: Playbook
    trustedDomain: bool = False
    reputation: Optional[ReputationResult] = None


class LocalIntelMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["domain", "shortcode", "pattern"]
    label: str
    detail: str
    severity: Severity


class ClassifierResult(BaseModel):
    label: Literal["phishing", "safe"] = "safe"
    score: int = Field(default=0, ge=0, le=100)
    reasons: List[str] = Field(default_factory=list)


class DetectRequest(BaseModel):
    type: ContentKind
    content: str = Field(min_length=3, max_length=5000)
    classifier: ClassifierMode = "none"


class DetectResponse(BaseModel):
    status: str
    result: Literal["phishing", "suspicious", "safe"]
    riskScore: int
    riskTier: RiskTier
    riskLevel: RiskLevel
    confidence: int
    targetInstitution: str
    signals: SignalSet
    indicators: List[Indicator]
    explanation: str
    explanationAmharic: str
    playbook: Playbook
    recommendation: str
    localIntelMatches: List[LocalIntelMatch]
    externalScore: int
    detectionId: Optional[int] = None


class TrustedDomainCreate(BaseModel):
    domain: str = Field(min_length=3, max_length=255)

    @field_validator("domain", mode="before")
    @classmethod
    def normalise(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


class TrustedDomainOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    domain: str
    created_at: Optional[datetime] = None
