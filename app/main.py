import hashlib
import logging
from contextlib import asynccontextmanager
from typing import Dict, FrozenSet, List, Optional

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from sqlalchemy.exc import SQLAlchemyError

from app.agents.classifier_agent import ClassifierAgent
from app.agents.risk_engine import RiskEngine
from app.config import settings
from app.db.database import Base, SessionLocal, engine
from app.db.models import DetectionLog
from app.models.schemas import (
    ContentInput,
    DetectRequest,
    DetectResponse,
    RiskOutcome,
    RiskTier,
    TrustedDomainCreate,
    TrustedDomainOut,
)
from app.services import trusted_domain_store
from app.services.hostname_resolver import UNCLASSIFIED
from app.services.local_intel import match_local_intel
from app.services.service_errors import ServiceError
from app.utils.logging_utils import configure_logging

configure_logging(settings.log_level)
logger = logging.getLogger("phishing-detector")

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])


@asynccontextmanager
async def lifespan(_: FastAPI):
    Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(title="Ethiopian Bank Phishing Detector", lifespan=lifespan)
app.state.limiter = limiter
allowed_origins = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_exception_handler(
    RateLimitExceeded,
    lambda request, exc: JSONResponse(status_code=429, content={"detail": "Rate limit exceeded", "code": "rate_limited"}),
)
app.add_middleware(SlowAPIMiddleware)


risk_engine = RiskEngine()
classifier_agent = ClassifierAgent()

STATUS_BY_RESULT = {
    "phishing": "Phishing Detected",
    "suspicious": "Suspicious Content",
    "safe": "Safe Content",
}

RECOMMENDATIONS = {
    "phishing": "Do not respond or share information. Verify directly with your bank using official channels.",
    "suspicious": "Proceed with caution and verify the sender or URL with official sources before taking action.",
    "safe": "This appears safe, but always verify sensitive requests through official channels.",
}


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


def _result_for(tier: RiskTier) -> str:
    if tier in (RiskTier.CRITICAL, RiskTier.HIGH):
        return "phishing"
    if tier is RiskTier.SUSPICIOUS:
        return "suspicious"
    return "safe"


def _review_status(risk_score: int) -> str:
    if risk_score >= 86:
        return "confirmed_phishing"
    if risk_score <= 30:
        return "false_positive"
    return "pending"


def _load_trusted_domains() -> FrozenSet[str]:
    configured = frozenset(settings.extra_trusted_domains())
    db = SessionLocal()
    try:
        return configured | trusted_domain_store.domain_names(db)
    except SQLAlchemyError as exc:
        logger.warning("Trusted domains unavailable, using built-in list", extra={"error": str(exc)})
        return configured
    finally:
        db.close()


def _persist_detection(
    payload: DetectRequest, outcome: RiskOutcome, result: str, local_intel: List[dict]
) -> Optional[int]:
    preview = payload.content[: settings.content_preview_chars]
    row = DetectionLog(
        input_type=payload.type.value,
        result=result,
        risk_score=outcome.riskScore,
        risk_tier=outcome.riskTier.value,
        risk_level=outcome.riskLevel.value,
        confidence=outcome.confidence,
        institution=None if outcome.targetInstitution == UNCLASSIFIED else outcome.targetInstitution,
        summary=outcome.explanation,
        summary_am=outcome.explanationAmharic,
        indicators=[indicator.model_dump(mode="json") for indicator in outcome.indicators],
        playbook=outcome.playbook.model_dump(mode="json"),
        local_intel=local_intel or None,
        content_preview=preview,
        content_hash=hashlib.sha256(preview.encode("utf-8")).hexdigest() if preview else None,
        trusted_domain=outcome.trustedDomain,
        status=_review_status(outcome.riskScore),
    )

    db = SessionLocal()
    try:
        db.add(row)
        db.commit()
        return row.id
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to persist detection", extra={"error": str(exc)})
        return None
    finally:
        db.close()


@app.post("/api/detect", response_model=DetectResponse)
@limiter.limit(settings.rate_limit)
def detect(request: Request, payload: DetectRequest) -> DetectResponse:
    logger.info("Detect request", extra={"type": payload.type.value, "length": len(payload.content)})

    trusted_domains = _load_trusted_domains()
    classification = classifier_agent.predict(payload.classifier, payload.type, payload.content)
    outcome = risk_engine.score(
        ContentInput(kind=payload.type, text=payload.content),
        trusted_domains=trusted_domains,
        external_score=classification.score,
    )

    try:
        local_intel = match_local_intel(payload.type, payload.content)
    except Exception as exc:
        logger.warning("Local intel matching failed", extra={"error": str(exc)})
        local_intel = []

    result = _result_for(outcome.riskTier)
    detection_id = _persist_detection(
        payload, outcome, result, [match.model_dump(mode="json") for match in local_intel]
    )

    return DetectResponse(
        status=STATUS_BY_RESULT[result],
        result=result,
        riskScore=outcome.riskScore,
        riskTier=outcome.riskTier,
        riskLevel=outcome.riskLevel,
        confidence=outcome.confidence,
        targetInstitution=outcome.targetInstitution,
        signals=outcome.signals,
        indicators=list(outcome.indicators),
        explanation=outcome.explanation,
        explanationAmharic=outcome.explanationAmharic,
        playbook=outcome.playbook,
        recommendation=RECOMMENDATIONS[result],
        localIntelMatches=local_intel,
        externalScore=classification.score,
        detectionId=detection_id,
    )


@app.get("/trusted-domains", response_model=List[TrustedDomainOut])
def get_trusted_domains() -> List[TrustedDomainOut]:
    db = SessionLocal()
    try:
        return [TrustedDomainOut.model_validate(row) for row in trusted_domain_store.list_domains(db)]
    finally:
        db.close()


@app.post("/trusted-domains", response_model=TrustedDomainOut, status_code=201)
def create_trusted_domain(payload: TrustedDomainCreate) -> TrustedDomainOut:
    db = SessionLocal()
    try:
        row = trusted_domain_store.add_domain(db, payload.domain)
        logger.info("Trusted domain added", extra={"domain": row.domain})
        return TrustedDomainOut.model_validate(row)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail()) from exc
    finally:
        db.close()


@app.delete("/trusted-domains/{domain_id}", status_code=204)
def remove_trusted_domain(domain_id: int) -> Response:
    db = SessionLocal()
    try:
        trusted_domain_store.delete_domain(db, domain_id)
        logger.info("Trusted domain removed", extra={"id": domain_id})
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail()) from exc
    finally:
        db.close()
    return Response(status_code=204)
