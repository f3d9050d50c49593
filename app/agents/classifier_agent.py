import json
import logging
import math
import re
from typing import Any, Dict, List

import httpx
from openai import OpenAI

from app.config import settings
from app.models.schemas import ClassifierResult, ContentKind
from app.services.hostname_resolver import extract_hostname, matches_domain
from app.services.service_errors import ServiceError

logger = logging.getLogger(__name__)

_ETHIOPIC = re.compile(r"[\u1200-\u137F]")
_LINK = re.compile(r"https?://|www\.", re.IGNORECASE)
_ETHIOPIAN_TLD = re.compile(r"\.(et|com\.et|org\.et|gov\.et)$", re.IGNORECASE)

CREDENTIAL_TERMS = ("password", "pin", "otp", "code", "account", "login", "ይግቡ", "የይለፍ ቃል", "ኮድ")
URGENCY_TERMS = (
    "urgent",
    "immediately",
    "suspended",
    "blocked",
    "verify",
    "confirm",
    "limited",
    "expired",
    "reactivate",
    "restore",
    "unlock",
    "unblock",
    "ታግዷል",
    "አስቸኳይ",
    "ያረጋግጡ",
    "ይጫኑ",
)
BANK_TERMS = (
    "telebirr",
    "cbe",
    "commercial bank",
    "dashen",
    "awash",
    "abyssinia",
    "zemen",
    "amhara",
    "hibret",
    "coop",
    "ቴሌብር",
    "ሲቢኢ",
)
SHORTENER_TERMS = ("bit.ly", "tinyurl", "t.co", "rebrand.ly", "goo.gl", "ow.ly", "is.gd")
CLASSIFIER_OFFICIAL_DOMAINS = (
    "cbe.com.et",
    "dashenbanksc.com",
    "awashbank.com",
    "ethiotelecom.et",
    "telebirr.com.et",
    "boabank.com",
)


def _checked_score(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValueError(f"classifier score is not a finite number: {value!r}")
    if value < 0 or value > 100:
        raise ValueError(f"classifier score is outside 0..100: {value!r}")
    return int(math.floor(value + 0.5))


class ClassifierAgent:
    def __init__(self) -> None:
        self.client = OpenAI(api_key=settings.openai_api_key) if settings.openai_api_key else None
        self.remote_url = settings.classifier_url
        self.timeout = settings.classifier_timeout_seconds

    def predict(self, mode: str, kind: ContentKind, content: str) -> ClassifierResult:
        """Best-effort external score; every failure path degrades to a score of 0."""
        if mode == "none":
            return ClassifierResult()
        if mode == "heuristic":
            return self.predict_heuristic(kind, content)

        try:
            if mode == "remote":
                return self._predict_remote(kind, content)
            if mode == "llm":
                return self._predict_llm(kind, content)
        except ServiceError as exc:
            logger.warning("Classifier unavailable, scoring without it", extra={"error": exc.message, "code": exc.code})
            return ClassifierResult()
        except Exception as exc:
            logger.warning("Classifier failed, scoring without it", extra={"mode": mode, "error": str(exc)})
            return ClassifierResult()

        logger.warning("Unknown classifier mode", extra={"mode": mode})
        return ClassifierResult()

    def _predict_remote(self, kind: ContentKind, content: str) -> ClassifierResult:
        if not self.remote_url:
            raise ServiceError("Remote classifier is not configured", status_code=503, code="classifier_not_configured")

        try:
            with httpx.Client(timeout=self.timeout) as client:
                resp = client.post(self.remote_url, json={"type": ContentKind(kind).value, "content": content})
        except httpx.RequestError as exc:
            raise ServiceError(
                "Unable to reach remote classifier",
                status_code=502,
                code="classifier_unreachable",
            ) from exc
        if resp.status_code >= 400:
            raise ServiceError(
                f"Remote classifier returned {resp.status_code}",
                status_code=502,
                code="classifier_error",
            )

        data = resp.json()
        return ClassifierResult(
            label="phishing" if data.get("label") == "phishing" else "safe",
            score=_checked_score(data.get("score")),
            reasons=[str(r) for r in data.get("reasons", []) if r] if isinstance(data.get("reasons"), list) else [],
        )

    def _predict_llm(self, kind: ContentKind, content: str) -> ClassifierResult:
        if not self.client:
            raise ServiceError("LLM classifier is not configured", status_code=503, code="classifier_not_configured")

        tool_schema = {
            "type": "function",
            "function": {
                "name": "phishing_assessment",
                "description": "Score how likely the content is a phishing attempt against an Ethiopian bank",
                "parameters": {
                    "type": "object",
                    "properties": {
                        "label": {"type": "string", "enum": ["phishing", "safe"]},
                        "score": {"type": "integer", "minimum": 0, "maximum": 100},
                        "reasons": {"type": "array", "items": {"type": "string"}},
                    },
                    "required": ["label", "score", "reasons"],
                },
            },
        }

        response = self.client.chat.completions.create(
            model=settings.openai_model,
            temperature=0,
            messages=[
                {
                    "role": "system",
                    "content": (
                        "You classify URLs, SMS and email bodies that may impersonate Ethiopian banks "
                        "or mobile-money services. Content may be English or Amharic. Always use the function call."
                    ),
                },
                {"role": "user", "content": json.dumps({"type": ContentKind(kind).value, "content": content[:5000]})},
            ],
            tools=[tool_schema],
            tool_choice={"type": "function", "function": {"name": "phishing_assessment"}},
        )

        tool_calls = response.choices[0].message.tool_calls
        if not tool_calls:
            raise ServiceError("LLM returned no assessment", status_code=502, code="classifier_empty")

        args: Dict[str, Any] = json.loads(tool_calls[0].function.arguments)
        return ClassifierResult(
            label="phishing" if args.get("label") == "phishing" else "safe",
            score=_checked_score(args.get("score")),
            reasons=[str(r) for r in args.get("reasons", [])],
        )

    def predict_heuristic(self, kind: ContentKind, content: str) -> ClassifierResult:
        lower = content.lower()
        reasons: List[str] = []
        score = 0

        if _ETHIOPIC.search(content):
            score += 5
            reasons.append("Amharic content detected")

        bank_target = any(term in lower for term in BANK_TERMS)
        if bank_target:
            score += 20
            reasons.append("Mentions Ethiopian banking/Telebirr")

        if any(term in lower for term in URGENCY_TERMS):
            score += 15
            reasons.append("Urgent/pressure language")

        if any(term in lower for term in CREDENTIAL_TERMS):
            score += 30
            reasons.append("Requests credentials (PIN/OTP/password)")

        if _LINK.search(content):
            score += 10
            reasons.append("Contains links")
        if any(term in lower for term in SHORTENER_TERMS):
            score += 35
            reasons.append("Uses link shortener to obfuscate destination")

        if ContentKind(kind) is ContentKind.URL and bank_target:
            hostname = extract_hostname(content)
            if not any(matches_domain(hostname, domain) for domain in CLASSIFIER_OFFICIAL_DOMAINS):
                score += 25
                reasons.append("Bank lookalike domain not official")
            if not _ETHIOPIAN_TLD.search(hostname):
                score += 10
                reasons.append("Non-Ethiopian TLD")

        score = max(0, min(100, score))
        return ClassifierResult(label="phishing" if score >= 50 else "safe", score=score, reasons=reasons)
