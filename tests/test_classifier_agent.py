import json
from types import SimpleNamespace

import httpx
import pytest

from app.agents import classifier_agent as classifier_mod
from app.agents.classifier_agent import ClassifierAgent
from app.models.schemas import ContentKind

TELEBIRR_SMS = "Your Telebirr account is blocked, verify now: http://bit.ly/xyz"


class _RaisingCompletions:
    def create(self, **kwargs):
        raise RuntimeError("quota exceeded")


class _RaisingChat:
    completions = _RaisingCompletions()


class _RaisingClient:
    chat = _RaisingChat()


class _ScoringCompletions:
    def __init__(self, arguments):
        self.arguments = arguments

    def create(self, **kwargs):
        call = SimpleNamespace(function=SimpleNamespace(arguments=json.dumps(self.arguments)))
        message = SimpleNamespace(tool_calls=[call])
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class _ScoringClient:
    def __init__(self, arguments):
        self.chat = SimpleNamespace(completions=_ScoringCompletions(arguments))


def _patch_transport(monkeypatch, handler):
    real_client = httpx.Client
    monkeypatch.setattr(
        classifier_mod.httpx,
        "Client",
        lambda timeout: real_client(transport=httpx.MockTransport(handler), timeout=timeout),
    )


def test_none_mode_scores_zero():
    assert ClassifierAgent().predict("none", ContentKind.SMS, TELEBIRR_SMS).score == 0


def test_llm_failure_falls_back_to_zero():
    agent = ClassifierAgent()
    agent.client = _RaisingClient()

    result = agent.predict("llm", ContentKind.SMS, TELEBIRR_SMS)

    assert result.score == 0
    assert result.label == "safe"


def test_llm_without_api_key_falls_back_to_zero():
    agent = ClassifierAgent()
    agent.client = None

    assert agent.predict("llm", ContentKind.SMS, TELEBIRR_SMS).score == 0


def test_llm_assessment_is_used():
    agent = ClassifierAgent()
    agent.client = _ScoringClient({"label": "phishing", "score": 88, "reasons": ["Telebirr lure"]})

    result = agent.predict("llm", ContentKind.SMS, TELEBIRR_SMS)

    assert result.score == 88
    assert result.label == "phishing"
    assert result.reasons == ["Telebirr lure"]


def test_remote_classifier_score_is_rounded(monkeypatch):
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"label": "phishing", "score": 91.6, "reasons": ["edge model"]})

    _patch_transport(monkeypatch, handler)
    agent = ClassifierAgent()
    agent.remote_url = "http://classifier.local/phishing-detect"

    result = agent.predict("remote", ContentKind.SMS, TELEBIRR_SMS)

    assert seen["body"] == {"type": "sms", "content": TELEBIRR_SMS}
    assert result.score == 92
    assert result.reasons == ["edge model"]


def test_remote_errors_fall_back_to_zero(monkeypatch):
    agent = ClassifierAgent()
    agent.remote_url = "http://classifier.local/phishing-detect"

    _patch_transport(monkeypatch, lambda request: httpx.Response(503, json={"error": "down"}))
    assert agent.predict("remote", ContentKind.SMS, TELEBIRR_SMS).score == 0

    _patch_transport(monkeypatch, lambda request: httpx.Response(200, json={"label": "phishing", "score": "high"}))
    assert agent.predict("remote", ContentKind.SMS, TELEBIRR_SMS).score == 0

    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    _patch_transport(monkeypatch, unreachable)
    assert agent.predict("remote", ContentKind.SMS, TELEBIRR_SMS).score == 0


@pytest.mark.parametrize("score", [150, -3, 100.6])
def test_remote_score_outside_range_falls_back_to_zero(monkeypatch, score):
    _patch_transport(monkeypatch, lambda request: httpx.Response(200, json={"label": "phishing", "score": score}))
    agent = ClassifierAgent()
    agent.remote_url = "http://classifier.local/phishing-detect"

    assert agent.predict("remote", ContentKind.SMS, TELEBIRR_SMS).score == 0


def test_llm_score_outside_range_falls_back_to_zero():
    agent = ClassifierAgent()
    agent.client = _ScoringClient({"label": "phishing", "score": 250, "reasons": []})

    assert agent.predict("llm", ContentKind.SMS, TELEBIRR_SMS).score == 0


def test_remote_without_url_falls_back_to_zero():
    agent = ClassifierAgent()
    agent.remote_url = ""

    assert agent.predict("remote", ContentKind.URL, "https://cbe.com.et").score == 0


def test_heuristic_scores_bank_lure():
    result = ClassifierAgent().predict("heuristic", ContentKind.SMS, TELEBIRR_SMS)

    assert result.score == 100
    assert result.label == "phishing"
    assert "Uses link shortener to obfuscate destination" in result.reasons


def test_heuristic_flags_lookalike_url():
    result = ClassifierAgent().predict_heuristic(ContentKind.URL, "http://cbe-secure.com/login")

    # bank 20 + credentials 30 + link 10 + not official 25 + foreign TLD 10
    assert result.score == 95
    assert "Bank lookalike domain not official" in result.reasons


def test_heuristic_is_quiet_on_benign_text():
    result = ClassifierAgent().predict_heuristic(ContentKind.SMS, "hello, how are you today")

    assert result.score == 0
    assert result.label == "safe"
