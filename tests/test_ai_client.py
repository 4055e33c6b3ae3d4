import pytest
import requests

from conftest import NOW, FakeAIClient, make_expense
from expense_api.services.ai_client import AIServiceError, HuggingFaceClient, InsightGenerator


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.headers = {}
        self.calls = []
        self.closed = False

    def post(self, url, json=None, timeout=None):
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        if self.error:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


def _client(session):
    return HuggingFaceClient(
        base_url="https://models.example/",
        classifier_model="sentiment",
        generator_model="t5",
        api_token="secret",
        timeout=3.0,
        session=session,
    )


def test_classify_picks_top_label():
    session = FakeSession(FakeResponse([[{"label": "NEGATIVE", "score": 0.1}, {"label": "POSITIVE", "score": 0.9}]]))
    client = _client(session)
    assert client.classify("buy a lamp") == "POSITIVE"
    assert session.calls[0] == {"url": "https://models.example/sentiment", "json": {"inputs": "buy a lamp"}, "timeout": 3.0}
    assert session.headers["Authorization"] == "Bearer secret"


def test_classify_flat_response():
    session = FakeSession(FakeResponse([{"label": "NEGATIVE", "score": 0.8}]))
    assert _client(session).classify("meh") == "NEGATIVE"


def test_classify_unexpected_payload():
    with pytest.raises(AIServiceError):
        _client(FakeSession(FakeResponse({"error": "loading"}))).classify("x")


def test_generate():
    session = FakeSession(FakeResponse([{"generated_text": "Spend less on taxis."}]))
    assert _client(session).generate("Suggest savings from: 20 on transportation", max_length=50) == "Spend less on taxis."
    assert session.calls[0]["json"]["parameters"] == {"max_length": 50}


def test_http_error_becomes_service_error():
    with pytest.raises(AIServiceError):
        _client(FakeSession(FakeResponse({}, status_code=503))).generate("x")


def test_timeout_becomes_service_error():
    with pytest.raises(AIServiceError):
        _client(FakeSession(error=requests.Timeout("slow"))).classify("x")


def test_invalid_json_becomes_service_error():
    with pytest.raises(AIServiceError):
        _client(FakeSession(FakeResponse(ValueError("bad json")))).generate("x")


def test_close_closes_session():
    session = FakeSession()
    _client(session).close()
    assert session.closed


def test_build_prompts():
    expenses = [
        make_expense(20.0, "transportation", "I spent $20 on gas", NOW),
        make_expense(15.5, "food", "Lunch $15.50 today", NOW),
    ]
    prompts = InsightGenerator.build_prompts(expenses)
    items = "20 on transportation (I spent $20 on gas), 15.5 on food (Lunch $15.50 today)"
    assert prompts == [
        f"Analyze spending pattern: {items}",
        f"Suggest savings from: {items}",
        f"Find unusual expenses in: {items}",
    ]


def test_generate_insights():
    client = FakeAIClient()
    insights = InsightGenerator(client, max_length=100).generate([make_expense(5.0, "food", "coffee $5", NOW)])
    assert insights.pattern == "Mostly transport and food."
    assert insights.savings == "Take the bus more often."
    assert insights.unusual == "Nothing unusual."


def test_generate_insights_without_client():
    assert InsightGenerator(None).generate([make_expense(5.0, "food", "coffee $5", NOW)]) is None


def test_generate_insights_failure():
    assert InsightGenerator(FakeAIClient(fail=True)).generate([make_expense(5.0, "food", "coffee $5", NOW)]) is None
