import datetime as dt

import pytest
import requests

from safetyfirst.ml_client import MLScorerClient, ScorerUnavailable
from safetyfirst.pipeline import SOURCE_MODEL, SOURCE_RULE_BASED, ScoringPipeline
from safetyfirst.submissions import DailySubmission, WorkerProfile


class FakeResponse:
    def __init__(self, status_code=200, payload=None, invalid_json=False):
        self.status_code = status_code
        self._payload = payload
        self._invalid_json = invalid_json

    def json(self):
        if self._invalid_json:
            raise ValueError("not json")
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, json=None, timeout=None):
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


def client_with(response=None, error=None):
    session = FakeSession(response, error)
    return MLScorerClient("http://scorer.test/predict", timeout=5, session=session), session


def submission():
    return DailySubmission(
        date=dt.date(2026, 3, 15),
        shift_duration_hours=8,
        fatigue_level=5,
        ppe_items_required=2,
        ppe_items_used=1,
        hazard_exposure_hours={"noise": 4},
    )


def test_returns_score_and_sends_timeout():
    client, session = client_with(FakeResponse(200, {"risk_score": 63.4}))
    assert client.predict({"fatigue_level": 5}) == 63.4
    assert session.calls[0]["timeout"] == 5
    assert session.calls[0]["json"] == {"fatigue_level": 5}


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse(500, {"risk_score": 10}),
        FakeResponse(200, {"score": 10}),
        FakeResponse(200, {"risk_score": "high"}),
        FakeResponse(200, {"risk_score": True}),
        FakeResponse(200, {"risk_score": 140}),
        FakeResponse(200, [10]),
        FakeResponse(200, invalid_json=True),
    ],
)
def test_malformed_responses_are_failures(response):
    client, _ = client_with(response)
    with pytest.raises(ScorerUnavailable):
        client.predict({})


@pytest.mark.parametrize("error", [requests.Timeout("slow"), requests.ConnectionError("down")])
def test_network_errors_are_failures(error):
    client, _ = client_with(error=error)
    with pytest.raises(ScorerUnavailable):
        client.predict({})


def test_disabled_client_never_posts():
    session = FakeSession(FakeResponse(200, {"risk_score": 10}))
    client = MLScorerClient("", session=session)
    with pytest.raises(ScorerUnavailable):
        client.predict({})
    assert session.calls == []


def test_pipeline_uses_model_score():
    client, session = client_with(FakeResponse(200, {"risk_score": 71.6}))
    outcome = ScoringPipeline(client).score(submission(), WorkerProfile(gender="male"), [])
    assert outcome.rule_based_score == 20
    assert outcome.risk_score == 72
    assert outcome.source == SOURCE_MODEL
    assert outcome.risk_level == "high"
    assert session.calls[0]["json"]["daily_risk_score"] == 20
    assert session.calls[0]["json"]["gender_encoded"] == 0


def test_pipeline_falls_back_on_timeout():
    client, _ = client_with(error=requests.Timeout("slow"))
    outcome = ScoringPipeline(client).score(submission(), WorkerProfile(), [])
    assert outcome.risk_score == outcome.rule_based_score == 20
    assert outcome.source == SOURCE_RULE_BASED
    assert "timed out" in outcome.failure_reason


def test_pipeline_without_client_is_rule_based_and_repeatable():
    pipeline = ScoringPipeline()
    first = pipeline.score(submission(), WorkerProfile(), [])
    second = pipeline.score(submission(), WorkerProfile(), [])
    assert first.source == SOURCE_RULE_BASED
    assert first.as_dict() == second.as_dict()
