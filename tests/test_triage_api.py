"""
Tests for /triage/prioritize with an external classifier that answers.
"""

import pytest
from fastapi.testclient import TestClient

from triage_hub.main import create_app
from triage_hub.services.collaborators import InMemoryMessageStore, StaticTokenAuthenticator

from tests.conftest import FakeResponse, make_gateway


@pytest.fixture
def classifier():
    gateway, session = make_gateway(
        lambda url, body: FakeResponse(200, {"priority": "MEDIUM", "score": 0.55, "reason": "model"})
    )
    yield gateway, session
    gateway.close()


@pytest.fixture
def api(classifier):
    gateway, _ = classifier
    app = create_app(
        gateway=gateway,
        authenticator=StaticTokenAuthenticator({}),
        message_store=InMemoryMessageStore(),
    )
    with TestClient(app) as test_client:
        yield test_client


def test_history_is_summarized_for_the_classifier(api, classifier):
    _, session = classifier

    response = api.post("/triage/prioritize", json={
        "title": "Need groceries",
        "category": "FOOD",
        "history": [
            {"category": "MEDICAL", "status": "PENDING", "created_at": "2026-10-10T08:00:00+00:00"},
            {
                "category": "FOOD",
                "status": "RESOLVED",
                "created_at": "2026-10-01T08:00:00+00:00",
                "updated_at": "2026-10-01T10:00:00+00:00",
            },
        ],
    })

    assert response.status_code == 200
    assert response.json()["priority"] == "MEDIUM"
    assert session.calls[0]["json"]["historical_data"] == {
        "total_requests": 2,
        "recent_category": "MEDICAL",
        "avg_resolution_time": 2 * 3600 * 1000,
    }


def test_explicit_context_wins_over_history(api, classifier):
    _, session = classifier

    api.post("/triage/prioritize", json={
        "title": "Need groceries",
        "historical_context": {"total_requests": 9},
        "history": [{"category": "FOOD"}],
    })

    assert session.calls[0]["json"]["historical_data"]["total_requests"] == 9


def test_no_history_sends_none(api, classifier):
    _, session = classifier

    api.post("/triage/prioritize", json={"title": "Need groceries"})

    assert session.calls[0]["json"]["historical_data"] is None
