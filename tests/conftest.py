"""
Pytest configuration and fixtures.

Test doubles for the classifier HTTP session and for real-time transports,
plus a fully wired app backed by in-memory collaborators.
"""

import time
from typing import Any, Callable, Dict, List, Optional

import pytest
import requests
from fastapi.testclient import TestClient

from triage_hub.core.settings import Settings
from triage_hub.main import create_app
from triage_hub.services.classifier import ClassifierClient, ClassifierGateway
from triage_hub.services.collaborators import InMemoryMessageStore, StaticTokenAuthenticator
from triage_hub.services.realtime import FanoutDispatcher, RoomRegistry


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, raw: Optional[str] = None):
        self.status_code = status_code
        self._payload = payload
        self._raw = raw

    def json(self):
        if self._raw is not None:
            raise ValueError(f"Expecting value: {self._raw!r}")
        return self._payload


class FakeHTTPSession:
    """Stands in for requests.Session; `handler(url, body)` returns a FakeResponse or raises."""

    def __init__(self, handler: Callable[[str, Dict], FakeResponse]):
        self.handler = handler
        self.calls: List[Dict[str, Any]] = []

    def post(self, url, json=None, timeout=None):
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        return self.handler(url, json)

    def close(self):
        pass


class RecordingTransport:
    """Collects frames sent to one session; optionally fails every send."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.messages: List[Dict[str, Any]] = []

    async def send_json(self, message):
        if self.fail:
            raise ConnectionError("socket closed")
        self.messages.append(message)


def make_gateway(handler, timeout_seconds: float = 0.5, enabled: bool = True):
    """Gateway whose HTTP calls go to `handler`. Returns (gateway, fake_session)."""
    test_settings = Settings(AI_ENABLED=enabled, AI_TIMEOUT_SECONDS=timeout_seconds)
    session = FakeHTTPSession(handler)
    client = ClassifierClient(timeout_seconds=timeout_seconds, max_workers=2, session=session)
    return ClassifierGateway(client=client, settings=test_settings), session


def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def registry() -> RoomRegistry:
    return RoomRegistry()


@pytest.fixture
def dispatcher(registry: RoomRegistry) -> FanoutDispatcher:
    return FanoutDispatcher(registry)


@pytest.fixture
def unreachable_gateway():
    def refuse(url, body):
        raise requests.ConnectionError("Connection refused")

    gateway, _ = make_gateway(refuse)
    yield gateway
    gateway.close()


TOKENS = {
    "alice-token": ("alice", "RESIDENT"),
    "bob-token": ("bob", "RESIDENT"),
    "admin-token": ("admin-1", "ADMIN"),
    "mod-token": ("mod-1", "MODERATOR"),
}


@pytest.fixture
def message_store() -> InMemoryMessageStore:
    return InMemoryMessageStore()


@pytest.fixture
def app(unreachable_gateway, message_store):
    return create_app(
        gateway=unreachable_gateway,
        authenticator=StaticTokenAuthenticator(TOKENS),
        message_store=message_store,
    )


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
