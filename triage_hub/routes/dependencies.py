"""
Shared FastAPI dependency providers.

Services are created once per application in main.create_app() and stored on
app.state; both HTTP and WebSocket routes read them from there.
"""

from fastapi import HTTPException, status
from fastapi.requests import HTTPConnection

from triage_hub.services.classifier import ClassifierGateway, get_classifier_gateway
from triage_hub.services.collaborators import SessionAuthenticator
from triage_hub.services.realtime import FanoutDispatcher, RealtimeChannel, RoomRegistry


def _state(conn: HTTPConnection, name: str):
    service = getattr(conn.app.state, name, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{name} is not initialized",
        )
    return service


def get_gateway(conn: HTTPConnection) -> ClassifierGateway:
    gateway = getattr(conn.app.state, "classifier_gateway", None)
    if gateway is None:
        gateway = get_classifier_gateway()
        conn.app.state.classifier_gateway = gateway
    return gateway


def get_room_registry(conn: HTTPConnection) -> RoomRegistry:
    return _state(conn, "room_registry")


def get_dispatcher(conn: HTTPConnection) -> FanoutDispatcher:
    return _state(conn, "dispatcher")


def get_channel(conn: HTTPConnection) -> RealtimeChannel:
    return _state(conn, "realtime_channel")


def get_authenticator(conn: HTTPConnection) -> SessionAuthenticator:
    return _state(conn, "authenticator")
