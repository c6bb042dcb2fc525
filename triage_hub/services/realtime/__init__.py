"""
Real-time fanout: session/room membership, event delivery and the inbound
event table of the WebSocket channel.
"""

from triage_hub.services.realtime.channel import RealtimeChannel, WebSocketTransport
from triage_hub.services.realtime.dispatcher import FanoutDispatcher
from triage_hub.services.realtime.registry import (
    ADMINS_ROOM,
    DuplicateSession,
    RegistryError,
    RoomRegistry,
    Session,
    UnknownSession,
    chat_room,
    request_room,
    role_room,
    user_room,
)

__all__ = [
    "ADMINS_ROOM",
    "DuplicateSession",
    "FanoutDispatcher",
    "RealtimeChannel",
    "RegistryError",
    "RoomRegistry",
    "Session",
    "UnknownSession",
    "WebSocketTransport",
    "chat_room",
    "request_room",
    "role_room",
    "user_room",
]
