"""
Models for the real-time channel: inbound frames, fanout events and the
request bodies of the notification endpoints.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Any, Dict, Optional

from triage_hub.models.triage import utcnow


class NotificationEvent:
    """
    One event on its way to a room.

    Exists only for the duration of a dispatch call; nothing is queued or
    replayed if the room has no members.
    """

    def __init__(
        self,
        target_room_key: str,
        event_name: str,
        payload: Any,
        emitted_at: Optional[datetime] = None
    ):
        self.target_room_key = target_room_key
        self.event_name = event_name
        self.payload = payload
        self.emitted_at = emitted_at or utcnow()

    def to_message(self) -> Dict[str, Any]:
        """Wire frame sent to each member's transport."""
        return {"event": self.event_name, "data": self.payload}

    def __repr__(self) -> str:
        return f"NotificationEvent({self.event_name!r} -> {self.target_room_key!r})"


class InboundFrame(BaseModel):
    """A JSON frame received from a client: {"event": ..., "data": ...}."""
    event: str = Field(..., min_length=1)
    data: Any = None


def _id_to_str(value):
    # Ids arrive as strings or numbers, the same as in join-request / join-chat
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, str):
        return value.strip()
    return value


class PrivateMessageIn(BaseModel):
    to: str = Field(..., min_length=1, description="Receiving user id")
    message: str = Field(..., min_length=1, max_length=5000)
    type: str = Field("text", description="Message type, e.g. text or image")

    @field_validator("to", mode="before")
    @classmethod
    def _normalize_to(cls, value):
        return _id_to_str(value)


class TypingIn(BaseModel):
    chatId: str = Field(..., min_length=1)
    isTyping: bool

    @field_validator("chatId", mode="before")
    @classmethod
    def _normalize_chat_id(cls, value):
        return _id_to_str(value)


class UserNotificationIn(BaseModel):
    """Body of POST /notifications/users/{user_id}."""
    type: str = "GENERAL"
    title: str
    message: str
    link: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class AdminBroadcastIn(BaseModel):
    """Body of POST /notifications/admins."""
    event: str = Field(..., min_length=1)
    payload: Dict[str, Any] = Field(default_factory=dict)


class RequestStatusIn(BaseModel):
    """Body of POST /notifications/requests/{request_id}/status."""
    status: str = Field(..., min_length=1)
    details_changed: bool = Field(False, description="Also emit request-updated to the room")


class RequestCreatedIn(BaseModel):
    """Body of POST /notifications/requests/{request_id}/created."""
    title: str
    category: str
    priority: str
    created_at: datetime = Field(default_factory=utcnow)


class FanoutResponse(BaseModel):
    delivered: int
