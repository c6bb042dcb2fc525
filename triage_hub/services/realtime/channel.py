"""
Real-time channel - routes inbound client frames to their handlers.

Each connection sends JSON frames {"event": <name>, "data": <payload>}.
Frames are looked up in a dispatch table by event name; transport framing
(WebSocket, test doubles) stays outside this module.

Inbound events:
- join-request  <requestId>                  -> joins request-<id>
- join-chat     <chatId>                     -> joins chat-<id>
- private-message {to, message, type}        -> persisted, then sent to user-<to>
- typing        {chatId, isTyping}           -> user-typing to the rest of chat-<id>
"""

from typing import Any, Awaitable, Callable, Dict, Optional
import logging

from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from triage_hub.models.realtime import InboundFrame, PrivateMessageIn, TypingIn
from triage_hub.services.collaborators.base import MessageStore
from triage_hub.services.realtime.dispatcher import FanoutDispatcher
from triage_hub.services.realtime.registry import (
    RoomRegistry,
    Session,
    chat_room,
    request_room,
    user_room,
)

logger = logging.getLogger(__name__)

Handler = Callable[[Session, Any], Awaitable[None]]


class InvalidFrame(ValueError):
    """A frame or its payload could not be understood."""


class WebSocketTransport:
    """Adapts a Starlette/FastAPI WebSocket to the dispatcher's transport interface."""

    def __init__(self, websocket):
        self.websocket = websocket

    async def send_json(self, message: Dict[str, Any]) -> None:
        await self.websocket.send_json(message)


def _room_id(data: Any, key: str) -> str:
    """Accept either a bare id or an object carrying the id under `key`."""
    if isinstance(data, dict):
        data = data.get(key)
    if isinstance(data, bool) or not isinstance(data, (str, int)) or str(data).strip() == "":
        raise InvalidFrame(f"missing {key}")
    return str(data).strip()


class RealtimeChannel:
    """Business logic behind one multiplexed real-time connection per session."""

    def __init__(
        self,
        registry: RoomRegistry,
        dispatcher: FanoutDispatcher,
        message_store: MessageStore
    ):
        self.registry = registry
        self.dispatcher = dispatcher
        self.message_store = message_store
        self.handlers: Dict[str, Handler] = {
            "join-request": self.on_join_request,
            "join-chat": self.on_join_chat,
            "private-message": self.on_private_message,
            "typing": self.on_typing,
        }

    async def handle(self, session: Session, raw_frame: Any) -> None:
        """Validate one inbound frame and run its handler."""
        try:
            frame = InboundFrame.model_validate(raw_frame)
        except ValidationError:
            await self.reply(session, "error", {"message": "Invalid frame"})
            return

        handler = self.handlers.get(frame.event)
        if handler is None:
            logger.debug(f"Ignoring unknown event {frame.event!r} from session {session.session_id}")
            return

        try:
            await handler(session, frame.data)
        except (InvalidFrame, ValidationError) as e:
            logger.debug(f"Invalid {frame.event} payload from session {session.session_id}: {e}")
            await self.reply(session, "error", {"message": f"Invalid {frame.event} payload"})

    async def reply(self, session: Session, event_name: str, data: Any) -> None:
        """Send a frame to this session only."""
        if session.transport is None:
            return
        try:
            await session.transport.send_json({"event": event_name, "data": data})
        except Exception as e:
            logger.warning(f"Failed to reply {event_name} to session {session.session_id}: {e}")

    async def _join(self, session: Session, room_key: str) -> None:
        if self.registry.join_room(session.session_id, room_key):
            await self.reply(session, "joined", {"room": room_key})

    async def on_join_request(self, session: Session, data: Any) -> None:
        await self._join(session, request_room(_room_id(data, "requestId")))

    async def on_join_chat(self, session: Session, data: Any) -> None:
        await self._join(session, chat_room(_room_id(data, "chatId")))

    async def on_private_message(self, session: Session, data: Any) -> None:
        message = PrivateMessageIn.model_validate(data)

        try:
            saved = await run_in_threadpool(
                self.message_store.save_message,
                session.user_id,
                message.to,
                message.message,
                message.type,
            )
        except Exception as e:
            logger.error(f"Error saving private message from {session.user_id}: {e}", exc_info=True)
            await self.reply(session, "error", {"message": "Failed to send message"})
            return

        await self.dispatcher.emit(
            user_room(message.to),
            "private-message",
            {
                "from": session.user_id,
                "message": saved.content,
                "type": saved.message_type,
                "timestamp": saved.created_at.isoformat(),
            },
        )
        logger.info(f"Private message sent from {session.user_id} to {message.to}")

    async def on_typing(self, session: Session, data: Any) -> None:
        typing = TypingIn.model_validate(data)
        await self.dispatcher.emit(
            chat_room(typing.chatId),
            "user-typing",
            {"userId": session.user_id, "isTyping": typing.isTyping},
            exclude_session_id=session.session_id,
        )

    def disconnect(self, session: Optional[Session]) -> None:
        if session is not None:
            self.registry.deregister(session.session_id)
