"""
Fanout Dispatcher - delivers one event to every live member of a room.

Nothing is queued: members that are not connected right now simply do not
get the event. Durable notification records are written by the caller
through its own store, before or alongside the dispatch.
"""

from datetime import datetime
from typing import Any, Dict, Optional
import asyncio
import logging

from triage_hub.models.realtime import NotificationEvent
from triage_hub.models.triage import utcnow
from triage_hub.services.realtime.registry import (
    ADMINS_ROOM,
    RoomRegistry,
    Session,
    request_room,
    user_room,
)

logger = logging.getLogger(__name__)

DELIVERY_TIMEOUT_SECONDS = 5.0


class FanoutDispatcher:
    """Resolves rooms through a RoomRegistry and sends to each member's transport."""

    def __init__(self, registry: RoomRegistry, delivery_timeout_seconds: float = DELIVERY_TIMEOUT_SECONDS):
        self.registry = registry
        self.delivery_timeout_seconds = delivery_timeout_seconds

    async def emit(
        self,
        room_key: str,
        event_name: str,
        payload: Any,
        exclude_session_id: Optional[str] = None
    ) -> int:
        """
        Send an event to every session in a room.

        Deliveries run concurrently and independently; a member whose
        transport fails, or does not accept the frame within
        delivery_timeout_seconds, is logged and skipped.

        Args:
            room_key: Target room
            event_name: Event name seen by clients
            payload: JSON-serializable event data
            exclude_session_id: Session that should not receive the event (the sender)

        Returns:
            Number of members the event was delivered to
        """
        event = NotificationEvent(room_key, event_name, payload)
        members = [
            session for session in self.registry.sessions_in(room_key)
            if session.session_id != exclude_session_id
        ]
        if not members:
            logger.debug(f"No live members in {room_key}, {event_name} not delivered")
            return 0

        results = await asyncio.gather(*(self._deliver(session, event) for session in members))
        delivered = sum(1 for ok in results if ok)
        logger.debug(f"{event_name} delivered to {delivered}/{len(members)} member(s) of {room_key}")
        return delivered

    async def _deliver(self, session: Session, event: NotificationEvent) -> bool:
        if session.transport is None:
            return False
        try:
            await asyncio.wait_for(
                session.transport.send_json(event.to_message()),
                timeout=self.delivery_timeout_seconds,
            )
            return True
        except asyncio.TimeoutError:
            logger.warning(
                f"Timed out delivering {event.event_name} to session {session.session_id} "
                f"in {event.target_room_key} after {self.delivery_timeout_seconds}s"
            )
            return False
        except Exception as e:
            logger.warning(
                f"Failed to deliver {event.event_name} to session {session.session_id} "
                f"in {event.target_room_key}: {e}"
            )
            return False

    async def notify_user(self, user_id, payload: Dict[str, Any]) -> int:
        """Send a `notification` event to all sessions of a user."""
        return await self.emit(user_room(user_id), "notification", payload)

    async def broadcast_to_admins(self, event_name: str, payload: Any) -> int:
        return await self.emit(ADMINS_ROOM, event_name, payload)

    async def notify_request_room(self, request_id, status: str) -> int:
        """Tell everyone watching a request that its status changed."""
        return await self.emit(
            request_room(request_id),
            "request-status-updated",
            {
                "requestId": request_id,
                "status": status,
                "updatedAt": utcnow().isoformat(),
            },
        )

    async def notify_request_updated(self, request_id, status: str) -> int:
        """Tell everyone watching a request that it was edited."""
        return await self.emit(
            request_room(request_id),
            "request-updated",
            {
                "requestId": request_id,
                "status": status,
                "updatedAt": utcnow().isoformat(),
            },
        )

    async def announce_new_request(
        self,
        request_id,
        title: str,
        category: str,
        priority: str,
        created_at: datetime
    ) -> int:
        """Tell admins and moderators about a newly submitted request."""
        return await self.broadcast_to_admins(
            "new-request",
            {
                "requestId": request_id,
                "title": title,
                "category": category,
                "priority": priority,
                "createdAt": created_at.isoformat(),
            },
        )
