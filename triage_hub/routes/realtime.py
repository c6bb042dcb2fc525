"""
Real-time routes - the WebSocket channel and read-only views of the rooms.
"""

from typing import Optional
from uuid import uuid4
import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from fastapi.concurrency import run_in_threadpool

from triage_hub.routes.dependencies import get_authenticator, get_channel, get_room_registry
from triage_hub.services.collaborators import SessionAuthenticator
from triage_hub.services.realtime import (
    RealtimeChannel,
    RoomRegistry,
    UnknownSession,
    WebSocketTransport,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Realtime"])


@router.websocket("/ws")
async def realtime_socket(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
    authenticator: SessionAuthenticator = Depends(get_authenticator),
    registry: RoomRegistry = Depends(get_room_registry),
    channel: RealtimeChannel = Depends(get_channel)
):
    """
    Multiplexed real-time channel.

    Handshake: ?token=<session token>. On success the client gets
    {"event": "connected", "data": {"sessionId", "rooms"}} and may then send
    {"event": ..., "data": ...} frames (see services.realtime.channel).
    """
    user = await run_in_threadpool(authenticator.authenticate, token)
    if user is None:
        logger.info("Rejected real-time handshake: invalid or missing token")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    session = registry.register(uuid4().hex, user.user_id, user.role, WebSocketTransport(websocket))
    logger.info(f"Socket connected: {session.session_id} (user {user.user_id})")

    try:
        await channel.reply(
            session,
            "connected",
            {"sessionId": session.session_id, "rooms": sorted(registry.rooms_of(session.session_id))},
        )
        while True:
            text = await websocket.receive_text()
            try:
                frame = json.loads(text)
            except ValueError:
                await channel.reply(session, "error", {"message": "Invalid frame"})
                continue
            await channel.handle(session, frame)
    except WebSocketDisconnect:
        logger.info(f"Socket disconnected: {session.session_id} (user {user.user_id})")
    finally:
        channel.disconnect(session)


@router.get("/realtime/rooms/{room_key}")
async def get_room(room_key: str, registry: RoomRegistry = Depends(get_room_registry)):
    """Live members of a room (empty rooms are not an error)."""
    members = registry.members_of(room_key)
    return {
        "room": room_key,
        "member_count": len(members),
        "session_ids": sorted(members),
    }


@router.get("/realtime/sessions/{session_id}")
async def get_session(session_id: str, registry: RoomRegistry = Depends(get_room_registry)):
    try:
        session = registry.get_session(session_id)
    except UnknownSession:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {session_id} not found"
        )
    return {**session.to_dict(), "rooms": sorted(registry.rooms_of(session_id))}
