"""
Fanout endpoints - called by the request service after it has persisted a
change, to push the change to connected clients.

Members that are offline simply miss the event; durable notifications are
stored by the caller.
"""

from fastapi import APIRouter, Depends

from triage_hub.models.realtime import (
    AdminBroadcastIn,
    FanoutResponse,
    RequestCreatedIn,
    RequestStatusIn,
    UserNotificationIn,
)
from triage_hub.routes.dependencies import get_dispatcher
from triage_hub.services.realtime import FanoutDispatcher

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.post("/users/{user_id}", response_model=FanoutResponse)
async def notify_user(
    user_id: str,
    notification: UserNotificationIn,
    dispatcher: FanoutDispatcher = Depends(get_dispatcher)
):
    """Send a `notification` event to every live session of a user."""
    delivered = await dispatcher.notify_user(user_id, notification.model_dump())
    return FanoutResponse(delivered=delivered)


@router.post("/admins", response_model=FanoutResponse)
async def broadcast_to_admins(
    broadcast: AdminBroadcastIn,
    dispatcher: FanoutDispatcher = Depends(get_dispatcher)
):
    delivered = await dispatcher.broadcast_to_admins(broadcast.event, broadcast.payload)
    return FanoutResponse(delivered=delivered)


@router.post("/requests/{request_id}/status", response_model=FanoutResponse)
async def request_status_changed(
    request_id: str,
    change: RequestStatusIn,
    dispatcher: FanoutDispatcher = Depends(get_dispatcher)
):
    """
    Push a status change to everyone watching the request.

    Emits `request-status-updated`, and `request-updated` as well when the
    request's details changed.
    """
    delivered = await dispatcher.notify_request_room(request_id, change.status)
    if change.details_changed:
        await dispatcher.notify_request_updated(request_id, change.status)
    return FanoutResponse(delivered=delivered)


@router.post("/requests/{request_id}/created", response_model=FanoutResponse)
async def request_created(
    request_id: str,
    created: RequestCreatedIn,
    dispatcher: FanoutDispatcher = Depends(get_dispatcher)
):
    """Announce a new request to admins and moderators."""
    delivered = await dispatcher.announce_new_request(
        request_id,
        title=created.title,
        category=created.category,
        priority=created.priority,
        created_at=created.created_at,
    )
    return FanoutResponse(delivered=delivered)
