"""Endpoints for listing, streaming, sending and updating notifications."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from lunchbell.application.errors import NotificationError
from lunchbell.application.use_cases.notifications import (
    delete_notification,
    get_notification_counts,
    get_system_stats,
    list_notifications,
    mark_all_read,
    notify_broadcast,
    notify_user,
    notify_users,
    open_notification_stream,
    set_read,
)
from lunchbell.domain.entities import Notification, User
from lunchbell.infrastructure import database
from lunchbell.infrastructure.database import get_db
from lunchbell.infrastructure.notifications import StreamRegistry
from lunchbell.interfaces.api.dependencies import (
    get_current_active_user,
    get_stream_registry,
    get_stream_user,
    require_admin,
)
from lunchbell.interfaces.api.routes_helpers import raise_http_error
from lunchbell.interfaces.api.schemas import (
    DispatchRead,
    MarkAllReadRead,
    NotificationCountsRead,
    NotificationCreate,
    NotificationList,
    NotificationRead,
    NotificationReadUpdate,
    SystemDispatchRead,
    SystemNotificationCreate,
    SystemOverviewRead,
    SystemStatsRead,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def _to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead.model_validate(notification)


@router.get("/", response_model=NotificationList)
def read_notifications(
    unread_only: bool = False,
    limit: int | None = Query(default=None, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Return the caller's notifications, newest first."""

    try:
        notifications = list_notifications(
            db, current_user.id, unread_only=unread_only, limit=limit
        )
    except NotificationError as exc:
        raise_http_error(exc)
    return NotificationList(notifications=[_to_schema(n) for n in notifications])


@router.get("/counts", response_model=NotificationCountsRead)
def read_counts(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    try:
        counts = get_notification_counts(db, current_user.id)
    except NotificationError as exc:
        raise_http_error(exc)
    return NotificationCountsRead(total=counts.total, unread=counts.unread)


@router.post("/read-all", response_model=MarkAllReadRead)
def read_all(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Mark every visible unread notification as read."""

    try:
        result = mark_all_read(db, current_user.id)
    except NotificationError as exc:
        raise_http_error(exc)
    return MarkAllReadRead(updated=len(result.updated), failed=result.failed)


@router.get("/stream")
async def stream_notifications(
    request: Request,
    current_user: User = Depends(get_stream_user),
    registry: StreamRegistry = Depends(get_stream_registry),
):
    """Server-sent events: a recent snapshot, then only newer records."""

    user_id = current_user.id
    stream = open_notification_stream(user_id, session_factory=database.SessionLocal)
    registry.register(user_id, stream)

    async def event_source():
        try:
            async for frame in stream.frames(request.is_disconnected):
                yield frame
        finally:
            stream.close()
            registry.unregister(user_id, stream)

    return StreamingResponse(
        event_source(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.get("/system", response_model=SystemOverviewRead)
def read_system_overview(
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    """Counters across all users plus the ten newest records."""

    stats = get_system_stats(db, recent_limit=10)
    return SystemOverviewRead(
        stats=SystemStatsRead(total=stats.total, system=stats.system, unread=stats.unread),
        recent=[_to_schema(n) for n in stats.recent],
    )


@router.post("/system", response_model=SystemDispatchRead, status_code=status.HTTP_201_CREATED)
def send_system_notification(
    payload: SystemNotificationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Broadcast to everyone, or to ``user_ids`` when the list is not empty."""

    try:
        if payload.user_ids:
            bulk = notify_users(
                db,
                user_ids=payload.user_ids,
                category=payload.category,
                message=payload.message,
            )
            notifications = bulk.notifications
            emailed, skipped = bulk.emailed_user_ids, bulk.skipped
        else:
            broadcast = notify_broadcast(
                db, category=payload.category, message=payload.message
            )
            notifications = [broadcast.notification]
            emailed, skipped = broadcast.emailed_user_ids, []
    except NotificationError as exc:
        raise_http_error(exc)

    logger.info(
        "Admin %s sent %s notification (%d records)",
        current_user.id,
        payload.category.value,
        len(notifications),
    )
    return SystemDispatchRead(
        notifications=[_to_schema(n) for n in notifications],
        count=len(notifications),
        emailed_user_ids=emailed,
        skipped_user_ids=skipped,
    )


@router.post("/", status_code=status.HTTP_201_CREATED)
def send_notification(
    payload: NotificationCreate,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    """Send to one user, or store a broadcast when ``user_id`` is omitted."""

    try:
        if payload.user_id is None:
            broadcast = notify_broadcast(
                db, category=payload.category, message=payload.message
            )
            return SystemDispatchRead(
                notifications=[_to_schema(broadcast.notification)],
                count=1,
                emailed_user_ids=broadcast.emailed_user_ids,
            )
        result = notify_user(
            db,
            user_id=payload.user_id,
            category=payload.category,
            message=payload.message,
        )
    except NotificationError as exc:
        raise_http_error(exc)

    return DispatchRead(
        in_app=result.in_app,
        email=result.email,
        notification=_to_schema(result.notification) if result.notification else None,
    )


@router.put("/{notification_id}", response_model=NotificationRead)
def update_read_state(
    notification_id: str,
    payload: NotificationReadUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Mark a notification read or unread."""

    try:
        notification = set_read(db, notification_id, current_user.id, payload.read)
    except NotificationError as exc:
        raise_http_error(exc)
    return _to_schema(notification)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_notification(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    try:
        delete_notification(db, notification_id, current_user.id)
    except NotificationError as exc:
        raise_http_error(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
