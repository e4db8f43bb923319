"""Admin notification feed: list, unread count, mark read, send, alerts, reminders."""

import asyncio

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from reelbook.core.database import get_db
from reelbook.core.dependencies import require_admin
from reelbook.core.errors import NotFound
from reelbook.models.base import utcnow
from reelbook.models.notification import Notification
from reelbook.schemas import MessageResponse, NotificationCreate, NotificationOut, ReminderRequest
from reelbook.services import studio_alerts
from reelbook.services.booking_manager import get_booking
from reelbook.services.notifications import send_admin_notice, send_event_reminder

router = APIRouter(prefix="/notifications", tags=["notifications"], dependencies=[Depends(require_admin)])


@router.get("")
async def list_notifications(
    is_read: bool | None = None,
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
):
    query = select(Notification)
    if is_read is not None:
        query = query.where(Notification.is_read.is_(is_read))
    result = await db.execute(query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit))
    return {"success": True, "notifications": [NotificationOut.model_validate(n) for n in result.scalars().all()]}


@router.get("/unread-count")
async def unread_count(db: AsyncSession = Depends(get_db)):
    count = (
        await db.execute(select(func.count(Notification.id)).where(Notification.is_read.is_(False)))
    ).scalar_one()
    return {"success": True, "count": count}


@router.put("/{notification_id}/read", response_model=MessageResponse)
async def mark_read(notification_id: int, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Notification).where(Notification.id == notification_id))
    notification = result.scalar_one_or_none()
    if notification is None:
        raise NotFound("Notification not found")
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = utcnow()
    return MessageResponse(message="Notification marked as read")


@router.post("/send", status_code=status.HTTP_201_CREATED)
async def send_notification(
    body: NotificationCreate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    if body.related_booking_id is not None and await get_booking(db, body.related_booking_id) is None:
        raise NotFound("Booking not found")

    notification = Notification(**body.model_dump(exclude={"send_email"}))
    db.add(notification)
    await db.commit()

    if body.send_email:
        background_tasks.add_task(send_admin_notice, body.recipient_email, body.title, body.message)
    return {"success": True, "notification": NotificationOut.model_validate(notification)}


@router.post("/auto-generate")
async def auto_generate(db: AsyncSession = Depends(get_db)):
    created = await studio_alerts.generate_alerts(db)
    return {
        "success": True,
        "generated": len(created),
        "notifications": [NotificationOut.model_validate(n) for n in created],
    }


@router.post("/send-reminders")
async def send_reminders(body: ReminderRequest, db: AsyncSession = Depends(get_db)):
    """Email customers whose paid event is one or two days away. Waits for the sends."""
    if body.type != "event_reminder":
        return {"success": True, "sent": 0}
    events = await studio_alerts.events_needing_reminder(db)
    results = await asyncio.gather(*(send_event_reminder(details) for details in events))
    return {"success": True, "sent": sum(results)}
