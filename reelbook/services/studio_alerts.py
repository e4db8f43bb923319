"""Admin notification feed: generated alerts and event reminders.

``generate_alerts`` scans bookings and equipment for things the studio
should act on and records one Notification per finding. A finding that
already has a notification with the same type and title is skipped, so the
scan can run as often as the dashboard likes.
"""

import logging
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reelbook.models.base import utcnow
from reelbook.models.booking import Booking, BookingStatus, PaymentStatus
from reelbook.models.inventory import Equipment, EquipmentMaintenance
from reelbook.models.notification import Notification
from reelbook.services.booking_manager import booking_details
from reelbook.services.notifications import BookingDetails

logger = logging.getLogger(__name__)

UPCOMING_WINDOW = timedelta(days=7)
MAINTENANCE_WINDOW = timedelta(days=7)
PAYMENT_GRACE = timedelta(hours=24)


async def _exists(db: AsyncSession, type_: str, title: str) -> bool:
    result = await db.execute(
        select(Notification.id).where(Notification.type == type_, Notification.title == title).limit(1)
    )
    return result.scalar_one_or_none() is not None


async def _record(
    db: AsyncSession, created: list[Notification], type_: str, title: str, message: str, booking_id: int | None = None
) -> None:
    if await _exists(db, type_, title):
        return
    notification = Notification(type=type_, title=title, message=message, related_booking_id=booking_id)
    db.add(notification)
    created.append(notification)


async def generate_alerts(db: AsyncSession, today: date | None = None) -> list[Notification]:
    """Record alerts for upcoming paid events, stale unpaid bookings and due maintenance."""
    today = today or date.today()
    created: list[Notification] = []

    upcoming = await db.execute(
        select(Booking)
        .where(
            Booking.event_date.between(today, today + UPCOMING_WINDOW),
            Booking.payment_status == PaymentStatus.PAID,
            Booking.booking_status != BookingStatus.CANCELLED,
        )
        .order_by(Booking.event_date, Booking.event_time)
    )
    for booking in upcoming.scalars().all():
        days = (booking.event_date - today).days
        await _record(
            db,
            created,
            "upcoming_event",
            f"Upcoming event: {booking.customer_name} on {booking.event_date.isoformat()}",
            f"Event in {days} days on {booking.event_date.isoformat()} at {booking.event_time}. "
            f"Service: {booking.service_name}",
            booking.id,
        )

    unpaid = await db.execute(
        select(Booking)
        .where(
            Booking.payment_status == PaymentStatus.PENDING,
            Booking.booking_status != BookingStatus.CANCELLED,
            Booking.created_at < utcnow() - PAYMENT_GRACE,
        )
        .order_by(Booking.id)
    )
    for booking in unpaid.scalars().all():
        await _record(
            db,
            created,
            "pending_payment",
            f"Pending payment: booking #{booking.id}",
            f"Payment pending for booking #{booking.id} ({booking.customer_name}). "
            f"Amount: Rs. {booking.total_amount:,}",
            booking.id,
        )

    due = await db.execute(
        select(Equipment.name, EquipmentMaintenance.next_due_date)
        .join(EquipmentMaintenance, EquipmentMaintenance.equipment_id == Equipment.id)
        .where(EquipmentMaintenance.next_due_date <= today + MAINTENANCE_WINDOW)
        .order_by(EquipmentMaintenance.next_due_date)
    )
    for name, due_date in due.all():
        await _record(
            db,
            created,
            "maintenance_due",
            f"Maintenance due: {name} on {due_date.isoformat()}",
            f"Equipment maintenance is due on {due_date.isoformat()}",
        )

    await db.flush()
    logger.info("Generated %d studio alerts", len(created))
    return created


async def events_needing_reminder(db: AsyncSession, today: date | None = None) -> list[BookingDetails]:
    """Paid, live bookings whose event is one or two days away."""
    today = today or date.today()
    result = await db.execute(
        select(Booking)
        .where(
            Booking.event_date.between(today + timedelta(days=1), today + timedelta(days=2)),
            Booking.payment_status == PaymentStatus.PAID,
            Booking.booking_status != BookingStatus.CANCELLED,
        )
        .order_by(Booking.event_date, Booking.event_time)
    )
    return [booking_details(b) for b in result.scalars().all()]
