"""Booking lifecycle: create, cancel, admin status updates, and listings.

Route handlers stay thin; everything that touches booking state goes
through here so the rules in ``booking_rules`` are applied in one place.
"""

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from reelbook.core.config import settings
from reelbook.core.dependencies import Actor
from reelbook.core.errors import NotFound
from reelbook.models.base import utcnow
from reelbook.models.booking import Booking, BookingStatus, PaymentStatus
from reelbook.schemas import BookingCreate
from reelbook.services.booking_rules import (
    append_cancellation_reason,
    check_cancellable,
    check_slot_conflict,
    check_transition,
    parse_booking_status,
    parse_payment_status,
    resolve_service,
)
from reelbook.services.notifications import BookingDetails

logger = logging.getLogger(__name__)


@dataclass
class Page:
    items: list
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.total > self.offset + len(self.items)


def booking_details(booking: Booking) -> BookingDetails:
    """Snapshot the fields the notification emails need."""
    return BookingDetails(
        booking_id=booking.id,
        customer_name=booking.customer_name,
        customer_email=booking.customer_email,
        customer_phone=booking.customer_phone,
        service_name=booking.service_name or "Custom Service",
        event_date=booking.event_date,
        event_time=booking.event_time,
        event_location=booking.event_location,
        total_amount=booking.total_amount,
    )


async def create_booking(db: AsyncSession, body: BookingCreate, user_id: int | None = None) -> Booking:
    """Validate, resolve the service, guard the slot, then insert as pending/pending."""
    service = await resolve_service(db, body.service)
    logger.info("Service resolved: %s (%s)", service.name, service.display_name)

    await check_slot_conflict(db, body.event_date, body.event_time)

    booking = Booking(
        user_id=user_id,
        service=service,
        customer_name=body.name,
        customer_email=body.email,
        customer_phone=body.phone,
        alt_phone=body.alt_phone,
        event_date=body.event_date,
        event_time=body.event_time,
        event_location=body.location,
        special_requirements=body.special_requirements or None,
        total_amount=int(body.price),
        booking_status=BookingStatus.PENDING,
        payment_status=PaymentStatus.PENDING,
    )
    db.add(booking)
    await db.flush()

    logger.info("Booking %s created for %s on %s %s", booking.id, service.name, booking.event_date, booking.event_time)
    return booking


async def get_booking(db: AsyncSession, booking_id: int) -> Booking | None:
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    return result.scalar_one_or_none()


async def cancel_booking(db: AsyncSession, booking_id: int, actor: Actor, reason: str | None = None) -> Booking:
    """Cancel a booking on behalf of its owner or an admin.

    A missing booking and someone else's booking look the same to the caller.
    """
    query = select(Booking).where(Booking.id == booking_id)
    if not actor.is_admin:
        query = query.where(Booking.user_id == actor.id)
    booking = (await db.execute(query)).scalar_one_or_none()
    if booking is None:
        raise NotFound("Booking not found or access denied")

    check_cancellable(booking)

    booking.booking_status = BookingStatus.CANCELLED
    booking.special_requirements = append_cancellation_reason(booking.special_requirements, reason)
    booking.updated_at = utcnow()
    await db.flush()

    logger.info("Booking %s cancelled by %s", booking.id, "admin" if actor.is_admin else f"user {actor.id}")
    return booking


async def update_booking_status(
    db: AsyncSession,
    booking_id: int,
    booking_status: str | None = None,
    payment_status: str | None = None,
    notes: str | None = None,
) -> Booking:
    """Admin partial update. Only the supplied fields change.

    By default an admin may force any booking_status; set
    ``admin_enforce_transitions`` to bind admins to the state machine.
    """
    new_booking_status = parse_booking_status(booking_status) if booking_status else None
    new_payment_status = parse_payment_status(payment_status) if payment_status else None

    booking = await get_booking(db, booking_id)
    if booking is None:
        raise NotFound("Booking not found")

    if new_booking_status is not None:
        if settings.admin_enforce_transitions:
            check_transition(booking.booking_status, new_booking_status)
        booking.booking_status = new_booking_status
    if new_payment_status is not None:
        booking.payment_status = new_payment_status
    if notes:
        booking.special_requirements = notes
    booking.updated_at = utcnow()
    await db.flush()

    logger.info(
        "Booking %s updated by admin: booking_status=%s payment_status=%s",
        booking.id,
        booking.booking_status,
        booking.payment_status,
    )
    return booking


async def list_user_bookings(db: AsyncSession, user_id: int, status: str | None = None) -> list[Booking]:
    query = select(Booking).where(Booking.user_id == user_id)
    if status:
        query = query.where(Booking.booking_status == parse_booking_status(status))
    result = await db.execute(query.order_by(Booking.event_date.desc(), Booking.id.desc()))
    return list(result.scalars().all())


async def list_bookings(
    db: AsyncSession,
    status: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    limit: int = 50,
    offset: int = 0,
) -> Page:
    conditions = []
    if status:
        conditions.append(Booking.booking_status == parse_booking_status(status))
    if date_from:
        conditions.append(Booking.event_date >= date_from)
    if date_to:
        conditions.append(Booking.event_date <= date_to)

    total = (await db.execute(select(func.count(Booking.id)).where(*conditions))).scalar_one()
    result = await db.execute(
        select(Booking)
        .where(*conditions)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return Page(items=list(result.scalars().all()), total=total, limit=limit, offset=offset)
