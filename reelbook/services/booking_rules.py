"""Booking rules enforcement.

Status vocabularies, the booking_status state machine, and the checks that
run before a booking is written or moved. Each check raises the matching
domain error, so callers read as a straight sequence of guards.
"""

from datetime import date

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from reelbook.core.errors import InvalidStatus, InvalidTransition, ServiceNotFound, SlotConflict
from reelbook.models.booking import Booking, BookingStatus, PaymentStatus
from reelbook.models.service import Service

BOOKING_STATUSES = frozenset(s.value for s in BookingStatus)
PAYMENT_STATUSES = frozenset(s.value for s in PaymentStatus)

# Statuses that hold a date/time slot against other bookings
SLOT_HOLDING = (BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS)

TERMINAL = frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED})

TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.IN_PROGRESS, BookingStatus.CANCELLED}),
    BookingStatus.IN_PROGRESS: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

DEFAULT_CANCEL_REASON = "No reason provided"


def can_transition(current: BookingStatus, new: BookingStatus) -> bool:
    """True if the state machine allows current -> new. Staying put is allowed."""
    return new == current or new in TRANSITIONS[current]


def parse_booking_status(value: str) -> BookingStatus:
    if value not in BOOKING_STATUSES:
        raise InvalidStatus("Invalid booking status")
    return BookingStatus(value)


def parse_payment_status(value: str) -> PaymentStatus:
    if value not in PAYMENT_STATUSES:
        raise InvalidStatus("Invalid payment status")
    return PaymentStatus(value)


def check_cancellable(booking: Booking) -> None:
    """Completed and cancelled bookings cannot be cancelled again."""
    if booking.booking_status == BookingStatus.COMPLETED:
        raise InvalidTransition("Cannot cancel completed booking")
    if booking.booking_status == BookingStatus.CANCELLED:
        raise InvalidTransition("Booking is already cancelled")


def check_transition(current: BookingStatus, new: BookingStatus) -> None:
    if not can_transition(current, new):
        raise InvalidTransition(f"Cannot move booking from {current.value} to {new.value}")


async def check_slot_conflict(db: AsyncSession, event_date: date, event_time: str) -> None:
    """No new booking at a date/time already held by a confirmed or in-progress booking.

    Not serialised against concurrent inserts: two requests for the same slot
    can both pass before either commits.
    """
    result = await db.execute(
        select(Booking.id)
        .where(
            Booking.event_date == event_date,
            Booking.event_time == event_time,
            Booking.booking_status.in_(SLOT_HOLDING),
        )
        .limit(1)
    )
    if result.scalar_one_or_none() is not None:
        raise SlotConflict()


async def resolve_service(db: AsyncSession, identifier: str) -> Service:
    """Find a service by slug name, display name, or numeric id."""
    conditions = [Service.name == identifier, Service.display_name == identifier]
    if identifier.isdigit():
        conditions.append(Service.id == int(identifier))

    result = await db.execute(select(Service).where(or_(*conditions)).order_by(Service.id).limit(1))
    service = result.scalar_one_or_none()
    if service is None:
        raise ServiceNotFound(f"Invalid service selected: {identifier}. Available services need to be checked.")
    return service


def append_cancellation_reason(existing: str | None, reason: str | None) -> str:
    """Cancellation reasons are kept in the special-requirements free text."""
    note = f"Cancellation reason: {reason or DEFAULT_CANCEL_REASON}"
    if existing is None:
        return note
    return f"{existing} | {note}"
