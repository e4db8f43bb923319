"""Payment reconciliation: bridge Razorpay's order/verify flow to local rows.

create_order   opens a gateway order and records a ``created`` Payment.
verify_payment checks the callback signature, completes the Payment and
               marks the booking paid/confirmed in the same session.

Re-verifying an order with a valid signature re-applies the same updates.
With ``payment_reject_reprocessing`` on, a completed order is refused with
AlreadyProcessed instead.
"""

import logging
import time

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from reelbook.core.config import settings
from reelbook.core.errors import (
    AlreadyProcessed,
    InternalError,
    InvalidAmount,
    InvalidStatus,
    NotFound,
    SignatureInvalid,
    ValidationFailed,
)
from reelbook.models.base import utcnow
from reelbook.models.booking import BookingStatus, PaymentStatus
from reelbook.models.payment import Payment, PaymentState
from reelbook.schemas import CreateOrderRequest, VerifyPaymentRequest
from reelbook.services import razorpay_service
from reelbook.services.booking_manager import Page, booking_details, get_booking
from reelbook.services.notifications import PaymentDetails

logger = logging.getLogger(__name__)


def resolve_booking_ref(value: int | str | None) -> int | None:
    """Turn a client-supplied booking reference into a booking id.

    Test-marker references (``test_...``) and empty values mean "no booking".
    """
    if value is None or value == "":
        return None
    if isinstance(value, int):
        return value
    if value.startswith(settings.test_booking_prefix):
        return None
    if value.isdigit():
        return int(value)
    raise ValidationFailed(errors=[{"field": "bookingId", "message": "Invalid booking reference"}])


async def create_order(db: AsyncSession, body: CreateOrderRequest) -> tuple[dict, Payment]:
    """Open a gateway order and persist the matching ``created`` Payment."""
    if body.amount is None or body.amount < settings.payment_min_amount:
        raise InvalidAmount(f"Invalid amount. Minimum Rs. {settings.payment_min_amount} required.")

    booking_id = resolve_booking_ref(body.booking_id)
    booking = None
    if booking_id is not None:
        booking = await get_booking(db, booking_id)
        if booking is None:
            raise NotFound("Booking not found")

    receipt = f"booking_{body.booking_id or int(time.time() * 1000)}"
    try:
        order = razorpay_service.create_order(
            body.amount * 100,
            receipt,
            notes={
                "booking_id": body.booking_id,
                "customer_name": body.customer_name,
                "customer_email": body.customer_email,
                "customer_phone": body.customer_phone,
            },
        )
    except razorpay_service.GATEWAY_ERRORS as exc:
        logger.error("Gateway order creation failed for %s: %s", receipt, exc)
        raise InternalError("Failed to create payment order") from exc

    payment = Payment(
        order_id=order["id"],
        booking_id=booking_id,
        amount=body.amount,
        currency=settings.payment_currency,
        status=PaymentState.CREATED,
        customer_name=body.customer_name,
        customer_email=body.customer_email,
        customer_phone=body.customer_phone,
        gateway="razorpay",
    )
    db.add(payment)
    if booking is not None:
        booking.razorpay_order_id = order["id"]
    await db.flush()

    logger.info("Order %s created for %s rupees (booking %s)", order["id"], body.amount, booking_id)
    return order, payment


async def verify_payment(db: AsyncSession, body: VerifyPaymentRequest) -> PaymentDetails | None:
    """Verify a checkout callback and apply it.

    Returns what the payment notification needs, or None when there is no
    booking/payment pair to notify about. A bad signature changes nothing, and
    neither does naming a booking other than the one the order was opened for.
    """
    if not razorpay_service.verify_signature(body.razorpay_order_id, body.razorpay_payment_id, body.razorpay_signature):
        logger.warning("Signature mismatch for order %s", body.razorpay_order_id)
        raise SignatureInvalid()

    result = await db.execute(select(Payment).where(Payment.order_id == body.razorpay_order_id))
    payment = result.scalar_one_or_none()
    booking_id = resolve_booking_ref(body.booking_id)

    if payment is None:
        logger.warning("Verified order %s has no local payment row", body.razorpay_order_id)
    else:
        if payment.booking_id is not None and booking_id is not None and payment.booking_id != booking_id:
            logger.warning(
                "Order %s belongs to booking %s, not %s", body.razorpay_order_id, payment.booking_id, booking_id
            )
            raise ValidationFailed(errors=[{"field": "booking_id", "message": "Booking does not match this order"}])
        if payment.booking_id is None and booking_id is not None:
            logger.warning("Order %s was opened without a booking; applying to booking %s", payment.order_id, booking_id)
        if settings.payment_reject_reprocessing and payment.status == PaymentState.COMPLETED:
            raise AlreadyProcessed()
        payment.status = PaymentState.COMPLETED
        payment.payment_id = body.razorpay_payment_id
        payment.signature = body.razorpay_signature
        payment.completed_at = utcnow()

    booking = None
    if booking_id is not None:
        booking = await get_booking(db, booking_id)
        if booking is None:
            logger.warning("Verified order %s references missing booking %s", body.razorpay_order_id, booking_id)
        else:
            booking.payment_status = PaymentStatus.PAID
            booking.booking_status = BookingStatus.CONFIRMED
            booking.razorpay_payment_id = body.razorpay_payment_id
            booking.updated_at = utcnow()

    await db.flush()
    logger.info("Payment %s verified for order %s", body.razorpay_payment_id, body.razorpay_order_id)

    if booking is None or payment is None:
        return None
    return PaymentDetails(
        booking=booking_details(booking),
        amount=payment.amount,
        payment_id=body.razorpay_payment_id,
        order_id=body.razorpay_order_id,
    )


async def apply_webhook_event(db: AsyncSession, event: dict) -> PaymentDetails | None:
    """Apply a gateway webhook event that already passed signature checks.

    ``payment.captured`` completes the order the same way a verified checkout
    callback does. Returns notification details only when this event moved
    the payment to completed, so a client verify that already ran does not
    trigger a second email.
    """
    event_type = event.get("event")
    try:
        entity = event["payload"]["payment"]["entity"]
        order_id = entity["order_id"]
        payment_id = entity["id"]
    except (KeyError, TypeError):
        logger.warning("Ignoring malformed webhook event %s", event_type)
        return None

    if event_type == "payment.failed":
        logger.warning("Gateway reported failed payment %s for order %s", payment_id, order_id)
        return None
    if event_type != "payment.captured":
        logger.debug("Ignoring webhook event %s", event_type)
        return None

    result = await db.execute(select(Payment).where(Payment.order_id == order_id))
    payment = result.scalar_one_or_none()
    if payment is None:
        logger.warning("Captured order %s has no local payment row", order_id)
        return None
    if payment.status == PaymentState.COMPLETED:
        return None

    payment.status = PaymentState.COMPLETED
    payment.payment_id = payment_id
    payment.completed_at = utcnow()

    booking = None
    if payment.booking_id is not None:
        booking = await get_booking(db, payment.booking_id)
    if booking is not None:
        booking.payment_status = PaymentStatus.PAID
        booking.booking_status = BookingStatus.CONFIRMED
        booking.razorpay_payment_id = payment_id
        booking.updated_at = utcnow()

    await db.flush()
    logger.info("Webhook captured payment %s for order %s", payment_id, order_id)

    if booking is None:
        return None
    return PaymentDetails(booking=booking_details(booking), amount=payment.amount, payment_id=payment_id, order_id=order_id)


async def get_payment(db: AsyncSession, identifier: str) -> Payment:
    """Look up a payment by local id or gateway payment id."""
    conditions = [Payment.payment_id == identifier]
    if identifier.isdigit():
        conditions.append(Payment.id == int(identifier))
    result = await db.execute(select(Payment).where(or_(*conditions)).order_by(Payment.id).limit(1))
    payment = result.scalar_one_or_none()
    if payment is None:
        raise NotFound("Payment not found")
    return payment


async def list_payments(db: AsyncSession, status: str | None = None, limit: int = 50, offset: int = 0) -> Page:
    conditions = []
    if status:
        if status not in {s.value for s in PaymentState}:
            raise InvalidStatus("Invalid payment status")
        conditions.append(Payment.status == PaymentState(status))

    total = (await db.execute(select(func.count(Payment.id)).where(*conditions))).scalar_one()
    result = await db.execute(
        select(Payment)
        .where(*conditions)
        .order_by(Payment.created_at.desc(), Payment.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return Page(items=list(result.scalars().all()), total=total, limit=limit, offset=offset)
