"""Notification dispatcher.

Fire-and-forget email for bookings, payments and contact messages. Nothing
here raises: a failed send is logged and reported as False, and callers
schedule these functions as background tasks after the primary write has
been committed. No retries.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date

import aiosmtplib

from reelbook.core.config import settings
from reelbook.services.email import send_email

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutgoingEmail:
    to: str
    subject: str
    body: str
    reply_to: str | None = None


@dataclass(frozen=True)
class DispatchResult:
    customer_sent: bool
    admin_sent: bool

    @property
    def success(self) -> bool:
        return self.customer_sent and self.admin_sent


@dataclass(frozen=True)
class BookingDetails:
    booking_id: int
    customer_name: str
    customer_email: str
    customer_phone: str | None
    service_name: str
    event_date: date
    event_time: str
    event_location: str
    total_amount: int


@dataclass(frozen=True)
class PaymentDetails:
    booking: BookingDetails
    amount: int
    payment_id: str
    order_id: str


async def dispatch(message: OutgoingEmail) -> bool:
    """Send one email. Returns False instead of raising."""
    try:
        await send_email(message.to, message.subject, message.body, reply_to=message.reply_to)
    except (aiosmtplib.SMTPException, OSError) as exc:
        logger.error("Failed to send %r to %s: %s", message.subject, message.to, exc)
        return False
    except Exception:
        # Bad header values from user input land here as ValueError
        logger.exception("Could not build or send %r to %s", message.subject, message.to)
        return False
    return True


async def _dispatch_pair(customer: OutgoingEmail, admin: OutgoingEmail) -> DispatchResult:
    # The two messages are independent; send them concurrently
    customer_sent, admin_sent = await asyncio.gather(dispatch(customer), dispatch(admin))
    return DispatchResult(customer_sent=customer_sent, admin_sent=admin_sent)


def _rupees(amount: int) -> str:
    return f"Rs. {amount:,}"


def _event_lines(details: BookingDetails) -> str:
    return (
        f"Booking ID: #{details.booking_id}\n"
        f"Service: {details.service_name}\n"
        f"Date: {details.event_date.isoformat()}\n"
        f"Time: {details.event_time}\n"
        f"Location: {details.event_location}\n"
    )


def booking_confirmation_emails(details: BookingDetails) -> tuple[OutgoingEmail, OutgoingEmail]:
    customer = OutgoingEmail(
        to=details.customer_email,
        subject=f"Booking received - {details.service_name}",
        body=(
            f"Hi {details.customer_name},\n\n"
            f"Thank you for booking with {settings.app_name}. Your booking details:\n\n"
            f"{_event_lines(details)}"
            f"Amount: {_rupees(details.total_amount)}\n\n"
            f"We'll contact you 24-48 hours before your event to confirm all details.\n"
            f"Questions? Call us on {settings.studio_phone}.\n\n"
            f"{settings.app_name}"
        ),
    )
    admin = OutgoingEmail(
        to=settings.admin_email,
        subject=f"New booking: {details.service_name} - {details.customer_name}",
        body=(
            f"New booking received.\n\n"
            f"Customer: {details.customer_name}\n"
            f"Email: {details.customer_email}\n"
            f"Phone: {details.customer_phone or '-'}\n\n"
            f"{_event_lines(details)}"
            f"Amount: {_rupees(details.total_amount)}\n"
        ),
    )
    return customer, admin


def payment_notification_emails(details: PaymentDetails) -> tuple[OutgoingEmail, OutgoingEmail]:
    booking = details.booking
    customer = OutgoingEmail(
        to=booking.customer_email,
        subject=f"Payment received - {booking.service_name}",
        body=(
            f"Hi {booking.customer_name},\n\n"
            f"We have received your payment of {_rupees(details.amount)} and your booking is confirmed.\n\n"
            f"{_event_lines(booking)}"
            f"Payment ID: {details.payment_id}\n\n"
            f"{settings.app_name}"
        ),
    )
    admin = OutgoingEmail(
        to=settings.admin_email,
        subject=f"Payment received: {_rupees(details.amount)} from {booking.customer_name}",
        body=(
            f"Payment completed.\n\n"
            f"Amount: {_rupees(details.amount)}\n"
            f"Payment ID: {details.payment_id}\n"
            f"Order ID: {details.order_id}\n\n"
            f"Customer: {booking.customer_name}\n"
            f"Email: {booking.customer_email}\n"
            f"Phone: {booking.customer_phone or '-'}\n\n"
            f"{_event_lines(booking)}"
        ),
    )
    return customer, admin


async def send_booking_confirmation(details: BookingDetails) -> DispatchResult:
    result = await _dispatch_pair(*booking_confirmation_emails(details))
    if result.success:
        logger.info("Booking confirmation sent for booking %s", details.booking_id)
    else:
        logger.warning("Booking confirmation incomplete for booking %s: %s", details.booking_id, result)
    return result


async def send_payment_notification(details: PaymentDetails) -> DispatchResult:
    result = await _dispatch_pair(*payment_notification_emails(details))
    if result.success:
        logger.info("Payment notification sent for order %s", details.order_id)
    else:
        logger.warning("Payment notification incomplete for order %s: %s", details.order_id, result)
    return result


async def send_contact_notification(name: str, email: str, subject: str, message: str) -> bool:
    """Forward a contact-form message to the studio inbox."""
    return await dispatch(
        OutgoingEmail(
            to=settings.admin_email,
            subject=f"New contact form: {subject}",
            body=f"From: {name} <{email}>\nSubject: {subject}\n\n{message}\n",
            reply_to=email,
        )
    )


async def send_event_reminder(details: BookingDetails) -> bool:
    return await dispatch(
        OutgoingEmail(
            to=details.customer_email,
            subject=f"Reminder: your {details.service_name} is coming up",
            body=(
                f"Hi {details.customer_name},\n\n"
                f"A friendly reminder that your {details.service_name} is scheduled soon:\n\n"
                f"{_event_lines(details)}\n"
                f"We're looking forward to capturing your special moments.\n"
                f"Questions? Call us on {settings.studio_phone}.\n\n"
                f"{settings.app_name}"
            ),
        )
    )


async def send_admin_notice(to: str, title: str, message: str) -> bool:
    """Email a notification composed in the admin dashboard."""
    return await dispatch(
        OutgoingEmail(to=to, subject=title, body=f"{message}\n\n--\nThis message was sent by {settings.app_name}.\n")
    )
