"""Payment model.

One row per gateway order. A payment starts ``created`` when the Razorpay
order is opened and becomes ``completed`` once a signed callback verifies.
Test orders carry no booking.
"""

import enum
from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from reelbook.models.base import Base, TimestampMixin, str_enum

if TYPE_CHECKING:
    from reelbook.models.booking import Booking


class PaymentState(enum.StrEnum):
    CREATED = "created"
    COMPLETED = "completed"


class Payment(TimestampMixin, Base):
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    booking_id: Mapped[int | None] = mapped_column(ForeignKey("bookings.id"))
    amount: Mapped[int] = mapped_column(Integer, nullable=False)  # rupees
    currency: Mapped[str] = mapped_column(String(3), default="INR", nullable=False)
    status: Mapped[PaymentState] = mapped_column(
        str_enum(PaymentState, "payment_state"),
        default=PaymentState.CREATED,
        nullable=False,
    )
    payment_id: Mapped[str | None] = mapped_column(String(100), index=True)
    signature: Mapped[str | None] = mapped_column(String(200))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Customer details as submitted with the order
    customer_name: Mapped[str | None] = mapped_column(String(200))
    customer_email: Mapped[str | None] = mapped_column(String(254))
    customer_phone: Mapped[str | None] = mapped_column(String(20))
    gateway: Mapped[str] = mapped_column(String(20), default="razorpay", nullable=False)

    booking: Mapped["Booking | None"] = relationship(lazy="selectin")

    @property
    def booking_customer(self) -> str | None:
        return self.booking.customer_name if self.booking else None

    @property
    def event_date(self) -> date | None:
        return self.booking.event_date if self.booking else None

    def __repr__(self) -> str:
        return f"<Payment {self.order_id} {self.status}>"
