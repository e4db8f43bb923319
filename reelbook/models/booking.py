"""Booking model.

A booking reserves the studio's crew for one customer event at a specific
date/time/location. This is the core transactional entity in the system.
"""

import enum
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Date, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from reelbook.models.base import Base, TimestampMixin, str_enum

if TYPE_CHECKING:
    from reelbook.models.member import User
    from reelbook.models.service import Service


class BookingStatus(enum.StrEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(enum.StrEnum):
    PENDING = "pending"
    PAID = "paid"
    PARTIAL = "partial"
    REFUNDED = "refunded"


class Booking(TimestampMixin, Base):
    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"))
    service_id: Mapped[int] = mapped_column(ForeignKey("services.id"), nullable=False)

    # Customer
    customer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    customer_email: Mapped[str] = mapped_column(String(254), nullable=False)
    customer_phone: Mapped[str] = mapped_column(String(20), nullable=False)
    alt_phone: Mapped[str | None] = mapped_column(String(20))

    # Event
    event_date: Mapped[date] = mapped_column(Date, nullable=False)
    event_time: Mapped[str] = mapped_column(String(5), nullable=False)  # HH:MM
    event_location: Mapped[str] = mapped_column(Text, nullable=False)
    special_requirements: Mapped[str | None] = mapped_column(Text)

    # Money (whole rupees)
    total_amount: Mapped[int] = mapped_column(Integer, nullable=False)

    # Status
    booking_status: Mapped[BookingStatus] = mapped_column(
        str_enum(BookingStatus, "booking_status"), default=BookingStatus.PENDING, nullable=False
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        str_enum(PaymentStatus, "payment_status"), default=PaymentStatus.PENDING, nullable=False
    )

    # Gateway references
    razorpay_order_id: Mapped[str | None] = mapped_column(String(100))
    razorpay_payment_id: Mapped[str | None] = mapped_column(String(100))

    # Relationships
    service: Mapped["Service"] = relationship(lazy="selectin")
    user: Mapped["User | None"] = relationship(lazy="raise")

    __table_args__ = (
        # Slot conflict lookups are by exact date + time
        Index("ix_bookings_slot", "event_date", "event_time"),
        # My bookings
        Index("ix_bookings_user", "user_id", "event_date"),
    )

    @property
    def service_name(self) -> str | None:
        return self.service.name if self.service else None

    @property
    def service_price(self) -> int | None:
        return self.service.price if self.service else None

    @property
    def service_features(self) -> list[str]:
        return list(self.service.features or []) if self.service else []

    def __repr__(self) -> str:
        return f"<Booking {self.id} {self.event_date} {self.event_time} {self.booking_status}>"
