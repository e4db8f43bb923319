"""Admin dashboard notifications."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from reelbook.models.base import Base, TimestampMixin


class Notification(TimestampMixin, Base):
    """An item in the studio's notification feed.

    ``type`` is free-form; the generated alerts use ``upcoming_event``,
    ``pending_payment`` and ``maintenance_due``.
    """

    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(primary_key=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    recipient_email: Mapped[str | None] = mapped_column(String(254))
    related_booking_id: Mapped[int | None] = mapped_column(ForeignKey("bookings.id"))
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    __table_args__ = (Index("ix_notifications_type_title", "type", "title"),)

    def __repr__(self) -> str:
        return f"<Notification {self.type} {self.title!r}>"
