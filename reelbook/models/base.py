"""Declarative base and shared column mixins."""

import enum
from datetime import UTC, datetime

from sqlalchemy import DateTime, Enum
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(UTC)


def str_enum(enum_cls: type[enum.Enum], name: str) -> Enum:
    """Store a StrEnum as its plain value in a VARCHAR column."""
    return Enum(enum_cls, name=name, native_enum=False, values_callable=lambda e: [x.value for x in e])


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    # Python-side defaults so the values are on the instance straight after flush
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
