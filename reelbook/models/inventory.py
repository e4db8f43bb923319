"""Studio equipment, its maintenance history and per-shoot usage."""

import enum
from datetime import date

from sqlalchemy import Date, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from reelbook.models.base import Base, TimestampMixin, str_enum


class EquipmentCondition(enum.StrEnum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    NEEDS_REPAIR = "needs_repair"


class Equipment(TimestampMixin, Base):
    __tablename__ = "equipment"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)  # camera, lens, drone, lighting...
    brand: Mapped[str | None] = mapped_column(String(100))
    model: Mapped[str | None] = mapped_column(String(100))
    purchase_date: Mapped[date | None] = mapped_column(Date)
    purchase_price: Mapped[int | None] = mapped_column(Integer)  # rupees
    current_value: Mapped[int | None] = mapped_column(Integer)
    condition_status: Mapped[EquipmentCondition] = mapped_column(
        str_enum(EquipmentCondition, "equipment_condition"), default=EquipmentCondition.GOOD, nullable=False
    )
    location: Mapped[str | None] = mapped_column(String(200))
    notes: Mapped[str | None] = mapped_column(Text)

    def __repr__(self) -> str:
        return f"<Equipment {self.id} {self.name} ({self.category})>"


class EquipmentMaintenance(TimestampMixin, Base):
    __tablename__ = "equipment_maintenance"

    id: Mapped[int] = mapped_column(primary_key=True)
    equipment_id: Mapped[int] = mapped_column(ForeignKey("equipment.id"), nullable=False, index=True)
    maintenance_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    cost: Mapped[int | None] = mapped_column(Integer)
    performed_by: Mapped[str | None] = mapped_column(String(200))
    next_due_date: Mapped[date | None] = mapped_column(Date, index=True)


class EquipmentUsage(TimestampMixin, Base):
    __tablename__ = "equipment_usage"

    id: Mapped[int] = mapped_column(primary_key=True)
    equipment_id: Mapped[int] = mapped_column(ForeignKey("equipment.id"), nullable=False, index=True)
    booking_id: Mapped[int | None] = mapped_column(ForeignKey("bookings.id"))
    usage_date: Mapped[date] = mapped_column(Date, nullable=False)
    hours_used: Mapped[float | None] = mapped_column(Float)
    condition_after: Mapped[EquipmentCondition | None] = mapped_column(
        str_enum(EquipmentCondition, "usage_condition")
    )
