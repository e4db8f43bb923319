"""Sales leads and the follow-up activity logged against them."""

import enum
from datetime import date

from sqlalchemy import Date, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from reelbook.models.base import Base, TimestampMixin, str_enum


class LeadStatus(enum.StrEnum):
    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    PROPOSAL_SENT = "proposal_sent"
    NEGOTIATING = "negotiating"
    WON = "won"
    LOST = "lost"


class LeadPriority(enum.StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


CLOSED_LEAD_STATUSES = frozenset({LeadStatus.WON, LeadStatus.LOST})


class Lead(TimestampMixin, Base):
    """A prospective customer who has not booked yet."""

    __tablename__ = "leads"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    email: Mapped[str | None] = mapped_column(String(254))
    service_interest: Mapped[str | None] = mapped_column(String(100))
    event_date: Mapped[date | None] = mapped_column(Date)
    budget: Mapped[int | None] = mapped_column(Integer)  # rupees
    source: Mapped[str] = mapped_column(String(50), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)
    priority: Mapped[LeadPriority] = mapped_column(
        str_enum(LeadPriority, "lead_priority"), default=LeadPriority.MEDIUM, nullable=False
    )
    status: Mapped[LeadStatus] = mapped_column(
        str_enum(LeadStatus, "lead_status"), default=LeadStatus.NEW, nullable=False
    )
    follow_up_date: Mapped[date | None] = mapped_column(Date)

    __table_args__ = (Index("ix_leads_follow_up", "follow_up_date", "status"),)

    def __repr__(self) -> str:
        return f"<Lead {self.id} {self.name} {self.status}>"


class LeadActivity(TimestampMixin, Base):
    __tablename__ = "lead_activities"

    id: Mapped[int] = mapped_column(primary_key=True)
    lead_id: Mapped[int] = mapped_column(ForeignKey("leads.id"), nullable=False, index=True)
    activity_type: Mapped[str] = mapped_column(String(50), nullable=False)  # call, email, meeting...
    description: Mapped[str] = mapped_column(Text, nullable=False)
    next_action: Mapped[str | None] = mapped_column(String(200))
    next_action_date: Mapped[date | None] = mapped_column(Date)

    def __repr__(self) -> str:
        return f"<LeadActivity {self.activity_type} for lead {self.lead_id}>"
