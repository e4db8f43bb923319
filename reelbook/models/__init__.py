"""All models imported here so Base.metadata sees every table."""

from reelbook.models.base import Base
from reelbook.models.booking import Booking, BookingStatus, PaymentStatus
from reelbook.models.crm import Lead, LeadActivity, LeadPriority, LeadStatus
from reelbook.models.feedback import ContactMessage, Review
from reelbook.models.inventory import Equipment, EquipmentCondition, EquipmentMaintenance, EquipmentUsage
from reelbook.models.member import User, UserRole
from reelbook.models.notification import Notification
from reelbook.models.payment import Payment, PaymentState
from reelbook.models.service import Service

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Service",
    "Booking",
    "BookingStatus",
    "PaymentStatus",
    "Payment",
    "PaymentState",
    "Review",
    "ContactMessage",
    "Lead",
    "LeadActivity",
    "LeadPriority",
    "LeadStatus",
    "Equipment",
    "EquipmentCondition",
    "EquipmentMaintenance",
    "EquipmentUsage",
    "Notification",
]
