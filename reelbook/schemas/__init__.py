"""Pydantic schemas for API serialisation.

Request field names follow the public booking form (``altPhone``,
``bookingId``, ``razorpay_order_id``...), so several models use aliases.
"""

import re
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from reelbook.models.crm import LeadPriority, LeadStatus
from reelbook.models.inventory import EquipmentCondition

# Indian mobile numbers, optionally prefixed with +91, 91 or 0
PHONE_RE = re.compile(r"^(\+?91|0)?[6789]\d{9}$")
# 24-hour clock, single-digit hour allowed
TIME_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")


def _check_phone(value: str | None) -> str | None:
    if value is not None and not PHONE_RE.match(value):
        raise ValueError("Valid Indian phone number required")
    return value


# --- Auth ---


class TokenResponse(BaseModel):
    success: bool = True
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class RegisterRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=2)
    email: EmailStr
    phone: str | None = None
    password: str = Field(min_length=6)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value: str | None) -> str | None:
        return _check_phone(value)


class RefreshRequest(BaseModel):
    refresh_token: str


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: str | None
    role: str
    created_at: datetime


# --- Services ---


class ServiceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    display_name: str | None
    description: str | None
    price: int
    duration_hours: int | None
    features: list[str] | None


# --- Booking ---


class BookingCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(min_length=2)
    email: EmailStr
    phone: str
    service: int | str
    price: float
    event_date: date = Field(alias="date")
    event_time: str = Field(alias="time")
    location: str = Field(min_length=5)
    alt_phone: str | None = Field(None, alias="altPhone")
    special_requirements: str | None = Field(None, alias="specialRequirements")

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value: str | None) -> str | None:
        return _check_phone(value)

    @field_validator("alt_phone")
    @classmethod
    def check_alt_phone(cls, value: str | None) -> str | None:
        # The form sends "" when the optional field is left blank
        return _check_phone(value or None)

    @field_validator("service")
    @classmethod
    def check_service(cls, value: int | str) -> str:
        value = str(value).strip()
        if not value:
            raise ValueError("Service selection required")
        return value

    @field_validator("event_time")
    @classmethod
    def normalise_time(cls, value: str) -> str:
        if not TIME_RE.match(value):
            raise ValueError("Valid time required")
        hours, minutes = value.split(":")
        return f"{int(hours):02d}:{minutes}"


class BookingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int | None
    service_id: int
    service_name: str | None
    service_price: int | None
    customer_name: str
    customer_email: str
    customer_phone: str
    alt_phone: str | None
    event_date: date
    event_time: str
    event_location: str
    special_requirements: str | None
    total_amount: int
    booking_status: str
    payment_status: str
    razorpay_payment_id: str | None
    created_at: datetime
    updated_at: datetime


class MyBookingOut(BookingOut):
    service_features: list[str]


class BookingResponse(BaseModel):
    success: bool = True
    message: str
    booking: BookingOut


class CancelRequest(BaseModel):
    reason: str | None = None


class StatusUpdate(BaseModel):
    booking_status: str | None = None
    payment_status: str | None = None
    notes: str | None = None


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    hasMore: bool


class BookingPage(BaseModel):
    success: bool = True
    bookings: list[BookingOut]
    pagination: Pagination


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# --- Payments ---


class CreateOrderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    amount: int | None = None  # rupees
    booking_id: int | str | None = Field(None, alias="bookingId")
    customer_name: str | None = Field(None, alias="customerName")
    customer_email: str | None = Field(None, alias="customerEmail")
    customer_phone: str | None = Field(None, alias="customerPhone")


class CreateOrderResponse(BaseModel):
    success: bool = True
    order: dict
    paymentId: int


class VerifyPaymentRequest(BaseModel):
    razorpay_order_id: str = Field(min_length=1)
    razorpay_payment_id: str = Field(min_length=1)
    razorpay_signature: str = Field(min_length=1)
    booking_id: int | str | None = None


class VerifyPaymentResponse(BaseModel):
    success: bool = True
    message: str
    payment_id: str


class PaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_id: str
    booking_id: int | None
    amount: int
    currency: str
    status: str
    payment_id: str | None
    customer_name: str | None
    customer_email: str | None
    customer_phone: str | None
    gateway: str
    booking_customer: str | None
    event_date: date | None
    created_at: datetime
    completed_at: datetime | None


class PaymentResponse(BaseModel):
    success: bool = True
    payment: PaymentOut


class PaymentPage(BaseModel):
    success: bool = True
    payments: list[PaymentOut]
    pagination: Pagination


# --- Reviews ---


class ReviewCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    customer_name: str = Field(min_length=2, alias="name")
    customer_email: EmailStr | None = Field(None, alias="email")
    rating: int = Field(ge=1, le=5)
    review_text: str | None = Field(None, alias="review", max_length=2000)
    booking_id: int | None = Field(None, alias="bookingId")


class ReviewOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    booking_id: int | None
    customer_name: str
    rating: int
    review_text: str | None
    is_approved: bool
    is_featured: bool
    created_at: datetime


class ReviewModerate(BaseModel):
    is_approved: bool | None = None
    is_featured: bool | None = None


# --- Contact ---


class ContactCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=2)
    email: EmailStr
    phone: str | None = None
    subject: str = Field(min_length=3)
    message: str = Field(min_length=10)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value: str | None) -> str | None:
        return _check_phone(value or None)


class ContactOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: str | None
    subject: str
    message: str
    is_read: bool
    replied: bool
    created_at: datetime


# --- CRM ---


class LeadCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=2)
    phone: str
    email: EmailStr | None = None
    service_interest: str | None = None
    event_date: date | None = None
    budget: int | None = Field(None, ge=0)
    source: str = Field(min_length=2, max_length=50)
    notes: str | None = None
    priority: LeadPriority = LeadPriority.MEDIUM

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value: str) -> str:
        return _check_phone(value)


class LeadUpdate(BaseModel):
    status: LeadStatus | None = None
    priority: LeadPriority | None = None
    notes: str | None = None
    follow_up_date: date | None = None


class LeadOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    phone: str
    email: str | None
    service_interest: str | None
    event_date: date | None
    budget: int | None
    source: str
    notes: str | None
    priority: str
    status: str
    follow_up_date: date | None
    created_at: datetime
    updated_at: datetime


class LeadActivityCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    activity_type: str = Field(min_length=2, max_length=50)
    description: str = Field(min_length=1)
    next_action: str | None = None
    next_action_date: date | None = None


class LeadActivityOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    lead_id: int
    activity_type: str
    description: str
    next_action: str | None
    next_action_date: date | None
    created_at: datetime


# --- Inventory ---


class EquipmentCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=2)
    category: str = Field(min_length=2, max_length=50)
    brand: str | None = None
    model: str | None = None
    purchase_date: date | None = None
    purchase_price: int | None = Field(None, ge=0)
    current_value: int | None = Field(None, ge=0)
    condition_status: EquipmentCondition = EquipmentCondition.GOOD
    location: str | None = None
    notes: str | None = None


class EquipmentUpdate(BaseModel):
    """Partial update; only the fields sent are changed."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(None, min_length=2)
    category: str | None = Field(None, min_length=2, max_length=50)
    brand: str | None = None
    model: str | None = None
    current_value: int | None = Field(None, ge=0)
    condition_status: EquipmentCondition | None = None
    location: str | None = None
    notes: str | None = None


class EquipmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    category: str
    brand: str | None
    model: str | None
    purchase_date: date | None
    purchase_price: int | None
    current_value: int | None
    condition_status: str
    location: str | None
    notes: str | None
    created_at: datetime
    updated_at: datetime


class MaintenanceCreate(BaseModel):
    maintenance_date: date
    description: str = Field(min_length=1)
    cost: int | None = Field(None, ge=0)
    performed_by: str | None = None
    next_due_date: date | None = None


class MaintenanceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    equipment_id: int
    maintenance_date: date
    description: str
    cost: int | None
    performed_by: str | None
    next_due_date: date | None
    created_at: datetime


class UsageCreate(BaseModel):
    booking_id: int | None = None
    usage_date: date
    hours_used: float | None = Field(None, ge=0)
    condition_after: EquipmentCondition | None = None


class UsageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    equipment_id: int
    booking_id: int | None
    usage_date: date
    hours_used: float | None
    condition_after: str | None
    created_at: datetime


# --- Admin notifications ---


class NotificationCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    type: str = Field("custom", min_length=1, max_length=50)
    title: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1)
    recipient_email: EmailStr | None = None
    related_booking_id: int | None = None
    send_email: bool = False

    @model_validator(mode="after")
    def check_recipient(self) -> "NotificationCreate":
        if self.send_email and not self.recipient_email:
            raise ValueError("recipient_email is required to send an email")
        return self


class NotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    title: str
    message: str
    recipient_email: str | None
    related_booking_id: int | None
    is_read: bool
    read_at: datetime | None
    created_at: datetime


class ReminderRequest(BaseModel):
    type: str = "event_reminder"
