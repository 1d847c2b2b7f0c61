"""Booking, payment, and availability data models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"


class BookingCreate(BaseModel):
    """Caller-supplied booking data; the store assigns id and created_at."""

    client_id: str
    service_id: str
    date: str
    time: str
    total_amount: int = Field(ge=0)
    status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_id: Optional[str] = None
    notes: Optional[str] = None


class Booking(BookingCreate):
    """Full booking record held by the booking store."""

    id: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class TimeSlot(BaseModel):
    """Single slot of the fixed daily schedule, recomputed on every query."""

    date: str
    time: str
    is_available: bool
    service_id: Optional[str] = None


class PaymentDetails(BaseModel):
    """Card details captured by the payment form."""

    card_number: str
    expiry_date: str
    cvv: str
    cardholder_name: str

    def masked_card(self) -> str:
        return f"**** **** **** {self.card_number[-4:]}"
