from pixelperfect.schemas.booking_schema import (
    Booking,
    BookingCreate,
    BookingStatus,
    PaymentDetails,
    PaymentStatus,
    TimeSlot,
)
from pixelperfect.schemas.catalog_schema import Service
from pixelperfect.schemas.dashboard_schema import DashboardStats, MonthlyRevenue, ServiceCount
from pixelperfect.schemas.user_schema import Role, User

__all__ = [
    "Booking", "BookingCreate", "BookingStatus", "PaymentDetails", "PaymentStatus",
    "TimeSlot", "Service", "DashboardStats", "MonthlyRevenue", "ServiceCount",
    "Role", "User",
]
