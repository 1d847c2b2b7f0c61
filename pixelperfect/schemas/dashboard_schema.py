"""Admin dashboard aggregates."""

from pydantic import BaseModel, Field

from pixelperfect.schemas.booking_schema import Booking


class MonthlyRevenue(BaseModel):
    month: str
    revenue: int


class ServiceCount(BaseModel):
    service: str
    count: int


class DashboardStats(BaseModel):
    """Figures shown on the admin dashboard, computed from the booking store."""

    total_bookings: int = 0
    total_revenue: int = 0
    total_clients: int = 0
    pending_bookings: int = 0
    recent_bookings: list[Booking] = Field(default_factory=list)
    revenue_by_month: list[MonthlyRevenue] = Field(default_factory=list)
    bookings_by_service: list[ServiceCount] = Field(default_factory=list)
