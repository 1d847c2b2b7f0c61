from pixelperfect.admin.management import (
    BookingFilter,
    client_bookings,
    compute_dashboard_stats,
    filter_bookings,
    format_dashboard,
    update_status,
)

__all__ = [
    "BookingFilter", "client_bookings", "compute_dashboard_stats",
    "filter_bookings", "format_dashboard", "update_status",
]
