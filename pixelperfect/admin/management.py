"""
Back-office queries over the booking store.

Booking search and filters for the admin table and the client's own
"My Bookings" list, the admin status actions, and the dashboard figures.
All of it reads the same store the booking flow writes to.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from pixelperfect.auth.session import require_role
from pixelperfect.schemas.booking_schema import Booking, BookingStatus, PaymentStatus
from pixelperfect.schemas.dashboard_schema import DashboardStats, MonthlyRevenue, ServiceCount
from pixelperfect.schemas.user_schema import Role, User
from pixelperfect.tools.booking import BookingStore
from pixelperfect.tools.services import ServiceCatalog

logger = logging.getLogger(__name__)

ALL = "all"

# Admin table actions on pending bookings.
ADMIN_STATUS_ACTIONS = frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED})


@dataclass
class BookingFilter:
    """Criteria from the booking table's search box and drop-downs."""

    search: str = ""
    status: str = ALL
    service_id: str = ALL
    date: str = ""


def _matches(booking: Booking, catalog: ServiceCatalog, criteria: BookingFilter) -> bool:
    if criteria.search:
        needle = criteria.search.strip().lower()
        service = catalog.get(booking.service_id)
        service_name = service.name.lower() if service else ""
        if needle not in service_name and needle not in booking.client_id.lower():
            return False
    if criteria.status != ALL and booking.status.value != criteria.status:
        return False
    if criteria.service_id != ALL and booking.service_id != criteria.service_id:
        return False
    if criteria.date and booking.date != criteria.date:
        return False
    return True


def filter_bookings(
    bookings: Iterable[Booking], catalog: ServiceCatalog, criteria: BookingFilter
) -> list[Booking]:
    """Bookings matching every set criterion, in store order."""
    return [b for b in bookings if _matches(b, catalog, criteria)]


def client_bookings(
    store: BookingStore,
    catalog: ServiceCatalog,
    client_id: str,
    status: str = ALL,
    search: str = "",
) -> list[Booking]:
    """A client's own bookings, filtered like the "My Bookings" page."""
    return filter_bookings(
        store.for_client(client_id), catalog, BookingFilter(search=search, status=status)
    )


def update_status(
    store: BookingStore,
    admin: Optional[User],
    booking_id: str,
    new_status: Union[BookingStatus, str],
) -> Optional[Booking]:
    """
    Admin confirm/cancel action on a booking.

    Raises:
        PermissionError: If ``admin`` is not an admin user.
        ValueError: If the status is not an admin action or the lifecycle
            does not allow it.
    """
    require_role(admin, Role.ADMIN)
    status = BookingStatus(new_status)
    if status not in ADMIN_STATUS_ACTIONS:
        raise ValueError(f"Admins can only confirm or cancel, got '{status.value}'")
    booking = store.update(booking_id, {"status": status})
    if booking is not None:
        logger.info("Admin set booking %s to %s", booking_id, status.value)
    return booking


def compute_dashboard_stats(
    store: BookingStore, catalog: ServiceCatalog, recent_limit: int = 5
) -> DashboardStats:
    """Calculate the dashboard figures from the current store contents."""
    bookings = store.all()
    paid = [b for b in bookings if b.payment_status == PaymentStatus.PAID]

    revenue: dict[str, int] = {}
    for booking in paid:
        month = booking.date[:7]
        revenue[month] = revenue.get(month, 0) + booking.total_amount

    by_category: Counter[str] = Counter()
    for booking in bookings:
        service = catalog.get(booking.service_id)
        by_category[service.category if service else "Other"] += 1
    ordered_categories = [c for c in catalog.categories() if by_category[c]]
    ordered_categories += sorted(c for c in by_category if c not in ordered_categories)

    return DashboardStats(
        total_bookings=len(bookings),
        total_revenue=sum(b.total_amount for b in paid),
        total_clients=len({b.client_id for b in bookings}),
        pending_bookings=sum(1 for b in bookings if b.status == BookingStatus.PENDING),
        recent_bookings=sorted(bookings, key=lambda b: b.created_at, reverse=True)[:recent_limit],
        revenue_by_month=[
            MonthlyRevenue(month=month, revenue=amount) for month, amount in sorted(revenue.items())
        ],
        bookings_by_service=[
            ServiceCount(service=category, count=by_category[category])
            for category in ordered_categories
        ],
    )


def format_dashboard(stats: DashboardStats) -> str:
    """Format dashboard figures into a plain-text report."""
    lines = [
        "=" * 60,
        "STUDIO DASHBOARD",
        "=" * 60,
        f"  Total bookings:    {stats.total_bookings}",
        f"  Total revenue:     ${stats.total_revenue:,}",
        f"  Total clients:     {stats.total_clients}",
        f"  Pending bookings:  {stats.pending_bookings}",
        "",
        "REVENUE BY MONTH",
    ]
    lines += [f"  {row.month}: ${row.revenue:,}" for row in stats.revenue_by_month] or ["  (none)"]
    lines += ["", "BOOKINGS BY SERVICE"]
    lines += [f"  {row.service}: {row.count}" for row in stats.bookings_by_service] or ["  (none)"]
    lines.append("=" * 60)
    return "\n".join(lines)
