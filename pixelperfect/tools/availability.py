"""
Slot availability for the fixed daily schedule.

Every service offers the same ordered list of time labels each day. A slot
is free unless a non-cancelled booking in the store holds the same service,
date, and time. Results are recomputed on every query.
"""

import asyncio
import logging
from datetime import date as date_type
from datetime import timedelta
from typing import Optional, Sequence

from pixelperfect.config import settings
from pixelperfect.schemas.booking_schema import TimeSlot
from pixelperfect.tools.booking import BookingStore

logger = logging.getLogger(__name__)


def compute_availability(
    store: BookingStore,
    service_id: str,
    date: str,
    schedule: Optional[Sequence[str]] = None,
) -> list[TimeSlot]:
    """
    Mark each scheduled time on ``date`` as free or taken for ``service_id``.

    Neither the service id nor the date is validated: an id that matches no
    booking simply yields every slot available.
    """
    labels = schedule if schedule is not None else settings.schedule.daily_slots
    slots = [
        TimeSlot(
            date=date,
            time=label,
            is_available=not store.occupied(service_id, date, label),
            service_id=service_id,
        )
        for label in labels
    ]
    logger.debug(
        "Availability for service %s on %s: %d/%d free",
        service_id, date, sum(s.is_available for s in slots), len(slots),
    )
    return slots


def available_times(slots: Sequence[TimeSlot]) -> list[str]:
    """Return the time labels of the free slots, in schedule order."""
    return [slot.time for slot in slots if slot.is_available]


def upcoming_dates(start: date_type, days: int) -> list[str]:
    """The ``days`` calendar dates after ``start`` as YYYY-MM-DD strings."""
    return [(start + timedelta(days=offset)).isoformat() for offset in range(1, days + 1)]


class AvailabilityCalculator:
    """Async availability provider consumed by the booking flow."""

    def __init__(
        self,
        store: BookingStore,
        schedule: Optional[Sequence[str]] = None,
        delay_sec: float = 0.0,
    ) -> None:
        self._store = store
        self.schedule = tuple(schedule) if schedule is not None else settings.schedule.daily_slots
        self.delay_sec = delay_sec
        self.last_result: list[TimeSlot] = []

    async def check(self, service_id: str, date: str) -> list[TimeSlot]:
        """Compute availability after the simulated lookup delay."""
        if self.delay_sec:
            await asyncio.sleep(self.delay_sec)
        self.last_result = compute_availability(self._store, service_id, date, self.schedule)
        return self.last_result
