"""
In-memory booking store.

In production, this would sit on top of a database table with a unique
constraint on (service_id, date, time) for non-cancelled rows. Here it is
an explicitly owned object: construct one per session and pass it to the
availability calculator and the booking flow.
"""

import logging
from typing import Any, Optional

from pixelperfect.schemas.booking_schema import (
    Booking,
    BookingCreate,
    BookingStatus,
    PaymentDetails,
    PaymentStatus,
)
from pixelperfect.tools.payment import MockPaymentGateway, PaymentGateway
from pixelperfect.tools.services import ServiceCatalog
from pixelperfect.utils import new_reference

logger = logging.getLogger(__name__)

MAX_ID_ATTEMPTS = 10

IMMUTABLE_FIELDS = frozenset({"id", "created_at", "client_id", "service_id", "total_amount"})
MUTABLE_FIELDS = frozenset({"status", "payment_status", "payment_id", "notes", "date", "time"})

# Forward-only lifecycles; staying in the same state is always allowed.
STATUS_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset(
        {BookingStatus.CONFIRMED, BookingStatus.COMPLETED, BookingStatus.CANCELLED}
    ),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

PAYMENT_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.PAID}),
    PaymentStatus.PAID: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.REFUNDED: frozenset(),
}


class BookingNotFoundError(KeyError):
    """Raised when an operation requires an existing booking."""


class UnknownServiceError(ValueError):
    """Raised when a booking references a service missing from the catalog."""


class SlotUnavailableError(Exception):
    """Raised when a non-cancelled booking already holds the requested slot."""


class InvalidStatusTransitionError(ValueError):
    """Raised when a patch moves a lifecycle backwards or edits a fixed field."""


def _check_lifecycle(current: Booking, status: BookingStatus, payment: PaymentStatus) -> None:
    if status != current.status and status not in STATUS_TRANSITIONS[current.status]:
        raise InvalidStatusTransitionError(
            f"Booking {current.id} cannot move from '{current.status.value}' "
            f"to '{status.value}'"
        )
    if payment != current.payment_status and payment not in PAYMENT_TRANSITIONS[current.payment_status]:
        raise InvalidStatusTransitionError(
            f"Booking {current.id} payment cannot move from "
            f"'{current.payment_status.value}' to '{payment.value}'"
        )


class BookingStore:
    """
    Shared in-memory collection of bookings for one session.

    Bookings are never deleted; cancellation is a status transition. With
    ``strict_slot_check`` enabled, at most one non-cancelled booking can hold
    a given (service_id, date, time).
    """

    def __init__(
        self,
        catalog: Optional[ServiceCatalog] = None,
        payment_gateway: Optional[PaymentGateway] = None,
        strict_slot_check: bool = True,
    ) -> None:
        self._bookings: dict[str, Booking] = {}
        self._charging: set[str] = set()
        self._catalog = catalog
        self._payment_gateway = payment_gateway or MockPaymentGateway()
        self.strict_slot_check = strict_slot_check

    def __len__(self) -> int:
        return len(self._bookings)

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def get(self, booking_id: str) -> Optional[Booking]:
        """Retrieve a booking by id."""
        return self._bookings.get(booking_id)

    def all(self) -> list[Booking]:
        """All bookings in creation order."""
        return list(self._bookings.values())

    def for_client(self, client_id: str) -> list[Booking]:
        return [b for b in self._bookings.values() if b.client_id == client_id]

    def occupied(
        self, service_id: str, date: str, time: str, exclude_id: Optional[str] = None
    ) -> bool:
        """True if a non-cancelled booking holds the slot."""
        return any(
            b.service_id == service_id
            and b.date == date
            and b.time == time
            and b.status != BookingStatus.CANCELLED
            and b.id != exclude_id
            for b in self._bookings.values()
        )

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #

    def create(self, data: BookingCreate) -> Booking:
        """Store a new booking with a fresh id and creation timestamp."""
        if self._catalog is not None and data.service_id not in self._catalog:
            raise UnknownServiceError(f"Unknown service id: {data.service_id}")
        if self.strict_slot_check and self.occupied(data.service_id, data.date, data.time):
            raise SlotUnavailableError(
                f"Service {data.service_id} is already booked on {data.date} at {data.time}"
            )

        booking = Booking(id=self._new_id(), **data.model_dump())
        self._bookings[booking.id] = booking
        logger.info(
            "Booking created: %s for client %s, service %s on %s at %s",
            booking.id, booking.client_id, booking.service_id, booking.date, booking.time,
        )
        return booking

    def update(self, booking_id: str, patch: dict[str, Any]) -> Optional[Booking]:
        """
        Merge ``patch`` into the booking.

        Returns the updated booking, or None (and changes nothing) when the id
        is unknown. The stored record is replaced only after every check
        passes.

        Raises:
            ValueError: If the patch names a field bookings do not have.
            InvalidStatusTransitionError: If a lifecycle moves backwards or a
                fixed field is changed.
            SlotUnavailableError: If a date/time change lands on a held slot.
        """
        current = self._bookings.get(booking_id)
        if current is None:
            logger.warning("Update ignored, booking %s not found", booking_id)
            return None
        if not patch:
            return current

        unknown = set(patch) - MUTABLE_FIELDS - IMMUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown booking fields: {sorted(unknown)}")

        updated = Booking.model_validate({**current.model_dump(), **patch})

        changed_fixed = [
            name for name in IMMUTABLE_FIELDS & set(patch)
            if getattr(updated, name) != getattr(current, name)
        ]
        if changed_fixed:
            raise InvalidStatusTransitionError(
                f"Booking {booking_id} fields cannot be changed: {sorted(changed_fixed)}"
            )
        _check_lifecycle(current, updated.status, updated.payment_status)

        moved = (updated.date, updated.time) != (current.date, current.time)
        if (
            moved
            and self.strict_slot_check
            and updated.status != BookingStatus.CANCELLED
            and self.occupied(updated.service_id, updated.date, updated.time, exclude_id=booking_id)
        ):
            raise SlotUnavailableError(
                f"Service {updated.service_id} is already booked on "
                f"{updated.date} at {updated.time}"
            )

        self._bookings[booking_id] = updated
        logger.debug("Booking %s updated with %s", booking_id, sorted(patch))
        return updated

    def cancel(self, booking_id: str) -> Optional[Booking]:
        """Cancel a booking. The record stays in the store."""
        booking = self.update(booking_id, {"status": BookingStatus.CANCELLED})
        if booking is not None:
            logger.info("Booking cancelled: %s", booking_id)
        return booking

    def complete(self, booking_id: str) -> Optional[Booking]:
        """Mark a session as shot and delivered."""
        return self.update(booking_id, {"status": BookingStatus.COMPLETED})

    def reschedule(self, booking_id: str, new_date: str, new_time: str) -> Optional[Booking]:
        """Move a booking to a new date/time."""
        booking = self.update(booking_id, {"date": new_date, "time": new_time})
        if booking is not None:
            logger.info("Booking rescheduled: %s to %s %s", booking_id, new_date, new_time)
        return booking

    def refund(self, booking_id: str) -> Optional[Booking]:
        """Refund a paid booking and release its slot."""
        booking = self.update(
            booking_id,
            {"payment_status": PaymentStatus.REFUNDED, "status": BookingStatus.CANCELLED},
        )
        if booking is not None:
            logger.info("Booking refunded: %s", booking_id)
        return booking

    async def confirm_payment(self, booking_id: str, payment_details: PaymentDetails) -> Booking:
        """
        Charge the booking through the payment gateway and confirm it.

        Raises:
            BookingNotFoundError: If no booking has this id.
            InvalidStatusTransitionError: If the booking cannot become
                confirmed and paid (checked before charging),
                or a charge for it is already in progress.
            PaymentError: If the gateway declines the charge.
        """
        booking = self._bookings.get(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        if booking_id in self._charging:
            raise InvalidStatusTransitionError(f"Booking {booking_id} payment is already in progress")
        if booking.payment_status != PaymentStatus.PENDING:
            raise InvalidStatusTransitionError(
                f"Booking {booking_id} payment is already '{booking.payment_status.value}'"
            )
        _check_lifecycle(booking, BookingStatus.CONFIRMED, PaymentStatus.PAID)

        self._charging.add(booking_id)
        try:
            payment_id = await self._payment_gateway.charge(
                booking.id, booking.total_amount, payment_details
            )
        finally:
            self._charging.discard(booking_id)
        confirmed = self.update(
            booking_id,
            {
                "payment_status": PaymentStatus.PAID,
                "payment_id": payment_id,
                "status": BookingStatus.CONFIRMED,
            },
        )
        logger.info("Payment confirmed for booking %s (%s)", booking_id, payment_id)
        return confirmed  # type: ignore[return-value]

    def _new_id(self) -> str:
        for _ in range(MAX_ID_ATTEMPTS):
            candidate = new_reference("BK")
            if candidate not in self._bookings:
                return candidate
        raise RuntimeError("Could not generate a unique booking id")
