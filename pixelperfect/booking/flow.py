"""
Booking flow: choose a slot, review and pay, confirmed.

Ties the state machine, the form validators, the availability calculator,
and the booking store together for one client. A flow instance can only be
opened for a signed-in user with a verified e-mail, and it ends at
CONFIRMED; a second booking needs a new flow.
"""

from dataclasses import dataclass
from datetime import date as date_type
from typing import Optional

from pixelperfect.auth.session import GateDecision, check_booking_gate
from pixelperfect.booking.forms import BOOKING_FORM, PAYMENT_FORM
from pixelperfect.booking.state_machine import (
    BookingFlowState,
    BookingStateMachine,
    FlowTrigger,
    InvalidTransitionError,
)
from pixelperfect.config import settings
from pixelperfect.logging_context import get_session_logger, set_session_id
from pixelperfect.schemas.booking_schema import Booking, BookingCreate, PaymentDetails
from pixelperfect.schemas.catalog_schema import Service
from pixelperfect.schemas.user_schema import User
from pixelperfect.tools.availability import AvailabilityCalculator, available_times, upcoming_dates
from pixelperfect.tools.booking import BookingStore, SlotUnavailableError
from pixelperfect.tools.payment import PaymentError
from pixelperfect.tools.services import ServiceCatalog

logger = get_session_logger(__name__)

SLOT_TAKEN_MESSAGE = "This time is no longer available"
PAYMENT_FAILED_MESSAGE = "Payment failed. Please try again."


class BookingGateError(Exception):
    """The user may not open a booking flow yet."""

    def __init__(self, decision: GateDecision) -> None:
        super().__init__(f"Booking unavailable: {decision.value}")
        self.decision = decision

    @property
    def redirect_route(self) -> Optional[str]:
        return self.decision.redirect_route


@dataclass(frozen=True)
class BookingSummary:
    """What the review step shows before payment."""

    service_name: str
    date: str
    time: str
    duration_minutes: int
    total_amount: int


class BookingFlow:
    """One client's pass through the booking steps."""

    def __init__(
        self,
        user: Optional[User],
        catalog: ServiceCatalog,
        store: BookingStore,
        availability: AvailabilityCalculator,
        session_id: Optional[str] = None,
    ) -> None:
        decision = check_booking_gate(user)
        if user is None or decision != GateDecision.ALLOWED:
            logger.info("Booking flow refused: %s", decision.value)
            raise BookingGateError(decision)

        self.user = user
        self._catalog = catalog
        self._store = store
        self._availability = availability
        self._sm = BookingStateMachine(guards={FlowTrigger.DETAILS_SUBMITTED: lambda: not self.errors})

        self.values: dict[str, str] = {name: "" for name in BOOKING_FORM.field_names}
        self.values["client_name"] = user.name
        self.values["client_email"] = user.email
        self.available_times: list[str] = []
        self.errors: dict[str, str] = {}
        self.booking: Optional[Booking] = None

        set_session_id(session_id or user.id)
        logger.info("Booking flow started for %s", user.email)

    @property
    def state(self) -> BookingFlowState:
        return self._sm.current_state

    @property
    def state_machine(self) -> BookingStateMachine:
        return self._sm

    @property
    def selected_service(self) -> Optional[Service]:
        return self._catalog.get(self.values["service_id"])

    # ------------------------------------------------------------------ #
    # Step 1: service, date, time, client details
    # ------------------------------------------------------------------ #

    async def select_service(self, service_id: str) -> list[str]:
        """Choose a service; refreshes free times when a date is already set."""
        self._require_state(BookingFlowState.SELECTING_SERVICE_AND_SLOT)
        if service_id != self.values["service_id"]:
            self.values["service_id"] = service_id
            self.values["time"] = ""
        return await self.refresh_availability()

    async def select_date(self, date: str) -> list[str]:
        """Choose a date; refreshes free times when a service is already set."""
        self._require_state(BookingFlowState.SELECTING_SERVICE_AND_SLOT)
        if date != self.values["date"]:
            self.values["date"] = date
            self.values["time"] = ""
        return await self.refresh_availability()

    def available_dates(self, today: Optional[date_type] = None) -> list[str]:
        """Dates offered by the date picker: the booking window starting tomorrow."""
        start = today or date_type.today()
        return upcoming_dates(start, settings.schedule.booking_window_days)

    def select_time(self, time: str) -> None:
        self._require_state(BookingFlowState.SELECTING_SERVICE_AND_SLOT)
        self.values["time"] = time

    def set_client_details(
        self,
        name: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        special_requests: Optional[str] = None,
    ) -> None:
        """Overwrite the given client fields; None leaves a field as it is."""
        self._require_state(BookingFlowState.SELECTING_SERVICE_AND_SLOT)
        for field_name, value in [
            ("client_name", name),
            ("client_email", email),
            ("client_phone", phone),
            ("special_requests", special_requests),
        ]:
            if value is not None:
                self.values[field_name] = value

    async def refresh_availability(self) -> list[str]:
        """
        Re-query free times for the selected service and date.

        A failing availability provider is logged and treated as no free
        times; it never aborts the flow.
        """
        service_id, date = self.values["service_id"], self.values["date"]
        if not service_id or not date:
            self.available_times = []
            return []
        try:
            slots = await self._availability.check(service_id, date)
        except Exception:
            logger.exception("Error checking availability for %s on %s", service_id, date)
            slots = []
        self.available_times = available_times(slots)
        return list(self.available_times)

    def submit_details(self) -> dict[str, str]:
        """
        Validate step 1 and move to review.

        Returns field errors; an empty dict means the flow moved on.
        """
        self._require_state(BookingFlowState.SELECTING_SERVICE_AND_SLOT)
        errors = BOOKING_FORM.validate(self.values)

        if "service_id" not in errors:
            service = self.selected_service
            if service is None:
                errors["service_id"] = "Please select a service"
            elif not service.is_active:
                errors["service_id"] = "This service is not currently offered"
        if "time" not in errors and self.values["time"].strip() not in self.available_times:
            errors["time"] = SLOT_TAKEN_MESSAGE

        self.errors = errors
        if errors:
            return dict(errors)

        self.values = BOOKING_FORM.normalize(self.values)
        self._sm.transition(FlowTrigger.DETAILS_SUBMITTED)
        return {}

    # ------------------------------------------------------------------ #
    # Step 2: review and pay
    # ------------------------------------------------------------------ #

    def summary(self) -> BookingSummary:
        service = self.selected_service
        if service is None:
            raise InvalidTransitionError("No service selected")
        return BookingSummary(
            service_name=service.name,
            date=self.values["date"],
            time=self.values["time"],
            duration_minutes=service.duration,
            total_amount=service.price,
        )

    def edit(self) -> BookingFlowState:
        """Go back to step 1 keeping everything entered so far."""
        self.errors = {}
        return self._sm.transition(FlowTrigger.EDIT_REQUESTED)

    async def submit_payment(
        self, card_number: str, expiry_date: str, cvv: str, cardholder_name: str
    ) -> dict[str, str]:
        """
        Validate the card, create the pending booking, and confirm its payment.

        Returns field errors; an empty dict means the booking is confirmed
        and paid. On a declined charge the pending booking is cancelled so
        its slot is released, and the flow stays on the review step.
        """
        self._require_state(BookingFlowState.REVIEWING_AND_PAYING)
        raw = {
            "card_number": card_number,
            "expiry_date": expiry_date,
            "cvv": cvv,
            "cardholder_name": cardholder_name,
        }
        errors = PAYMENT_FORM.validate(raw)
        self.errors = errors
        if errors:
            return dict(errors)

        details = PaymentDetails(**PAYMENT_FORM.normalize(raw))
        summary = self.summary()
        try:
            pending = self._store.create(
                BookingCreate(
                    client_id=self.user.id,
                    service_id=self.values["service_id"],
                    date=summary.date,
                    time=summary.time,
                    total_amount=summary.total_amount,
                    notes=self.values["special_requests"] or None,
                )
            )
        except SlotUnavailableError:
            logger.info("Slot %s %s taken before payment", summary.date, summary.time)
            self.values["time"] = ""
            await self.refresh_availability()
            self.errors = {"time": SLOT_TAKEN_MESSAGE}
            return dict(self.errors)

        try:
            confirmed = await self._store.confirm_payment(pending.id, details)
        except PaymentError as exc:
            logger.warning("Payment declined for booking %s: %s", pending.id, exc)
            self._store.cancel(pending.id)
            self.errors = {"payment": PAYMENT_FAILED_MESSAGE}
            return dict(self.errors)

        self.booking = confirmed
        self._sm.transition(FlowTrigger.PAYMENT_SUCCEEDED)
        logger.info("Booking %s confirmed and paid", confirmed.id)
        return {}

    def _require_state(self, state: BookingFlowState) -> None:
        if self._sm.current_state != state:
            raise InvalidTransitionError(
                f"Action requires '{state.value}', flow is in '{self._sm.current_state.value}'"
            )
