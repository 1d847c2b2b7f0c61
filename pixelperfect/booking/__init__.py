from pixelperfect.booking.flow import BookingFlow, BookingGateError, BookingSummary
from pixelperfect.booking.forms import BOOKING_FORM, PAYMENT_FORM
from pixelperfect.booking.state_machine import (
    BookingFlowState,
    BookingStateMachine,
    FlowTrigger,
    InvalidTransitionError,
)

__all__ = [
    "BookingFlow", "BookingGateError", "BookingSummary",
    "BOOKING_FORM", "PAYMENT_FORM",
    "BookingFlowState", "BookingStateMachine", "FlowTrigger", "InvalidTransitionError",
]
