"""
Finite state machine for the booking flow.

Three steps: select service and slot, review and pay, confirmed. The only
way back is review -> edit; CONFIRMED accepts nothing.

Usage:
    sm = BookingStateMachine()
    sm.transition(FlowTrigger.DETAILS_SUBMITTED)
    assert sm.current_state == BookingFlowState.REVIEWING_AND_PAYING
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)

Guard = Callable[[], bool]


class BookingFlowState(str, Enum):
    SELECTING_SERVICE_AND_SLOT = "selecting_service_and_slot"
    REVIEWING_AND_PAYING = "reviewing_and_paying"
    CONFIRMED = "confirmed"


class FlowTrigger(str, Enum):
    DETAILS_SUBMITTED = "details_submitted"
    EDIT_REQUESTED = "edit_requested"
    PAYMENT_SUCCEEDED = "payment_succeeded"


@dataclass(frozen=True)
class Transition:
    from_state: BookingFlowState
    trigger: FlowTrigger
    to_state: BookingFlowState


@dataclass
class StateEntry:
    """One visited step and the trigger that led to it (None for the start)."""
    state: BookingFlowState
    entered_at: datetime
    trigger: Optional[FlowTrigger] = None


class InvalidTransitionError(Exception):
    """The trigger is not allowed from the current step, or a guard refused it."""


_S = BookingFlowState
_T = FlowTrigger

TRANSITIONS: dict[tuple[BookingFlowState, FlowTrigger], Transition] = {
    (t.from_state, t.trigger): t
    for t in (
        Transition(_S.SELECTING_SERVICE_AND_SLOT, _T.DETAILS_SUBMITTED, _S.REVIEWING_AND_PAYING),
        Transition(_S.REVIEWING_AND_PAYING, _T.EDIT_REQUESTED, _S.SELECTING_SERVICE_AND_SLOT),
        Transition(_S.REVIEWING_AND_PAYING, _T.PAYMENT_SUCCEEDED, _S.CONFIRMED),
    )
}


class BookingStateMachine:
    """
    Tracks the current booking step and every step visited.

    ``guards`` maps a trigger to a callable that must return True for the
    transition to happen, e.g. details must validate before review.
    """

    def __init__(self, guards: Optional[dict[FlowTrigger, Guard]] = None) -> None:
        self._guards = dict(guards or {})
        self._state = BookingFlowState.SELECTING_SERVICE_AND_SLOT
        self._history = [StateEntry(self._state, datetime.now(timezone.utc))]

    @property
    def current_state(self) -> BookingFlowState:
        return self._state

    def transition(self, trigger: FlowTrigger) -> BookingFlowState:
        """
        Move to the step ``trigger`` leads to and return it.

        Raises:
            InvalidTransitionError: If the trigger is not allowed from the
                current step or its guard refuses.
        """
        step = TRANSITIONS.get((self._state, trigger))
        if step is None:
            allowed = [t.value for t in self.get_valid_triggers()]
            raise InvalidTransitionError(
                f"'{trigger.value}' is not allowed in '{self._state.value}'. "
                f"Valid triggers: {allowed}"
            )
        guard = self._guards.get(trigger)
        if guard is not None and not guard():
            raise InvalidTransitionError(
                f"Guard refused '{trigger.value}' from '{self._state.value}'"
            )

        logger.debug("Booking flow %s -> %s on %s", self._state.value, step.to_state.value, trigger.value)
        self._state = step.to_state
        self._history.append(StateEntry(self._state, datetime.now(timezone.utc), trigger))
        return self._state

    def get_valid_triggers(self) -> list[FlowTrigger]:
        return [trigger for (state, trigger) in TRANSITIONS if state == self._state]

    def get_history(self) -> list[StateEntry]:
        return list(self._history)

    def get_state_trace(self) -> list[str]:
        return [entry.state.value for entry in self._history]

    def is_terminal(self) -> bool:
        return not self.get_valid_triggers()
