"""
Offline console demo: walks through the studio booking core without a UI.

Uses the real catalog, booking store, availability calculator, session,
and booking flow with the mocked auth and payment services. No network
calls. Designed for live demo walkthroughs.

Usage:
    python console_demo.py
    python console_demo.py --scenario invalid-email
    python console_demo.py --scenario unverified --fast
"""

import argparse
import asyncio

from pixelperfect.admin.management import compute_dashboard_stats, format_dashboard
from pixelperfect.auth.session import MockAuthProvider, Session, home_route_for
from pixelperfect.booking.flow import BookingFlow, BookingGateError
from pixelperfect.config import settings
from pixelperfect.logging_context import bound_session
from pixelperfect.tools.availability import AvailabilityCalculator, available_times
from pixelperfect.tools.booking import BookingStore
from pixelperfect.tools.payment import MockPaymentGateway
from pixelperfect.tools.services import ServiceCatalog
from pixelperfect.tools.session_storage import InMemoryStorage, JsonFileStorage

BLUE = "\033[94m"
GREEN = "\033[92m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

DEMO_DATE = "2024-02-15"
DEMO_CARD = {
    "card_number": "4111111111111111",
    "expiry_date": "12/29",
    "cvv": "123",
    "cardholder_name": "Jane Doe",
}


class ConsoleSession:
    """Wires one studio session together and narrates it in the terminal."""

    SCENARIOS = ("booking", "invalid-email", "unverified", "cancel")

    def __init__(self, fast: bool = False) -> None:
        sim = settings.simulation
        self.catalog = ServiceCatalog()
        self.gateway = MockPaymentGateway(0.0 if fast else sim.payment_delay_sec)
        self.store = BookingStore(
            self.catalog, self.gateway, strict_slot_check=settings.booking.strict_slot_check
        )
        self.availability = AvailabilityCalculator(
            self.store, delay_sec=0.0 if fast else sim.availability_delay_sec
        )
        storage = (
            JsonFileStorage(settings.storage.session_file)
            if settings.storage.session_file
            else InMemoryStorage()
        )
        self.session = Session(
            storage, MockAuthProvider(delay_sec=0.0 if fast else sim.login_delay_sec)
        )

    def say(self, text: str) -> None:
        print(f"{GREEN}{text}{RESET}")

    def user_does(self, text: str) -> None:
        print(f"\n{BLUE}[Client] {RESET}{text}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def show_errors(self, errors: dict[str, str]) -> None:
        for field_name, message in errors.items():
            print(f"{RED}  ! {field_name}: {message}{RESET}")

    async def run_scenario(self, scenario: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  STUDIO BOOKING CORE - Scenario: {scenario}{RESET}")
        print(f"{BOLD}  Studio: {settings.studio.name}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

        handler = {
            "booking": self._scenario_booking,
            "invalid-email": self._scenario_invalid_email,
            "unverified": self._scenario_unverified,
            "cancel": self._scenario_cancel,
        }[scenario]
        with bound_session(f"demo-{scenario}"):
            await handler()

        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Scenario '{scenario}' complete.{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    # ------------------------------------------------------------------ #
    # Steps shared by scenarios
    # ------------------------------------------------------------------ #

    async def _sign_in(self) -> None:
        self.user_does("Signs in as jane@example.com")
        user = await self.session.login("jane@example.com", "hunter2")
        self.system_log(f"Signed in as {user.name} ({user.role.value}) -> {home_route_for(user.role)}")

    async def _open_flow_with_slot(self, time: str = "11:00") -> BookingFlow:
        flow = BookingFlow(self.session.current_user, self.catalog, self.store, self.availability)
        self.user_does("Chooses Portrait Session")
        await flow.select_service("2")
        window = flow.available_dates()
        self.system_log(f"Date picker offers {window[0]} to {window[-1]} ({len(window)} days)")
        self.user_does(f"Chooses {DEMO_DATE}")
        times = await flow.select_date(DEMO_DATE)
        self.say(f"Free times: {', '.join(times) or 'none'}")
        self.user_does(f"Picks {time}")
        flow.select_time(time)
        return flow

    async def _book(self, time: str = "11:00") -> BookingFlow:
        flow = await self._open_flow_with_slot(time)
        flow.set_client_details(name="Jane Doe", phone="(555) 123-4567")
        errors = flow.submit_details()
        self.show_errors(errors)
        self.system_log(f"State: {flow.state.value}")

        summary = flow.summary()
        self.say(
            f"{summary.service_name} on {summary.date} at {summary.time}, "
            f"{summary.duration_minutes} minutes, total ${summary.total_amount}"
        )
        self.user_does("Pays with card ending 1111")
        errors = await flow.submit_payment(**DEMO_CARD)
        self.show_errors(errors)
        self.system_log(f"State: {flow.state.value}")
        if flow.booking is not None:
            booking = flow.booking
            self.say(
                f"Booking {booking.id} is {booking.status.value}, payment "
                f"{booking.payment_status.value} ({booking.payment_id})"
            )
        self.system_log(f"Trace: {' -> '.join(flow.state_machine.get_state_trace())}")
        return flow

    # ------------------------------------------------------------------ #
    # Scenarios
    # ------------------------------------------------------------------ #

    async def _scenario_booking(self) -> None:
        await self._sign_in()
        await self._book()
        print()
        print(format_dashboard(compute_dashboard_stats(self.store, self.catalog)))

    async def _scenario_invalid_email(self) -> None:
        await self._sign_in()
        flow = await self._open_flow_with_slot()
        self.user_does("Types 'not-an-email' as e-mail and submits")
        flow.set_client_details(email="not-an-email", phone="555 123 4567")
        self.show_errors(flow.submit_details())
        self.system_log(f"State: {flow.state.value}")

    async def _scenario_unverified(self) -> None:
        self.user_does("Registers as Sam Lee")
        await self.session.register("Sam Lee", "sam@example.com", "pw")
        try:
            BookingFlow(self.session.current_user, self.catalog, self.store, self.availability)
        except BookingGateError as exc:
            self.say(f"Booking blocked ({exc.decision.value}), redirect to {exc.redirect_route}")
        self.user_does("Clicks the verification link")
        await self.session.verify_email("token")
        BookingFlow(self.session.current_user, self.catalog, self.store, self.availability)
        self.say("Booking flow opened")

    async def _scenario_cancel(self) -> None:
        await self._sign_in()
        flow = await self._book()
        if flow.booking is None:
            return
        self.user_does(f"Cancels booking {flow.booking.id}")
        self.store.cancel(flow.booking.id)
        slots = await self.availability.check("2", DEMO_DATE)
        self.say(f"Free times again: {', '.join(available_times(slots))}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline studio booking demo")
    parser.add_argument(
        "--scenario",
        choices=ConsoleSession.SCENARIOS,
        default="booking",
        help="Pre-scripted scenario to play",
    )
    parser.add_argument(
        "--fast", action="store_true", help="Skip the simulated network delays"
    )
    args = parser.parse_args()

    session = ConsoleSession(fast=args.fast)
    asyncio.run(session.run_scenario(args.scenario))


if __name__ == "__main__":
    main()
