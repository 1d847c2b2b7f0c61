"""Tests for import chains and package re-exports."""


class TestSchemaImports:
    def test_import_booking_schema(self):
        from pixelperfect.schemas import Booking, BookingStatus, PaymentStatus
        assert BookingStatus.PENDING == "pending"
        assert PaymentStatus.REFUNDED == "refunded"
        assert Booking is not None

    def test_import_user_schema(self):
        from pixelperfect.schemas import Role, User
        assert Role.ADMIN == "admin"
        assert User is not None


class TestPackageImports:
    def test_import_tools(self):
        from pixelperfect.tools import (
            AvailabilityCalculator, BookingStore, InMemoryStorage, ServiceCatalog,
        )
        store = BookingStore(ServiceCatalog())
        assert AvailabilityCalculator(store).last_result == []
        assert InMemoryStorage().get("user") is None

    def test_import_booking(self):
        from pixelperfect.booking import BookingFlowState, BookingStateMachine
        assert BookingStateMachine().current_state == BookingFlowState.SELECTING_SERVICE_AND_SLOT

    def test_import_auth(self):
        from pixelperfect.auth import GateDecision, check_booking_gate
        assert check_booking_gate(None) == GateDecision.SIGN_IN_REQUIRED

    def test_import_admin(self):
        from pixelperfect.admin import compute_dashboard_stats
        assert callable(compute_dashboard_stats)

    def test_console_demo_scenarios(self):
        from console_demo import ConsoleSession
        assert "booking" in ConsoleSession.SCENARIOS
