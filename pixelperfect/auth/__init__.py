from pixelperfect.auth.session import (
    AuthError,
    AuthProvider,
    GateDecision,
    MockAuthProvider,
    Session,
    check_booking_gate,
    home_route_for,
    require_role,
)

__all__ = [
    "AuthError", "AuthProvider", "GateDecision", "MockAuthProvider", "Session",
    "check_booking_gate", "home_route_for", "require_role",
]
