"""
Session and authentication state.

Holds the signed-in user, runs the (mocked) auth actions through an
injectable provider, and answers the two preconditions the booking flow
needs: is someone signed in, and have they verified their e-mail.

Usage:
    session = Session(InMemoryStorage(), MockAuthProvider())
    session.restore()
    await session.login("jane@example.com", "secret")
    decision = check_booking_gate(session.current_user)
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from pydantic import ValidationError

from pixelperfect.config import settings
from pixelperfect.schemas.user_schema import Role, User
from pixelperfect.tools.session_storage import KeyValueStorage
from pixelperfect.utils import new_reference

logger = logging.getLogger(__name__)

USER_STORAGE_KEY = "user"


class AuthError(Exception):
    """Login or registration failed; the session is left as it was."""


# ---------------------------------------------------------------------- #
# Auth provider
# ---------------------------------------------------------------------- #


class AuthProvider(ABC):
    @abstractmethod
    async def login(self, email: str, password: str) -> User:
        raise NotImplementedError

    @abstractmethod
    async def register(self, name: str, email: str, password: str) -> User:
        raise NotImplementedError

    @abstractmethod
    async def reset_password(self, email: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def update_password(self, token: str, new_password: str) -> None:
        raise NotImplementedError


class MockAuthProvider(AuthProvider):
    """
    Accepts any non-empty credentials after a fixed delay.

    The studio's admin e-mail signs in as the admin; everyone else is a
    client. Registered users start unverified.
    """

    def __init__(self, admin_email: Optional[str] = None, delay_sec: float = 0.0) -> None:
        self.admin_email = (admin_email or settings.studio.admin_email).lower()
        self.delay_sec = delay_sec

    async def _wait(self) -> None:
        if self.delay_sec:
            await asyncio.sleep(self.delay_sec)

    async def login(self, email: str, password: str) -> User:
        await self._wait()
        if not email.strip() or not password:
            raise ValueError("email and password are required")
        is_admin = email.strip().lower() == self.admin_email
        return User(
            id="1",
            email=email.strip(),
            name="Admin User" if is_admin else "Client User",
            role=Role.ADMIN if is_admin else Role.CLIENT,
            is_email_verified=True,
        )

    async def register(self, name: str, email: str, password: str) -> User:
        await self._wait()
        if not name.strip() or not email.strip() or not password:
            raise ValueError("name, email and password are required")
        return User(
            id=new_reference("USR", 10),
            email=email.strip(),
            name=name.strip(),
            role=Role.CLIENT,
            is_email_verified=False,
        )

    async def reset_password(self, email: str) -> None:
        await self._wait()

    async def update_password(self, token: str, new_password: str) -> None:
        await self._wait()


# ---------------------------------------------------------------------- #
# Session
# ---------------------------------------------------------------------- #


class Session:
    """Current user for one client session, mirrored into key-value storage."""

    def __init__(self, storage: KeyValueStorage, provider: AuthProvider) -> None:
        self._storage = storage
        self._provider = provider
        self._user: Optional[User] = None

    @property
    def current_user(self) -> Optional[User]:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    @property
    def is_email_verified(self) -> bool:
        return self._user is not None and self._user.is_email_verified

    def restore(self) -> Optional[User]:
        """Load a previously stored user, if any."""
        record = self._storage.get(USER_STORAGE_KEY)
        if record is None:
            return self._user
        try:
            self._user = User.model_validate(record)
        except ValidationError:
            logger.warning("Stored user record is malformed, discarding it")
            self._storage.remove(USER_STORAGE_KEY)
            return None
        logger.debug("Session restored for %s", self._user.email)
        return self._user

    def _set_user(self, user: User) -> None:
        self._user = user
        self._storage.set(USER_STORAGE_KEY, user.model_dump(mode="json"))

    async def login(self, email: str, password: str) -> User:
        try:
            user = await self._provider.login(email, password)
        except Exception as exc:
            logger.info("Login failed for %s: %s", email, exc)
            raise AuthError("Invalid credentials") from exc
        self._set_user(user)
        logger.info("User signed in: %s (%s)", user.email, user.role.value)
        return user

    async def register(self, name: str, email: str, password: str) -> User:
        try:
            user = await self._provider.register(name, email, password)
        except Exception as exc:
            logger.info("Registration failed for %s: %s", email, exc)
            raise AuthError("Registration failed") from exc
        self._set_user(user)
        logger.info("User registered: %s", user.email)
        return user

    def logout(self) -> None:
        if self._user is not None:
            logger.info("User signed out: %s", self._user.email)
        self._user = None
        self._storage.remove(USER_STORAGE_KEY)

    async def verify_email(self, token: str) -> Optional[User]:
        """Mark the current user's e-mail as verified. No-op when signed out."""
        if self._user is None:
            return None
        self._set_user(self._user.model_copy(update={"is_email_verified": True}))
        logger.info("E-mail verified for %s", self._user.email)
        return self._user

    async def reset_password(self, email: str) -> None:
        await self._provider.reset_password(email)

    async def update_password(self, token: str, new_password: str) -> None:
        await self._provider.update_password(token, new_password)


# ---------------------------------------------------------------------- #
# Gates and role dispatch
# ---------------------------------------------------------------------- #


class GateDecision(str, Enum):
    """Outcome of the booking entry gate."""

    ALLOWED = "allowed"
    SIGN_IN_REQUIRED = "sign_in_required"
    VERIFICATION_REQUIRED = "verification_required"

    @property
    def redirect_route(self) -> Optional[str]:
        return _GATE_REDIRECTS[self]


_GATE_REDIRECTS: dict[GateDecision, Optional[str]] = {
    GateDecision.ALLOWED: None,
    GateDecision.SIGN_IN_REQUIRED: "/login",
    GateDecision.VERIFICATION_REQUIRED: "/verify-email",
}

HOME_ROUTES: dict[Role, str] = {
    Role.ADMIN: "/admin",
    Role.CLIENT: "/my-bookings",
}


def check_booking_gate(user: Optional[User]) -> GateDecision:
    """Booking requires a signed-in user with a verified e-mail."""
    if user is None:
        return GateDecision.SIGN_IN_REQUIRED
    if not user.is_email_verified:
        return GateDecision.VERIFICATION_REQUIRED
    return GateDecision.ALLOWED


def home_route_for(role: Role) -> str:
    """Landing route after sign-in for each role."""
    return HOME_ROUTES[role]


def require_role(user: Optional[User], role: Role) -> User:
    """Return the user if they hold ``role``; otherwise raise PermissionError."""
    if user is None or user.role != role:
        raise PermissionError(f"{role.value} access required")
    return user
