"""
Studio settings read from the environment (and an optional .env file).

Studio details, the daily booking schedule, and the artificial delays of the
mocked external services are all configurable here. Nothing is hardcoded in
the store, flow, or session logic.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Callable, TypeVar

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

T = TypeVar("T")

TIME_LABEL_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _parse_env(env_var: str, default: str, cast: Callable[[str], T], kind: str) -> T:
    raw = os.getenv(env_var, default)
    try:
        return cast(raw.strip())
    except ValueError:
        raise ValueError(f"{env_var} must be a valid {kind}, got {raw!r}") from None


def _safe_int(env_var: str, default: str) -> int:
    return _parse_env(env_var, default, int, "integer")


def _safe_float(env_var: str, default: str) -> float:
    return _parse_env(env_var, default, float, "number")


def _safe_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag (true/false, yes/no, 1/0)."""
    raw = os.getenv(env_var, default).strip().lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"{env_var} must be a valid boolean, got {raw!r}")


def _slot_list(env_var: str, default: str) -> tuple[str, ...]:
    raw = os.getenv(env_var, default)
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class StudioConfig:
    """Studio identity settings."""

    name: str = os.getenv("STUDIO_NAME", "PixelPerfect Studio")
    admin_email: str = os.getenv("ADMIN_EMAIL", "admin@pixelperfect.com")


@dataclass(frozen=True)
class ScheduleConfig:
    """Fixed daily schedule offered for every service."""

    daily_slots: tuple[str, ...] = _slot_list(
        "DAILY_SLOTS", "09:00,11:00,13:00,15:00,17:00"
    )
    booking_window_days: int = _safe_int("BOOKING_WINDOW_DAYS", "30")


@dataclass(frozen=True)
class SimulationConfig:
    """Artificial delays of the mocked login, payment, and availability calls."""

    login_delay_sec: float = _safe_float("LOGIN_DELAY_SECONDS", "1.0")
    payment_delay_sec: float = _safe_float("PAYMENT_DELAY_SECONDS", "2.0")
    availability_delay_sec: float = _safe_float("AVAILABILITY_DELAY_SECONDS", "0.0")


@dataclass(frozen=True)
class BookingConfig:
    """Booking store behavior."""

    strict_slot_check: bool = _safe_bool("STRICT_SLOT_CHECK", "true")


@dataclass(frozen=True)
class StorageConfig:
    """Where the signed-in user record is kept between runs."""

    session_file: str = os.getenv("SESSION_FILE", "")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    studio: StudioConfig = field(default_factory=StudioConfig)
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    booking: BookingConfig = field(default_factory=BookingConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if "@" not in config.studio.admin_email:
        raise ValueError(
            f"ADMIN_EMAIL must be an e-mail address, got {config.studio.admin_email!r}"
        )
    if not config.schedule.daily_slots:
        raise ValueError("DAILY_SLOTS must contain at least one time")
    for label in config.schedule.daily_slots:
        if not TIME_LABEL_PATTERN.match(label):
            raise ValueError(f"DAILY_SLOTS entries must be HH:MM, got {label!r}")
    if list(config.schedule.daily_slots) != sorted(set(config.schedule.daily_slots)):
        raise ValueError("DAILY_SLOTS must be unique and in ascending order")
    if config.schedule.booking_window_days < 1:
        raise ValueError(
            f"BOOKING_WINDOW_DAYS must be >= 1, got {config.schedule.booking_window_days}"
        )

    for delay_name, delay_value in [
        ("LOGIN_DELAY_SECONDS", config.simulation.login_delay_sec),
        ("PAYMENT_DELAY_SECONDS", config.simulation.payment_delay_sec),
        ("AVAILABILITY_DELAY_SECONDS", config.simulation.availability_delay_sec),
    ]:
        if delay_value < 0:
            raise ValueError(f"{delay_name} must be >= 0, got {delay_value}")


def load_config() -> AppConfig:
    """Build settings from the environment, validate them, and set up root logging."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s'", config.studio.name)
    return config


settings = load_config()
