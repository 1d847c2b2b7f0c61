"""Per-session log correlation.

Every record from a session logger carries ``session_id``, so one client's
way through availability, the booking store, and payment can be grepped
out of interleaved output.

Usage:
    with bound_session("client-7"):
        logger = get_session_logger(__name__)
        logger.info("Checking availability")  # record.session_id == "client-7"
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

ANONYMOUS = "ANONYMOUS"

_session_id: ContextVar[str] = ContextVar("session_id", default=ANONYMOUS)


def set_session_id(session_id: str) -> None:
    _session_id.set(session_id or ANONYMOUS)


def get_session_id() -> str:
    return _session_id.get()


@contextmanager
def bound_session(session_id: str) -> Iterator[str]:
    """Tag records with ``session_id`` inside the block, restoring the old tag after."""
    token = _session_id.set(session_id or ANONYMOUS)
    try:
        yield _session_id.get()
    finally:
        _session_id.reset(token)


class SessionIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = _session_id.get()  # type: ignore[attr-defined]
        return True


def get_session_logger(name: str) -> logging.Logger:
    """Logger whose records carry ``session_id`` for ``%(session_id)s`` formats."""
    logger = logging.getLogger(name)
    if not any(isinstance(f, SessionIdFilter) for f in logger.filters):
        logger.addFilter(SessionIdFilter())
    return logger
