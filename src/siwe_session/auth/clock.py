"""Clock abstraction for testable time handling in session logic.

This module defines a `Clock` protocol representing callables that return the
current UNIX timestamp as ``float``.  All time-based decisions inside the
auth package MUST depend on an injected ``Clock`` instance rather than
calling ``time.time()`` or ``datetime.now()`` directly.

Example
-------
>>> from siwe_session.auth.clock import default_clock, now_ms
>>> isinstance(now_ms(default_clock), int)
True
"""

from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone
from typing import Final, Protocol, runtime_checkable

_EPOCH: Final[datetime] = datetime(1970, 1, 1, tzinfo=timezone.utc)


@runtime_checkable
class Clock(Protocol):
    """Callable protocol returning *seconds* since the UNIX epoch."""

    def __call__(self) -> float: ...


def default_clock() -> float:
    """Default implementation that delegates to ``time.time()``."""
    return time.time()


def now_ms(clock: Clock = default_clock) -> int:
    """Return *clock* as integer milliseconds since the UNIX epoch."""
    return round(clock() * 1000)


def from_ms(value: int) -> datetime:
    """Convert epoch milliseconds into an aware UTC ``datetime``."""
    return _EPOCH + timedelta(milliseconds=value)


def to_ms(value: datetime) -> int:
    """Convert a ``datetime`` into epoch milliseconds (naive means UTC)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - _EPOCH) // timedelta(milliseconds=1)


def to_iso8601(value: datetime) -> str:
    """Serialise *value* as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC.

    The millisecond precision and ``Z`` suffix match the timestamps SIWE
    verifiers usually produce, so both sides render the same string.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    utc = value.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso8601(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; a missing offset is treated as UTC."""
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
