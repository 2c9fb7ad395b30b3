"""Typed records used by the session core."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable, Final, Mapping
from urllib.parse import urlparse

from siwe_session.auth.clock import Clock, default_clock, from_ms, now_ms

Signer = Callable[[str], Awaitable[str]]

DEFAULT_STATEMENT: Final[str] = "Sign in with Ethereum"
DEFAULT_VERSION: Final[str] = "1"
DEFAULT_SESSION_DURATION_MS: Final[int] = 14_400_000  # 4 hours


def _require_http_url(name: str, value: str) -> None:
    parsed = urlparse(value or "")
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise ValueError(f"{name} must be an absolute http(s) URL")


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Immutable settings supplied once when building a SessionManager."""

    signer: Signer
    account_address: str
    login_url: str
    clock_url: str
    chain_id: int
    statement: str = DEFAULT_STATEMENT
    version: str = DEFAULT_VERSION
    session_duration_ms: int = DEFAULT_SESSION_DURATION_MS
    headers: Mapping[str, str] = field(default_factory=dict)
    timeout_ms: int | None = None
    # Share one in-flight login between concurrent fetches (off by default)
    single_flight_login: bool = False

    def __post_init__(self) -> None:
        if not callable(self.signer):
            raise ValueError("signer must be callable")
        if not self.account_address:
            raise ValueError("account_address is required")
        _require_http_url("login_url", self.login_url)
        _require_http_url("clock_url", self.clock_url)
        if self.session_duration_ms <= 0:
            raise ValueError("session_duration_ms must be positive")
        if self.timeout_ms is not None and self.timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")

    @property
    def domain(self) -> str:
        """Hostname of the login endpoint, used as the SIWE ``domain``."""
        return urlparse(self.login_url).hostname or ""


@dataclass(frozen=True, slots=True)
class ClockDiffParams:
    """One NTP-style sample, all values in epoch milliseconds.

    ``t0`` local send, ``t1`` remote receive, ``t2`` remote send,
    ``t3`` local receive.
    """

    t0: int
    t1: int
    t2: int
    t3: int


@dataclass(frozen=True, slots=True)
class ClockDiffResult:
    """Estimated remote-minus-local offset and its error bound (ms)."""

    diff: int
    max_error: int


@dataclass(frozen=True, slots=True)
class LoginParams:
    issued_at: datetime | None = None
    headers: Mapping[str, str] | None = None


@dataclass(frozen=True, slots=True)
class SignedLogin:
    """Canonical message text plus the signer's signature over it."""

    message: str
    signature: str
    expiration_time: datetime

    def to_body(self) -> dict[str, str]:
        """Return the login request body expected by the server."""
        return {"message": self.message, "signature": self.signature}


@dataclass(slots=True)
class SessionState:
    """Expiry of the current session, ``None`` until the first login."""

    expiry_ms: int | None = None

    def is_live(self, *, clock: Clock = default_clock) -> bool:
        return self.expiry_ms is not None and self.expiry_ms > now_ms(clock)

    @property
    def expiry(self) -> datetime | None:
        return from_ms(self.expiry_ms) if self.expiry_ms is not None else None
