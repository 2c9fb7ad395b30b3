"""Session authentication core package.

This namespace hosts the building blocks for Sign-In with Ethereum sessions
that must survive clock skew between client and server.

Sub-modules
-----------
clock
    Test-friendly time abstraction and ISO-8601 helpers.
clock_sync
    NTP-style estimate of the server clock offset.
nonce
    Random nonce generation.
message
    EIP-4361 message layout, address checksumming and signing.
cookies
    Per-runtime session cookie extraction strategies.
manager
    The ``SessionManager`` orchestrating login and authenticated fetches.
models
    Dataclasses for configuration, clock samples and session state.
errors
    Exception types used by the session core.
log_utils
    Structured logging helpers (thin wrapper around :pymod:`logging`).

All public objects are re-exported here for convenience.
"""

from __future__ import annotations

from .clock import Clock, default_clock  # noqa: F401
from .errors import (  # noqa: F401
    AuthenticationError,
    NetworkError,
    RequestTimeoutError,
    SigningError,
    SiweSessionError,
    ValidationError,
)
from .models import (  # noqa: F401
    ClockDiffParams,
    ClockDiffResult,
    LoginParams,
    SessionConfig,
    SessionState,
    SignedLogin,
)
from .nonce import generate_nonce  # noqa: F401
from .message import LoginMessageBuilder, SiweMessage, to_checksum_address  # noqa: F401
from .clock_sync import ClockSynchronizer, calculate_clock_diff  # noqa: F401
from .cookies import (  # noqa: F401
    CookieExtractor,
    CookieStore,
    CookieStoreExtractor,
    HttpxCookieStore,
    MultiHeaderCookieExtractor,
    SingleHeaderCookieExtractor,
    serialize_cookies,
)
from .manager import SessionManager  # noqa: F401
from .log_utils import get_auth_logger, mask_sensitive  # noqa: F401

__all__ = [
    # clock
    "Clock",
    "default_clock",
    # errors
    "SiweSessionError",
    "NetworkError",
    "RequestTimeoutError",
    "AuthenticationError",
    "SigningError",
    "ValidationError",
    # models
    "SessionConfig",
    "SessionState",
    "ClockDiffParams",
    "ClockDiffResult",
    "LoginParams",
    "SignedLogin",
    # message
    "generate_nonce",
    "SiweMessage",
    "LoginMessageBuilder",
    "to_checksum_address",
    # clock sync
    "ClockSynchronizer",
    "calculate_clock_diff",
    # cookies
    "CookieExtractor",
    "CookieStore",
    "CookieStoreExtractor",
    "HttpxCookieStore",
    "MultiHeaderCookieExtractor",
    "SingleHeaderCookieExtractor",
    "serialize_cookies",
    # manager
    "SessionManager",
    # logging helpers
    "get_auth_logger",
    "mask_sensitive",
]
