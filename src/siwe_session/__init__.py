"""Client-side Sign-In with Ethereum sessions with server clock alignment."""

from siwe_session.auth import (  # noqa: F401
    AuthenticationError,
    LoginParams,
    NetworkError,
    RequestTimeoutError,
    SessionConfig,
    SessionManager,
    SigningError,
    SiweSessionError,
    ValidationError,
)

__version__ = "0.1.0"
