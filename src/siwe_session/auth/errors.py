"""Exception types raised by the session core.

Only lightweight, **data-carrying** exceptions live here so that outer layers
can transform them into result values or user-friendly messages.  None of the
payloads carry signatures, nonces or cookie values.
"""

from __future__ import annotations

import json
from typing import Any


class SiweSessionError(RuntimeError):
    """Base class for every failure surfaced by the session core."""

    code: str = "session_error"

    def to_payload(self) -> dict[str, Any]:
        """Return a JSON-serialisable payload **without secrets**."""
        return {"error": self.code, "message": str(self)}


class NetworkError(SiweSessionError):
    """Transport failure or a non-2xx answer from a non-login endpoint."""

    code = "network_error"

    def __init__(
        self,
        detail: str,
        *,
        url: str | None = None,
        status: int | None = None,
    ) -> None:
        super().__init__(detail)
        self.detail: str = detail
        self.url: str | None = url
        self.status: int | None = status

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload.update({"url": self.url, "status": self.status})
        return payload


class RequestTimeoutError(NetworkError):
    """The request was aborted after the configured timeout elapsed."""

    code = "timeout"


class AuthenticationError(SiweSessionError):
    """The login endpoint rejected the signed message."""

    code = "authentication_error"

    def __init__(self, body: str, *, status: int | None = None) -> None:
        super().__init__(f"Received error response on login: {body}")
        self.body: str = body
        self.status: int | None = status

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["status"] = self.status
        return payload


class SigningError(SiweSessionError):
    """The injected signing capability rejected the message."""

    code = "signing_error"


class ValidationError(SiweSessionError):
    """A response body did not match its expected schema."""

    code = "validation_error"

    def __init__(self, description: str, issues: list[dict[str, Any]]) -> None:
        super().__init__(
            f"Error validating object with schema {description}: "
            f"{json.dumps(issues, default=str)}"
        )
        self.description: str = description
        self.issues: list[dict[str, Any]] = issues

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload.update({"schema": self.description, "issues": self.issues})
        return payload
