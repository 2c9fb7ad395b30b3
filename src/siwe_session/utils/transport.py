"""HTTP transport seam for the session core.

The core never talks to ``httpx`` directly.  It depends on a :class:`Transport`
callable shaped like ``client.request`` so callers can inject a cookie-aware
client, a stub, or a wrapped transport with a timeout.

Transport-level exceptions are translated here into the session error
taxonomy; HTTP status codes are left to the caller, which knows what a
non-2xx answer means for its endpoint.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

import anyio
import httpx

from siwe_session.auth.errors import NetworkError, RequestTimeoutError

_LOG = logging.getLogger("siwe-session.utils.transport")


@runtime_checkable
class Transport(Protocol):
    """Async callable ``(method, url, **kwargs) -> httpx.Response``."""

    async def __call__(self, method: str, url: str, **kwargs: Any) -> httpx.Response: ...


def httpx_transport(client: httpx.AsyncClient) -> Transport:
    """Adapt an ``httpx.AsyncClient`` (and its cookie jar) into a Transport."""

    async def _send(method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise RequestTimeoutError(f"Request timed out: {exc}", url=url) from exc
        except httpx.TransportError as exc:
            raise NetworkError(f"Request failed: {exc}", url=url) from exc

    return _send


def fetch_with_timeout(transport: Transport, timeout_ms: int) -> Transport:
    """Wrap *transport* so every call is aborted after *timeout_ms*.

    Timeouts surface as :class:`RequestTimeoutError`, a subclass of
    :class:`NetworkError`, so callers can tell them apart from other failures.
    """
    if timeout_ms <= 0:
        raise ValueError("timeout_ms must be positive")
    seconds = timeout_ms / 1000

    async def _send(method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            with anyio.fail_after(seconds):
                return await transport(method, url, **kwargs)
        except (TimeoutError, httpx.TimeoutException) as exc:
            _LOG.debug("Request to %s aborted after %sms", url, timeout_ms)
            raise RequestTimeoutError(
                f"Request aborted after {timeout_ms}ms", url=url
            ) from exc

    return _send

