"""SessionManager – signed-login sessions around an HTTP transport.

The manager owns the only mutable state of the core: the session expiry and
the cookie map of the last successful login.  Every instance is independent,
so several accounts can hold sessions side by side.

State machine
-------------
``Unauthenticated`` → (login succeeds) → ``Authenticated(expiry)``.  Expiry is
purely a function of wall-clock time; the next successful login re-enters
``Authenticated`` with a new expiry.

Concurrency
-----------
By default two concurrent :meth:`SessionManager.fetch` calls that both find
the session expired each run their own login.  Setting
``SessionConfig.single_flight_login`` makes them share one pending login.
No retries are performed anywhere; callers own their retry policy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Mapping

import anyio
import httpx

from siwe_session.auth.clock import Clock, default_clock, from_ms, now_ms, to_ms
from siwe_session.auth.clock_sync import ClockSynchronizer
from siwe_session.auth.cookies import (
    CookieExtractor,
    CookieMap,
    MultiHeaderCookieExtractor,
    serialize_cookies,
)
from siwe_session.auth.errors import AuthenticationError
from siwe_session.auth.log_utils import get_auth_logger
from siwe_session.auth.message import LoginMessageBuilder
from siwe_session.auth.models import (
    ClockDiffResult,
    LoginParams,
    SessionConfig,
    SessionState,
)
from siwe_session.auth.nonce import generate_nonce
from siwe_session.utils.transport import Transport, fetch_with_timeout, httpx_transport
from siwe_session.utils.validate import ClockResponse


class SessionManager:
    """Run SIWE logins and keep a session alive around outbound requests."""

    def __init__(
        self,
        config: SessionConfig,
        transport: Transport,
        *,
        cookie_extractor: CookieExtractor | None = None,
        clock: Clock = default_clock,
        nonce_factory: Callable[[], str] = generate_nonce,
        cookies: Mapping[str, str] | None = None,
    ) -> None:
        self.config = config
        if config.timeout_ms is not None:
            transport = fetch_with_timeout(transport, config.timeout_ms)
        self._transport = transport
        self._clock = clock
        self._cookie_extractor = cookie_extractor or MultiHeaderCookieExtractor()
        self._builder = LoginMessageBuilder(config, clock=clock, nonce_factory=nonce_factory)
        self._clock_sync = ClockSynchronizer(
            config.clock_url, transport, headers=config.headers, clock=clock
        )
        self._state = SessionState()
        self._cookies: CookieMap = dict(cookies or {})
        self._pending_login: _PendingLogin | None = None
        self._log = get_auth_logger(
            base_logger_name="siwe-session.auth.manager",
            address=config.account_address,
            domain=config.domain,
        )

    @classmethod
    def from_client(
        cls,
        config: SessionConfig,
        client: httpx.AsyncClient,
        **kwargs: Any,
    ) -> "SessionManager":
        """Build a manager sending through *client* and its cookie jar."""
        return cls(config, httpx_transport(client), **kwargs)

    # ------------------------------------------------------------------ #
    # Session lifecycle                                                  #
    # ------------------------------------------------------------------ #
    async def login(self, params: LoginParams | None = None) -> None:
        """Sign a fresh login message and establish a session.

        ``issued_at`` resolution: explicit parameter, else the approximate
        server time, else local time when the clock endpoint fails.

        Raises
        ------
        AuthenticationError
            The login endpoint answered with a non-2xx status.
        SigningError
            The signer rejected the message.
        NetworkError
            The login request could not be delivered.
        """
        params = params or LoginParams()
        issued_at = params.issued_at or await self._resolve_issued_at()

        signed = await self._builder.build(issued_at)

        # case-insensitive: a static ``content-type`` replaces the default
        headers = httpx.Headers({"Content-Type": "application/json"})
        headers.update(self.config.headers)
        headers.update(params.headers or {})
        response = await self._transport(
            "POST", self.config.login_url, headers=headers, json=signed.to_body()
        )
        if not response.is_success:
            raise AuthenticationError(response.text, status=response.status_code)

        self._cookies = await self._cookie_extractor.extract(
            response, url=self.config.login_url
        )
        self._state.expiry_ms = to_ms(signed.expiration_time)
        self._log.info(
            "Logged in; session valid until %s (%d cookie(s))",
            signed.expiration_time.isoformat(),
            len(self._cookies),
        )

    def is_logged_in(self) -> bool:
        """Return *True* if a login succeeded and its expiry is in the future."""
        return self._state.is_live(clock=self._clock)

    @property
    def session_expiry(self) -> datetime | None:
        return self._state.expiry

    async def fetch(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request, logging in first when no live session exists.

        The request itself is passed to the transport unmodified; cookies are
        expected to travel through a cookie-aware transport, otherwise attach
        :meth:`get_cookie_header` yourself.  Login failures propagate and the
        request is not sent.
        """
        if not self.is_logged_in():
            if self.config.single_flight_login:
                await self._login_once()
            else:
                await self.login()
        return await self._transport(method, url, **kwargs)

    # ------------------------------------------------------------------ #
    # Cookies                                                            #
    # ------------------------------------------------------------------ #
    def get_cookies(self) -> CookieMap:
        """Return a copy of the cookies set by the last successful login."""
        return dict(self._cookies)

    def get_cookie_header(self) -> str:
        """Return the session cookies as a ``Cookie`` header value."""
        return serialize_cookies(self._cookies)

    # ------------------------------------------------------------------ #
    # Server clock                                                       #
    # ------------------------------------------------------------------ #
    async def get_clock(self) -> ClockResponse:
        return await self._clock_sync.get_clock()

    async def get_clock_diff_approx(self) -> ClockDiffResult:
        return await self._clock_sync.get_clock_diff_approx()

    async def get_server_time_approx(self) -> datetime:
        return await self._clock_sync.get_server_time_approx()

    # ---------------- internal helpers --------------------------------- #
    async def _resolve_issued_at(self) -> datetime:
        try:
            return await self._clock_sync.get_server_time_approx()
        except Exception as exc:  # noqa: BLE001
            self._log.warning(
                "Unable to determine issued-at from server clock, using local time: %s",
                exc,
            )
            return from_ms(now_ms(self._clock))

    async def _login_once(self) -> None:
        """Join the pending login if one is running, otherwise lead one.

        Waiters re-raise the leader's error.  When the leader is cancelled
        the next waiter takes over and logs in itself.
        """
        while True:
            pending = self._pending_login
            if pending is None:
                break
            await pending.done.wait()
            if pending.cancelled:
                continue
            if pending.error is not None:
                raise pending.error
            return

        pending = self._pending_login = _PendingLogin()
        try:
            await self.login()
        except anyio.get_cancelled_exc_class():
            pending.cancelled = True
            raise
        except BaseException as exc:
            pending.error = exc
            raise
        finally:
            self._pending_login = None
            pending.done.set()


@dataclass(slots=True)
class _PendingLogin:
    done: anyio.Event = field(default_factory=anyio.Event)
    error: BaseException | None = None
    cancelled: bool = False
