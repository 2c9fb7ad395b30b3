"""NTP-style clock offset estimation against the server's clock endpoint.

https://en.wikipedia.org/wiki/Network_Time_Protocol#Clock_synchronization_algorithm

A single round trip yields four instants (epoch milliseconds):

``t0``
    local time the request was sent
``t1``
    server time reported in the response body
``t2``
    server send time, assumed equal to ``t1`` (the endpoint reports a single
    instant, so server-side processing time is treated as zero)
``t3``
    local time the response arrived

Nothing is cached between calls; every estimate costs one request.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Mapping

import httpx

from siwe_session.auth.clock import Clock, default_clock, from_ms, now_ms, parse_iso8601, to_ms
from siwe_session.auth.errors import NetworkError
from siwe_session.auth.models import ClockDiffParams, ClockDiffResult
from siwe_session.utils.transport import Transport
from siwe_session.utils.validate import ClockResponse, validate

_LOG = logging.getLogger("siwe-session.auth.clock_sync")


def calculate_clock_diff(params: ClockDiffParams) -> ClockDiffResult:
    """Return the server-minus-client offset and its maximum error.

    Positive ``diff`` means the server clock is ahead of the client's.
    ``max_error`` is half of the observed round trip.
    """
    return ClockDiffResult(
        diff=((params.t1 - params.t0) + (params.t2 - params.t3)) // 2,
        max_error=(params.t3 - params.t0) // 2,
    )


class ClockSynchronizer:
    """Estimate the server clock through its ``GET /clock`` endpoint."""

    def __init__(
        self,
        clock_url: str,
        transport: Transport,
        *,
        headers: Mapping[str, str] | None = None,
        clock: Clock = default_clock,
    ) -> None:
        self.clock_url = clock_url
        self._transport = transport
        self._headers = dict(headers or {})
        self._clock = clock

    async def get_clock(self) -> ClockResponse:
        """Fetch and validate the clock endpoint body."""
        response = await self._transport("GET", self.clock_url, headers=dict(self._headers))
        return self._parse(response)

    async def get_clock_diff_approx(self) -> ClockDiffResult:
        """Sample the server clock once and return the estimated offset."""
        t0 = now_ms(self._clock)
        response = await self._transport("GET", self.clock_url, headers=dict(self._headers))
        t3 = now_ms(self._clock)

        body = self._parse(response)
        t1 = to_ms(parse_iso8601(body.time))
        result = calculate_clock_diff(ClockDiffParams(t0=t0, t1=t1, t2=t1, t3=t3))
        _LOG.debug(
            "Clock sample diff=%sms max_error=%sms", result.diff, result.max_error
        )
        return result

    async def get_server_time_approx(self) -> datetime:
        """Return the *earliest* plausible current server time.

        Subtracting ``max_error`` keeps a message's issued-at from landing in
        the server's future, which many verifiers reject.
        """
        result = await self.get_clock_diff_approx()
        return from_ms(now_ms(self._clock) + result.diff - result.max_error)

    def _parse(self, response: httpx.Response) -> ClockResponse:
        if not response.is_success:
            raise NetworkError(
                f"Clock endpoint returned {response.status_code}: {response.text}",
                url=self.clock_url,
                status=response.status_code,
            )
        return validate(response.json(), ClockResponse)
