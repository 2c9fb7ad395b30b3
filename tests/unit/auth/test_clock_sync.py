"""Unit tests for the NTP-style clock offset estimation.

Coverage:
* Pure diff / max-error arithmetic, including the server-behind case
* Single-sample flow against a stubbed clock endpoint
* Earliest-plausible server time
* Error propagation for non-2xx answers and malformed bodies
"""

from __future__ import annotations

import json

import httpx
import pytest

from siwe_session.auth.clock import from_ms, now_ms, to_iso8601
from siwe_session.auth.clock_sync import ClockSynchronizer, calculate_clock_diff
from siwe_session.auth.errors import NetworkError, ValidationError
from siwe_session.auth.models import ClockDiffParams
from siwe_session.utils.transport import httpx_transport

from conftest import FakeClock

CLOCK_URL = "https://siwe-api.com/clock"


def _synchronizer(
    handler, clock: FakeClock, headers: dict[str, str] | None = None
) -> ClockSynchronizer:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ClockSynchronizer(
        CLOCK_URL, httpx_transport(client), headers=headers, clock=clock
    )


# --------------------------------------------------------------------------- #
# calculate_clock_diff                                                        #
# --------------------------------------------------------------------------- #
def test_clock_diff_when_server_is_ahead() -> None:
    result = calculate_clock_diff(ClockDiffParams(t0=10000, t1=10500, t2=10500, t3=10500))
    assert result.diff == 250
    assert result.max_error == 250


def test_clock_diff_when_server_is_behind() -> None:
    result = calculate_clock_diff(ClockDiffParams(t0=10000, t1=9500, t2=9500, t3=10500))
    assert result.diff == -750
    assert result.max_error == 250


def test_clock_diff_floors_odd_values() -> None:
    # -3 / 2 floors to -2 and 1 / 2 floors to 0
    result = calculate_clock_diff(ClockDiffParams(t0=0, t1=-1, t2=-1, t3=1))
    assert result.diff == -2
    assert result.max_error == 0

    result = calculate_clock_diff(ClockDiffParams(t0=0, t1=-1, t2=-1, t3=3))
    assert result.diff == -3
    assert result.max_error == 1


@pytest.mark.parametrize(
    ("t0", "t1", "t3"),
    [(0, 0, 0), (100, 50, 100), (1000, 99999, 1001), (5, -10_000, 12_345)],
)
def test_clock_diff_matches_formula(t0: int, t1: int, t3: int) -> None:
    result = calculate_clock_diff(ClockDiffParams(t0=t0, t1=t1, t2=t1, t3=t3))
    assert result.diff == ((t1 - t0) + (t1 - t3)) // 2
    assert result.max_error == (t3 - t0) // 2
    assert result.max_error >= 0


# --------------------------------------------------------------------------- #
# ClockSynchronizer                                                           #
# --------------------------------------------------------------------------- #
@pytest.mark.anyio
async def test_get_clock_diff_approx_samples_once(fake_clock: FakeClock) -> None:
    start_ms = now_ms(fake_clock)
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        fake_clock.advance(1.0)  # round trip of 1000ms
        return httpx.Response(200, json={"time": to_iso8601(from_ms(start_ms + 1500))})

    sync = _synchronizer(handler, fake_clock, headers={"Authorization": "Bearer k"})
    result = await sync.get_clock_diff_approx()

    assert result.diff == 1000
    assert result.max_error == 500
    assert len(seen) == 1
    assert seen[0].method == "GET"
    assert str(seen[0].url) == CLOCK_URL
    assert seen[0].headers["authorization"] == "Bearer k"


@pytest.mark.anyio
async def test_get_server_time_approx_is_earliest_plausible(fake_clock: FakeClock) -> None:
    start_ms = now_ms(fake_clock)

    def handler(request: httpx.Request) -> httpx.Response:
        fake_clock.advance(1.0)
        return httpx.Response(200, json={"time": to_iso8601(from_ms(start_ms + 1500))})

    server_time = await _synchronizer(handler, fake_clock).get_server_time_approx()

    # local now is start + 1000; diff 1000, max_error 500
    assert server_time == from_ms(start_ms + 1000 + 1000 - 500)


@pytest.mark.anyio
async def test_get_clock_accepts_offset_timestamps(fake_clock: FakeClock) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"time": "2022-05-02T22:06:00+00:00"})

    body = await _synchronizer(handler, fake_clock).get_clock()
    assert body.time == "2022-05-02T22:06:00+00:00"


@pytest.mark.anyio
async def test_non_2xx_raises_network_error_with_body(fake_clock: FakeClock) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text='{"error": "InternalError"}')

    with pytest.raises(NetworkError) as exc_info:
        await _synchronizer(handler, fake_clock).get_clock_diff_approx()

    assert exc_info.value.status == 500
    assert "InternalError" in exc_info.value.detail


@pytest.mark.anyio
async def test_unreachable_endpoint_raises_network_error(fake_clock: FakeClock) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkError):
        await _synchronizer(handler, fake_clock).get_server_time_approx()


@pytest.mark.anyio
async def test_missing_time_field_raises_validation_error(fake_clock: FakeClock) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=json.dumps({"now": "x"}).encode())

    with pytest.raises(ValidationError) as exc_info:
        await _synchronizer(handler, fake_clock).get_clock_diff_approx()
    assert exc_info.value.description == "ClockResponse"


@pytest.mark.anyio
async def test_unparseable_time_propagates(fake_clock: FakeClock) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"time": "yesterday"})

    with pytest.raises(ValueError):
        await _synchronizer(handler, fake_clock).get_clock_diff_approx()
