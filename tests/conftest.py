"""Shared fixtures for the session core tests."""

from __future__ import annotations

import pytest

# 2022-05-01T00:00:00Z
FROZEN_NOW: float = 1_651_363_200.0


class FakeClock:
    """Deterministic, manually advanced clock (seconds since epoch)."""

    def __init__(self, now: float = FROZEN_NOW) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
