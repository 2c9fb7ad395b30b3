"""Configuration helpers: network presets and environment loading."""

from __future__ import annotations

import logging
import os
from enum import Enum
from typing import Final, Mapping, Tuple

from siwe_session.auth.models import (
    DEFAULT_SESSION_DURATION_MS,
    DEFAULT_STATEMENT,
    DEFAULT_VERSION,
    SessionConfig,
    Signer,
)

logger = logging.getLogger("siwe-session.utils.environment")

_TRUTHY: Final[Tuple[str, ...]] = ("true", "1", "yes", "y", "on")


class Network(str, Enum):
    ALFAJORES = "alfajores"
    MAINNET = "mainnet"


NETWORK_CHAIN_IDS: Final[dict[Network, int]] = {
    Network.ALFAJORES: 44787,
    Network.MAINNET: 42220,
}


def _truthy(value: str | None) -> bool:
    return (value or "").strip().lower() in _TRUTHY


def _auth_header(api_key: str | None) -> dict[str, str]:
    return {"Authorization": f"Bearer {api_key}"} if api_key else {}


def create_session_config(
    *,
    base_url: str,
    network: Network | str,
    account_address: str,
    signer: Signer,
    api_key: str | None = None,
    timeout_ms: int | None = None,
    single_flight_login: bool = False,
) -> SessionConfig:
    """Return the session settings for a provider rooted at *base_url*.

    The login and clock endpoints live at ``/auth/login`` and ``/clock``;
    the chain id follows from *network*.
    """
    base = base_url.rstrip("/")
    return SessionConfig(
        signer=signer,
        account_address=account_address,
        login_url=f"{base}/auth/login",
        clock_url=f"{base}/clock",
        chain_id=NETWORK_CHAIN_IDS[Network(network)],
        statement=DEFAULT_STATEMENT,
        version=DEFAULT_VERSION,
        session_duration_ms=DEFAULT_SESSION_DURATION_MS,
        headers=_auth_header(api_key),
        timeout_ms=timeout_ms,
        single_flight_login=single_flight_login,
    )


def _require(env: Mapping[str, str], key: str) -> str:
    value = (env.get(key) or "").strip()
    if not value:
        raise ValueError(f"Environment variable {key} is required")
    return value


def _int(env: Mapping[str, str], key: str, default: int | None) -> int | None:
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"Environment variable {key} must be an integer") from None


def session_config_from_env(
    signer: Signer,
    *,
    prefix: str = "SIWE_",
    environ: Mapping[str, str] | None = None,
) -> SessionConfig:
    """Build a :class:`SessionConfig` from ``{prefix}*`` environment variables.

    Required: ``LOGIN_URL``, ``CLOCK_URL``, ``ACCOUNT_ADDRESS``, ``CHAIN_ID``.
    Optional: ``STATEMENT``, ``VERSION``, ``SESSION_DURATION_MS``,
    ``TIMEOUT_MS``, ``API_KEY``, ``SINGLE_FLIGHT_LOGIN``.
    The signer is never read from the environment.
    """
    env = os.environ if environ is None else environ

    login_url = _require(env, f"{prefix}LOGIN_URL")
    clock_url = _require(env, f"{prefix}CLOCK_URL")
    account_address = _require(env, f"{prefix}ACCOUNT_ADDRESS")
    chain_id = _int(env, f"{prefix}CHAIN_ID", None)
    if chain_id is None:
        raise ValueError(f"Environment variable {prefix}CHAIN_ID is required")

    api_key = env.get(f"{prefix}API_KEY") or None
    if api_key:
        logger.debug("Using API key from %sAPI_KEY for session requests", prefix)

    return SessionConfig(
        signer=signer,
        account_address=account_address,
        login_url=login_url,
        clock_url=clock_url,
        chain_id=chain_id,
        statement=env.get(f"{prefix}STATEMENT") or DEFAULT_STATEMENT,
        version=env.get(f"{prefix}VERSION") or DEFAULT_VERSION,
        session_duration_ms=_int(
            env, f"{prefix}SESSION_DURATION_MS", DEFAULT_SESSION_DURATION_MS
        ),
        headers=_auth_header(api_key),
        timeout_ms=_int(env, f"{prefix}TIMEOUT_MS", None),
        single_flight_login=_truthy(env.get(f"{prefix}SINGLE_FLIGHT_LOGIN")),
    )
