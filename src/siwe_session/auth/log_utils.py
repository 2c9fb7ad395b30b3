"""Structured logging helpers for session components.

This module purposefully restricts **which** contextual attributes are attached
to log records in order to avoid accidentally leaking secrets.  All helpers
ONLY inject the following *non-sensitive* fields:

- ``address``        – The signing account (first 10 chars kept, rest masked)
- ``domain``         – Host the session is established with
- ``correlation_id`` – Placeholder, to be wired by outer layers

Usage
-----
>>> from siwe_session.auth.log_utils import get_auth_logger
>>> log = get_auth_logger(
...     base_logger_name="siwe-session.auth.manager",
...     address="0x0d8e461687b7d06f86ec348e0c270b0f279855f0",
...     domain="siwe-api.com",
... )
>>> log.info("Logging in")
INFO siwe-session.auth.manager address=0x0d8e4616******************************** domain=siwe-api.com ...

Signed messages, signatures, nonces and cookie values are never passed to
these helpers.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, MutableMapping

_ADDRESS_KEEP = 10


def mask_sensitive(value: str | None, keep: int = 4) -> str:
    """Return *value* with everything after the first *keep* chars masked."""
    if not value:
        return ""
    if len(value) <= keep:
        return "*" * len(value)
    return value[:keep] + "*" * (len(value) - keep)


class _SessionLoggerAdapter(logging.LoggerAdapter):
    """Attach masked, whitelisted session context to every record."""

    context_keys = ("address", "domain", "correlation_id")
    masked = {"address": _ADDRESS_KEEP}

    def __init__(self, logger: logging.Logger, context: Mapping[str, Any] | None = None):
        context = context or {}
        clean = {
            key: context[key] for key in self.context_keys if context.get(key) is not None
        }
        for key, keep in self.masked.items():
            if key in clean:
                clean[key] = mask_sensitive(str(clean[key]), keep)
        super().__init__(logger, clean)

    def process(self, msg: str, kwargs: MutableMapping[str, Any]):
        # call-site extras win over the bound session context
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


def get_auth_logger(
    *,
    base_logger_name: str = "siwe-session.auth",
    address: str | None = None,
    domain: str | None = None,
    correlation_id: str | None = None,
) -> logging.LoggerAdapter:
    """Return a LoggerAdapter pre-filled with session context."""
    logger = logging.getLogger(base_logger_name)
    return _SessionLoggerAdapter(
        logger,
        {
            "address": address,
            "domain": domain,
            "correlation_id": correlation_id,
        },
    )
