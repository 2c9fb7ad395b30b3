"""Nonce generation for sign-in messages.

EIP-4361 requires an alphanumeric nonce of at least 8 characters that is
never reused.  The default length of 17 characters gives roughly 96 bits of
entropy.

This module intentionally performs **no logging** of generated values.
"""

from __future__ import annotations

import secrets
import string
from typing import Final

_NONCE_LEN: Final[int] = 17
_MIN_NONCE_LEN: Final[int] = 8
_ALLOWED_CHARS: Final[str] = string.ascii_letters + string.digits


def generate_nonce(length: int = _NONCE_LEN) -> str:
    """Return a cryptographically secure alphanumeric nonce.

    Parameters
    ----------
    length:
        Number of characters, at least 8 (default 17).
    """
    if length < _MIN_NONCE_LEN:
        raise ValueError("nonce must be at least 8 characters")
    return "".join(secrets.choice(_ALLOWED_CHARS) for _ in range(length))
