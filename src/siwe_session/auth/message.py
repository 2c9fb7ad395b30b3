"""Sign-In with Ethereum (EIP-4361) message construction.

The signature is computed over the exact text produced by
:meth:`SiweMessage.prepare_message`, so the layout below must match the
verifier's canonical form byte-for-byte::

    {scheme://}{domain} wants you to sign in with your Ethereum account:
    {address}

    {statement}

    URI: {uri}
    Version: {version}
    Chain ID: {chain_id}
    Nonce: {nonce}
    Issued At: {issued_at}
    Expiration Time: {expiration_time}
    Not Before: {not_before}
    Request ID: {request_id}
    Resources:
    - {resource}

Optional trailing fields are omitted entirely when unset.  When there is no
statement the blank line that would surround it collapses into two.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from eth_utils import add_0x_prefix, is_address, is_checksum_address, remove_0x_prefix
from eth_utils import to_checksum_address as _eth_checksum

from siwe_session.auth.clock import Clock, default_clock, from_ms, now_ms, to_iso8601, to_ms
from siwe_session.auth.errors import SigningError
from siwe_session.auth.models import SessionConfig, SignedLogin
from siwe_session.auth.nonce import generate_nonce

_LOG = logging.getLogger("siwe-session.auth.message")

_HEADER_SUFFIX = " wants you to sign in with your Ethereum account:"


def to_checksum_address(address: str) -> str:
    """Return the EIP-55 mixed-case form of *address*.

    All-lower and all-upper hex is accepted as is; mixed case is taken to be
    a checksum and must already be the correct one.

    Raises
    ------
    ValueError
        If *address* is not a 20-byte hex account address, or carries a
        mixed-case checksum that does not match.
    """
    if not is_address(address.lower()):
        raise ValueError(f"invalid account address: {address!r}")
    body = remove_0x_prefix(address)
    if body not in (body.lower(), body.upper()) and not is_checksum_address(add_0x_prefix(body)):
        raise ValueError(f"bad address checksum: {address!r}")
    return _eth_checksum(address.lower())


@dataclass(frozen=True, slots=True)
class SiweMessage:
    """Fields of an EIP-4361 message, timestamps already ISO-8601 strings."""

    domain: str
    address: str
    uri: str
    version: str
    chain_id: int
    nonce: str
    issued_at: str
    statement: str | None = None
    expiration_time: str | None = None
    not_before: str | None = None
    request_id: str | None = None
    resources: tuple[str, ...] = field(default_factory=tuple)
    scheme: str | None = None

    def prepare_message(self) -> str:
        """Return the canonical text that gets signed."""
        origin = f"{self.scheme}://{self.domain}" if self.scheme else self.domain
        prefix = f"{origin}{_HEADER_SUFFIX}\n{self.address}\n\n"
        if self.statement:
            prefix += f"{self.statement}\n"

        suffix = [
            f"URI: {self.uri}",
            f"Version: {self.version}",
            f"Chain ID: {self.chain_id}",
            f"Nonce: {self.nonce}",
            f"Issued At: {self.issued_at}",
        ]
        if self.expiration_time:
            suffix.append(f"Expiration Time: {self.expiration_time}")
        if self.not_before:
            suffix.append(f"Not Before: {self.not_before}")
        if self.request_id is not None:
            suffix.append(f"Request ID: {self.request_id}")
        if self.resources:
            suffix.append("\n".join(["Resources:", *(f"- {r}" for r in self.resources)]))

        return prefix + "\n" + "\n".join(suffix)


class LoginMessageBuilder:
    """Build and sign the login message for one :class:`SessionConfig`."""

    def __init__(
        self,
        config: SessionConfig,
        *,
        clock: Clock = default_clock,
        nonce_factory: Callable[[], str] = generate_nonce,
    ) -> None:
        self.config = config
        self._clock = clock
        self._nonce_factory = nonce_factory

    def create_message(self, issued_at: datetime) -> SiweMessage:
        """Return the unsigned message bound to *issued_at*."""
        issued_ms = to_ms(issued_at)
        expiration = from_ms(issued_ms + self.config.session_duration_ms)
        return SiweMessage(
            domain=self.config.domain,
            # Some verifiers compare against the checksummed signing address
            address=to_checksum_address(self.config.account_address),
            statement=self.config.statement,
            uri=self.config.login_url,
            version=self.config.version,
            chain_id=self.config.chain_id,
            nonce=self._nonce_factory(),
            issued_at=to_iso8601(from_ms(issued_ms)),
            expiration_time=to_iso8601(expiration),
        )

    async def build(self, issued_at: datetime | None = None) -> SignedLogin:
        """Construct the message and sign it with the configured signer.

        Raises
        ------
        SigningError
            If the signer raises; the original exception is chained.
        """
        if issued_at is None:
            issued_at = from_ms(now_ms(self._clock))
        siwe_message = self.create_message(issued_at)
        message = siwe_message.prepare_message()
        _LOG.debug(
            "Built login message domain=%s issued_at=%s expires=%s",
            siwe_message.domain,
            siwe_message.issued_at,
            siwe_message.expiration_time,
        )

        try:
            signature = await self.config.signer(message)
        except SigningError:
            raise
        except Exception as exc:
            raise SigningError(f"Signer rejected login message: {exc}") from exc

        return SignedLogin(
            message=message,
            signature=signature,
            expiration_time=from_ms(to_ms(issued_at) + self.config.session_duration_ms),
        )
