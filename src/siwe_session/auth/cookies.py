"""Session cookie extraction strategies.

After a successful login the server sets one or more session cookies.  How
those cookies can be read depends on the runtime:

* :class:`SingleHeaderCookieExtractor` – only one combined ``set-cookie``
  value is visible and has to be split on ``;``.
* :class:`MultiHeaderCookieExtractor` – every ``set-cookie`` header is
  available separately.
* :class:`CookieStoreExtractor` – headers are not accessible at all; the
  cookies are looked up in a platform cookie store keyed by URL.

Each strategy returns a fresh ``name -> value`` mapping; attributes such as
``Path`` or ``Expires`` are dropped.  The owning session replaces its map
wholesale with the result.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Mapping, Protocol, runtime_checkable

import httpx

_LOG = logging.getLogger("siwe-session.auth.cookies")

CookieMap = dict[str, str]

# A comma starts a new cookie only when a ``name=`` token follows it; the
# comma inside ``Expires=Wed, 21 Oct 2015 ...`` does not match.
_COOKIE_BOUNDARY = re.compile(r",\s*(?=[!#$%&'*+\-.^_`|~0-9A-Za-z]+=)")

_ATTRIBUTES = frozenset(
    {
        "path",
        "domain",
        "expires",
        "max-age",
        "secure",
        "httponly",
        "samesite",
        "priority",
        "partitioned",
        "version",
        "comment",
    }
)


def _parse_pair(fragment: str) -> tuple[str, str] | None:
    name, sep, value = fragment.strip().partition("=")
    name = name.strip()
    if not sep or not name or name.lower() in _ATTRIBUTES:
        return None
    return name, value.strip()


def _collect(fragments: Iterable[str]) -> CookieMap:
    cookies: CookieMap = {}
    for fragment in fragments:
        pair = _parse_pair(fragment)
        if pair:
            cookies[pair[0]] = pair[1]
    return cookies


def serialize_cookies(cookies: Mapping[str, str]) -> str:
    """Render *cookies* as a ``Cookie`` request header value."""
    return "; ".join(f"{name}={value}" for name, value in cookies.items())


@runtime_checkable
class CookieExtractor(Protocol):
    """Strategy turning a login response into a cookie map."""

    async def extract(self, response: httpx.Response, *, url: str) -> CookieMap: ...


class SingleHeaderCookieExtractor:
    """Split one combined ``set-cookie`` value on ``;``.

    Repeated headers arrive joined with ``", "``; the value is first cut back
    into one string per cookie so later cookies are not read as attributes.
    """

    async def extract(self, response: httpx.Response, *, url: str) -> CookieMap:
        raw = response.headers.get("set-cookie")
        if not raw:
            return {}
        cookies: CookieMap = {}
        for cookie_string in _COOKIE_BOUNDARY.split(raw):
            cookies.update(_collect(cookie_string.split(";")))
        return cookies


class MultiHeaderCookieExtractor:
    """Read each ``set-cookie`` header and keep its leading ``name=value``."""

    async def extract(self, response: httpx.Response, *, url: str) -> CookieMap:
        values = response.headers.get_list("set-cookie")
        return _collect(value.split(";", 1)[0] for value in values)


@runtime_checkable
class CookieStore(Protocol):
    """Platform cookie store queried by URL."""

    async def get(self, url: str) -> Mapping[str, str]: ...


class HttpxCookieStore:
    """Expose the cookie jar of an ``httpx`` client as a :class:`CookieStore`.

    Matching is left to the jar's policy, so domain, path, expiry and
    ``Secure`` rules are the ones the client itself applies when sending.
    """

    def __init__(self, cookies: httpx.Cookies) -> None:
        self._cookies = cookies

    async def get(self, url: str) -> Mapping[str, str]:
        request = httpx.Request("GET", url)
        self._cookies.set_cookie_header(request)
        header = request.headers.get("cookie")
        if not header:
            return {}
        return _collect(header.split(";"))


class CookieStoreExtractor:
    """Ignore the response and query *store* for cookies set on *url*."""

    def __init__(self, store: CookieStore) -> None:
        self._store = store

    async def extract(self, response: httpx.Response, *, url: str) -> CookieMap:
        cookies = await self._store.get(url)
        _LOG.debug("Cookie store returned %d cookie(s)", len(cookies))
        return dict(cookies)
