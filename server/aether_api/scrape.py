"""Fetch a public web page and reduce it to plain text for the chat assistant."""

from __future__ import annotations

import ipaddress
import logging
import re
import socket
from dataclasses import dataclass
from urllib.parse import urlsplit

import httpx

from aether_api.config import Settings, settings

log = logging.getLogger(__name__)

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address

ACCEPT_HEADER = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"

_ALLOWED_SCHEMES = {"http", "https"}
_LOCAL_HOSTNAMES = {"localhost", "localhost.localdomain"}

_SCRIPT_RE = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style[^>]*>[\s\S]*?</style>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_SPACE_RE = re.compile(r"\s+")

# Applied in order, so "&amp;lt;" decodes all the way to "<".
_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
)


# ── Errors ───────────────────────────────────────────────────────────


class ScrapeError(RuntimeError):
    """Base error for scrape failures; carries the HTTP status to report."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class InvalidURLError(ScrapeError):
    """URL is malformed, not http(s), or points at a non-public host."""

    status_code = 400


class UpstreamStatusError(ScrapeError):
    """Target answered with a non-2xx status."""


class ScrapeTimeoutError(ScrapeError):
    status_code = 408


class EmptyContentError(ScrapeError):
    status_code = 400


@dataclass(frozen=True, slots=True)
class ScrapeResult:
    content: str
    url: str

    @property
    def length(self) -> int:
        return len(self.content)

    def to_dict(self) -> dict:
        return {"content": self.content, "url": self.url, "length": self.length}


# ── URL policy ───────────────────────────────────────────────────────


def _host_address(hostname: str) -> IPAddress | None:
    """The address a literal host denotes, or None for a DNS name.

    Covers the shorthand IPv4 forms the OS resolver accepts ("127.1",
    "2130706433", "0x7f.0.0.1", "0") and IPv4-mapped IPv6.
    """
    try:
        ip = ipaddress.ip_address(hostname)
    except ValueError:
        try:
            ip = ipaddress.IPv4Address(socket.inet_aton(hostname))
        except (OSError, ValueError):
            return None
    if ip.version == 6 and ip.ipv4_mapped is not None:
        return ip.ipv4_mapped
    return ip


def _is_non_public(ip: IPAddress) -> bool:
    return (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_reserved
        or ip.is_multicast
        or ip.is_unspecified
    )


def is_allowed_url(url: str, *, allow_loopback: bool = False) -> bool:
    """True for http(s) URLs whose host is not local or private.

    DNS names are not resolved; literal addresses (in any form the resolver
    accepts) and localhost names are screened. With *allow_loopback*
    (development), localhost and loopback addresses pass, other private
    ranges still do not.
    """
    try:
        parts = urlsplit(url)
        hostname = parts.hostname
    except ValueError:
        return False
    if parts.scheme.lower() not in _ALLOWED_SCHEMES or not hostname:
        return False
    hostname = hostname.rstrip(".")
    if not hostname:
        return False
    if hostname in _LOCAL_HOSTNAMES or hostname.endswith(".localhost"):
        return allow_loopback
    ip = _host_address(hostname)
    if ip is None:
        return True
    if ip.is_loopback:
        return allow_loopback
    return not _is_non_public(ip)


# ── Text extraction ──────────────────────────────────────────────────


def extract_text(html: str, max_chars: int = 5000) -> str:
    """Strip scripts, styles and tags, decode common entities, squash whitespace."""
    cleaned = _SCRIPT_RE.sub("", html)
    cleaned = _STYLE_RE.sub("", cleaned)
    cleaned = _TAG_RE.sub(" ", cleaned)
    for entity, char in _ENTITIES:
        cleaned = cleaned.replace(entity, char)
    cleaned = _SPACE_RE.sub(" ", cleaned).strip()
    return cleaned[:max_chars]


# ── Fetching ─────────────────────────────────────────────────────────


def create_http_client(
    cfg: Settings = settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Shared client for page fetches.

    Redirects are followed, and every hop is re-checked against the URL
    policy before it is sent.
    """

    async def _check_request(request: httpx.Request) -> None:
        if not is_allowed_url(str(request.url), allow_loopback=cfg.development):
            raise InvalidURLError("Invalid URL or protocol not allowed")

    return httpx.AsyncClient(
        timeout=httpx.Timeout(cfg.scrape_timeout_s),
        follow_redirects=True,
        headers={"User-Agent": cfg.scrape_user_agent, "Accept": ACCEPT_HEADER},
        event_hooks={"request": [_check_request]},
        transport=transport,
    )


async def scrape(
    client: httpx.AsyncClient, url: str, cfg: Settings = settings
) -> ScrapeResult:
    """Fetch *url* and return its readable text.

    Raises:
        InvalidURLError: the URL fails the policy check.
        UpstreamStatusError: the target returned a non-2xx status.
        ScrapeTimeoutError: the fetch exceeded the configured timeout.
        EmptyContentError: too little text survived extraction.
        ScrapeError: any other transport failure.
    """
    url = url.strip()
    if not is_allowed_url(url, allow_loopback=cfg.development):
        raise InvalidURLError("Invalid URL or protocol not allowed")

    try:
        resp = await client.get(url)
    except httpx.TimeoutException as e:
        log.warning("Scrape timed out: %s", url)
        raise ScrapeTimeoutError("Request timeout") from e
    except httpx.HTTPError as e:
        log.warning("Scrape failed for %s: %s", url, e)
        raise ScrapeError(str(e) or "Internal server error") from e

    if not resp.is_success:
        log.info("Scrape target %s answered %d", url, resp.status_code)
        raise UpstreamStatusError(
            f"Failed to fetch URL: {resp.reason_phrase}",
            status_code=resp.status_code,
        )

    content = extract_text(resp.text, max_chars=cfg.scrape_max_chars)
    if len(content) < cfg.scrape_min_chars:
        raise EmptyContentError("Could not extract meaningful content from URL")
    return ScrapeResult(content=content, url=url)
