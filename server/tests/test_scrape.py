"""Tests for the scrape proxy: URL policy, text extraction and endpoints."""

from __future__ import annotations

import httpx
import pytest

from aether_api.config import Settings
from aether_api.main import app
from aether_api.scrape import (
    ACCEPT_HEADER,
    EmptyContentError,
    InvalidURLError,
    ScrapeTimeoutError,
    UpstreamStatusError,
    create_http_client,
    extract_text,
    is_allowed_url,
    scrape,
)

PAGE = """
<html>
  <head>
    <style>body { color: red; }</style>
    <script type="text/javascript">var secret = "hidden";</script>
  </head>
  <body>
    <h1>Studio&nbsp;Aether</h1>
    <p>Brand &amp; web design &lt;since 2019&gt;. &quot;Quiet&quot; work &#39;n play.</p>
  </body>
</html>
"""


class TestUrlPolicy:
    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com/work",
            "http://studio-aether.dev",
            "https://8.8.8.8/",
            "HTTPS://EXAMPLE.COM",
        ],
    )
    def test_public_urls_allowed(self, url):
        assert is_allowed_url(url)

    @pytest.mark.parametrize(
        "url",
        [
            "",
            "not a url",
            "ftp://example.com/file",
            "file:///etc/passwd",
            "javascript:alert(1)",
            "http://",
            "http://localhost:3000",
            "http://api.localhost/",
            "http://127.0.0.1/",
            "http://[::1]/",
            "http://10.1.2.3/",
            "http://172.16.0.1/",
            "http://192.168.1.10/",
            "http://169.254.169.254/latest/meta-data",
            "http://0.0.0.0/",
            "http://[fe80::1]/",
        ],
    )
    def test_blocked_urls(self, url):
        assert not is_allowed_url(url)

    def test_loopback_allowed_in_development(self):
        assert is_allowed_url("http://localhost:3000", allow_loopback=True)
        assert is_allowed_url("http://127.0.0.1:8080/", allow_loopback=True)

    def test_private_still_blocked_in_development(self):
        assert not is_allowed_url("http://192.168.1.10/", allow_loopback=True)

    @pytest.mark.parametrize(
        "url",
        [
            "http://127.1/",
            "http://2130706433/",
            "http://0x7f.0.0.1/",
            "http://017700000001/",
            "http://0/",
            "http://10.1/",
            "http://192.168.257/",
            "http://127.0.0.1./",
            "http://localhost./",
            "http://[::ffff:127.0.0.1]/",
            "http://[::ffff:10.0.0.1]/",
        ],
    )
    def test_shorthand_and_mapped_addresses_blocked(self, url):
        assert not is_allowed_url(url)

    def test_shorthand_public_address_allowed(self):
        assert is_allowed_url("http://134744072/")  # 8.8.8.8

    def test_shorthand_loopback_allowed_in_development(self):
        assert is_allowed_url("http://127.1/", allow_loopback=True)
        assert not is_allowed_url("http://10.1/", allow_loopback=True)


class TestExtractText:
    def test_strips_markup_and_decodes_entities(self):
        text = extract_text(PAGE)
        assert text == (
            "Studio Aether Brand & web design <since 2019>. \"Quiet\" work 'n play."
        )

    def test_script_and_style_removed(self):
        text = extract_text(PAGE)
        assert "secret" not in text
        assert "color" not in text

    def test_truncates(self):
        assert len(extract_text("<p>" + "a" * 6000 + "</p>")) == 5000
        assert extract_text("abcdef", max_chars=3) == "abc"

    def test_entities_decode_in_order(self):
        assert extract_text("&amp;lt;b&amp;gt;") == "<b>"

    def test_empty_html(self):
        assert extract_text("<html><body>  </body></html>") == ""


def _client(handler, cfg: Settings | None = None) -> httpx.AsyncClient:
    return create_http_client(
        cfg or Settings(app_env="production"), transport=httpx.MockTransport(handler)
    )


class TestScrape:
    @pytest.mark.asyncio
    async def test_success_sends_bot_headers(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["ua"] = request.headers["user-agent"]
            seen["accept"] = request.headers["accept"]
            return httpx.Response(200, text=PAGE)

        async with _client(handler) as client:
            result = await scrape(client, "https://example.com", Settings(app_env="production"))

        assert result.url == "https://example.com"
        assert result.content.startswith("Studio Aether")
        assert result.length == len(result.content)
        assert seen["ua"] == "Mozilla/5.0 (compatible; StudioAetherBot/1.0)"
        assert seen["accept"] == ACCEPT_HEADER

    @pytest.mark.asyncio
    async def test_upstream_status_is_forwarded(self):
        async with _client(lambda r: httpx.Response(404)) as client:
            with pytest.raises(UpstreamStatusError) as exc:
                await scrape(client, "https://example.com/missing")
        assert exc.value.status_code == 404
        assert str(exc.value) == "Failed to fetch URL: Not Found"

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with _client(handler) as client:
            with pytest.raises(ScrapeTimeoutError) as exc:
                await scrape(client, "https://slow.example.com")
        assert exc.value.status_code == 408

    @pytest.mark.asyncio
    async def test_too_little_text(self):
        async with _client(lambda r: httpx.Response(200, text="<p>hi</p>")) as client:
            with pytest.raises(EmptyContentError):
                await scrape(client, "https://example.com")

    @pytest.mark.asyncio
    async def test_redirect_to_private_host_blocked(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "example.com":
                return httpx.Response(302, headers={"Location": "http://10.0.0.5/admin"})
            return httpx.Response(200, text=PAGE)

        async with _client(handler) as client:
            with pytest.raises(InvalidURLError):
                await scrape(client, "https://example.com")

    @pytest.mark.asyncio
    async def test_redirect_to_shorthand_loopback_blocked(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "example.com":
                return httpx.Response(302, headers={"Location": "http://2130706433/"})
            return httpx.Response(200, text=PAGE)

        async with _client(handler) as client:
            with pytest.raises(InvalidURLError):
                await scrape(client, "https://example.com")

    @pytest.mark.asyncio
    async def test_invalid_url_never_fetched(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, text=PAGE)

        async with _client(handler) as client:
            with pytest.raises(InvalidURLError):
                await scrape(client, "http://127.0.0.1/")
        assert calls == []

    @pytest.mark.asyncio
    async def test_surrounding_whitespace_is_stripped(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, text=PAGE)

        async with _client(handler) as client:
            result = await scrape(client, "  https://example.com/work \n")
        assert result.url == "https://example.com/work"
        assert seen == ["https://example.com/work"]


# ── Endpoints ────────────────────────────────────────────────────────


async def _get(path: str, handler=None, **kwargs) -> httpx.Response:
    handler = handler or (lambda r: httpx.Response(200, text=PAGE))
    app.state.http_client = _client(handler)
    transport = httpx.ASGITransport(app=app)
    try:
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            return await client.get(path, **kwargs)
    finally:
        await app.state.http_client.aclose()


@pytest.mark.asyncio
async def test_scrape_endpoint_success():
    resp = await _get("/api/scrape", params={"url": "https://example.com"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["url"] == "https://example.com"
    assert body["length"] == len(body["content"])
    assert "Brand & web design" in body["content"]


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [{}, {"url": ""}, {"url": "   "}])
async def test_scrape_endpoint_missing_url(params):
    resp = await _get("/api/scrape", params=params)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing or invalid url parameter"}


@pytest.mark.asyncio
async def test_scrape_endpoint_strips_url():
    resp = await _get("/api/scrape", params={"url": "   https://example.com  "})
    assert resp.status_code == 200
    assert resp.json()["url"] == "https://example.com"


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["http://127.1/", "http://2130706433/", "http://10.1/"])
async def test_scrape_endpoint_rejects_shorthand_internal_host(url):
    resp = await _get("/api/scrape", params={"url": url})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid URL or protocol not allowed"}


@pytest.mark.asyncio
async def test_scrape_endpoint_rejects_private_host():
    resp = await _get("/api/scrape", params={"url": "http://192.168.0.1/"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid URL or protocol not allowed"}


@pytest.mark.asyncio
async def test_scrape_endpoint_forwards_upstream_status():
    resp = await _get(
        "/api/scrape",
        handler=lambda r: httpx.Response(503),
        params={"url": "https://example.com"},
    )
    assert resp.status_code == 503
    assert resp.json() == {"error": "Failed to fetch URL: Service Unavailable"}


@pytest.mark.asyncio
async def test_scrape_endpoint_empty_content():
    resp = await _get(
        "/api/scrape",
        handler=lambda r: httpx.Response(200, text="<script>x()</script>"),
        params={"url": "https://example.com"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Could not extract meaningful content from URL"}


@pytest.mark.asyncio
async def test_scrape_endpoint_transport_error_is_500():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    resp = await _get("/api/scrape", handler=handler, params={"url": "https://example.com"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "connection refused"}


@pytest.mark.asyncio
async def test_health():
    resp = await _get("/api/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["timestamp"].endswith("Z")


@pytest.mark.asyncio
async def test_cors_allows_dev_origin():
    resp = await _get(
        "/api/scrape",
        headers={"Origin": "http://localhost:3000"},
        params={"url": "https://example.com"},
    )
    assert resp.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert resp.headers["access-control-allow-credentials"] == "true"


@pytest.mark.asyncio
async def test_cors_unknown_origin_gets_no_grant():
    resp = await _get(
        "/api/scrape",
        headers={"Origin": "https://evil.example"},
        params={"url": "https://example.com"},
    )
    assert "access-control-allow-origin" not in resp.headers
