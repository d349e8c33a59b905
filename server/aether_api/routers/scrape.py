"""GET /api/scrape: fetch a page and return its plain text."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from aether_api.config import settings
from aether_api.schemas import ErrorResponse, ScrapeResponse
from aether_api.scrape import ScrapeError, scrape

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

_ERROR_RESPONSES = {code: {"model": ErrorResponse} for code in (400, 408, 500)}


@router.get("/scrape", response_model=ScrapeResponse, responses=_ERROR_RESPONSES)
async def scrape_url(
    request: Request, url: str | None = None
) -> ScrapeResponse | JSONResponse:
    """Proxy a cross-origin page fetch for the chat assistant."""
    url = (url or "").strip()
    if not url:
        return JSONResponse(
            {"error": "Missing or invalid url parameter"}, status_code=400
        )

    client = request.app.state.http_client
    try:
        result = await scrape(client, url, settings)
    except ScrapeError as e:
        return JSONResponse({"error": str(e)}, status_code=e.status_code)
    except Exception:
        log.exception("Unexpected scrape failure for %s", url)
        return JSONResponse({"error": "Internal server error"}, status_code=500)

    log.info("Scraped %s (%d chars)", url, result.length)
    return ScrapeResponse(**result.to_dict())
