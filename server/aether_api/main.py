"""Scrape proxy server entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from aether_api.config import settings
from aether_api.routers.scrape import router as scrape_router
from aether_api.schemas import HealthResponse
from aether_api.scrape import create_http_client

log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open/close the shared outbound HTTP client."""
    app.state.http_client = create_http_client(settings)
    log.info(
        "Scrape proxy starting (env=%s); allowed origins: %s",
        settings.app_env,
        ", ".join(settings.allowed_origins),
    )

    yield

    await app.state.http_client.aclose()


app = FastAPI(
    title="Studio Aether Scrape Proxy",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

app.include_router(scrape_router)


@app.get("/api/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness check."""
    now = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return HealthResponse(status="ok", timestamp=now.replace("+00:00", "Z"))


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
    )
    uvicorn.run(
        "aether_api.main:app",
        host=settings.host,
        port=settings.port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
