"""Pydantic models for the scrape proxy's HTTP responses."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ScrapeResponse(BaseModel):
    """Plain text pulled from a fetched page."""

    content: str
    url: str
    length: int = Field(ge=0)


class HealthResponse(BaseModel):
    status: str = "ok"
    timestamp: str


class ErrorResponse(BaseModel):
    error: str
