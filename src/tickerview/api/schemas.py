"""API-specific request/response schemas (Pydantic v2)."""

from __future__ import annotations

from pydantic import BaseModel, Field

from tickerview.core.models import ChartKind, FetchState, Theme
from tickerview.view.chart import ChartSpec, LatestQuote


# -- Error --


class ErrorResponse(BaseModel):
    """Standard error envelope."""

    error: str
    detail: str | None = None


# -- Health --


class HealthResponse(BaseModel):
    status: str
    version: str


# -- View state --


class ViewStateResponse(BaseModel):
    """Full view state, including the pipeline's current fetch state."""

    symbol: str
    chart_kind: ChartKind
    window_days: int
    window_choices: list[int]
    theme: Theme
    fetch_state: FetchState


class ViewUpdateRequest(BaseModel):
    """Presentation changes. None of these trigger a network fetch."""

    symbol: str | None = Field(None, min_length=1, max_length=32)
    chart_kind: ChartKind | None = None
    window_days: int | None = Field(None, ge=1)
    theme: Theme | None = None


class SearchRequest(BaseModel):
    """Optional symbol to set before searching."""

    symbol: str | None = Field(None, min_length=1, max_length=32)


# -- Chart --


class ChartResponse(BaseModel):
    """Chart for the current result. ``chart`` is null unless data is ready."""

    symbol: str
    chart_kind: ChartKind
    theme: Theme
    chart: ChartSpec | None = None
    latest: LatestQuote | None = None
