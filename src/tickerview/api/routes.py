"""FastAPI route definitions for the tickerview API."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

import tickerview
from tickerview.api.deps import get_view
from tickerview.api.schemas import (
    ChartResponse,
    HealthResponse,
    SearchRequest,
    ViewStateResponse,
    ViewUpdateRequest,
)
from tickerview.view.state import QuoteView

router = APIRouter()


def _view_state(view: QuoteView) -> ViewStateResponse:
    return ViewStateResponse(
        symbol=view.symbol,
        chart_kind=view.chart_kind,
        window_days=view.window_days,
        window_choices=list(view.window_choices),
        theme=view.theme,
        fetch_state=view.fetch_state,
    )


# -- Health --


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Liveness probe."""
    return HealthResponse(status="ok", version=tickerview.__version__)


# -- View state --


@router.get("/state", response_model=ViewStateResponse)
async def get_state(view: QuoteView = Depends(get_view)):
    """Current view state and fetch state."""
    return _view_state(view)


@router.patch("/view", response_model=ViewStateResponse)
async def update_view(
    request: ViewUpdateRequest,
    view: QuoteView = Depends(get_view),
):
    """Change presentation state. Never fetches; a window change re-filters locally."""
    if request.window_days is not None and request.window_days not in view.window_choices:
        raise HTTPException(
            status_code=422,
            detail=f"window_days must be one of {list(view.window_choices)}",
        )

    if request.symbol is not None:
        view.set_symbol(request.symbol)
    if request.chart_kind is not None:
        view.set_chart_kind(request.chart_kind)
    if request.theme is not None:
        view.set_theme(request.theme)
    if request.window_days is not None:
        view.set_window(request.window_days)

    return _view_state(view)


@router.post("/view/theme/toggle", response_model=ViewStateResponse)
async def toggle_theme(view: QuoteView = Depends(get_view)):
    """Flip between light and dark themes."""
    view.toggle_theme()
    return _view_state(view)


# -- Search --


@router.post("/search", response_model=ViewStateResponse)
async def search(
    request: SearchRequest | None = None,
    view: QuoteView = Depends(get_view),
):
    """Refresh the series for the current (or given) symbol and window.

    Fetch failures are reported in ``fetch_state``, not as HTTP errors.
    """
    if request is not None and request.symbol is not None:
        view.set_symbol(request.symbol)
    await view.search()
    return _view_state(view)


# -- Chart --


@router.get("/chart", response_model=ChartResponse)
async def get_chart(view: QuoteView = Depends(get_view)):
    """Chart description and latest-day summary for the current result."""
    return ChartResponse(
        symbol=view.symbol,
        chart_kind=view.chart_kind,
        theme=view.theme,
        chart=view.chart(),
        latest=view.latest(),
    )
