"""Dependency injection for FastAPI routes."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from fastapi import Request

from tickerview.core.config import TickerviewConfig
from tickerview.quotes.fetcher import QuoteFetcher
from tickerview.quotes.pipeline import QuotePipeline
from tickerview.view.state import QuoteView


@dataclass
class AppState:
    """Shared application state, attached to app.state during lifespan."""

    config: TickerviewConfig
    fetcher: QuoteFetcher
    pipeline: QuotePipeline
    view: QuoteView
    startup_task: asyncio.Task | None = None


def get_app_state(request: Request) -> AppState:
    """Dependency: retrieve AppState from the request."""
    return request.app.state.app_state


def get_config(request: Request) -> TickerviewConfig:
    """Dependency: retrieve config."""
    return request.app.state.app_state.config


def get_view(request: Request) -> QuoteView:
    """Dependency: retrieve the view-state machine."""
    return request.app.state.app_state.view
