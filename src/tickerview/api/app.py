"""FastAPI application factory."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tickerview.api.deps import AppState
from tickerview.api.routes import router
from tickerview.api.schemas import ErrorResponse
from tickerview.core.config import TickerviewConfig, load_config
from tickerview.core.exceptions import ConfigError, TickerviewError
from tickerview.quotes.fetcher import AlphaVantageFetcher, QuoteFetcher
from tickerview.quotes.pipeline import QuotePipeline
from tickerview.view.state import QuoteView

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown lifecycle."""
    config = app.state._pending_config or load_config()
    fetcher = app.state._pending_fetcher or AlphaVantageFetcher(config.provider)
    pipeline = QuotePipeline(fetcher)
    view = QuoteView(pipeline, config.view)

    state = AppState(config=config, fetcher=fetcher, pipeline=pipeline, view=view)
    # Initial load runs in the background
    state.startup_task = asyncio.create_task(view.start())
    app.state.app_state = state

    yield

    if not state.startup_task.done():
        state.startup_task.cancel()
        with suppress(asyncio.CancelledError):
            await state.startup_task
    close = getattr(fetcher, "close", None)
    if close is not None:
        await close()


def create_app(
    config: TickerviewConfig | None = None,
    fetcher: QuoteFetcher | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    import tickerview

    app = FastAPI(
        title="tickerview API",
        description="Daily price history charts for a single equity",
        version=tickerview.__version__,
        lifespan=lifespan,
    )

    # Stash config and fetcher so lifespan can retrieve them
    app.state._pending_config = config
    app.state._pending_fetcher = fetcher

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api")

    @app.exception_handler(TickerviewError)
    async def tickerview_exception_handler(request: Request, exc: TickerviewError):
        status_map = {
            ConfigError: 400,
        }
        status = status_map.get(type(exc), 500)
        return JSONResponse(
            status_code=status,
            content=ErrorResponse(error=type(exc).__name__, detail=str(exc)).model_dump(),
        )

    return app
