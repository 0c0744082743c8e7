"""View-state machine: decides when the pipeline refreshes.

Only ``start`` and ``search`` reach the network. Symbol edits, chart kind
and theme are presentation state. A window change re-filters the history
already fetched for the current result; it does not refetch.
"""

from __future__ import annotations

import logging

from tickerview.core.config import ViewConfig
from tickerview.core.models import ChartKind, FetchState, Ready, Theme
from tickerview.quotes.pipeline import QuotePipeline
from tickerview.view.chart import ChartSpec, LatestQuote, build_chart, latest_quote

logger = logging.getLogger(__name__)


class QuoteView:
    """Presentation state around a QuotePipeline.

    Parameters
    ----------
    pipeline : QuotePipeline
        The pipeline whose fetch state this view shows.
    config : ViewConfig | None
        Initial symbol, window, chart kind, theme and window choices.
    """

    def __init__(self, pipeline: QuotePipeline, config: ViewConfig | None = None) -> None:
        self._pipeline = pipeline
        self._config = config or ViewConfig()
        self._symbol = self._config.default_symbol
        self._window_days = self._config.default_window
        self._chart_kind = self._config.default_chart_kind
        self._theme = self._config.theme
        self._started = False

    @property
    def pipeline(self) -> QuotePipeline:
        return self._pipeline

    @property
    def symbol(self) -> str:
        return self._symbol

    @property
    def window_days(self) -> int:
        return self._window_days

    @property
    def window_choices(self) -> tuple[int, ...]:
        return self._config.window_choices

    @property
    def chart_kind(self) -> ChartKind:
        return self._chart_kind

    @property
    def theme(self) -> Theme:
        return self._theme

    @property
    def fetch_state(self) -> FetchState:
        return self._pipeline.state

    async def start(self) -> None:
        """Run the one implicit refresh for the configured defaults."""
        if self._started:
            return
        self._started = True
        await self._pipeline.refresh(
            self._config.default_symbol, self._config.default_window
        )

    def set_symbol(self, text: str) -> None:
        """Store the symbol text, uppercased. Does not refresh."""
        self._symbol = text.strip().upper()

    async def search(self) -> None:
        """Refresh the pipeline for the current symbol and window."""
        self._started = True
        await self._pipeline.refresh(self._symbol, self._window_days)

    def set_chart_kind(self, kind: ChartKind | str) -> None:
        self._chart_kind = ChartKind(kind)

    def set_window(self, window_days: int) -> None:
        """Select a new trailing window and re-filter the current result.

        Raises:
            ValueError: If ``window_days`` is not one of the window choices.
        """
        if window_days not in self._config.window_choices:
            raise ValueError(
                f"window_days must be one of {list(self._config.window_choices)}, "
                f"got {window_days!r}"
            )
        self._window_days = window_days
        self._pipeline.apply_window(window_days)

    def set_theme(self, theme: Theme | str) -> None:
        self._theme = Theme(theme)

    def toggle_theme(self) -> Theme:
        self._theme = Theme.DARK if self._theme == Theme.LIGHT else Theme.LIGHT
        return self._theme

    def chart(self) -> ChartSpec | None:
        """Chart for the current result, or None unless the state is Ready."""
        state = self._pipeline.state
        if not isinstance(state, Ready):
            return None
        return build_chart(state.records, self._chart_kind, self._theme)

    def latest(self) -> LatestQuote | None:
        state = self._pipeline.state
        if not isinstance(state, Ready):
            return None
        return latest_quote(state.records)
