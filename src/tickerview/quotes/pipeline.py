"""QuotePipeline: fetch, normalize, window and publish a daily series.

Architecture
------------
    QuoteFetcher → AlphaVantageAdapter → filter_window → StateCell → view

Every ``refresh`` publishes ``Loading`` at once and then exactly one
terminal state (``Ready`` or ``Failed``). Refreshes are not serialized:
each one takes a generation token, and an outcome whose token is no longer
the newest is dropped instead of published. A slow earlier request can
therefore never overwrite the result of a later one.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import date, timedelta

from tickerview.core.exceptions import InvalidSymbolOrLimitError, TransportError
from tickerview.core.models import (
    DailyRecord,
    ErrorKind,
    Failed,
    FetchState,
    Loading,
    Ready,
    RecordSequence,
)
from tickerview.quotes.adapter import AlphaVantageAdapter
from tickerview.quotes.fetcher import QuoteFetcher
from tickerview.quotes.state import StateCell, StateListener

logger = logging.getLogger(__name__)


def filter_window(
    records: Iterable[DailyRecord], window_days: int, today: date
) -> RecordSequence:
    """Keep records dated on or after ``today - window_days`` (inclusive).

    A window reaching past ``date.min`` keeps every record.
    """
    try:
        cutoff = today - timedelta(days=window_days)
    except OverflowError:
        cutoff = date.min
    return tuple(r for r in records if r.date >= cutoff)


def _check_window(window_days: int) -> None:
    if isinstance(window_days, bool) or not isinstance(window_days, int) or window_days < 1:
        raise ValueError(f"window_days must be a positive integer, got {window_days!r}")


class QuotePipeline:
    """Drives the fetch state observed by the view layer.

    Parameters
    ----------
    fetcher : QuoteFetcher
        Source of raw provider payloads.
    adapter : AlphaVantageAdapter | None
        Payload parser. Uses default if None.
    today : Callable[[], date]
        Clock for the trailing-window cutoff. Default: ``date.today``.
    """

    def __init__(
        self,
        fetcher: QuoteFetcher,
        adapter: AlphaVantageAdapter | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._fetcher = fetcher
        self._adapter = adapter or AlphaVantageAdapter()
        self._today = today
        self._cell = StateCell()
        self._generation = 0
        # Full sorted history behind the current Ready state
        self._history: RecordSequence = ()

    @property
    def state(self) -> FetchState:
        """The current fetch state (read-only)."""
        return self._cell.value

    @property
    def generation(self) -> int:
        """Token of the most recently started refresh."""
        return self._generation

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` on every publish. Returns an unsubscribe callable."""
        return self._cell.subscribe(listener)

    async def refresh(self, symbol: str, window_days: int) -> None:
        """Fetch ``symbol`` and publish its trailing ``window_days`` of history.

        Never raises for fetch or parse failures; they are published as
        ``Failed``. Raises ``ValueError`` (publishing nothing) if
        ``window_days`` is not a positive integer.
        """
        _check_window(window_days)

        self._generation += 1
        token = self._generation
        self._history = ()
        logger.info("Refreshing %s (window=%dd, generation=%d)", symbol, window_days, token)
        self._cell.publish(Loading(symbol=symbol, window_days=window_days))

        outcome = await self._load(symbol, window_days)

        if token != self._generation:
            logger.debug(
                "Discarding stale result for %s (generation %d, current %d)",
                symbol,
                token,
                self._generation,
            )
            return

        if isinstance(outcome, Failed):
            self._history = ()
            self._cell.publish(outcome)
            return

        self._history = outcome
        records = filter_window(outcome, window_days, self._today())
        logger.info(
            "Published %d of %d records for %s", len(records), len(outcome), symbol
        )
        self._cell.publish(Ready(symbol=symbol, window_days=window_days, records=records))

    async def _load(self, symbol: str, window_days: int) -> RecordSequence | Failed:
        """Fetch and adapt; map every failure onto a Failed state."""
        try:
            payload = await self._fetcher.fetch(symbol)
        except TransportError as e:
            logger.error("Fetch failed for %s: %s", symbol, e)
            return Failed.of(symbol, window_days, ErrorKind.FETCH_FAILED)
        except Exception:
            logger.exception("Unexpected error fetching %s", symbol)
            return Failed.of(symbol, window_days, ErrorKind.FETCH_FAILED)

        try:
            return self._adapter.adapt(payload, symbol)
        except InvalidSymbolOrLimitError as e:
            logger.warning("%s", e)
            return Failed.of(symbol, window_days, ErrorKind.INVALID_SYMBOL_OR_LIMIT)
        except Exception:
            logger.exception("Unexpected error parsing response for %s", symbol)
            return Failed.of(symbol, window_days, ErrorKind.FETCH_FAILED)

    def apply_window(self, window_days: int) -> None:
        """Re-filter the retained history for a new window without refetching.

        Only acts when the current state is ``Ready``; otherwise the new
        window takes effect on the next refresh.
        """
        _check_window(window_days)

        current = self._cell.value
        if not isinstance(current, Ready) or current.window_days == window_days:
            return

        records = filter_window(self._history, window_days, self._today())
        logger.info(
            "Re-filtered %s to %dd locally (%d records)",
            current.symbol,
            window_days,
            len(records),
        )
        self._cell.publish(
            Ready(symbol=current.symbol, window_days=window_days, records=records)
        )
