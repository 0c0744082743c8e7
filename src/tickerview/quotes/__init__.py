"""Quote acquisition and transformation.

Architecture
------------
    QuoteFetcher → AlphaVantageAdapter → filter_window → StateCell → view

Key abstractions:

- ``QuoteFetcher``: Protocol for one outbound request per symbol.
- ``AlphaVantageFetcher``: httpx implementation against Alpha Vantage.
- ``AlphaVantageAdapter``: Parses the daily series into ``DailyRecord`` tuples.
- ``StateCell``: Owned, observable ``FetchState``.
- ``QuotePipeline``: ``refresh(symbol, window_days)`` and local re-windowing.
"""

from tickerview.quotes.adapter import TIME_SERIES_KEY, AlphaVantageAdapter
from tickerview.quotes.fetcher import AlphaVantageFetcher, QuoteFetcher
from tickerview.quotes.pipeline import QuotePipeline, filter_window
from tickerview.quotes.state import StateCell, StateListener

__all__ = [
    "TIME_SERIES_KEY",
    # Protocols
    "QuoteFetcher",
    # Alpha Vantage
    "AlphaVantageFetcher",
    "AlphaVantageAdapter",
    # Pipeline
    "QuotePipeline",
    "StateCell",
    "StateListener",
    "filter_window",
]
