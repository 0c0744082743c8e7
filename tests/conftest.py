"""Shared pytest fixtures for tickerview."""

from __future__ import annotations

import asyncio
from datetime import date, timedelta
from typing import Any

import pytest

from tickerview.core.config import ProviderConfig, TickerviewConfig
from tickerview.core.models import DailyRecord


def make_entry(
    open_: float | str = 10,
    high: float | str = 12,
    low: float | str = 9,
    close: float | str = 11,
    volume: int | str = 1000,
) -> dict[str, str]:
    """One provider-shaped daily entry with string-encoded numbers."""
    return {
        "1. open": str(open_),
        "2. high": str(high),
        "3. low": str(low),
        "4. close": str(close),
        "5. volume": str(volume),
    }


def make_payload(series: dict[str, Any] | None = None) -> dict[str, Any]:
    """A TIME_SERIES_DAILY response body wrapping ``series``."""
    return {
        "Meta Data": {
            "1. Information": "Daily Prices (open, high, low, close) and Volumes",
            "2. Symbol": "AAPL",
        },
        "Time Series (Daily)": series if series is not None else {},
    }


def recent_payload(days: int, today: date | None = None) -> dict[str, Any]:
    """Payload with one entry per calendar day for the last ``days`` days.

    Entries are listed newest first, like the provider does. Close prices
    count up from 100 by day age so each day is distinguishable.
    """
    today = today or date.today()
    series = {}
    for age in range(days):
        day = today - timedelta(days=age)
        series[day.isoformat()] = make_entry(close=100 + age, volume=1000 + age)
    return make_payload(series)


class FakeFetcher:
    """In-memory QuoteFetcher.

    ``payloads`` maps symbol -> response body. ``errors`` maps symbol ->
    exception to raise. ``gates`` maps symbol -> asyncio.Event the fetch
    waits on before answering. Unknown symbols get the provider's
    error-message body.
    """

    def __init__(self, payloads: dict[str, Any] | None = None) -> None:
        self.payloads: dict[str, Any] = dict(payloads or {})
        self.errors: dict[str, Exception] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[str] = []
        self.closed = False

    async def fetch(self, symbol: str) -> dict[str, Any]:
        self.calls.append(symbol)
        gate = self.gates.get(symbol)
        if gate is not None:
            await gate.wait()
        if symbol in self.errors:
            raise self.errors[symbol]
        return self.payloads.get(
            symbol,
            {"Error Message": "Invalid API call. Please retry or visit the documentation."},
        )

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def provider_config() -> ProviderConfig:
    return ProviderConfig(
        api_key="test-key",
        base_url="https://www.alphavantage.co/query",
        request_timeout=5.0,
    )


@pytest.fixture
def config(provider_config: ProviderConfig) -> TickerviewConfig:
    return TickerviewConfig(provider=provider_config)


@pytest.fixture
def sample_record() -> DailyRecord:
    return DailyRecord(
        date=date(2024, 1, 2),
        open=10.0,
        high=12.0,
        low=9.0,
        close=11.0,
        volume=1000,
    )


@pytest.fixture
def january_payload() -> dict[str, Any]:
    """Five trading days in early January 2024, newest first."""
    return make_payload(
        {
            "2024-01-09": make_entry(14, 15, 13, 14.5, 1500),
            "2024-01-08": make_entry(13, 14, 12, 13.5, 1400),
            "2024-01-05": make_entry(12, 13, 11, 12.5, 1300),
            "2024-01-03": make_entry(11, 12, 10, 11.5, 1200),
            "2024-01-02": make_entry(10, 12, 9, 11, 1000),
        }
    )
