"""Tests for tickerview.quotes.pipeline (QuotePipeline)."""

from __future__ import annotations

import asyncio
from datetime import date, timedelta

import pytest

from tickerview.core.exceptions import TransportError
from tickerview.core.models import (
    DailyRecord,
    ErrorKind,
    Failed,
    Idle,
    Loading,
    Ready,
)
from tickerview.quotes.pipeline import QuotePipeline, filter_window

from tests.conftest import FakeFetcher, make_entry, make_payload, recent_payload

TODAY = date(2024, 1, 10)


def _record(day: date) -> DailyRecord:
    return DailyRecord(date=day, open=1, high=1, low=1, close=1, volume=1)


@pytest.fixture
def fetcher(january_payload) -> FakeFetcher:
    return FakeFetcher({"AAPL": january_payload})


@pytest.fixture
def pipeline(fetcher) -> QuotePipeline:
    return QuotePipeline(fetcher, today=lambda: TODAY)


@pytest.fixture
def published(pipeline) -> list:
    states: list = []
    pipeline.subscribe(states.append)
    return states


class TestFilterWindow:
    def test_cutoff_is_inclusive(self):
        records = [_record(date(2024, 1, d)) for d in (2, 3, 4)]
        kept = filter_window(records, 7, TODAY)
        assert [r.date for r in kept] == [date(2024, 1, 3), date(2024, 1, 4)]

    def test_every_kept_record_within_bound(self):
        records = [_record(TODAY - timedelta(days=age)) for age in range(60)]
        for window in (1, 7, 30, 45, 90):
            cutoff = TODAY - timedelta(days=window)
            kept = filter_window(records, window, TODAY)
            assert all(r.date >= cutoff for r in kept)
            assert len(kept) == sum(1 for r in records if r.date >= cutoff)

    def test_window_longer_than_history_keeps_everything(self):
        records = [_record(date(2024, 1, d)) for d in (2, 3)]
        assert len(filter_window(records, 10_000, TODAY)) == 2

    def test_window_past_earliest_date_keeps_everything(self):
        records = [_record(date(2024, 1, d)) for d in (2, 3)]
        for window in (800_000, 10**9, 10**12):
            assert len(filter_window(records, window, TODAY)) == 2

    def test_returns_tuple(self):
        assert filter_window([], 7, TODAY) == ()


class TestInitialState:
    def test_starts_idle(self, pipeline):
        assert isinstance(pipeline.state, Idle)
        assert pipeline.generation == 0


class TestRefresh:
    async def test_spec_scenario_single_record(self):
        payload = make_payload({"2024-01-02": make_entry(10, 12, 9, 11, 1000)})
        pipeline = QuotePipeline(FakeFetcher({"AAPL": payload}), today=lambda: TODAY)

        await pipeline.refresh("AAPL", 30)

        state = pipeline.state
        assert isinstance(state, Ready)
        assert state.records == (
            DailyRecord(
                date=date(2024, 1, 2), open=10, high=12, low=9, close=11, volume=1000
            ),
        )

    async def test_publishes_loading_then_ready(self, pipeline, published):
        await pipeline.refresh("AAPL", 30)

        assert [type(s) for s in published] == [Loading, Ready]
        assert published[0] == Loading(symbol="AAPL", window_days=30)
        assert published[1].symbol == "AAPL"
        assert published[1].window_days == 30

    async def test_loading_is_visible_while_in_flight(self, pipeline, fetcher):
        fetcher.gates["AAPL"] = asyncio.Event()
        task = asyncio.create_task(pipeline.refresh("AAPL", 30))
        await asyncio.sleep(0)

        assert isinstance(pipeline.state, Loading)

        fetcher.gates["AAPL"].set()
        await task
        assert isinstance(pipeline.state, Ready)

    async def test_output_sorted_strictly_ascending(self, pipeline):
        await pipeline.refresh("AAPL", 30)
        dates = [r.date for r in pipeline.state.records]
        assert all(a < b for a, b in zip(dates, dates[1:]))

    async def test_window_filters_records(self, pipeline):
        await pipeline.refresh("AAPL", 7)
        dates = [r.date for r in pipeline.state.records]
        assert dates == [
            date(2024, 1, 3),
            date(2024, 1, 5),
            date(2024, 1, 8),
            date(2024, 1, 9),
        ]

    async def test_window_larger_than_history(self, pipeline):
        await pipeline.refresh("AAPL", 3650)
        assert isinstance(pipeline.state, Ready)
        assert len(pipeline.state.records) == 5

    async def test_everything_before_cutoff_is_ready_empty(self):
        payload = make_payload({"2023-01-02": make_entry()})
        pipeline = QuotePipeline(FakeFetcher({"AAPL": payload}), today=lambda: TODAY)

        await pipeline.refresh("AAPL", 7)
        assert pipeline.state == Ready(symbol="AAPL", window_days=7, records=())

    async def test_empty_series_is_ready_empty(self):
        pipeline = QuotePipeline(
            FakeFetcher({"AAPL": make_payload({})}), today=lambda: TODAY
        )
        await pipeline.refresh("AAPL", 30)
        assert isinstance(pipeline.state, Ready)
        assert pipeline.state.records == ()

    async def test_idempotent_for_unchanged_payload(self, pipeline):
        await pipeline.refresh("AAPL", 30)
        first = pipeline.state.records
        await pipeline.refresh("AAPL", 30)
        assert pipeline.state.records == first

    async def test_default_clock_is_today(self):
        pipeline = QuotePipeline(FakeFetcher({"AAPL": recent_payload(20)}))
        await pipeline.refresh("AAPL", 7)
        # Days aged 0..7 inclusive
        assert len(pipeline.state.records) == 8

    async def test_malformed_record_dropped_not_failed(self):
        payload = make_payload(
            {
                "2024-01-09": make_entry(close="n/a"),
                "2024-01-08": make_entry(close=13),
            }
        )
        pipeline = QuotePipeline(FakeFetcher({"AAPL": payload}), today=lambda: TODAY)

        await pipeline.refresh("AAPL", 30)
        assert isinstance(pipeline.state, Ready)
        assert [r.date for r in pipeline.state.records] == [date(2024, 1, 8)]

    async def test_huge_window_publishes_full_history(self, pipeline, published):
        await pipeline.refresh("AAPL", 800_000)

        assert [type(s) for s in published] == [Loading, Ready]
        assert pipeline.state.window_days == 800_000
        assert len(pipeline.state.records) == 5


class TestRefreshFailures:
    async def test_missing_series_key(self, pipeline, published):
        await pipeline.refresh("NOPE", 30)

        state = pipeline.state
        assert isinstance(state, Failed)
        assert state.error == ErrorKind.INVALID_SYMBOL_OR_LIMIT
        assert state.message == "Invalid symbol or API limit reached."
        assert [type(s) for s in published] == [Loading, Failed]

    async def test_transport_error(self, pipeline, fetcher):
        fetcher.errors["AAPL"] = TransportError("HTTP 500 from quote provider")

        await pipeline.refresh("AAPL", 30)

        assert pipeline.state == Failed.of("AAPL", 30, ErrorKind.FETCH_FAILED)

    async def test_unexpected_exception_does_not_escape(self, pipeline, fetcher):
        fetcher.errors["AAPL"] = RuntimeError("socket exploded")

        await pipeline.refresh("AAPL", 30)

        assert isinstance(pipeline.state, Failed)
        assert pipeline.state.error == ErrorKind.FETCH_FAILED

    async def test_failure_replaces_previous_records(self, pipeline, fetcher):
        await pipeline.refresh("AAPL", 30)
        assert isinstance(pipeline.state, Ready)

        fetcher.errors["AAPL"] = TransportError("down")
        await pipeline.refresh("AAPL", 30)

        assert isinstance(pipeline.state, Failed)
        assert not hasattr(pipeline.state, "records")

    @pytest.mark.parametrize("window", [0, -7, 7.5, True, "30"])
    async def test_invalid_window_rejected_without_publishing(
        self, pipeline, published, fetcher, window
    ):
        with pytest.raises(ValueError, match="positive integer"):
            await pipeline.refresh("AAPL", window)
        assert published == []
        assert fetcher.calls == []


class TestConcurrentRefresh:
    async def test_slow_earlier_request_cannot_clobber_later_result(self, fetcher):
        fetcher.payloads["SLOW"] = make_payload({"2024-01-05": make_entry(close=1)})
        fetcher.payloads["FAST"] = make_payload({"2024-01-05": make_entry(close=2)})
        fetcher.gates["SLOW"] = asyncio.Event()
        pipeline = QuotePipeline(fetcher, today=lambda: TODAY)

        slow = asyncio.create_task(pipeline.refresh("SLOW", 30))
        await asyncio.sleep(0)
        await pipeline.refresh("FAST", 30)
        assert pipeline.state.symbol == "FAST"

        fetcher.gates["SLOW"].set()
        await slow

        assert isinstance(pipeline.state, Ready)
        assert pipeline.state.symbol == "FAST"
        assert pipeline.state.records[0].close == 2.0

    async def test_only_latest_refresh_publishes(self, fetcher):
        fetcher.payloads["A"] = make_payload({"2024-01-05": make_entry()})
        fetcher.payloads["B"] = make_payload({"2024-01-05": make_entry()})
        fetcher.gates["A"] = asyncio.Event()
        fetcher.gates["B"] = asyncio.Event()
        pipeline = QuotePipeline(fetcher, today=lambda: TODAY)
        states: list = []
        pipeline.subscribe(states.append)

        first = asyncio.create_task(pipeline.refresh("A", 30))
        second = asyncio.create_task(pipeline.refresh("B", 30))
        await asyncio.sleep(0)
        assert pipeline.generation == 2

        fetcher.gates["A"].set()
        await first
        assert pipeline.state == Loading(symbol="B", window_days=30)

        fetcher.gates["B"].set()
        await second
        assert pipeline.state.symbol == "B"
        assert [type(s) for s in states] == [Loading, Loading, Ready]

    async def test_stale_failure_is_discarded(self, fetcher):
        fetcher.payloads["GOOD"] = make_payload({"2024-01-05": make_entry()})
        fetcher.errors["BAD"] = TransportError("down")
        fetcher.gates["BAD"] = asyncio.Event()
        pipeline = QuotePipeline(fetcher, today=lambda: TODAY)

        bad = asyncio.create_task(pipeline.refresh("BAD", 30))
        await asyncio.sleep(0)
        await pipeline.refresh("GOOD", 30)
        fetcher.gates["BAD"].set()
        await bad

        assert isinstance(pipeline.state, Ready)
        assert pipeline.state.symbol == "GOOD"


class TestApplyWindow:
    async def test_refilters_retained_history(self, pipeline, fetcher, published):
        await pipeline.refresh("AAPL", 30)
        assert len(pipeline.state.records) == 5

        pipeline.apply_window(7)

        assert pipeline.state.window_days == 7
        assert len(pipeline.state.records) == 4
        assert fetcher.calls == ["AAPL"]
        assert [type(s) for s in published] == [Loading, Ready, Ready]

    async def test_widening_restores_records(self, pipeline):
        await pipeline.refresh("AAPL", 7)
        assert len(pipeline.state.records) == 4

        pipeline.apply_window(90)
        assert len(pipeline.state.records) == 5

    async def test_same_window_is_noop(self, pipeline, published):
        await pipeline.refresh("AAPL", 30)
        pipeline.apply_window(30)
        assert len(published) == 2

    def test_noop_when_idle(self, pipeline, published):
        pipeline.apply_window(7)
        assert isinstance(pipeline.state, Idle)
        assert published == []

    async def test_noop_when_failed(self, pipeline, published):
        await pipeline.refresh("NOPE", 30)
        pipeline.apply_window(7)
        assert isinstance(pipeline.state, Failed)
        assert pipeline.state.window_days == 30

    async def test_huge_window_keeps_full_history(self, pipeline):
        await pipeline.refresh("AAPL", 7)

        pipeline.apply_window(10**9)
        assert isinstance(pipeline.state, Ready)
        assert len(pipeline.state.records) == 5

    def test_invalid_window_rejected(self, pipeline):
        with pytest.raises(ValueError):
            pipeline.apply_window(0)


class TestSubscribe:
    async def test_unsubscribe_stops_notifications(self, pipeline):
        states: list = []
        unsubscribe = pipeline.subscribe(states.append)
        unsubscribe()

        await pipeline.refresh("AAPL", 30)
        assert states == []

    async def test_failing_listener_does_not_break_publish(self, pipeline):
        def broken(state):
            raise RuntimeError("listener bug")

        states: list = []
        pipeline.subscribe(broken)
        pipeline.subscribe(states.append)

        await pipeline.refresh("AAPL", 30)

        assert isinstance(pipeline.state, Ready)
        assert len(states) == 2
