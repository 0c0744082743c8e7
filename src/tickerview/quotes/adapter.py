"""Alpha Vantage adapter: turns a daily-series payload into DailyRecords."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date
from typing import Any

from pydantic import ValidationError

from tickerview.core.exceptions import InvalidSymbolOrLimitError, MalformedRecordError
from tickerview.core.models import DailyRecord, RecordSequence

logger = logging.getLogger(__name__)

TIME_SERIES_KEY = "Time Series (Daily)"

# Provider field name -> DailyRecord field name
_PRICE_FIELDS: dict[str, str] = {
    "1. open": "open",
    "2. high": "high",
    "3. low": "low",
    "4. close": "close",
}
_VOLUME_FIELD = "5. volume"

# Top-level keys the provider uses for throttling and error notices
_NOTICE_KEYS = ("Note", "Information", "Error Message")


def _provider_notice(payload: Mapping[str, Any]) -> str | None:
    """Return the first provider notice in the payload, if any."""
    for key in _NOTICE_KEYS:
        value = payload.get(key)
        if value:
            return str(value)
    return None


class AlphaVantageAdapter:
    """Transforms a TIME_SERIES_DAILY payload into a sorted record tuple.

    Malformed entries are dropped with a warning rather than failing the
    whole series; no field is ever coerced to zero.
    """

    def adapt(self, raw_data: Any, symbol: str) -> RecordSequence:
        """Parse the provider payload into DailyRecords.

        Parameters
        ----------
        raw_data : dict
            The decoded JSON object returned by the fetcher.
        symbol : str
            The symbol the payload belongs to (used for logging only).

        Returns
        -------
        tuple[DailyRecord, ...]
            Strictly ascending by date. If the provider repeats a date the
            last entry seen wins.

        Raises
        ------
        InvalidSymbolOrLimitError
            If the payload has no daily time-series mapping.
        """
        series = raw_data.get(TIME_SERIES_KEY) if isinstance(raw_data, Mapping) else None
        if not isinstance(series, Mapping):
            notice = _provider_notice(raw_data) if isinstance(raw_data, Mapping) else None
            if notice:
                logger.warning("Quote provider notice for %s: %s", symbol, notice)
            raise InvalidSymbolOrLimitError(
                f"No daily time series in response for {symbol!r}",
                context={"symbol": symbol, "notice": notice},
            )

        by_date: dict[date, DailyRecord] = {}
        dropped = 0
        for date_key, fields in series.items():
            try:
                record = self.parse_record(date_key, fields)
            except MalformedRecordError as e:
                dropped += 1
                logger.warning(
                    "Dropping malformed %s record %s: %s", symbol, date_key, e
                )
                continue
            by_date[record.date] = record

        if dropped:
            logger.warning(
                "Dropped %d of %d daily records for %s", dropped, len(series), symbol
            )

        return tuple(by_date[d] for d in sorted(by_date))

    def parse_record(self, date_key: Any, fields: Any) -> DailyRecord:
        """Parse one ``(date_key, fields)`` entry.

        Raises:
            MalformedRecordError: If the date or any numeric field is missing,
                unparseable, negative or non-finite.
        """
        try:
            day = date.fromisoformat(str(date_key).strip())
        except ValueError as e:
            raise MalformedRecordError(
                f"unparseable date {date_key!r}",
                context={"date_key": date_key, "field": None, "reason": str(e)},
            ) from e

        if not isinstance(fields, Mapping):
            raise MalformedRecordError(
                f"expected an object of fields, got {type(fields).__name__}",
                context={"date_key": date_key, "field": None, "reason": "not a mapping"},
            )

        values: dict[str, Any] = {"date": day}
        for source, target in _PRICE_FIELDS.items():
            values[target] = _parse_number(date_key, fields, source, float)
        values["volume"] = _parse_number(date_key, fields, _VOLUME_FIELD, int)

        try:
            return DailyRecord(**values)
        except ValidationError as e:
            raise MalformedRecordError(
                f"out-of-range value: {e.errors()[0]['msg']}",
                context={"date_key": date_key, "field": None, "reason": str(e)},
            ) from e


def _parse_number(date_key: Any, fields: Mapping[str, Any], name: str, cast: type) -> Any:
    """Read and cast a numeric-string field, raising MalformedRecordError."""
    if name not in fields:
        raise MalformedRecordError(
            f"missing field {name!r}",
            context={"date_key": date_key, "field": name, "reason": "missing"},
        )
    raw = fields[name]
    if isinstance(raw, bool) or raw is None:
        raise MalformedRecordError(
            f"field {name!r} is {raw!r}",
            context={"date_key": date_key, "field": name, "reason": "not a number"},
        )
    text = str(raw).strip()
    try:
        if "_" in text:
            raise ValueError("digit separators are not allowed")
        return cast(text)
    except ValueError as e:
        raise MalformedRecordError(
            f"field {name!r} is not a valid {cast.__name__}: {raw!r}",
            context={"date_key": date_key, "field": name, "reason": str(e)},
        ) from e
