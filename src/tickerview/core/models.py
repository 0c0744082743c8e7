"""Pydantic data models: the system's type contracts."""

from __future__ import annotations

import math
from datetime import date
from enum import StrEnum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# --- Type Aliases ---

Symbol = str
WindowDays = int

# --- Enumerations ---


class ChartKind(StrEnum):
    """Chart presentations offered by the view."""

    LINE = "line"
    AREA = "area"
    BAR = "bar"


class Theme(StrEnum):
    """Colour scheme of the view."""

    LIGHT = "light"
    DARK = "dark"


class ErrorKind(StrEnum):
    """Reasons a refresh can end in the Failed state."""

    FETCH_FAILED = "fetch_failed"
    INVALID_SYMBOL_OR_LIMIT = "invalid_symbol_or_limit"

    @property
    def message(self) -> str:
        """User-facing text for this error."""
        return _ERROR_MESSAGES[self]


_ERROR_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.FETCH_FAILED: "Failed to fetch data.",
    ErrorKind.INVALID_SYMBOL_OR_LIMIT: "Invalid symbol or API limit reached.",
}


# --- Price Records ---


class DailyRecord(BaseModel):
    """One trading day of OHLCV data.

    Dates carry no timezone. Prices and volume are non-negative.
    """

    model_config = ConfigDict(frozen=True)

    date: date
    open: float
    high: float
    low: float
    close: float
    volume: int

    @field_validator("open", "high", "low", "close")
    @classmethod
    def price_finite_non_negative(cls, v: float) -> float:
        if not math.isfinite(v) or v < 0:
            raise ValueError(f"price must be a finite value >= 0, got {v}")
        return v

    @field_validator("volume")
    @classmethod
    def volume_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"volume must be >= 0, got {v}")
        return v


RecordSequence = tuple[DailyRecord, ...]


# --- Fetch State ---


class Idle(BaseModel):
    """No fetch has completed yet."""

    model_config = ConfigDict(frozen=True)

    status: Literal["idle"] = "idle"


class Loading(BaseModel):
    """A fetch is in flight."""

    model_config = ConfigDict(frozen=True)

    status: Literal["loading"] = "loading"
    symbol: Symbol
    window_days: WindowDays


class Ready(BaseModel):
    """The last fetch succeeded. ``records`` may be empty."""

    model_config = ConfigDict(frozen=True)

    status: Literal["ready"] = "ready"
    symbol: Symbol
    window_days: WindowDays
    records: RecordSequence = ()


class Failed(BaseModel):
    """The last fetch or parse failed."""

    model_config = ConfigDict(frozen=True)

    status: Literal["failed"] = "failed"
    symbol: Symbol
    window_days: WindowDays
    error: ErrorKind
    message: str = ""

    @classmethod
    def of(cls, symbol: Symbol, window_days: WindowDays, error: ErrorKind) -> Failed:
        return cls(
            symbol=symbol,
            window_days=window_days,
            error=error,
            message=error.message,
        )


FetchState = Annotated[
    Union[Idle, Loading, Ready, Failed],
    Field(discriminator="status"),
]
