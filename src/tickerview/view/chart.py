"""Renderer-agnostic chart description built from a record sequence.

The drawing itself belongs to whichever charting library consumes the
``ChartSpec``; this module only decides what goes on the axes and how it
is coloured.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, computed_field

from tickerview.core.models import ChartKind, DailyRecord, Theme

STROKE_COLOR = "#1976d2"

_PALETTES: dict[Theme, tuple[str, str]] = {
    Theme.LIGHT: ("#fafafa", "#222"),
    Theme.DARK: ("#121212", "#eee"),
}


class ChartPoint(BaseModel):
    """One x/y point of the close-price series."""

    model_config = ConfigDict(frozen=True)

    date: date
    label: str
    value: float


class GradientStop(BaseModel):
    model_config = ConfigDict(frozen=True)

    offset: float
    opacity: float


class Palette(BaseModel):
    model_config = ConfigDict(frozen=True)

    background: str
    foreground: str


class ChartSpec(BaseModel):
    """Everything a charting library needs to draw the selected chart."""

    model_config = ConfigDict(frozen=True)

    kind: ChartKind
    data_key: str = "close"
    points: tuple[ChartPoint, ...] = ()
    stroke: str = STROKE_COLOR
    fill: str | None = None
    gradient: tuple[GradientStop, ...] = ()
    show_dots: bool = False
    grid_dash: str = "3 3"
    palette: Palette


class LatestQuote(BaseModel):
    """Summary of the most recent trading day in the sequence."""

    model_config = ConfigDict(frozen=True)

    date: date
    open: float
    high: float
    low: float
    close: float
    volume: int

    @computed_field
    @property
    def volume_display(self) -> str:
        return f"{self.volume:,}"


def tick_label(day: date) -> str:
    """Short axis label: ``MM-DD``."""
    return day.isoformat()[5:]


def palette_for(theme: Theme) -> Palette:
    background, foreground = _PALETTES[theme]
    return Palette(background=background, foreground=foreground)


def build_chart(
    records: tuple[DailyRecord, ...] | list[DailyRecord],
    kind: ChartKind,
    theme: Theme = Theme.LIGHT,
) -> ChartSpec:
    """Describe ``records`` as a close-price chart of the given kind."""
    points = tuple(
        ChartPoint(date=r.date, label=tick_label(r.date), value=r.close) for r in records
    )

    fill: str | None = None
    gradient: tuple[GradientStop, ...] = ()
    if kind == ChartKind.AREA:
        fill = STROKE_COLOR
        gradient = (
            GradientStop(offset=0.05, opacity=0.8),
            GradientStop(offset=0.95, opacity=0.0),
        )
    elif kind == ChartKind.BAR:
        fill = STROKE_COLOR

    return ChartSpec(
        kind=kind,
        points=points,
        fill=fill,
        gradient=gradient,
        palette=palette_for(theme),
    )


def latest_quote(records: tuple[DailyRecord, ...] | list[DailyRecord]) -> LatestQuote | None:
    """Return the last day of ``records`` as a LatestQuote, or None if empty."""
    if not records:
        return None
    last = records[-1]
    return LatestQuote(
        date=last.date,
        open=last.open,
        high=last.high,
        low=last.low,
        close=last.close,
        volume=last.volume,
    )
