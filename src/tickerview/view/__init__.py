"""tickerview.view: view-state machine and chart description."""

from tickerview.view.chart import (
    ChartPoint,
    ChartSpec,
    GradientStop,
    LatestQuote,
    Palette,
    build_chart,
    latest_quote,
    palette_for,
    tick_label,
)
from tickerview.view.state import QuoteView

__all__ = [
    "QuoteView",
    "ChartSpec",
    "ChartPoint",
    "GradientStop",
    "Palette",
    "LatestQuote",
    "build_chart",
    "latest_quote",
    "palette_for",
    "tick_label",
]
