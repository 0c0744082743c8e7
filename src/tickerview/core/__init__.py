"""tickerview.core: Foundation types, config, and exceptions."""

from tickerview.core.config import (
    APIConfig,
    ProviderConfig,
    TickerviewConfig,
    ViewConfig,
    load_config,
)
from tickerview.core.exceptions import (
    ConfigError,
    InvalidSymbolOrLimitError,
    MalformedRecordError,
    QuoteError,
    TickerviewError,
    TransportError,
)
from tickerview.core.models import (
    ChartKind,
    DailyRecord,
    ErrorKind,
    Failed,
    FetchState,
    Idle,
    Loading,
    Ready,
    RecordSequence,
    Symbol,
    Theme,
    WindowDays,
)

__all__ = [
    # Type aliases
    "Symbol",
    "WindowDays",
    "RecordSequence",
    # Enums
    "ChartKind",
    "Theme",
    "ErrorKind",
    # Records
    "DailyRecord",
    # Fetch state
    "FetchState",
    "Idle",
    "Loading",
    "Ready",
    "Failed",
    # Config
    "TickerviewConfig",
    "ProviderConfig",
    "ViewConfig",
    "APIConfig",
    "load_config",
    # Exceptions
    "TickerviewError",
    "ConfigError",
    "QuoteError",
    "TransportError",
    "InvalidSymbolOrLimitError",
    "MalformedRecordError",
]
