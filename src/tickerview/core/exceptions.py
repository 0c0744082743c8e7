"""Custom exception hierarchy for tickerview."""

from typing import Any


class TickerviewError(Exception):
    """Base exception for all tickerview errors.

    All exceptions carry an optional `context` dict for structured error
    metadata that can be logged or serialized without parsing the message.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigError(TickerviewError):
    """Invalid or missing configuration.

    Raised by load_config() during startup. Should be treated as fatal.

    Context keys:
        field (str): the config field that failed validation
        value (Any): the invalid value (redacted for secrets)
    """


class QuoteError(TickerviewError):
    """Failed to obtain a usable daily series from the quote provider.

    Policy: caught by QuotePipeline and published as a Failed state.
    Never propagates to the view layer.
    """


class TransportError(QuoteError):
    """Network, HTTP status, or response-decoding failure.

    Policy: no retry. Surfaced as ErrorKind.FETCH_FAILED.

    Context keys:
        symbol (str): the symbol being fetched
        status_code (int | None): HTTP status if a response arrived
        error (str | None): underlying transport error text
    """


class InvalidSymbolOrLimitError(QuoteError):
    """Well-formed response without the daily time-series key.

    The provider answers an unknown symbol and an exhausted quota the same
    way, so both surface as ErrorKind.INVALID_SYMBOL_OR_LIMIT.

    Context keys:
        symbol (str): the symbol being fetched
        notice (str | None): provider message ("Note", "Information", ...)
    """


class MalformedRecordError(QuoteError):
    """A single daily entry could not be parsed.

    Policy: log and drop the record. Other records remain valid.

    Context keys:
        date_key (str): the provider's date key for the entry
        field (str | None): the field that failed
        reason (str): why parsing failed
    """
