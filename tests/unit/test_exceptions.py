"""Tests for tickerview.core.exceptions."""

import pytest

from tickerview.core.exceptions import (
    ConfigError,
    InvalidSymbolOrLimitError,
    MalformedRecordError,
    QuoteError,
    TickerviewError,
    TransportError,
)


class TestExceptionHierarchy:
    """Verify the exception class hierarchy."""

    def test_config_is_subclass(self):
        assert issubclass(ConfigError, TickerviewError)

    def test_quote_is_subclass(self):
        assert issubclass(QuoteError, TickerviewError)

    def test_transport_is_subclass_of_quote(self):
        assert issubclass(TransportError, QuoteError)
        assert issubclass(TransportError, TickerviewError)

    def test_invalid_symbol_is_subclass_of_quote(self):
        assert issubclass(InvalidSymbolOrLimitError, QuoteError)

    def test_malformed_record_is_subclass_of_quote(self):
        assert issubclass(MalformedRecordError, QuoteError)

    def test_transport_and_invalid_symbol_are_distinct(self):
        assert not issubclass(TransportError, InvalidSymbolOrLimitError)
        assert not issubclass(InvalidSymbolOrLimitError, TransportError)


class TestExceptionContext:
    """Verify context dict behavior."""

    def test_context_preserved(self):
        exc = TransportError(
            "HTTP 503 from quote provider",
            context={"symbol": "AAPL", "status_code": 503},
        )
        assert exc.context["symbol"] == "AAPL"
        assert exc.context["status_code"] == 503

    def test_default_context_is_empty_dict(self):
        assert TickerviewError("test error").context == {}

    def test_str_returns_message(self):
        assert str(ConfigError("invalid field")) == "invalid field"

    def test_exception_can_be_caught_as_parent(self):
        with pytest.raises(QuoteError):
            raise InvalidSymbolOrLimitError("no series", context={"notice": None})
