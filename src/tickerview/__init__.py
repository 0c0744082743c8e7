"""tickerview: daily price history charts for a single equity."""

__version__ = "0.1.0"
