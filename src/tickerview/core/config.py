"""Configuration loading, validation, and access."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from tickerview.core.exceptions import ConfigError
from tickerview.core.models import ChartKind, Theme

_DEFAULT_BASE_URL = "https://www.alphavantage.co/query"


class ProviderConfig(BaseModel):
    """Quote provider access configuration."""

    model_config = ConfigDict(frozen=True)

    api_key: str
    base_url: str = _DEFAULT_BASE_URL
    function: str = "TIME_SERIES_DAILY"
    request_timeout: float = 5.0

    @field_validator("api_key", mode="before")
    @classmethod
    def api_key_as_text(cls, v: object) -> object:
        # Env auto-casting turns all-digit keys into ints
        if isinstance(v, int | float) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("api_key")
    @classmethod
    def api_key_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("api_key must not be empty")
        return v.strip()

    @field_validator("request_timeout")
    @classmethod
    def timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("request_timeout must be > 0")
        return v


class ViewConfig(BaseModel):
    """Initial view state and selector choices."""

    model_config = ConfigDict(frozen=True)

    default_symbol: str = "AAPL"
    default_window: int = 30
    window_choices: tuple[int, ...] = (7, 30, 90)
    default_chart_kind: ChartKind = ChartKind.LINE
    theme: Theme = Theme.LIGHT

    @field_validator("default_symbol")
    @classmethod
    def symbol_upper(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("default_symbol must not be empty")
        return v.strip().upper()

    @field_validator("window_choices")
    @classmethod
    def choices_positive(cls, v: tuple[int, ...]) -> tuple[int, ...]:
        if not v:
            raise ValueError("window_choices must not be empty")
        if any(days < 1 for days in v):
            raise ValueError("window_choices must all be >= 1")
        return tuple(sorted(set(v)))

    @model_validator(mode="after")
    def default_window_is_a_choice(self) -> ViewConfig:
        if self.default_window not in self.window_choices:
            raise ValueError(
                f"default_window ({self.default_window}) must be one of "
                f"{list(self.window_choices)}"
            )
        return self


class APIConfig(BaseModel):
    """FastAPI server configuration."""

    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = 8000


class TickerviewConfig(BaseModel):
    """Root configuration for tickerview."""

    model_config = ConfigDict(frozen=True)

    provider: ProviderConfig
    view: ViewConfig = ViewConfig()
    api: APIConfig = APIConfig()


def load_config(
    config_path: str | None = None,
    env_prefix: str = "TICKERVIEW_",
) -> TickerviewConfig:
    """Load configuration from environment + YAML file + defaults.

    Resolution order (highest priority first):
    1. Environment variables (TICKERVIEW_PROVIDER__API_KEY, etc.)
    2. YAML file at config_path
    3. Built-in defaults

    Nested keys use double-underscore in env vars:
        TICKERVIEW_VIEW__DEFAULT_WINDOW=90  ->  view.default_window = 90
    """
    try:
        yaml_path = _resolve_config_path(config_path)
        base: dict = {}
        if yaml_path is not None:
            base = _load_yaml(yaml_path)

        merged = _merge_env_vars(base, env_prefix)
        return TickerviewConfig.model_validate(merged)
    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(str(e), context={"source": "load_config"}) from e


def _resolve_config_path(explicit: str | None) -> Path | None:
    """Determine config file path."""
    if explicit is not None:
        p = Path(explicit)
        if not p.exists():
            raise ConfigError(
                f"Config file not found: {explicit}",
                context={"field": "config_path", "value": explicit},
            )
        return p

    env_path = os.environ.get("TICKERVIEW_CONFIG")
    if env_path:
        p = Path(env_path)
        if not p.exists():
            raise ConfigError(
                f"Config file from TICKERVIEW_CONFIG not found: {env_path}",
                context={"field": "TICKERVIEW_CONFIG", "value": env_path},
            )
        return p

    default = Path("tickerview.yml")
    if default.exists():
        return default

    return None


def _load_yaml(path: Path) -> dict:
    """Load and parse YAML file."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(
                f"YAML config must be a mapping, got {type(data).__name__}",
                context={"field": "config_file", "value": str(path)},
            )
        return data
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Failed to parse YAML config: {e}",
            context={"field": "config_file", "value": str(path)},
        ) from e


def _merge_env_vars(base: dict, prefix: str) -> dict:
    """Overlay environment variables onto base config dict.

    Double-underscore separates nesting levels.
    Values are auto-cast: "true"/"false" -> bool, numeric strings -> int.
    """
    result = dict(base)

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue

        remainder = key[len(prefix) :]
        parts = [p.lower() for p in remainder.split("__")]

        # TICKERVIEW_CONFIG names the file, not a setting
        if parts == ["config"]:
            continue

        cast_value = _auto_cast(value)

        target = result
        for part in parts[:-1]:
            if not isinstance(target.get(part), dict):
                target[part] = {}
            else:
                target[part] = dict(target[part])
            target = target[part]
        target[parts[-1]] = cast_value

    return result


def _auto_cast(value: str) -> str | int | float | bool:
    """Auto-cast string values from environment variables."""
    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        pass
    return value
