"""Quote fetcher: one outbound request per call to the daily series endpoint.

Talks to the Alpha Vantage ``/query`` endpoint via httpx. The fetcher only
moves bytes: it returns the decoded JSON object untouched and leaves the
interpretation of its contents to ``AlphaVantageAdapter``.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

import httpx

from tickerview.core.config import ProviderConfig
from tickerview.core.exceptions import TransportError

logger = logging.getLogger(__name__)

_USER_AGENT = "tickerview/0.1"


@runtime_checkable
class QuoteFetcher(Protocol):
    """Consumer-facing interface for retrieving a raw provider payload.

    Implementations make a single attempt per call and raise
    ``TransportError`` when the request itself fails.
    """

    async def fetch(self, symbol: str) -> dict[str, Any]: ...


class AlphaVantageFetcher:
    """Fetches the TIME_SERIES_DAILY payload for a symbol.

    The symbol is sent verbatim. There are no retries and no rate limiting;
    a throttled or unknown-symbol reply still comes back as a payload
    and is handled downstream.

    Use via ``async with AlphaVantageFetcher(config) as fetcher:`` or call
    ``close()`` explicitly.

    Parameters
    ----------
    config : ProviderConfig
        Endpoint, credential and timeout.
    client : httpx.AsyncClient | None
        Pre-built client (useful for testing). Created from config if None.
    """

    def __init__(
        self,
        config: ProviderConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": _USER_AGENT},
            timeout=httpx.Timeout(config.request_timeout),
        )

    async def __aenter__(self) -> AlphaVantageFetcher:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client. Called automatically by __aexit__."""
        await self._client.aclose()

    async def fetch(self, symbol: str) -> dict[str, Any]:
        """Issue one GET for ``symbol`` and return the decoded JSON object.

        Raises:
            TransportError: On connection failure or a non-2xx status. A 2xx
                body that is empty, not JSON, or not a JSON object comes
                back as ``{}``.
        """
        params = {
            "function": self._config.function,
            "symbol": symbol,
            "apikey": self._config.api_key,
        }

        try:
            response = await self._client.get(self._config.base_url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Quote provider HTTP error for %s: %s %s",
                symbol,
                e.response.status_code,
                e.response.text[:200],
            )
            raise TransportError(
                f"HTTP {e.response.status_code} from quote provider",
                context={"symbol": symbol, "status_code": e.response.status_code},
            ) from e
        except httpx.RequestError as e:
            logger.error("Quote provider request error for %s: %s", symbol, e)
            raise TransportError(
                f"Request to quote provider failed: {e}",
                context={"symbol": symbol, "error": str(e)},
            ) from e

        # Empty, non-JSON and non-object 2xx bodies are throttling replies
        try:
            data = response.json()
        except ValueError:
            logger.warning(
                "Quote provider returned a non-JSON body for %s: %r",
                symbol,
                response.text[:200],
            )
            return {}

        if not isinstance(data, dict):
            logger.warning(
                "Quote provider returned %s for %s, expected an object",
                type(data).__name__,
                symbol,
            )
            return {}

        return data
