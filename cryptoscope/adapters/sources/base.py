"""
Shared HTTP plumbing and value coercion for market data sources.
"""

from typing import Any, Callable, Optional, TypeVar

import httpx

from cryptoscope.domain.entities.result import Err, Result
from cryptoscope.domain.errors import ParseError, SourceError
from cryptoscope.domain.ports.market_data_port import MarketDataSourcePort
from cryptoscope.infrastructure.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def as_float(value: Any, default: float = 0.0) -> float:
    """Coerce a JSON number or numeric string to float."""
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def as_optional_float(value: Any) -> Optional[float]:
    """Like ``as_float`` but keeps missing values as None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def as_optional_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class HttpSource(MarketDataSourcePort):
    """
    Base class for sources reached over HTTP/JSON.

    Owns a lazily created ``httpx.AsyncClient``. A client can be injected
    (tests pass one built on ``httpx.MockTransport``); injected clients are
    still closed by ``close()``.
    """

    name = "http"
    TIMEOUT = 15.0

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the source.

        Args:
            base_url: Provider API base URL (no trailing slash required)
            timeout: Request timeout in seconds
            client: Optional pre-built HTTP client
        """
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout if timeout is not None else self.TIMEOUT
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers={"Accept": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _get_json(self, url: str, params: Optional[dict[str, Any]] = None) -> Any:
        """
        GET a URL and decode its JSON body.

        Raises:
            SourceError: On timeouts, transport errors and non-2xx responses
                (429 included, it is not retried).
            ParseError: If the body is not valid JSON.
        """
        client = await self._get_client()
        try:
            response = await client.get(url, params=params)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise SourceError(self.name, f"Timeout fetching {url}") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 429:
                logger.warning("Rate limit exceeded", source=self.name)
            raise SourceError(self.name, f"HTTP {status} from {url}", status_code=status) from e
        except httpx.HTTPError as e:
            raise SourceError(self.name, f"Request failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise ParseError(self.name, f"Invalid JSON from {url}") from e

    async def _fetch(
        self,
        url: str,
        params: Optional[dict[str, Any]],
        parse: Callable[[Any], Result[T]],
    ) -> Result[T]:
        """Fetch a URL and run a parse function over it, folding errors into Err."""
        try:
            raw = await self._get_json(url, params)
        except SourceError as e:
            return Err(e)
        try:
            return parse(raw)
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            return Err(ParseError(self.name, f"Malformed payload from {url}: {e!r}"))
