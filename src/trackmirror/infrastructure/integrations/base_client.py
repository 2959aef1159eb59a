"""Shared HTTP plumbing for provider clients.

Hey future me - every provider client (Last.fm, slider.kz, Tidal) goes through
``_make_request`` here. It's the single place where httpx errors get translated
into our taxonomy:

- 404                          → None (caller maps to NotFound)
- other non-2xx / network error → ProviderTransportError (not retried)
- httpx.TimeoutException        → re-raised unchanged (the retry trigger!)
- body not JSON / not an object → ProviderProtocolError

Each client lazily creates ONE httpx.AsyncClient and keeps it until ``close()``.
Use ``async with`` or the runtime so the pool gets released on every exit path.
"""

import json
import logging
from typing import Any, ClassVar, cast

import httpx

from trackmirror.domain.exceptions import ProviderProtocolError, ProviderTransportError

logger = logging.getLogger(__name__)


class ProviderHttpClient:
    """Base class for provider HTTP clients."""

    PROVIDER_NAME: ClassVar[str] = "provider"
    DEFAULT_TIMEOUT: ClassVar[float] = 10.0

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str] | None = None,
        default_params: dict[str, Any] | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize provider client.

        Args:
            base_url: Provider API endpoint; request paths are relative to it
            headers: Fixed headers sent with every request
            default_params: Query parameters sent with every request
            timeout: Per-call timeout in seconds
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self.base_url = base_url
        self.headers = dict(headers or {})
        self.default_params = dict(default_params or {})
        self.timeout = timeout if timeout is not None else self.DEFAULT_TIMEOUT
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self.headers,
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    @property
    def is_open(self) -> bool:
        """True while a pooled httpx client is held."""
        return self._client is not None

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _make_request(
        self, path: str = "", params: dict[str, Any] | None = None
    ) -> dict[str, Any] | None:
        """
        GET ``path`` and return the decoded JSON object.

        Args:
            path: Path relative to ``base_url``
            params: Query parameters merged over ``default_params``

        Returns:
            Response object, or None on 404

        Raises:
            httpx.TimeoutException: The call exceeded the timeout
            ProviderTransportError: Non-timeout transport failure or non-2xx status
            ProviderProtocolError: Body is not a JSON object
        """
        client = await self._get_client()
        request_params = {**self.default_params, **(params or {})}

        try:
            response = await client.get(path, params=request_params or None)
            response.raise_for_status()
        except httpx.TimeoutException:
            raise
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise ProviderTransportError(
                f"{self.PROVIDER_NAME} returned HTTP {e.response.status_code} for {path or '/'}",
                provider=self.PROVIDER_NAME,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise ProviderTransportError(
                f"{self.PROVIDER_NAME} request failed: {e}",
                provider=self.PROVIDER_NAME,
            ) from e

        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ProviderProtocolError(
                f"{self.PROVIDER_NAME} returned a non-JSON body for {path or '/'}",
                provider=self.PROVIDER_NAME,
            ) from e

        if not isinstance(data, dict):
            raise ProviderProtocolError(
                f"{self.PROVIDER_NAME} returned {type(data).__name__} where an object was expected",
                provider=self.PROVIDER_NAME,
            )

        return cast(dict[str, Any], data)

    async def __aenter__(self) -> "ProviderHttpClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
