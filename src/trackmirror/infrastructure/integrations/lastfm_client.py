"""Last.fm HTTP client implementation."""

from typing import Any

import httpx

from trackmirror.config.settings import LastfmSettings
from trackmirror.infrastructure.integrations.base_client import ProviderHttpClient


class LastfmClient(ProviderHttpClient):
    """HTTP client for Last.fm API operations."""

    PROVIDER_NAME = "lastfm"
    API_BASE_URL = "https://ws.audioscrobbler.com/2.0/"

    def __init__(
        self,
        settings: LastfmSettings,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize Last.fm client.

        Args:
            settings: Last.fm configuration settings
            timeout: Per-call timeout in seconds
            transport: Optional httpx transport override
        """
        super().__init__(
            base_url=self.API_BASE_URL,
            headers={
                "User-Agent": settings.user_agent,
                "api_key": settings.api_key,
            },
            default_params={"api_key": settings.api_key, "format": "json"},
            timeout=timeout,
            transport=transport,
        )
        self.settings = settings

    async def _call(self, method: str, params: dict[str, Any]) -> dict[str, Any] | None:
        """
        Call a Last.fm API method.

        Args:
            method: API method name
            params: Method parameters

        Returns:
            Response data or None if not found
        """
        data = await self._make_request("", {"method": method, **params})

        # Last.fm reports unknown tracks as {"error": 6, "message": "..."} with HTTP 200
        if data is None or "error" in data:
            return None

        return data

    async def get_track_info(self, artist: str, track: str) -> dict[str, Any] | None:
        """
        Get track information.

        Args:
            artist: Artist name (URL slug as captured from a track URL)
            track: Track title

        Returns:
            Raw response (``{"track": {...}}``) or None if not found
        """
        return await self._call("track.getinfo", {"artist": artist, "track": track})

    async def search_tracks(self, query: str, limit: int) -> dict[str, Any] | None:
        """
        Search tracks by free text.

        Args:
            query: Search text
            limit: Maximum number of results

        Returns:
            Raw response (``{"results": {"trackmatches": {"track": [...]}}}``)
            or None if not found
        """
        return await self._call("track.search", {"track": query, "limit": limit})
