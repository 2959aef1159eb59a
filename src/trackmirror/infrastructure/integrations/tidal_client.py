"""Tidal HTTP client implementation.

Hey future me - this talks to the PUBLIC v1 API (api.tidal.com/v1), the one the
Tidal apps use with a static ``x-tidal-token`` header. No OAuth dance needed for
catalogue lookups, but the token must come from settings (TIDAL__TOKEN), it is
NOT compiled in anymore.

Tidal never gives us audio through this API: every Tidal track goes through the
mirror resolver before playback.

Every catalogue call needs ``countryCode`` or Tidal answers 400.
"""

from typing import Any, ClassVar, Literal

import httpx

from trackmirror.config.settings import TidalSettings
from trackmirror.infrastructure.integrations.base_client import ProviderHttpClient

CollectionKind = Literal["album", "playlist"]


class TidalClient(ProviderHttpClient):
    """HTTP client for the Tidal public catalogue API."""

    PROVIDER_NAME = "tidal"
    API_BASE_URL = "https://api.tidal.com/v1/"

    # Max items per collection page, same as the Tidal apps request
    MAX_PAGE_ITEMS: ClassVar[dict[str, int]] = {"album": 120, "playlist": 750}

    def __init__(
        self,
        settings: TidalSettings,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize Tidal client.

        Args:
            settings: Tidal configuration (token, country code, user agent)
            timeout: Per-call timeout in seconds
            transport: Optional httpx transport override
        """
        super().__init__(
            base_url=self.API_BASE_URL,
            headers={
                "User-Agent": settings.user_agent,
                "x-tidal-token": settings.token,
            },
            default_params={"countryCode": settings.country_code},
            timeout=timeout,
            transport=transport,
        )
        self.settings = settings

    # =========================================================================
    # TRACKS
    # =========================================================================

    async def get_track(self, track_id: str) -> dict[str, Any] | None:
        """Get track details by Tidal ID."""
        return await self._make_request(f"tracks/{track_id}")

    async def search_tracks(self, query: str, limit: int) -> dict[str, Any] | None:
        """Search for tracks.

        Returns:
            Raw response (``{"tracks": {"items": [...]}}``) or None
        """
        return await self._make_request(
            "search", {"query": query, "offset": 0, "limit": limit}
        )

    # =========================================================================
    # ALBUMS / PLAYLISTS
    # =========================================================================

    async def get_collection_tracks(
        self, kind: CollectionKind, collection_id: str, limit: int | None = None
    ) -> dict[str, Any] | None:
        """Get the track list of an album or playlist.

        Args:
            kind: "album" or "playlist"
            collection_id: Tidal album id or playlist uuid
            limit: Page size (defaults to the per-kind maximum)

        Returns:
            Raw response (``{"items": [...]}``) or None
        """
        page_size = limit if limit is not None else self.MAX_PAGE_ITEMS[kind]
        return await self._make_request(
            f"{kind}s/{collection_id}/tracks", {"limit": page_size}
        )

    async def get_collection(
        self, kind: CollectionKind, collection_id: str
    ) -> dict[str, Any] | None:
        """Get album or playlist details (we only need the title)."""
        return await self._make_request(f"{kind}s/{collection_id}")
