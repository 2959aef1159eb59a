"""slider.kz HTTP client implementation.

Hey future me - slider.kz is our default MIRROR. It has no useful metadata of its own,
but every search hit comes with a downloadable MP3 URL, which is exactly what Last.fm
and Tidal results lack. Public endpoint, no credentials.
"""

from typing import Any

import httpx

from trackmirror.config.settings import SliderKzSettings
from trackmirror.infrastructure.integrations.base_client import ProviderHttpClient


class SliderKzClient(ProviderHttpClient):
    """HTTP client for slider.kz search."""

    PROVIDER_NAME = "sliderkz"
    SEARCH_PATH = "vk_auth.php"

    def __init__(
        self,
        settings: SliderKzSettings,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize slider.kz client.

        Args:
            settings: slider.kz configuration settings
            timeout: Per-call timeout in seconds
            transport: Optional httpx transport override
        """
        super().__init__(
            base_url=settings.base_url,
            headers={"Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )
        self.settings = settings

    async def search(self, query: str) -> dict[str, Any] | None:
        """
        Search audio by free text.

        Args:
            query: Search text, usually "artist title"

        Returns:
            Raw response (``{"audios": {"": [...]}}``) or None if not found
        """
        return await self._make_request(self.SEARCH_PATH, {"q": query})
