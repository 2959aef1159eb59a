"""slider.kz provider descriptor.

Search-only (no URL pattern). Its tracks carry a direct MP3 stream URL, which
makes it the default mirror provider.
"""

import logging

from trackmirror.domain.dtos import PlaylistMetadata, ResolvedItem
from trackmirror.domain.ports import ProviderDescriptor
from trackmirror.infrastructure.integrations.sliderkz_client import SliderKzClient
from trackmirror.infrastructure.parsers import sliderkz as sliderkz_parser
from trackmirror.infrastructure.parsers.common import get_path

logger = logging.getLogger(__name__)

NAME = "sliderkz"
SEARCH_PREFIX = "sksearch:"


def search_playlist_name(query: str) -> str:
    return f"SliderKz Music Search: {query}"


def create_sliderkz_provider(client: SliderKzClient) -> ProviderDescriptor:
    """Build the slider.kz descriptor around a client."""
    host = client.settings.base_url

    async def search(query: str, limit: int) -> ResolvedItem:
        data = await client.search(query)
        node = get_path(data, "audios", "")
        if not node:
            logger.info("Search result is empty.")
            return ResolvedItem.not_found()

        tracks = sliderkz_parser.parse_tracks(node, host=host)[:limit]
        if not tracks:
            logger.info("No tracks found in the search result.")
            return ResolvedItem.not_found()

        logger.info("Search successful. Found %d track(s).", len(tracks))
        return ResolvedItem.of_playlist(
            PlaylistMetadata(
                name=search_playlist_name(query),
                tracks=tuple(tracks),
                total_duration_ms=sum(t.duration_ms for t in tracks),
                is_search_result=True,
            )
        )

    return ProviderDescriptor(
        name=NAME,
        search_prefix=SEARCH_PREFIX,
        search=search,
        mirror_eligible=True,
    )
