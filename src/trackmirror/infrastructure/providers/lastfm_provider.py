"""Last.fm provider descriptor.

Ties the Last.fm client to the Last.fm parser. Metadata only: Last.fm tracks
have no stream and always go through the mirror resolver for playback.
"""

import logging
import re
from collections.abc import Mapping
from urllib.parse import unquote_plus

from trackmirror.domain.dtos import PlaylistMetadata, ResolvedItem
from trackmirror.domain.ports import ProviderDescriptor
from trackmirror.infrastructure.integrations.lastfm_client import LastfmClient
from trackmirror.infrastructure.parsers import lastfm as lastfm_parser
from trackmirror.infrastructure.parsers.common import get_path

logger = logging.getLogger(__name__)

NAME = "lastfm"
SEARCH_PREFIX = "lfmsearch:"
URL_PATTERN = re.compile(
    r"https?://(?:(?:www|m)\.)?(?:lastfm\.com|last\.fm)/(?:music|track)/"
    r"(?P<artist>[^/?#]+)/(?:_/)?(?P<track>[^/?#]+)(?:\?.*)?"
)


def search_playlist_name(query: str) -> str:
    return f"Last.fm Music Search: {query}"


def create_lastfm_provider(client: LastfmClient) -> ProviderDescriptor:
    """Build the Last.fm descriptor around a client."""

    async def lookup(captures: Mapping[str, str]) -> ResolvedItem:
        artist = unquote_plus(captures["artist"])
        track = unquote_plus(captures["track"])

        data = await client.get_track_info(artist, track)
        node = get_path(data, "track")
        if not node:
            logger.info("Track not found for %s - %s", artist, track)
            return ResolvedItem.not_found()

        parsed = lastfm_parser.parse_track(node)
        if parsed is None:
            logger.info("Failed to parse track for %s - %s", artist, track)
            return ResolvedItem.not_found()

        logger.info("Track loaded successfully for %s - %s", artist, track)
        return ResolvedItem.of_track(parsed)

    async def search(query: str, limit: int) -> ResolvedItem:
        data = await client.search_tracks(query, limit)
        node = get_path(data, "results", "trackmatches", "track")
        if not node:
            return ResolvedItem.not_found()

        tracks = lastfm_parser.parse_tracks(node)
        if not tracks:
            return ResolvedItem.not_found()

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
        url_pattern=URL_PATTERN,
        search_prefix=SEARCH_PREFIX,
        lookup=lookup,
        search=search,
        mirror_eligible=False,
    )
