"""Tidal provider descriptor.

Handles track, album and playlist URLs plus ``tdsearch:`` queries.
Metadata only: Tidal tracks are mirrored for playback.
"""

import logging
import re
from collections.abc import Mapping
from typing import cast

import httpx

from trackmirror.domain.dtos import PlaylistMetadata, ResolvedItem
from trackmirror.domain.exceptions import ProviderError
from trackmirror.domain.ports import ProviderDescriptor
from trackmirror.infrastructure.integrations.tidal_client import CollectionKind, TidalClient
from trackmirror.infrastructure.parsers import tidal as tidal_parser
from trackmirror.infrastructure.parsers.common import coerce_str, get_path

logger = logging.getLogger(__name__)

NAME = "tidal"
SEARCH_PREFIX = "tdsearch:"
URL_PATTERN = re.compile(
    r"https?://(?:(?:listen|www)\.)?tidal\.com/(?:browse/)?"
    r"(?P<type>album|track|playlist)/(?P<id>[a-zA-Z0-9\-]+)(?:[/?].*)?"
)


def search_playlist_name(query: str) -> str:
    return f"Tidal Music Search: {query}"


def create_tidal_provider(client: TidalClient) -> ProviderDescriptor:
    """Build the Tidal descriptor around a client."""

    async def get_track(track_id: str) -> ResolvedItem:
        data = await client.get_track(track_id)
        if not data:
            logger.info("Track not found for ID: %s", track_id)
            return ResolvedItem.not_found()

        track = tidal_parser.parse_track(data)
        if track is None:
            logger.info("Failed to parse track for ID: %s", track_id)
            return ResolvedItem.not_found()

        logger.info("Track loaded successfully for ID: %s", track_id)
        return ResolvedItem.of_track(track)

    async def collection_title(kind: CollectionKind, collection_id: str) -> str:
        # Hey future me - the title is cosmetic. If this second call fails we still have the
        # tracks, so never let it sink the whole album/playlist.
        fallback = f"{kind} {collection_id}"
        try:
            info = await client.get_collection(kind, collection_id)
        except (ProviderError, httpx.TimeoutException) as e:
            logger.warning("Could not fetch title for Tidal %s %s: %s", kind, collection_id, e)
            return fallback
        return coerce_str(get_path(info, "title")) or fallback

    async def get_collection(kind: CollectionKind, collection_id: str) -> ResolvedItem:
        data = await client.get_collection_tracks(kind, collection_id)
        items = get_path(data, "items")
        if not items:
            return ResolvedItem.not_found()

        tracks = tidal_parser.parse_tracks(items)
        if not tracks:
            return ResolvedItem.not_found()

        return ResolvedItem.of_playlist(
            PlaylistMetadata(
                name=await collection_title(kind, collection_id),
                tracks=tuple(tracks),
                total_duration_ms=sum(t.duration_ms for t in tracks),
                is_search_result=False,
            )
        )

    async def lookup(captures: Mapping[str, str]) -> ResolvedItem:
        kind = captures["type"]
        item_id = captures["id"]
        if kind == "track":
            return await get_track(item_id)
        return await get_collection(cast(CollectionKind, kind), item_id)

    async def search(query: str, limit: int) -> ResolvedItem:
        data = await client.search_tracks(query, limit)
        items = get_path(data, "tracks", "items")
        if not items:
            return ResolvedItem.not_found()

        tracks = tidal_parser.parse_tracks(items)
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
