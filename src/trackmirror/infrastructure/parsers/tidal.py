"""Tidal response parser.

Layout quirks:
- several artists per track, joined as "A, B"
- cover art is a UUID with dashes that maps to a path on the image CDN
  (``ab-cd`` → ``ab/cd``)
- ``duration`` is an integer number of seconds
- tracks come bare from ``tracks/<id>``, as ``items`` from album/playlist
  pages, and as ``tracks.items`` from search
"""

from collections.abc import Mapping
from typing import Any

from trackmirror.domain.dtos import TrackMetadata
from trackmirror.domain.exceptions import MalformedRecordError
from trackmirror.infrastructure.parsers.common import (
    UNKNOWN_ARTIST,
    build_track,
    coerce_str,
    get_path,
    guarded,
    iter_entries,
    parse_duration_ms,
    parse_list,
    require_str,
)

PROVIDER = "tidal"
IMAGE_BASE_URL = "https://resources.tidal.com/images"
COVER_SIZE = "1280x1280"


def cover_url(cover_id: str | None) -> str | None:
    """Turn a Tidal cover UUID into a CDN URL."""
    if not cover_id:
        return None
    return f"{IMAGE_BASE_URL}/{cover_id.replace('-', '/')}/{COVER_SIZE}.jpg"


def _artist_names(node: Mapping[str, Any]) -> str:
    names = [
        name
        for artist in iter_entries(node.get("artists"))
        if (name := coerce_str(get_path(artist, "name")))
    ]
    if not names:
        return coerce_str(get_path(node, "artist", "name")) or UNKNOWN_ARTIST
    return ", ".join(names)


def _parse_record(node: Mapping[str, Any]) -> TrackMetadata:
    # Playlist pages wrap each entry as {"item": {...}, "type": "track"}; videos share the page
    if isinstance(node.get("item"), Mapping):
        entry_type = coerce_str(node.get("type"))
        if entry_type is not None and entry_type != "track":
            raise MalformedRecordError(
                f"Unsupported playlist entry type {entry_type!r}", field="type"
            )
        node = node["item"]

    track_id = require_str(node, "id")
    return build_track(
        title=require_str(node, "title"),
        artist=_artist_names(node),
        duration_ms=parse_duration_ms(node.get("duration")),
        canonical_url=coerce_str(node.get("url")) or f"https://tidal.com/browse/track/{track_id}",
        source=PROVIDER,
        identifier=track_id,
        artwork_url=cover_url(coerce_str(get_path(node, "album", "cover"))),
        album_name=coerce_str(get_path(node, "album", "title")),
        isrc=coerce_str(node.get("isrc")),
    )


parse_track = guarded(_parse_record, PROVIDER)


def parse_tracks(node: Any) -> list[TrackMetadata]:
    """Parse an ``items`` array, dropping malformed entries."""
    return parse_list(node, parse_track)
