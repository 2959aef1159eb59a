"""Last.fm response parser.

Layout quirks:
- ``artist`` is a plain string in search results but an object
  ``{"name": ..., "url": ...}`` in ``track.getinfo``
- cover art is the 4th entry (``extralarge``) of an ``image`` array, found on
  the track itself in search results and under ``album`` in getinfo
- ``duration`` is seconds as a string; search hits often lack it entirely
- no audio: every Last.fm track needs a mirror
"""

from collections.abc import Mapping
from typing import Any

from trackmirror.domain.dtos import TrackMetadata
from trackmirror.infrastructure.parsers.common import (
    UNKNOWN_ARTIST,
    build_track,
    coerce_str,
    get_path,
    guarded,
    parse_duration_ms,
    parse_list,
    require_str,
)

PROVIDER = "lastfm"
COVER_IMAGE_INDEX = 3


def _artist_name(node: Mapping[str, Any]) -> str:
    artist = node.get("artist")
    if isinstance(artist, Mapping):
        return coerce_str(artist.get("name")) or UNKNOWN_ARTIST
    return coerce_str(artist) or UNKNOWN_ARTIST


def _cover_url(node: Mapping[str, Any]) -> str | None:
    return coerce_str(get_path(node, "image", COVER_IMAGE_INDEX, "#text")) or coerce_str(
        get_path(node, "album", "image", COVER_IMAGE_INDEX, "#text")
    )


def _parse_record(node: Mapping[str, Any]) -> TrackMetadata:
    url = require_str(node, "url")
    return build_track(
        title=require_str(node, "name"),
        artist=_artist_name(node),
        duration_ms=parse_duration_ms(node.get("duration")),
        canonical_url=url,
        source=PROVIDER,
        identifier=coerce_str(node.get("mbid")) or url,
        artwork_url=_cover_url(node),
        album_name=coerce_str(get_path(node, "album", "title")),
        album_url=coerce_str(get_path(node, "album", "url")),
        artist_url=coerce_str(get_path(node, "artist", "url")),
    )


parse_track = guarded(_parse_record, PROVIDER)


def parse_tracks(node: Any) -> list[TrackMetadata]:
    """Parse a ``trackmatches.track`` array, dropping malformed entries."""
    return parse_list(node, parse_track)
