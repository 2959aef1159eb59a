"""slider.kz response parser.

Results live under ``audios[""]`` (yes, an empty-string key). Each entry has a
combined ``tit_art`` field ("Artist - Title"), a duration in seconds and a
download path that is usually relative to the slider.kz host.
"""

from collections.abc import Callable, Mapping
from typing import Any

from trackmirror.domain.dtos import TrackMetadata
from trackmirror.infrastructure.parsers.common import (
    UNKNOWN_ARTIST,
    build_track,
    coerce_str,
    guarded,
    normalize_media_url,
    parse_duration_ms,
    parse_list,
    require_str,
)

PROVIDER = "sliderkz"
DEFAULT_HOST = "https://hayqbhgr.slider.kz/"
TITLE_ARTIST_SEPARATOR = " - "
COVER_SIZE = "400x400"


def split_title_artist(title_artist: str) -> tuple[str, str]:
    """Split "Artist - Title" on the FIRST separator.

    Returns:
        (artist, title). Without a separator the whole string is the title
        and the artist is unknown.

    Example:
        >>> split_title_artist("AC/DC - Back In Black - Live")
        ('AC/DC', 'Back In Black - Live')
    """
    artist, separator, title = title_artist.partition(TITLE_ARTIST_SEPARATOR)
    if not separator:
        return UNKNOWN_ARTIST, title_artist.strip()
    return artist.strip() or UNKNOWN_ARTIST, title.strip()


def format_cover_url(template: str | None, size: str = COVER_SIZE) -> str | None:
    """Fill the ``%%`` size token of a templated cover path."""
    if not template:
        return None
    filled = template.replace("%%", size)
    if filled.startswith(("https://", "http://")):
        return filled
    return "https://" + filled.lstrip("/")


def make_record_parser(
    host: str = DEFAULT_HOST,
) -> Callable[[Mapping[str, Any]], TrackMetadata]:
    """Build a record parser bound to a slider.kz host."""

    def _parse_record(node: Mapping[str, Any]) -> TrackMetadata:
        duration_ms = parse_duration_ms(node.get("duration"))
        artist, title = split_title_artist(require_str(node, "tit_art"))
        url = normalize_media_url(require_str(node, "url"), host)
        return build_track(
            title=title,
            artist=artist,
            duration_ms=duration_ms,
            canonical_url=url,
            source=PROVIDER,
            identifier=coerce_str(node.get("id")) or url,
            stream_url=url,
            artwork_url=format_cover_url(coerce_str(node.get("cover"))),
        )

    return _parse_record


parse_track = guarded(make_record_parser(), PROVIDER)


def parse_tracks(node: Any, host: str = DEFAULT_HOST) -> list[TrackMetadata]:
    """Parse an ``audios[""]`` array, dropping malformed entries."""
    parse_one = parse_track if host == DEFAULT_HOST else guarded(make_record_parser(host), PROVIDER)
    return parse_list(node, parse_one)
