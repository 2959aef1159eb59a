"""Helpers shared by the provider parsers.

Provider responses are loosely shaped JSON: keys go missing, numbers arrive as
strings, a one-element result list sometimes arrives as a bare object. These
helpers make reading them total (never KeyError/IndexError), so each parser
only has to decide which fields are required.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from trackmirror.domain.dtos import MAX_DURATION_MS, TrackMetadata
from trackmirror.domain.exceptions import MalformedRecordError, ValidationError

logger = logging.getLogger(__name__)

UNKNOWN_ARTIST = "Unknown Artist"


def get_path(node: Any, *keys: str | int) -> Any:
    """Walk nested mappings/lists, returning None as soon as a step is missing.

    Example:
        >>> get_path({"album": {"image": [{"#text": "a"}]}}, "album", "image", 0, "#text")
        'a'
    """
    current = node
    for key in keys:
        if isinstance(key, int):
            if not isinstance(current, list) or not -len(current) <= key < len(current):
                return None
            current = current[key]
        elif isinstance(current, Mapping):
            current = current.get(key)
        else:
            return None
        if current is None:
            return None
    return current


def coerce_str(value: Any) -> str | None:
    """Return stripped text, or None for missing/blank/non-scalar values."""
    if value is None or isinstance(value, (Mapping, list)):
        return None
    text = str(value).strip()
    return text or None


def require_str(node: Any, *keys: str | int) -> str:
    """Like ``get_path`` + ``coerce_str`` but a missing value is a malformed record."""
    value = coerce_str(get_path(node, *keys))
    if value is None:
        raise MalformedRecordError(
            f"Missing required field {'.'.join(str(k) for k in keys)}",
            field=".".join(str(k) for k in keys),
        )
    return value


def parse_duration_ms(raw: Any) -> int:
    """Convert a provider duration in seconds into milliseconds.

    Accepts ints and decimal digit strings ("215"). Anything else (None,
    "", "3:35", "abc", "²", negative values, booleans, fractional seconds, or
    more milliseconds than a signed 64-bit field holds) is a malformed record:
    it is never turned into a sentinel like 0 or -1.

    Raises:
        MalformedRecordError: duration is not a non-negative whole number in range
    """
    seconds: int | None = None
    if isinstance(raw, bool):
        seconds = None
    elif isinstance(raw, int):
        seconds = raw
    elif isinstance(raw, float) and raw.is_integer():
        seconds = int(raw)
    elif isinstance(raw, str) and raw.strip().isdecimal():
        # isdecimal, not isdigit: "²" is a digit but int() rejects it
        seconds = int(raw.strip())

    if seconds is None or seconds < 0:
        raise MalformedRecordError(f"Unparsable duration: {raw!r}", field="duration")
    if seconds * 1000 > MAX_DURATION_MS:
        raise MalformedRecordError(f"Duration out of range: {raw!r}", field="duration")
    return seconds * 1000


def normalize_media_url(path: str, base_url: str) -> str:
    """Make a provider media path absolute.

    - ``http://`` / ``https://`` URLs are returned unchanged (so the function
      is idempotent)
    - protocol-relative ``//host/x`` gains ``https:``
    - anything else is joined onto ``base_url`` with spaces encoded as ``+``
      and angle brackets removed

    Example:
        >>> normalize_media_url("download/1 2<3>.mp3", "https://example.org/")
        'https://example.org/download/1+23.mp3'
    """
    if path.startswith(("https://", "http://")):
        return path
    if path.startswith("//"):
        return "https:" + path

    cleaned = path.replace(" ", "+").replace("<", "").replace(">", "")
    return base_url.rstrip("/") + "/" + cleaned.lstrip("/")


def iter_entries(node: Any) -> Iterable[Any]:
    """Iterate result entries.

    Lists iterate as-is; a single object is treated as a one-element list
    (Last.fm collapses single results that way); anything else is empty.
    """
    if isinstance(node, list):
        return node
    if isinstance(node, Mapping):
        return (node,)
    return ()


def build_track(**fields: Any) -> TrackMetadata:
    """Construct TrackMetadata, turning invariant violations into malformed records."""
    try:
        return TrackMetadata(**fields)
    except ValidationError as e:
        raise MalformedRecordError(e.message) from e


def parse_list(
    node: Any, parse_one: Callable[[Any], TrackMetadata | None]
) -> list[TrackMetadata]:
    """Parse every entry of ``node``, dropping the ones that fail.

    Output order matches input order. A malformed entry never fails the batch.
    """
    tracks: list[TrackMetadata] = []
    for position, entry in enumerate(iter_entries(node)):
        track = parse_one(entry)
        if track is None:
            logger.debug("Dropped malformed entry at position %d", position)
            continue
        tracks.append(track)
    return tracks


def guarded(
    parse_record: Callable[[Any], TrackMetadata], provider: str
) -> Callable[[Any], TrackMetadata | None]:
    """Wrap a strict record parser so MalformedRecordError becomes None."""

    def parse_one(node: Any) -> TrackMetadata | None:
        if not isinstance(node, Mapping):
            logger.debug("Skipping non-object %s entry: %r", provider, node)
            return None
        try:
            return parse_record(node)
        except MalformedRecordError as e:
            logger.debug("Skipping malformed %s record (%s): %r", provider, e.message, node)
            return None

    return parse_one
