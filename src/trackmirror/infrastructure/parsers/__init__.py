"""Provider response parsers.

One module per provider, each exposing ``parse_track(node)`` (record or None)
and ``parse_tracks(node)`` (list, malformed entries dropped, order kept).
"""

from trackmirror.infrastructure.parsers import lastfm, sliderkz, tidal
from trackmirror.infrastructure.parsers.common import normalize_media_url, parse_list

__all__ = ["lastfm", "normalize_media_url", "parse_list", "sliderkz", "tidal"]
