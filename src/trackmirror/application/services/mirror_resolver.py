"""Mirror Resolver - find a playable stream for metadata-only tracks.

Hey future me - Last.fm and Tidal give us great metadata but no audio. At
playback time we search the mirror providers (slider.kz by default) for the
same song and borrow their stream URL. The original canonical URL stays the
source of truth; the binding is thrown away after the session.

Matching is deliberately strict by default (exact normalized title/artist plus
a +-2s duration window). A wrong song playing is worse than no song playing.
The fuzzy mode uses rapidfuzz token_set_ratio, the same library the
enrichment code uses for name matching, and still enforces the duration window.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from typing import TYPE_CHECKING

from rapidfuzz import fuzz

from trackmirror.config.settings import MirrorSettings
from trackmirror.domain.dtos import MirrorBinding, TrackMetadata
from trackmirror.domain.exceptions import (
    ConfigurationError,
    ProviderProtocolError,
    ProviderTransportError,
)

if TYPE_CHECKING:
    from trackmirror.application.services.resolution_engine import ResolutionEngine

logger = logging.getLogger(__name__)

_WS_RE = re.compile(r"\s+")


def normalize_text(value: str) -> str:
    """Normalize a title or artist for comparison.

    NFKC folds compatibility characters (full-width letters, ligatures),
    casefold handles more than lower() (German ß), and whitespace runs
    collapse to a single space.
    """
    text = unicodedata.normalize("NFKC", value or "").casefold()
    return _WS_RE.sub(" ", text).strip()


def build_query(track: TrackMetadata, include_duration: bool = False) -> str:
    """Build the mirror search query for a track."""
    query = f"{track.artist} {track.title}"
    if include_duration:
        query = f"{query} {track.duration_ms // 1000}"
    return query


class MirrorResolver:
    """Look up a mirror stream for tracks that have none."""

    def __init__(self, engine: ResolutionEngine, settings: MirrorSettings | None = None) -> None:
        """Initialize the resolver.

        Args:
            engine: Engine whose registry holds the mirror providers
            settings: Mirror policy (default: MirrorSettings())

        Raises:
            ConfigurationError: A configured mirror provider is unknown or not mirror-eligible
        """
        self._engine = engine
        self._settings = settings or MirrorSettings()

        for name in self._settings.providers:
            provider = engine.registry.get(name)
            if provider is None:
                raise ConfigurationError(f"Mirror provider {name} is not registered")
            if not provider.mirror_eligible:
                raise ConfigurationError(f"Provider {name} cannot act as a mirror")

        self._providers = list(self._settings.providers)

    @property
    def providers(self) -> list[str]:
        return list(self._providers)

    def duration_matches(self, track: TrackMetadata, candidate: TrackMetadata) -> bool:
        return abs(track.duration_ms - candidate.duration_ms) <= self._settings.duration_tolerance_ms

    def matches(self, track: TrackMetadata, candidate: TrackMetadata) -> bool:
        """Decide whether a candidate is the same recording as the track.

        Args:
            track: Metadata-only original
            candidate: Search result from a mirror provider

        Returns:
            True when the candidate is playable and passes the configured match policy
        """
        if not candidate.stream_url:
            return False
        if not self.duration_matches(track, candidate):
            return False

        title, artist = normalize_text(track.title), normalize_text(track.artist)
        cand_title, cand_artist = normalize_text(candidate.title), normalize_text(candidate.artist)

        if self._settings.match_mode == "fuzzy":
            threshold = self._settings.fuzzy_threshold
            return (
                fuzz.token_set_ratio(title, cand_title) >= threshold
                and fuzz.token_set_ratio(artist, cand_artist) >= threshold
            )

        return title == cand_title and artist == cand_artist

    async def resolve_mirror(self, track: TrackMetadata) -> MirrorBinding | None:
        """Find a stream for ``track`` on the configured mirror providers.

        Providers are tried in priority order; the first matching candidate of
        the first provider that yields one wins.

        Args:
            track: Track without a stream URL

        Returns:
            MirrorBinding, or None when the track already streams or no mirror matches
        """
        if not track.needs_mirror:
            return None

        query = build_query(track, self._settings.include_duration_in_query)

        for name in self._providers:
            try:
                candidates = await self._engine.search(name, query)
            except (ProviderTransportError, ProviderProtocolError) as e:
                logger.warning("Mirror provider %s failed for %r: %s", name, query, e.message)
                continue

            for candidate in candidates:
                if self.matches(track, candidate):
                    assert candidate.stream_url is not None
                    logger.info(
                        "Mirrored %s - %s via %s", track.artist, track.title, name
                    )
                    return MirrorBinding(
                        original=track,
                        stream_url=candidate.stream_url,
                        provider=name,
                        candidate=candidate,
                    )

            logger.debug("%s had %d candidate(s) for %r, none matched", name, len(candidates), query)

        logger.info("No mirror found for %s - %s", track.artist, track.title)
        return None
