"""Playback Service - lazily attach a stream to resolved metadata.

Hey future me - resolution and playback are separate on purpose. Resolving a
100-track Tidal playlist must not fire 100 mirror searches. A PlaybackSession
wraps ONE track and only asks the MirrorResolver when someone actually wants
to play it. The binding is cached for the lifetime of the session, and the
lock makes sure two concurrent open_stream() calls don't both search.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from trackmirror.domain.dtos import MirrorBinding, PlayableStream, TrackMetadata

if TYPE_CHECKING:
    from trackmirror.application.services.mirror_resolver import MirrorResolver
    from trackmirror.application.services.resolution_engine import ResolutionEngine

logger = logging.getLogger(__name__)


class PlaybackSession:
    """One track's playback lifecycle."""

    def __init__(self, track: TrackMetadata, mirror_resolver: MirrorResolver) -> None:
        self._track = track
        self._mirror_resolver = mirror_resolver
        self._lock = asyncio.Lock()
        self._binding: MirrorBinding | None = None
        self._resolved = False

    @property
    def track(self) -> TrackMetadata:
        return self._track

    @property
    def binding(self) -> MirrorBinding | None:
        """Cached mirror binding, None until open_stream() found one."""
        return self._binding

    async def open_stream(self) -> PlayableStream | None:
        """Return a playable stream for the session's track.

        Tracks with their own stream URL never touch the mirror resolver. For
        the rest, the first call resolves a mirror and later calls reuse it,
        including a negative result.

        Returns:
            PlayableStream, or None when no mirror carries the track
        """
        if self._track.stream_url:
            return PlayableStream(url=self._track.stream_url, track=self._track)

        async with self._lock:
            if not self._resolved:
                self._binding = await self._mirror_resolver.resolve_mirror(self._track)
                self._resolved = True

        if self._binding is None:
            return None
        return PlayableStream(url=self._binding.stream_url, track=self._track, mirror=self._binding)


class PlaybackService:
    """Resolve an identifier and hand out playback sessions for its tracks."""

    def __init__(self, engine: ResolutionEngine, mirror_resolver: MirrorResolver) -> None:
        self._engine = engine
        self._mirror_resolver = mirror_resolver

    def session(self, track: TrackMetadata) -> PlaybackSession:
        return PlaybackSession(track, self._mirror_resolver)

    async def open(self, identifier: str) -> list[PlaybackSession]:
        """Resolve ``identifier`` and wrap every resulting track in a session.

        Args:
            identifier: Provider URL or prefixed search query

        Returns:
            Sessions in track order; empty for Unrecognized, NotFound or Error
        """
        item = await self._engine.resolve(identifier)
        if item is None:
            logger.info("Identifier %r is not handled by any provider", identifier)
            return []
        if item.is_error:
            logger.warning("Could not open %r: %s", identifier, item.error)
            return []
        return [self.session(track) for track in item.tracks]
