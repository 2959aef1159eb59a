"""Application services."""

from trackmirror.application.services.mirror_resolver import MirrorResolver
from trackmirror.application.services.playback_service import (
    PlaybackService,
    PlaybackSession,
)
from trackmirror.application.services.resolution_engine import ResolutionEngine

__all__ = [
    "MirrorResolver",
    "PlaybackService",
    "PlaybackSession",
    "ResolutionEngine",
]
