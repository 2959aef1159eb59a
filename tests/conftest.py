"""Shared test fixtures."""

from collections.abc import Callable
from typing import Any

import pytest

from trackmirror.domain.dtos import TrackMetadata

TrackFactory = Callable[..., TrackMetadata]


@pytest.fixture
def make_track() -> TrackFactory:
    """Factory for TrackMetadata with sensible Last.fm-style defaults."""

    def _make(**overrides: Any) -> TrackMetadata:
        fields: dict[str, Any] = {
            "title": "Shape of You",
            "artist": "Ed Sheeran",
            "duration_ms": 233_000,
            "canonical_url": "https://www.last.fm/music/Ed+Sheeran/_/Shape+of+You",
            "source": "lastfm",
        }
        fields.update(overrides)
        return TrackMetadata(**fields)

    return _make
