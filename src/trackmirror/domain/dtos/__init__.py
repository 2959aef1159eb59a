"""
Standard data records shared by every provider.

Hey future me - these DTOs are the LINGUA FRANCA between providers!
Every parser (Last.fm, slider.kz, Tidal) MUST return data in this shape, and
everything above the parser layer (engine, mirror resolver, codec) only ever
sees these records: never raw provider JSON.

Flow: Provider JSON → parser → TrackMetadata / PlaylistMetadata → ResolvedItem
      → (playback) MirrorBinding → PlayableStream
"""

from dataclasses import dataclass, field
from enum import Enum

from trackmirror.domain.exceptions import ValidationError

# Persisted records store the duration as a signed 64-bit integer
MAX_DURATION_MS = 2**63 - 1


# Hey future me - stream_url is the important optional here! None means "metadata only",
# the track has to go through the MirrorResolver before anything can be played.
# canonical_url stays the source of truth for re-resolution and dedup, even after mirroring.
@dataclass(frozen=True)
class TrackMetadata:
    """Normalized track record produced by a metadata parser."""

    title: str
    artist: str
    duration_ms: int
    canonical_url: str
    source: str  # provider name: "lastfm", "sliderkz", "tidal"
    identifier: str = ""  # provider-local id (Tidal track id, slider.kz id, ...)

    stream_url: str | None = None
    artwork_url: str | None = None
    album_name: str | None = None
    is_preview: bool = False

    isrc: str | None = None
    album_url: str | None = None
    artist_url: str | None = None
    preview_url: str | None = None

    def __post_init__(self) -> None:
        """Validate essential fields."""
        if self.duration_ms < 0:
            raise ValidationError(f"duration_ms must be >= 0, got {self.duration_ms}")
        if self.duration_ms > MAX_DURATION_MS:
            raise ValidationError(
                f"duration_ms must be <= {MAX_DURATION_MS}, got {self.duration_ms}"
            )
        if not self.title or not self.title.strip():
            raise ValidationError("Track title cannot be empty")
        if not self.canonical_url:
            raise ValidationError("canonical_url must be specified")
        if not self.source:
            raise ValidationError("source must be specified")

    @property
    def needs_mirror(self) -> bool:
        """True when the track carries no directly playable stream."""
        return not self.stream_url


@dataclass(frozen=True)
class PlaylistMetadata:
    """Ordered collection of tracks (album, playlist or search result)."""

    name: str
    tracks: tuple[TrackMetadata, ...] = ()
    total_duration_ms: int | None = None
    is_search_result: bool = False

    def __post_init__(self) -> None:
        # Accept lists from callers but store an immutable tuple
        if not isinstance(self.tracks, tuple):
            object.__setattr__(self, "tracks", tuple(self.tracks))

    def __len__(self) -> int:
        return len(self.tracks)


class ItemKind(str, Enum):
    """Which variant of ResolvedItem is populated."""

    TRACK = "track"
    PLAYLIST = "playlist"
    NOT_FOUND = "not_found"
    ERROR = "error"


# Hey future me - ResolvedItem is a sum type squeezed into a dataclass. Exactly one payload
# is set (none for NOT_FOUND). Always build it through the classmethods below, they keep the
# invariant. NOT_FOUND is a perfectly normal answer, ERROR is for protocol/transport failures
# that a caller may want to fall back on.
@dataclass(frozen=True)
class ResolvedItem:
    """Outcome of resolving one identifier."""

    kind: ItemKind
    track: TrackMetadata | None = None
    playlist: PlaylistMetadata | None = None
    error: Exception | None = None

    def __post_init__(self) -> None:
        """Validate that exactly the payload matching ``kind`` is populated."""
        populated = {
            ItemKind.TRACK: self.track is not None,
            ItemKind.PLAYLIST: self.playlist is not None,
            ItemKind.ERROR: self.error is not None,
        }
        for kind, is_set in populated.items():
            if is_set != (kind == self.kind):
                raise ValidationError(
                    f"ResolvedItem of kind {self.kind.value} has an invalid payload"
                )

    @classmethod
    def of_track(cls, track: TrackMetadata) -> "ResolvedItem":
        return cls(kind=ItemKind.TRACK, track=track)

    @classmethod
    def of_playlist(cls, playlist: PlaylistMetadata) -> "ResolvedItem":
        return cls(kind=ItemKind.PLAYLIST, playlist=playlist)

    @classmethod
    def not_found(cls) -> "ResolvedItem":
        return cls(kind=ItemKind.NOT_FOUND)

    @classmethod
    def failed(cls, cause: Exception) -> "ResolvedItem":
        return cls(kind=ItemKind.ERROR, error=cause)

    @property
    def is_not_found(self) -> bool:
        return self.kind is ItemKind.NOT_FOUND

    @property
    def is_error(self) -> bool:
        return self.kind is ItemKind.ERROR

    @property
    def tracks(self) -> tuple[TrackMetadata, ...]:
        """All tracks carried by this item (empty for NOT_FOUND/ERROR)."""
        if self.track is not None:
            return (self.track,)
        if self.playlist is not None:
            return self.playlist.tracks
        return ()


@dataclass(frozen=True)
class MirrorBinding:
    """Binds a mirror provider's stream to the original track metadata.

    Lives only for one playback session. Never persisted: mirror targets go
    stale or get geo-restricted, so the next session resolves again.
    """

    original: TrackMetadata
    stream_url: str
    provider: str
    candidate: TrackMetadata | None = field(default=None, compare=False)


@dataclass(frozen=True)
class PlayableStream:
    """A URL audio bytes can be fetched from, plus where it came from."""

    url: str
    track: TrackMetadata
    mirror: MirrorBinding | None = None

    @property
    def is_mirrored(self) -> bool:
        return self.mirror is not None
