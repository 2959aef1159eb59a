# Hey future me - this is the byte format resolved tracks are stored in. Once bytes are out in
# the wild you can NEVER change what an existing field means. Rules:
#
#   1. New fields go at the END of the extension block. Old readers ignore trailing bytes.
#   2. Absent optionals are written as marker 0, never skipped. Position = meaning.
#   3. Bump SCHEMA_VERSION when adding fields. Readers accept newer versions (rule 1 makes
#      that safe), but version 0 is always garbage.
#
# Extension block (encode/decode), all integers big-endian:
#
#   u8  schema version
#   opt stream_url, artwork_url, album_name, album_url, artist_url, preview_url
#   u8  is_preview (0/1)
#
#   opt = u8 marker (0 absent, 1 present) [+ u16 byte length + UTF-8 bytes]
#
# Full record (encode_track_record/decode_track_record): base block first, then the extension
# block framed by a u32 length, so a reader can finish the base record before touching the
# extension:
#
#   u8  schema version
#   opt source, identifier, title, artist
#   i64 duration_ms
#   opt canonical_url, isrc
#   u8  has_stream (0/1)
#   u32 extension length + extension block
"""Track State Codec - persist resolved tracks without re-resolving."""

from __future__ import annotations

import struct
from dataclasses import dataclass

from trackmirror.domain.dtos import TrackMetadata
from trackmirror.domain.exceptions import CorruptTrackStateError, ValidationError

SCHEMA_VERSION = 1

MAX_STRING_BYTES = 0xFFFF

_ABSENT = 0
_PRESENT = 1

_U8 = struct.Struct(">B")
_U16 = struct.Struct(">H")
_U32 = struct.Struct(">I")
_I64 = struct.Struct(">q")


@dataclass(frozen=True)
class BaseTrackFields:
    """Fields stored by the enclosing record, not by the extension block."""

    title: str
    artist: str
    duration_ms: int
    canonical_url: str
    source: str
    identifier: str = ""
    isrc: str | None = None

    @classmethod
    def from_track(cls, track: TrackMetadata) -> BaseTrackFields:
        return cls(
            title=track.title,
            artist=track.artist,
            duration_ms=track.duration_ms,
            canonical_url=track.canonical_url,
            source=track.source,
            identifier=track.identifier,
            isrc=track.isrc,
        )


class _Writer:
    def __init__(self) -> None:
        self._buffer = bytearray()

    def u8(self, value: int) -> None:
        self._buffer += _U8.pack(value)

    def boolean(self, value: bool) -> None:
        self.u8(1 if value else 0)

    def optional_str(self, value: str | None, field: str) -> None:
        if value is None:
            self.u8(_ABSENT)
            return
        encoded = value.encode("utf-8")
        if len(encoded) > MAX_STRING_BYTES:
            raise CorruptTrackStateError(
                f"{field} is {len(encoded)} bytes, the limit is {MAX_STRING_BYTES}"
            )
        self.u8(_PRESENT)
        self._buffer += _U16.pack(len(encoded))
        self._buffer += encoded

    def i64(self, value: int) -> None:
        self._buffer += _I64.pack(value)

    def block(self, data: bytes) -> None:
        self._buffer += _U32.pack(len(data))
        self._buffer += data

    def getvalue(self) -> bytes:
        return bytes(self._buffer)


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = memoryview(data)
        self.offset = 0

    def _take(self, size: int, what: str) -> memoryview:
        end = self.offset + size
        if end > len(self._data):
            raise CorruptTrackStateError(
                f"Truncated track state: {what} needs {size} byte(s), "
                f"{len(self._data) - self.offset} left",
                offset=self.offset,
            )
        chunk = self._data[self.offset : end]
        self.offset = end
        return chunk

    def u8(self, what: str) -> int:
        return int(_U8.unpack(self._take(1, what))[0])

    def boolean(self, what: str) -> bool:
        value = self.u8(what)
        if value not in (0, 1):
            raise CorruptTrackStateError(
                f"Invalid boolean {value} for {what}", offset=self.offset - 1
            )
        return value == 1

    def optional_str(self, what: str) -> str | None:
        marker = self.u8(what)
        if marker == _ABSENT:
            return None
        if marker != _PRESENT:
            raise CorruptTrackStateError(
                f"Unknown presence marker {marker} for {what}", offset=self.offset - 1
            )
        (length,) = _U16.unpack(self._take(2, what))
        start = self.offset
        raw = self._take(length, what)
        try:
            return bytes(raw).decode("utf-8")
        except UnicodeDecodeError as e:
            raise CorruptTrackStateError(f"{what} is not valid UTF-8", offset=start) from e

    def required_str(self, what: str) -> str:
        value = self.optional_str(what)
        if value is None:
            raise CorruptTrackStateError(f"Missing required {what}", offset=self.offset - 1)
        return value

    def i64(self, what: str) -> int:
        return int(_I64.unpack(self._take(8, what))[0])

    def block(self, what: str) -> bytes:
        (length,) = _U32.unpack(self._take(4, what))
        return bytes(self._take(length, what))

    def version(self) -> int:
        version = self.u8("schema version")
        if version == 0:
            raise CorruptTrackStateError("Schema version 0 is invalid", offset=0)
        return version


def encode(track: TrackMetadata) -> bytes:
    """Encode the extension fields of a track.

    Args:
        track: Track to encode

    Returns:
        Extension block bytes

    Raises:
        CorruptTrackStateError: A string field exceeds 65535 UTF-8 bytes
    """
    writer = _Writer()
    writer.u8(SCHEMA_VERSION)
    writer.optional_str(track.stream_url, "stream_url")
    writer.optional_str(track.artwork_url, "artwork_url")
    writer.optional_str(track.album_name, "album_name")
    writer.optional_str(track.album_url, "album_url")
    writer.optional_str(track.artist_url, "artist_url")
    writer.optional_str(track.preview_url, "preview_url")
    writer.boolean(track.is_preview)
    return writer.getvalue()


def decode(data: bytes, base: BaseTrackFields) -> TrackMetadata:
    """Rebuild a track from an extension block and its base fields.

    Bytes after the known fields are ignored, so blocks written by a newer
    schema decode fine.

    Args:
        data: Extension block from encode()
        base: Fields the enclosing record stores

    Returns:
        Reconstructed TrackMetadata

    Raises:
        CorruptTrackStateError: Truncated data, bad marker, version 0 or invalid UTF-8
    """
    reader = _Reader(data)
    reader.version()
    stream_url = reader.optional_str("stream_url")
    artwork_url = reader.optional_str("artwork_url")
    album_name = reader.optional_str("album_name")
    album_url = reader.optional_str("album_url")
    artist_url = reader.optional_str("artist_url")
    preview_url = reader.optional_str("preview_url")
    is_preview = reader.boolean("is_preview")

    try:
        return TrackMetadata(
            title=base.title,
            artist=base.artist,
            duration_ms=base.duration_ms,
            canonical_url=base.canonical_url,
            source=base.source,
            identifier=base.identifier,
            isrc=base.isrc,
            stream_url=stream_url,
            artwork_url=artwork_url,
            album_name=album_name,
            album_url=album_url,
            artist_url=artist_url,
            preview_url=preview_url,
            is_preview=is_preview,
        )
    except ValidationError as e:
        raise CorruptTrackStateError(f"Decoded track is invalid: {e.message}") from e


def encode_track_record(track: TrackMetadata) -> bytes:
    """Encode a complete persisted record: base block plus framed extension."""
    writer = _Writer()
    writer.u8(SCHEMA_VERSION)
    writer.optional_str(track.source, "source")
    writer.optional_str(track.identifier, "identifier")
    writer.optional_str(track.title, "title")
    writer.optional_str(track.artist, "artist")
    writer.i64(track.duration_ms)
    writer.optional_str(track.canonical_url, "canonical_url")
    writer.optional_str(track.isrc, "isrc")
    writer.boolean(track.stream_url is not None)
    writer.block(encode(track))
    return writer.getvalue()


def decode_base_fields(data: bytes) -> tuple[BaseTrackFields, bytes]:
    """Read the base block of a persisted record.

    Returns:
        The base fields and the raw (still undecoded) extension block
    """
    reader = _Reader(data)
    reader.version()
    source = reader.required_str("source")
    identifier = reader.required_str("identifier")
    title = reader.required_str("title")
    artist = reader.required_str("artist")
    duration_ms = reader.i64("duration_ms")
    canonical_url = reader.required_str("canonical_url")
    isrc = reader.optional_str("isrc")
    reader.boolean("has_stream")
    extension = reader.block("extension block")

    base = BaseTrackFields(
        title=title,
        artist=artist,
        duration_ms=duration_ms,
        canonical_url=canonical_url,
        source=source,
        identifier=identifier,
        isrc=isrc,
    )
    return base, extension


def decode_track_record(data: bytes) -> TrackMetadata:
    """Decode a record produced by encode_track_record()."""
    base, extension = decode_base_fields(data)
    return decode(extension, base)
