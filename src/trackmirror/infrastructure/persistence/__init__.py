"""Persistence format for resolved tracks."""

from trackmirror.infrastructure.persistence.track_state_codec import (
    SCHEMA_VERSION,
    BaseTrackFields,
    decode,
    decode_base_fields,
    decode_track_record,
    encode,
    encode_track_record,
)

__all__ = [
    "SCHEMA_VERSION",
    "BaseTrackFields",
    "decode",
    "decode_base_fields",
    "decode_track_record",
    "encode",
    "encode_track_record",
]
