"""Serialization of (metadata, value) pairs into stored strings."""

from storage_lru.codec.record_codec import FormatError, ParseError, RecordCodec

__all__ = [
    "FormatError",
    "ParseError",
    "RecordCodec",
]
