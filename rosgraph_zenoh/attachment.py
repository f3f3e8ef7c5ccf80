"""Per-message attachment carrying sequence number, timestamp and source GID."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Tuple

from .entity import GID_STORAGE_SIZE

_INT64 = struct.Struct("<q")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

_SEQUENCE_NUMBER = "sequence_number"
_SOURCE_TIMESTAMP = "source_timestamp"
_SOURCE_GID = "source_gid"


def _encode_varint(value: int) -> bytes:
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _encode_str(text: str) -> bytes:
    raw = text.encode("utf-8")
    return _encode_varint(len(raw)) + raw


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = memoryview(data)
        self._pos = 0

    def take(self, size: int) -> bytes:
        end = self._pos + size
        if end > len(self._data):
            raise ValueError("attachment is truncated")
        chunk = bytes(self._data[self._pos:end])
        self._pos = end
        return chunk

    def varint(self) -> int:
        value = 0
        shift = 0
        while True:
            byte = self.take(1)[0]
            value |= (byte & 0x7F) << shift
            if not byte & 0x80:
                return value
            shift += 7
            if shift > 63:
                raise ValueError("attachment holds an oversized length")

    def string(self) -> str:
        raw = self.take(self.varint())
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ValueError("attachment holds an invalid string") from exc

    def int64(self) -> int:
        return _INT64.unpack(self.take(_INT64.size))[0]


@dataclass(frozen=True)
class AttachmentData:
    """Metadata sent alongside each message."""

    sequence_number: int
    source_timestamp: int
    source_gid: bytes

    def __post_init__(self) -> None:
        for name in ("sequence_number", "source_timestamp"):
            value = getattr(self, name)
            if not _INT64_MIN <= value <= _INT64_MAX:
                raise ValueError(f"{name} does not fit in a signed 64-bit integer")
        gid = bytes(self.source_gid)
        if len(gid) != GID_STORAGE_SIZE:
            raise ValueError(f"source_gid must be {GID_STORAGE_SIZE} bytes, got {len(gid)}")
        object.__setattr__(self, "source_gid", gid)

    def to_bytes(self) -> bytes:
        """Serialize as alternating field names and values."""
        parts: Tuple[bytes, ...] = (
            _encode_str(_SEQUENCE_NUMBER),
            _INT64.pack(self.sequence_number),
            _encode_str(_SOURCE_TIMESTAMP),
            _INT64.pack(self.source_timestamp),
            _encode_str(_SOURCE_GID),
            self.source_gid,
        )
        return b"".join(parts)

    @classmethod
    def from_bytes(cls, data: bytes) -> "AttachmentData":
        """Parse serialized attachment data; raises ValueError when it is malformed."""
        reader = _Reader(bytes(data))
        if reader.string() != _SEQUENCE_NUMBER:
            raise ValueError("sequence_number is not found in the attachment.")
        sequence_number = reader.int64()
        if reader.string() != _SOURCE_TIMESTAMP:
            raise ValueError("source_timestamp is not found in the attachment.")
        source_timestamp = reader.int64()
        if reader.string() != _SOURCE_GID:
            raise ValueError("source_gid is not found in the attachment.")
        source_gid = reader.take(GID_STORAGE_SIZE)
        return cls(sequence_number, source_timestamp, source_gid)