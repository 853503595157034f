"""Serialized endpoint arguments: fixed-order fields, little-endian."""

from __future__ import annotations

import struct

from .errors import ArgsError

U8_MAX = 2**8 - 1
U64_MAX = 2**64 - 1


class Args:
    def __init__(self, data: bytes = b"") -> None:
        self._buf = bytearray(data)
        self._offset = 0

    def serialize(self) -> bytes:
        return bytes(self._buf)

    def add_u8(self, value: int) -> "Args":
        if not 0 <= value <= U8_MAX:
            raise ArgsError(f"u8 out of range: {value}")
        self._buf += struct.pack("<B", value)
        return self

    def add_u64(self, value: int) -> "Args":
        if not 0 <= value <= U64_MAX:
            raise ArgsError(f"u64 out of range: {value}")
        self._buf += struct.pack("<Q", value)
        return self

    def next_u8(self) -> int:
        return struct.unpack("<B", self._take(1))[0]

    def next_u64(self) -> int:
        return struct.unpack("<Q", self._take(8))[0]

    def remaining(self) -> int:
        return len(self._buf) - self._offset

    def finish(self) -> None:
        """Reject trailing bytes: the buffer held more fields than expected."""
        if self.remaining():
            raise ArgsError(f"{self.remaining()} unexpected trailing byte(s) in arguments")

    def _take(self, size: int) -> bytes:
        end = self._offset + size
        if end > len(self._buf):
            raise ArgsError(
                f"Argument buffer too short: need {size} byte(s) at offset {self._offset}, "
                f"have {len(self._buf) - self._offset}"
            )
        chunk = bytes(self._buf[self._offset:end])
        self._offset = end
        return chunk
