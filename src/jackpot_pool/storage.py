"""Key-value storage backends and the typed pool-state view over them."""

from __future__ import annotations

import json
import os
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from .addresses import Address
from .errors import IntegrityError
from .project_constants import (
    ENTRANTS_KEY,
    ENTRY_PRICE_KEY,
    FEE_KEY,
    NEXT_ENTRY_PRICE_KEY,
    NEXT_FEE_KEY,
    OWNER_KEY,
    ROUND_END_KEY,
    ROUND_PERIOD_KEY,
)


class Store(Protocol):
    def get(self, key: bytes) -> Optional[bytes]:
        """Return value for key, or None if missing."""

    def set(self, key: bytes, value: bytes) -> None:
        """Insert or replace key with value."""

    def delete(self, key: bytes) -> None:
        """Remove key if present (no-op if absent)."""

    def has(self, key: bytes) -> bool:
        """Return True if key exists."""


@dataclass
class InMemoryStore:
    def __post_init__(self) -> None:
        self._data: Dict[bytes, bytes] = {}

    def get(self, key: bytes) -> Optional[bytes]:
        return self._data.get(key)

    def set(self, key: bytes, value: bytes) -> None:
        self._data[key] = bytes(value)

    def delete(self, key: bytes) -> None:
        self._data.pop(key, None)

    def has(self, key: bytes) -> bool:
        return key in self._data

    def snapshot(self) -> Dict[bytes, bytes]:
        return dict(self._data)

    def restore(self, snapshot: Dict[bytes, bytes]) -> None:
        self._data = dict(snapshot)


@dataclass
class JsonFileStore:
    """Durable store: every write rewrites a JSON file of hex-encoded pairs."""

    path: Path

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        self._data: Dict[bytes, bytes] = {}
        if self.path.exists():
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            self._data = {bytes.fromhex(k): bytes.fromhex(v) for k, v in raw.items()}

    def get(self, key: bytes) -> Optional[bytes]:
        return self._data.get(key)

    def set(self, key: bytes, value: bytes) -> None:
        self._data[key] = bytes(value)
        self._flush()

    def delete(self, key: bytes) -> None:
        if self._data.pop(key, None) is not None:
            self._flush()

    def has(self, key: bytes) -> bool:
        return key in self._data

    def snapshot(self) -> Dict[bytes, bytes]:
        return dict(self._data)

    def restore(self, snapshot: Dict[bytes, bytes]) -> None:
        self._data = dict(snapshot)
        self._flush()

    def _flush(self) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        payload = {k.hex(): v.hex() for k, v in sorted(self._data.items())}
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
        os.replace(tmp, self.path)


# Entrant sequence layout: count(u32 LE) | [len(u8) | address bytes]*
_COUNT = struct.Struct("<I")


def encode_entries(address: Address, times: int) -> bytes:
    raw = address.to_bytes()
    if len(raw) > 255:
        raise ValueError(f"Address too long to record: {address}")
    return (bytes([len(raw)]) + raw) * times


def empty_entrants() -> bytes:
    return _COUNT.pack(0)


def append_entrants(blob: bytes, address: Address, times: int) -> bytes:
    """Append without decoding the existing entries."""
    (count,) = _COUNT.unpack_from(blob, 0)
    return _COUNT.pack(count + times) + blob[_COUNT.size:] + encode_entries(address, times)


def entrant_count(blob: bytes) -> int:
    return _COUNT.unpack_from(blob, 0)[0]


def decode_entrants(blob: bytes) -> List[Address]:
    out: List[Address] = []
    try:
        (count,) = _COUNT.unpack_from(blob, 0)
        offset = _COUNT.size
        for _ in range(count):
            size = blob[offset]
            end = offset + 1 + size
            if end > len(blob):
                raise ValueError("entry runs past the end of the record")
            out.append(Address.from_bytes(blob[offset + 1:end]))
            offset = end
    except (struct.error, IndexError, ValueError) as e:
        raise IntegrityError(f"Entrant record is corrupted: {e}") from e
    if offset != len(blob):
        raise IntegrityError("Entrant record is corrupted")
    return out


def _u8(value: int) -> bytes:
    return struct.pack("<B", value)


def _u64(value: int) -> bytes:
    return struct.pack("<Q", value)


class PoolState:
    """Typed accessors for every persisted pool parameter."""

    def __init__(self, store: Store) -> None:
        self.store = store

    def _require(self, key: bytes) -> bytes:
        raw = self.store.get(key)
        if raw is None:
            raise IntegrityError(f"Missing storage key {key!r}")
        return raw

    def _get_u8(self, key: bytes) -> int:
        return struct.unpack("<B", self._require(key))[0]

    def _get_u64(self, key: bytes) -> int:
        return struct.unpack("<Q", self._require(key))[0]

    @property
    def is_deployed(self) -> bool:
        return self.store.has(OWNER_KEY)

    @property
    def owner(self) -> Address:
        return Address(self._require(OWNER_KEY).decode("utf-8"))

    @owner.setter
    def owner(self, address: Address) -> None:
        self.store.set(OWNER_KEY, str(address).encode("utf-8"))

    @property
    def fee(self) -> int:
        return self._get_u8(FEE_KEY)

    @fee.setter
    def fee(self, value: int) -> None:
        self.store.set(FEE_KEY, _u8(value))

    @property
    def next_fee(self) -> int:
        return self._get_u8(NEXT_FEE_KEY)

    @next_fee.setter
    def next_fee(self, value: int) -> None:
        self.store.set(NEXT_FEE_KEY, _u8(value))

    @property
    def entry_price(self) -> int:
        return self._get_u64(ENTRY_PRICE_KEY)

    @entry_price.setter
    def entry_price(self, value: int) -> None:
        self.store.set(ENTRY_PRICE_KEY, _u64(value))

    @property
    def next_entry_price(self) -> int:
        return self._get_u64(NEXT_ENTRY_PRICE_KEY)

    @next_entry_price.setter
    def next_entry_price(self, value: int) -> None:
        self.store.set(NEXT_ENTRY_PRICE_KEY, _u64(value))

    @property
    def has_round_end(self) -> bool:
        return self.store.has(ROUND_END_KEY)

    @property
    def round_end(self) -> int:
        return self._get_u64(ROUND_END_KEY)

    @round_end.setter
    def round_end(self, slot: int) -> None:
        self.store.set(ROUND_END_KEY, _u64(slot))

    @property
    def period(self) -> int:
        return self._get_u64(ROUND_PERIOD_KEY)

    @period.setter
    def period(self, value: int) -> None:
        self.store.set(ROUND_PERIOD_KEY, _u64(value))

    # Entrants

    @property
    def has_pending_entrants(self) -> bool:
        raw = self.store.get(ENTRANTS_KEY)
        return raw is not None and entrant_count(raw) > 0

    def entrants(self) -> List[Address]:
        raw = self.store.get(ENTRANTS_KEY)
        if raw is None:
            return []
        return decode_entrants(raw)

    def entrant_count(self) -> int:
        raw = self.store.get(ENTRANTS_KEY)
        return 0 if raw is None else entrant_count(raw)

    def reset_entrants(self) -> None:
        self.store.set(ENTRANTS_KEY, empty_entrants())

    def add_entries(self, address: Address, times: int) -> None:
        raw = self.store.get(ENTRANTS_KEY) or empty_entrants()
        self.store.set(ENTRANTS_KEY, append_entrants(raw, address, times))

    def clear_entrants(self) -> None:
        self.store.delete(ENTRANTS_KEY)
