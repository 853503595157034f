from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import base58

USER_PREFIX = "AU"
CONTRACT_PREFIX = "AS"

_KIND_TAGS = {USER_PREFIX: 0, CONTRACT_PREFIX: 1}
_TAG_KINDS = {tag: kind for kind, tag in _KIND_TAGS.items()}


@dataclass(frozen=True, order=True)
class Address:
    value: str

    def __post_init__(self) -> None:
        parse_address(self.value)

    def __str__(self) -> str:
        return self.value

    @property
    def kind(self) -> str:
        return self.value[:2]

    @property
    def is_contract_address(self) -> bool:
        return self.kind == CONTRACT_PREFIX

    @staticmethod
    def from_payload(kind: str, payload: bytes) -> "Address":
        if kind not in _KIND_TAGS:
            raise ValueError(f"Unknown address kind: {kind!r}")
        if not payload:
            raise ValueError("Address payload must not be empty")
        return Address(kind + base58.b58encode_check(payload).decode("ascii"))

    def to_bytes(self) -> bytes:
        """Compact form: 1-byte kind tag followed by the raw payload."""
        kind, payload = parse_address(self.value)
        return bytes([_KIND_TAGS[kind]]) + payload

    @staticmethod
    def from_bytes(data: bytes) -> "Address":
        if len(data) < 2:
            raise ValueError("Address bytes too short")
        kind = _TAG_KINDS.get(data[0])
        if kind is None:
            raise ValueError(f"Unknown address tag: {data[0]}")
        return Address.from_payload(kind, data[1:])


def parse_address(text: str) -> Tuple[str, bytes]:
    """
    Split an address string into (kind prefix, payload).
    Layout: "AU" | "AS" followed by base58check(payload).
    """
    if len(text) < 3:
        raise ValueError(f"Address too short: {text!r}")
    kind = text[:2]
    if kind not in _KIND_TAGS:
        raise ValueError(f"Unknown address prefix in {text!r}")
    try:
        payload = base58.b58decode_check(text[2:])
    except ValueError as e:
        raise ValueError(f"Invalid address {text!r}: {e}") from e
    if not payload:
        raise ValueError(f"Empty address payload in {text!r}")
    return kind, payload


def is_valid_address(text: str) -> bool:
    try:
        parse_address(text)
    except ValueError:
        return False
    return True
