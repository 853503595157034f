from __future__ import annotations

from dataclasses import dataclass

from .addresses import Address


@dataclass(frozen=True)
class CallContext:
    """Everything an invocation may know about who is calling, and when."""

    caller: Address
    contract: Address
    origin: Address
    slot: int
    coins: int = 0

    @property
    def is_self_call(self) -> bool:
        return self.caller == self.contract
