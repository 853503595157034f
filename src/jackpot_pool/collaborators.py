"""Interfaces of the ledger services the pool relies on, plus local implementations."""

from __future__ import annotations

import random
import secrets
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Set, Tuple

from .addresses import Address
from .errors import InsufficientBalanceError

I64_MIN = -(2**63)


class Ledger(Protocol):
    def balance(self, address: Address) -> int:
        """Return the coins currently held by address."""

    def transfer(self, sender: Address, to: Address, amount: int) -> None:
        """Move coins; fails the whole invocation if sender cannot cover amount."""

    def has_bytecode(self, address: Address) -> bool:
        """Return True if address holds deployed code."""


class Randomness(Protocol):
    def next(self) -> int:
        """Return an unpredictable signed 64-bit integer."""


class Scheduler(Protocol):
    def schedule_self_call(
        self,
        contract: Address,
        function: str,
        target_slot: int,
        valid_through_slot: int,
        gas_budget: int,
        fee_budget: int,
    ) -> None:
        """Request a future invocation of contract.function; delivery is not guaranteed."""


class EventSink(Protocol):
    def emit(self, event: "Event") -> None:
        """Append a structured event to the log."""


@dataclass(frozen=True)
class Event:
    name: str
    slot: int
    data: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "slot": self.slot, "data": dict(self.data)}

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "Event":
        return Event(name=raw["name"], slot=int(raw["slot"]), data=dict(raw["data"]))


@dataclass
class EventLog:
    events: List[Event] = field(default_factory=list)

    def emit(self, event: Event) -> None:
        self.events.append(event)

    def named(self, name: str) -> List[Event]:
        return [e for e in self.events if e.name == name]

    def snapshot(self) -> int:
        return len(self.events)

    def restore(self, size: int) -> None:
        del self.events[size:]


@dataclass
class InMemoryLedger:
    balances: Dict[Address, int] = field(default_factory=dict)
    contracts: Set[Address] = field(default_factory=set)

    def balance(self, address: Address) -> int:
        return self.balances.get(address, 0)

    def credit(self, address: Address, amount: int) -> None:
        if amount < 0:
            raise ValueError("Cannot credit a negative amount")
        self.balances[address] = self.balance(address) + amount

    def transfer(self, sender: Address, to: Address, amount: int) -> None:
        if amount < 0:
            raise ValueError("Cannot transfer a negative amount")
        available = self.balance(sender)
        if available < amount:
            raise InsufficientBalanceError(str(sender), available, amount)
        self.balances[sender] = available - amount
        self.balances[to] = self.balance(to) + amount

    def deploy_code(self, address: Address) -> None:
        self.contracts.add(address)

    def has_bytecode(self, address: Address) -> bool:
        return address in self.contracts

    def snapshot(self) -> Tuple[Dict[Address, int], Set[Address]]:
        return dict(self.balances), set(self.contracts)

    def restore(self, snapshot: Tuple[Dict[Address, int], Set[Address]]) -> None:
        self.balances, self.contracts = dict(snapshot[0]), set(snapshot[1])


class SystemRandomness:
    def next(self) -> int:
        return secrets.randbits(64) + I64_MIN


class SeededRandomness:
    """Reproducible draws for simulations."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def next(self) -> int:
        return self._rng.getrandbits(64) + I64_MIN


@dataclass(frozen=True)
class ScheduledCall:
    contract: Address
    function: str
    target_slot: int
    valid_through_slot: int
    gas_budget: int
    fee_budget: int


@dataclass
class MessageQueue:
    pending: List[ScheduledCall] = field(default_factory=list)

    def schedule_self_call(
        self,
        contract: Address,
        function: str,
        target_slot: int,
        valid_through_slot: int,
        gas_budget: int,
        fee_budget: int,
    ) -> None:
        self.pending.append(
            ScheduledCall(contract, function, target_slot, valid_through_slot, gas_budget, fee_budget)
        )

    def next_due(self, slot: int) -> Optional[ScheduledCall]:
        """Pop the earliest call whose target slot has been reached."""
        due = [c for c in self.pending if c.target_slot <= slot]
        if not due:
            return None
        call = min(due, key=lambda c: c.target_slot)
        self.pending.remove(call)
        return call

    def snapshot(self) -> List[ScheduledCall]:
        return list(self.pending)

    def restore(self, snapshot: List[ScheduledCall]) -> None:
        self.pending = list(snapshot)
