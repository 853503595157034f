"""
Local single-threaded host for a pool contract.

Each invocation runs to completion against the shared store; if it raises,
store, ledger, scheduled calls and events are restored to what they were
before the call. Scheduled self-calls are delivered best-effort while the
slot clock advances.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Tuple, Union

from .addresses import Address
from .collaborators import (
    EventLog,
    InMemoryLedger,
    MessageQueue,
    Randomness,
    ScheduledCall,
    SystemRandomness,
)
from .context import CallContext
from .controller import PoolController
from .endpoints import READ_ONLY, dispatch, encode_args
from .errors import PoolError
from .storage import InMemoryStore, JsonFileStore

log = logging.getLogger(__name__)


class LocalChain:
    def __init__(
        self,
        contract: Address,
        store: Union[InMemoryStore, JsonFileStore, None] = None,
        ledger: Optional[InMemoryLedger] = None,
        randomness: Optional[Randomness] = None,
        slot: int = 0,
        deliver_scheduled: bool = True,
    ) -> None:
        self.contract = contract
        self.store = store if store is not None else InMemoryStore()
        self.ledger = ledger if ledger is not None else InMemoryLedger()
        self.ledger.deploy_code(contract)
        self.randomness = randomness if randomness is not None else SystemRandomness()
        self.messages = MessageQueue()
        self.events = EventLog()
        self.slot = slot
        self.deliver_scheduled = deliver_scheduled
        self.dropped: List[Tuple[ScheduledCall, str]] = []
        self.pool = PoolController(self.store, self.ledger, self.randomness, self.messages, self.events)

    def fund(self, address: Address, amount: int) -> None:
        self.ledger.credit(address, amount)

    def deploy(self, deployer: Address, fee: int, entry_price: int, period: int, coins: int = 0) -> None:
        args = encode_args("constructor", {"fee": fee, "entry_price": entry_price, "period": period})
        self.call(deployer, "constructor", args, coins=coins)

    def call(
        self,
        caller: Address,
        function: str,
        args: bytes = b"",
        coins: int = 0,
        origin: Optional[Address] = None,
    ) -> Any:
        ctx = CallContext(
            caller=caller,
            contract=self.contract,
            origin=origin if origin is not None else caller,
            slot=self.slot,
            coins=coins,
        )
        return self._execute(ctx, function, args)

    def read(self, function: str) -> Any:
        if function not in READ_ONLY:
            raise ValueError(f"{function} is not a read-only endpoint")
        ctx = CallContext(caller=self.contract, contract=self.contract, origin=self.contract, slot=self.slot)
        return dispatch(self.pool, function, ctx)

    def advance(self, slots: int) -> None:
        self.advance_to(self.slot + slots)

    def advance_to(self, slot: int) -> None:
        if slot < self.slot:
            raise ValueError(f"Cannot move the clock back from {self.slot} to {slot}")
        while self.deliver_scheduled:
            call = self.messages.next_due(slot)
            if call is None:
                break
            if call.valid_through_slot < self.slot:
                log.warning("Scheduled %s expired at slot %d", call.function, call.valid_through_slot)
                self.dropped.append((call, "expired"))
                continue
            self.slot = max(self.slot, call.target_slot)
            self._deliver(call)
        self.slot = slot

    def _deliver(self, call: ScheduledCall) -> None:
        ctx = CallContext(caller=call.contract, contract=call.contract, origin=call.contract, slot=self.slot)
        try:
            self._execute(ctx, call.function, b"")
        except PoolError as e:
            log.warning("Scheduled %s failed at slot %d: %s", call.function, self.slot, e)
            self.dropped.append((call, str(e)))
        except Exception as e:
            # already rolled back by _execute
            log.warning("Scheduled %s crashed at slot %d: %r", call.function, self.slot, e, exc_info=True)
            self.dropped.append((call, repr(e)))

    def _execute(self, ctx: CallContext, function: str, args: bytes) -> Any:
        saved = (
            self.store.snapshot(),
            self.ledger.snapshot(),
            self.messages.snapshot(),
            self.events.snapshot(),
        )
        try:
            if ctx.coins:
                self.ledger.transfer(ctx.caller, ctx.contract, ctx.coins)
            return dispatch(self.pool, function, ctx, args)
        except Exception:
            self.store.restore(saved[0])
            self.ledger.restore(saved[1])
            self.messages.restore(saved[2])
            self.events.restore(saved[3])
            raise
