from __future__ import annotations

import logging
from dataclasses import dataclass

from .addresses import Address
from .args import U64_MAX
from .collaborators import Event, EventSink, Ledger, Randomness, Scheduler
from .context import CallContext
from .draw import compute_payout, pick_winner
from .errors import (
    ALREADY_DEPLOYED,
    AUTONOMOUS_ONLY,
    END_OUT_OF_RANGE,
    END_TOO_SOON,
    FEE_TOO_HIGH,
    NO_CONTRACTS,
    NOT_DEPLOYED,
    NOT_OWNER,
    PERIOD_NOT_POSITIVE,
    PERIOD_TOO_LONG,
    POOL_ENDED,
    POOL_NOT_ENDED,
    PRICE_NOT_POSITIVE,
    VALUE_NOT_MULTIPLE,
    VALUE_TOO_LOW,
    WINNER_PENDING,
    AuthorizationError,
    InvalidValueError,
    TimingError,
    ensure,
)
from .project_constants import (
    DRAW_DELAY,
    DRAW_FEE_BUDGET,
    DRAW_GAS_BUDGET,
    DRAW_VALIDITY,
    END_ROUND_FUNCTION,
    MAX_FEE,
    MAX_PERIOD,
    MIN_RELAUNCH_LEAD,
)
from .storage import PoolState, Store

log = logging.getLogger(__name__)

LAUNCHED_EVENT = "JACKPOT_LAUNCHED"
ENTER_EVENT = "JACKPOT_ENTER"
WINNER_EVENT = "JACKPOT_WINNER"


@dataclass(frozen=True)
class PoolInfo:
    owner: str
    fee: int
    next_fee: int
    entry_price: int
    next_entry_price: int
    round_end: int
    period: int
    entries: int


class PoolController:
    """
    Jackpot pool lifecycle.

    Holds no state of its own: every call reads and writes the injected store,
    so any two invocations only communicate through persisted keys.
    """

    def __init__(
        self,
        store: Store,
        ledger: Ledger,
        randomness: Randomness,
        scheduler: Scheduler,
        events: EventSink,
    ) -> None:
        self.state = PoolState(store)
        self.ledger = ledger
        self.randomness = randomness
        self.scheduler = scheduler
        self.events = events

    # CONSTRUCTOR

    def construct(self, ctx: CallContext, fee: int, entry_price: int, period: int) -> None:
        ensure(not self.state.is_deployed, TimingError, ALREADY_DEPLOYED)
        _check_fee(fee)
        _check_entry_price(entry_price)
        _check_period(period)

        self._launch(ctx, fee, entry_price, ctx.slot + period)
        self.state.owner = ctx.caller
        self.state.next_entry_price = entry_price
        self.state.next_fee = fee
        self.state.period = period
        log.info("Pool deployed by %s (fee=%d%%, entry=%d, period=%d)", ctx.caller, fee, entry_price, period)

    # ADMIN

    def update_fee(self, ctx: CallContext, fee: int) -> None:
        self._only_owner(ctx)
        _check_fee(fee)
        self.state.next_fee = fee
        log.info("Next round fee staged: %d%%", fee)

    def update_entry_price(self, ctx: CallContext, entry_price: int) -> None:
        self._only_owner(ctx)
        _check_entry_price(entry_price)
        self.state.next_entry_price = entry_price
        log.info("Next round entry price staged: %d", entry_price)

    def update_period(self, ctx: CallContext, period: int) -> None:
        self._only_owner(ctx)
        _check_period(period)
        self.state.period = period
        log.info("Round period staged: %d", period)

    def relaunch(self, ctx: CallContext, fee: int, entry_price: int, end_slot: int) -> None:
        self._only_owner(ctx)
        _check_fee(fee)
        _check_entry_price(entry_price)
        ensure(end_slot > ctx.slot + MIN_RELAUNCH_LEAD, TimingError, END_TOO_SOON)
        ensure(not self.state.has_pending_entrants, TimingError, WINNER_PENDING)
        self._launch(ctx, fee, entry_price, end_slot)

    # ROUND END

    def end_round(self, ctx: CallContext) -> None:
        """Scheduled self-call fired at the draw slot."""
        ensure(ctx.is_self_call, AuthorizationError, AUTONOMOUS_ONLY)
        self._end_round(ctx)

    def end_round_manual(self, ctx: CallContext) -> None:
        """Owner fallback for when the scheduled call never arrived."""
        self._only_owner(ctx)
        ensure(not self._is_contract(ctx), AuthorizationError, NO_CONTRACTS)
        self._end_round(ctx)

    # ENTRY

    def enter(self, ctx: CallContext) -> int:
        ensure(self.state.is_deployed, TimingError, NOT_DEPLOYED)
        ensure(ctx.slot < self.state.round_end, TimingError, POOL_ENDED)

        entry_price = self.state.entry_price
        ensure(ctx.coins >= entry_price, InvalidValueError, VALUE_TOO_LOW)
        ensure(ctx.coins % entry_price == 0, InvalidValueError, VALUE_NOT_MULTIPLE)

        entries = ctx.coins // entry_price
        self.state.add_entries(ctx.caller, entries)
        self.events.emit(
            Event(
                ENTER_EVENT,
                ctx.slot,
                {"caller": str(ctx.caller), "amount": ctx.coins, "entries": entries},
            )
        )
        log.debug("%s entered %d time(s) with %d", ctx.caller, entries, ctx.coins)
        return entries

    # VIEWS

    def owner_address(self) -> Address:
        ensure(self.state.is_deployed, TimingError, NOT_DEPLOYED)
        return self.state.owner

    def pool_info(self) -> PoolInfo:
        ensure(self.state.is_deployed, TimingError, NOT_DEPLOYED)
        s = self.state
        return PoolInfo(
            owner=str(s.owner),
            fee=s.fee,
            next_fee=s.next_fee,
            entry_price=s.entry_price,
            next_entry_price=s.next_entry_price,
            round_end=s.round_end,
            period=s.period,
            entries=s.entrant_count(),
        )

    # INTERNALS

    def _only_owner(self, ctx: CallContext) -> None:
        ensure(self.state.is_deployed, TimingError, NOT_DEPLOYED)
        ensure(ctx.caller == self.state.owner, AuthorizationError, NOT_OWNER)

    def _is_contract(self, ctx: CallContext) -> bool:
        # Direct callers are the transaction origin; anything relayed through code is not.
        return ctx.caller != ctx.origin and self.ledger.has_bytecode(ctx.caller)

    def _launch(self, ctx: CallContext, fee: int, entry_price: int, end_slot: int) -> None:
        ensure(end_slot <= U64_MAX - DRAW_DELAY - DRAW_VALIDITY, InvalidValueError, END_OUT_OF_RANGE)
        if self.state.has_round_end:
            ensure(ctx.slot > self.state.round_end, TimingError, POOL_NOT_ENDED)

        self.state.fee = fee
        self.state.entry_price = entry_price
        self.state.round_end = end_slot
        self.state.reset_entrants()

        # Draw a few slots after close so the random value is not known at close time.
        draw_slot = end_slot + DRAW_DELAY
        self.scheduler.schedule_self_call(
            ctx.contract,
            END_ROUND_FUNCTION,
            draw_slot,
            draw_slot + DRAW_VALIDITY,
            DRAW_GAS_BUDGET,
            DRAW_FEE_BUDGET,
        )
        self.events.emit(
            Event(
                LAUNCHED_EVENT,
                ctx.slot,
                {"end_slot": end_slot, "draw_slot": draw_slot, "fee": fee, "entry_price": entry_price},
            )
        )
        log.info("Round launched: ends at slot %d, draw at slot %d", end_slot, draw_slot)

    def _end_round(self, ctx: CallContext) -> None:
        ensure(self.state.is_deployed, TimingError, NOT_DEPLOYED)
        ensure(ctx.slot > self.state.round_end, TimingError, POOL_NOT_ENDED)

        entrants = self.state.entrants()
        if entrants:
            draw = self.randomness.next()
            winner, index = pick_winner(entrants, draw)

            # Cleared before any coins move: a retried call cannot pay this round twice.
            self.state.clear_entrants()
            payout = compute_payout(self.ledger.balance(ctx.contract), self.state.fee)
            self.ledger.transfer(ctx.contract, winner, payout.winner_amount)
            self.ledger.transfer(ctx.contract, self.state.owner, payout.fee)
            self.events.emit(
                Event(
                    WINNER_EVENT,
                    ctx.slot,
                    {
                        "winner": str(winner),
                        "amount": payout.winner_amount,
                        "fee": payout.fee,
                        "total": payout.total,
                        "draw": draw,
                        "index": index,
                        "entries": len(entrants),
                    },
                )
            )
            log.info("Winner %s drawn at index %d/%d, paid %d", winner, index, len(entrants), payout.winner_amount)
        else:
            log.info("Round ended at slot %d with no entrants", ctx.slot)

        self._launch(
            ctx,
            self.state.next_fee,
            self.state.next_entry_price,
            ctx.slot + self.state.period,
        )


def _check_fee(fee: int) -> None:
    ensure(0 <= fee <= MAX_FEE, InvalidValueError, FEE_TOO_HIGH)


def _check_entry_price(entry_price: int) -> None:
    ensure(entry_price > 0, InvalidValueError, PRICE_NOT_POSITIVE)


def _check_period(period: int) -> None:
    ensure(period > 0, InvalidValueError, PERIOD_NOT_POSITIVE)
    ensure(period <= MAX_PERIOD, InvalidValueError, PERIOD_TOO_LONG)
