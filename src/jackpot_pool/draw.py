from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from .addresses import Address
from .errors import NO_WINNER, RESERVE_NOT_COVERED, IntegrityError
from .project_constants import COIN_DECIMALS, RESERVE


@dataclass(frozen=True)
class Payout:
    total: int
    fee: int
    winner_amount: int


def to_coins(raw_amount: int) -> float:
    return round(raw_amount / (10**COIN_DECIMALS), 3)


def winner_index(draw: int, entry_count: int) -> int:
    """Uniform pick over entries (not unique addresses)."""
    if entry_count <= 0:
        raise IntegrityError("Cannot draw from an empty entrant list.")
    return abs(draw) % entry_count


def pick_winner(entrants: Sequence[Address], draw: int) -> Tuple[Address, int]:
    idx = winner_index(draw, len(entrants))
    winner = entrants[idx]
    if not isinstance(winner, Address):
        raise IntegrityError(NO_WINNER)
    return winner, idx


def compute_payout(balance: int, fee_percent: int, reserve: int = RESERVE) -> Payout:
    total = balance - reserve
    if total < 0:
        raise IntegrityError(f"{RESERVE_NOT_COVERED}: {balance} < {reserve}")
    fee = (fee_percent * total) // 100
    return Payout(total=total, fee=fee, winner_amount=total - fee)
