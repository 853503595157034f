import pytest

from conftest import user
from jackpot_pool.draw import compute_payout, pick_winner, to_coins, winner_index
from jackpot_pool.errors import IntegrityError
from jackpot_pool.project_constants import ONE_COIN, RESERVE


def test_winner_index_is_positional_modulo_entry_count() -> None:
    assert winner_index(2, 3) == 2
    assert winner_index(7, 3) == 1
    assert winner_index(-5, 3) == 2


def test_pick_winner_weights_by_entries() -> None:
    a, b = user("a"), user("b")
    entrants = [a, b, b]

    assert pick_winner(entrants, 0) == (a, 0)
    assert pick_winner(entrants, 1) == (b, 1)
    assert pick_winner(entrants, 2) == (b, 2)


def test_pick_winner_rejects_empty_entrants() -> None:
    with pytest.raises(IntegrityError):
        pick_winner([], 1)


def test_pick_winner_rejects_non_address_entry() -> None:
    with pytest.raises(IntegrityError):
        pick_winner([user("a"), None], 1)


def test_compute_payout_withholds_reserve_and_splits_fee() -> None:
    payout = compute_payout(4 * ONE_COIN, 5)

    assert payout.total == 3 * ONE_COIN
    assert payout.fee == 150_000_000
    assert payout.winner_amount == 2_850_000_000


@pytest.mark.parametrize("balance", [RESERVE, RESERVE + 1, RESERVE + 199, RESERVE + 12_345_678_901])
@pytest.mark.parametrize("fee", [0, 1, 3, 5])
def test_compute_payout_never_leaks(balance: int, fee: int) -> None:
    payout = compute_payout(balance, fee)

    assert payout.fee + payout.winner_amount == payout.total == balance - RESERVE
    assert payout.fee == fee * payout.total // 100


def test_compute_payout_rejects_balance_below_reserve() -> None:
    with pytest.raises(IntegrityError):
        compute_payout(RESERVE - 1, 5)


def test_to_coins() -> None:
    assert to_coins(2_850_000_000) == 2.85
