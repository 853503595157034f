from __future__ import annotations

from typing import Iterable, List

import pytest

from jackpot_pool.addresses import Address
from jackpot_pool.project_constants import ONE_COIN, RESERVE
from jackpot_pool.runtime import LocalChain

PRICE = 1 * ONE_COIN
PERIOD = 604_800_000


def user(name: str) -> Address:
    return Address.from_payload("AU", name.encode("utf-8"))


def contract_address(name: str) -> Address:
    return Address.from_payload("AS", name.encode("utf-8"))


class FixedRandomness:
    def __init__(self, values: Iterable[int]) -> None:
        self.values: List[int] = list(values)
        self.calls = 0

    def next(self) -> int:
        self.calls += 1
        return self.values.pop(0)


@pytest.fixture
def owner() -> Address:
    return user("owner")


@pytest.fixture
def alice() -> Address:
    return user("alice")


@pytest.fixture
def bob() -> Address:
    return user("bob")


@pytest.fixture
def randomness() -> FixedRandomness:
    return FixedRandomness([2, 0, 1, 5])


@pytest.fixture
def chain(owner: Address, alice: Address, bob: Address, randomness: FixedRandomness) -> LocalChain:
    c = LocalChain(contract=contract_address("pool"), randomness=randomness)
    c.fund(owner, RESERVE)
    c.fund(alice, 10 * PRICE)
    c.fund(bob, 10 * PRICE)
    c.deploy(owner, fee=5, entry_price=PRICE, period=PERIOD, coins=RESERVE)
    return c
