import pytest

from conftest import PERIOD, PRICE, FixedRandomness, contract_address, user
from jackpot_pool.args import Args
from jackpot_pool.endpoints import ENDPOINTS, decode_args, encode_args
from jackpot_pool.errors import ArgsError
from jackpot_pool.project_constants import RESERVE
from jackpot_pool.runtime import LocalChain


def test_encode_args_uses_fixed_field_order() -> None:
    bs = encode_args("constructor", {"period": PERIOD, "fee": 5, "entry_price": PRICE})

    assert bs == Args().add_u8(5).add_u64(PRICE).add_u64(PERIOD).serialize()
    assert decode_args("constructor", bs) == {"fee": 5, "entry_price": PRICE, "period": PERIOD}


def test_encode_args_rejects_missing_or_extra_fields() -> None:
    with pytest.raises(ArgsError):
        encode_args("relaunchPool", {"fee": 5, "entry_price": PRICE})
    with pytest.raises(ArgsError):
        encode_args("updateFee", {"fee": 5, "period": 1})


def test_decode_args_rejects_wrong_field_count() -> None:
    short = Args().add_u8(5).add_u64(PRICE).serialize()
    long = Args().add_u8(5).add_u64(PRICE).add_u64(PERIOD).add_u8(1).serialize()

    with pytest.raises(ArgsError):
        decode_args("constructor", short)
    with pytest.raises(ArgsError):
        decode_args("constructor", long)


def test_no_argument_endpoints_accept_empty_buffer_only() -> None:
    assert decode_args("endPool", b"") == {}
    with pytest.raises(ArgsError):
        decode_args("endPoolManual", b"\x01")


def test_endpoint_table_covers_every_entry_point() -> None:
    assert set(ENDPOINTS) == {
        "constructor",
        "updateFee",
        "updateEntreeValue",
        "updatePeriod",
        "relaunchPool",
        "enter",
        "endPool",
        "endPoolManual",
        "ownerAddress",
        "poolInfo",
    }


def test_unknown_endpoint_is_rejected() -> None:
    chain = LocalChain(contract=contract_address("pool"), randomness=FixedRandomness([]))

    with pytest.raises(ArgsError):
        chain.call(user("owner"), "drain")


def test_admin_endpoints_decode_and_stage(chain: LocalChain, owner) -> None:
    chain.call(owner, "updateFee", encode_args("updateFee", {"fee": 1}))
    chain.call(owner, "updateEntreeValue", encode_args("updateEntreeValue", {"entry_price": 3 * PRICE}))
    chain.call(owner, "updatePeriod", encode_args("updatePeriod", {"period": 42}))

    info = chain.read("poolInfo")
    assert (info["next_fee"], info["next_entry_price"], info["period"]) == (1, 3 * PRICE, 42)
    assert chain.read("ownerAddress") == str(owner)


def test_constructor_with_truncated_arguments_deploys_nothing(owner) -> None:
    chain = LocalChain(contract=contract_address("pool"), randomness=FixedRandomness([]))
    chain.fund(owner, RESERVE)

    with pytest.raises(ArgsError):
        chain.call(owner, "constructor", Args().add_u8(5).serialize(), coins=RESERVE)

    assert chain.pool.state.is_deployed is False
    assert chain.ledger.balance(owner) == RESERVE
    assert chain.messages.pending == []
