import json

import httpx
import pytest

from jackpot_pool.rpc import RpcClient, parse_coins


def _client(handler) -> RpcClient:
    return RpcClient("https://node.test/api/v2", transport=httpx.MockTransport(handler))


def test_get_slot_reads_last_slot_period() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": {"last_slot": {"period": 4321, "thread": 3}}})

    rpc = _client(handler)
    try:
        assert rpc.get_slot() == 4321
    finally:
        rpc.close()
    assert seen["body"]["method"] == "get_status"


def test_get_balance_converts_to_raw_units() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        assert body["method"] == "get_addresses"
        assert body["params"] == [["AS1pool"]]
        return httpx.Response(
            200,
            json={"result": [{"address": "AS1pool", "final_balance": "12.5", "candidate_balance": "13"}]},
        )

    rpc = _client(handler)
    try:
        assert rpc.get_balance("AS1pool") == 12_500_000_000
        assert rpc.get_balance("AS1pool", final=False) == 13_000_000_000
    finally:
        rpc.close()


def test_rpc_error_is_raised() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"error": {"code": -32601, "message": "no such method"}})

    rpc = _client(handler)
    try:
        with pytest.raises(RuntimeError, match="RPC error"):
            rpc.get_status()
    finally:
        rpc.close()


def test_missing_address_entry_is_raised() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"result": []})

    rpc = _client(handler)
    try:
        with pytest.raises(RuntimeError):
            rpc.get_balance("AU1nobody")
    finally:
        rpc.close()


def test_http_errors_propagate() -> None:
    rpc = _client(lambda request: httpx.Response(503))
    try:
        with pytest.raises(httpx.HTTPStatusError):
            rpc.get_slot()
    finally:
        rpc.close()


@pytest.mark.parametrize("amount, raw", [("0", 0), ("1", 1_000_000_000), ("0.000000001", 1)])
def test_parse_coins(amount: str, raw: int) -> None:
    assert parse_coins(amount) == raw


@pytest.mark.parametrize("amount", ["abc", "0.0000000001"])
def test_parse_coins_rejects_bad_amounts(amount: str) -> None:
    with pytest.raises(RuntimeError):
        parse_coins(amount)
