from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

import httpx

from .project_constants import ONE_COIN


class RpcClient:
    def __init__(
        self,
        rpc_url: str,
        timeout_s: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.client = httpx.Client(timeout=timeout_s, transport=transport)

    def close(self) -> None:
        self.client.close()

    def get_status(self) -> Dict[str, Any]:
        payload = {"jsonrpc": "2.0", "id": 1, "method": "get_status", "params": []}
        data = self._post(payload)
        result = data.get("result")
        if not isinstance(result, dict):
            raise RuntimeError("get_status returned no result.")
        return result

    def get_slot(self) -> int:
        """Returns the period of the node's last slot."""
        last_slot = self.get_status().get("last_slot")
        if not last_slot or "period" not in last_slot:
            raise RuntimeError("get_status returned no last_slot.")
        return int(last_slot["period"])

    def get_balances(self, addresses: List[str], final: bool = True) -> Dict[str, int]:
        """Returns raw balances (smallest units) keyed by address."""
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "get_addresses",
            "params": [addresses],
        }
        data = self._post(payload)
        field = "final_balance" if final else "candidate_balance"
        out: Dict[str, int] = {}
        for item in data.get("result", []):
            out[item["address"]] = parse_coins(item[field])
        return out

    def get_balance(self, address: str, final: bool = True) -> int:
        balances = self.get_balances([address], final=final)
        if address not in balances:
            raise RuntimeError(f"Address {address}: get_addresses returned no entry.")
        return balances[address]

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        resp = self.client.post(self.rpc_url, json=payload)
        resp.raise_for_status()
        data = resp.json()
        if "error" in data:
            raise RuntimeError(f"RPC error: {data['error']}")
        return data


def parse_coins(amount: str) -> int:
    """Decimal coin string ("12.5") to raw units."""
    try:
        raw = Decimal(amount) * ONE_COIN
    except InvalidOperation as e:
        raise RuntimeError(f"Invalid coin amount: {amount!r}") from e
    if raw != raw.to_integral_value():
        raise RuntimeError(f"Coin amount has too many decimals: {amount!r}")
    return int(raw)
