"""
Scripted runs of a pool on a LocalChain.

A scenario is a JSON object:

    {
      "contract": "AS...", "owner": "AU...",
      "fee": 5, "entry_price": 1000000000, "period": 100,
      "start_slot": 0, "seed": 7, "deploy_coins": 1000000000,
      "deliver_scheduled": true,
      "balances": {"AU...": 5000000000},
      "steps": [
        {"at": 10, "call": "enter", "caller": "AU...", "coins": 2000000000},
        {"at": 20, "call": "updateFee", "caller": "AU...", "args": {"fee": 2}},
        {"advance_to": 300}
      ]
    }

Rejected calls are recorded in the audit and the run continues.

`state_file`, when given, receives a dump of the pool storage as the run
progresses. It is not a resume point: ledger balances, scheduled calls and
events live only in memory, so an existing file is refused.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .addresses import Address
from .collaborators import SeededRandomness
from .endpoints import encode_args
from .errors import PoolError
from .project_constants import RESERVE
from .runtime import LocalChain
from .storage import InMemoryStore, JsonFileStore

log = logging.getLogger(__name__)


def run_scenario(scenario: Dict[str, Any], state_file: Optional[str] = None) -> Dict[str, Any]:
    contract = Address(scenario["contract"])
    owner = Address(scenario["owner"])
    if state_file and Path(state_file).exists():
        raise FileExistsError(f"State file already exists: {state_file}")
    store = JsonFileStore(state_file) if state_file else InMemoryStore()

    chain = LocalChain(
        contract=contract,
        store=store,
        randomness=SeededRandomness(scenario.get("seed")),
        slot=int(scenario.get("start_slot", 0)),
        deliver_scheduled=bool(scenario.get("deliver_scheduled", True)),
    )
    for address, amount in scenario.get("balances", {}).items():
        chain.fund(Address(address), int(amount))

    deploy_coins = int(scenario.get("deploy_coins", RESERVE))
    chain.fund(owner, deploy_coins)
    chain.deploy(
        owner,
        fee=int(scenario["fee"]),
        entry_price=int(scenario["entry_price"]),
        period=int(scenario["period"]),
        coins=deploy_coins,
    )

    rejected: List[Dict[str, Any]] = []
    for step in scenario.get("steps", []):
        if "advance_to" in step:
            chain.advance_to(int(step["advance_to"]))
            continue

        chain.advance_to(int(step.get("at", chain.slot)))
        function = step["call"]
        caller = Address(step["caller"])
        origin = Address(step["origin"]) if "origin" in step else None
        try:
            chain.call(
                caller,
                function,
                encode_args(function, step.get("args", {})),
                coins=int(step.get("coins", 0)),
                origin=origin,
            )
        except PoolError as e:
            log.info("Slot %d: %s by %s rejected: %s", chain.slot, function, caller, e)
            rejected.append({"slot": chain.slot, "call": function, "caller": str(caller), "error": str(e)})

    return {
        "metadata": {
            "tool": "jackpot-pool",
            "version": "1.0.0",
            "generated_at_utc": datetime.now(timezone.utc).isoformat(),
            "contract": str(contract),
            "owner": str(owner),
            "seed": scenario.get("seed"),
            "reserve": RESERVE,
            "final_slot": chain.slot,
        },
        "events": [e.to_dict() for e in chain.events.events],
        "rejected": rejected,
        "dropped_scheduled_calls": [
            {**asdict(call), "contract": str(call.contract), "reason": reason} for call, reason in chain.dropped
        ],
        "final_state": chain.read("poolInfo"),
        "final_balances": {str(a): b for a, b in sorted(chain.ledger.balances.items())},
    }
