from __future__ import annotations

import json
from typing import Any, Dict, List

from .collaborators import Event
from .controller import ENTER_EVENT, LAUNCHED_EVENT, WINNER_EVENT
from .draw import winner_index


def replay_events(events: List[Event]) -> Dict[str, Any]:
    """
    Rebuild every round from its events and recompute each draw.
    Raises RuntimeError on the first inconsistency.
    """
    entrants: List[str] = []
    fee = 0
    entry_price = 0
    rounds = 0
    winners: List[Dict[str, Any]] = []

    for event in events:
        data = event.data
        if event.name == LAUNCHED_EVENT:
            if entrants:
                raise RuntimeError(
                    f"Slot {event.slot}: round relaunched with {len(entrants)} unresolved entries"
                )
            fee = int(data["fee"])
            entry_price = int(data["entry_price"])
            rounds += 1

        elif event.name == ENTER_EVENT:
            entries = int(data["entries"])
            if int(data["amount"]) != entries * entry_price:
                raise RuntimeError(
                    f"Slot {event.slot}: paid {data['amount']} for {entries} entries at price {entry_price}"
                )
            entrants.extend([data["caller"]] * entries)

        elif event.name == WINNER_EVENT:
            if int(data["entries"]) != len(entrants):
                raise RuntimeError(
                    f"Slot {event.slot}: entry count mismatch: audit={data['entries']} recomputed={len(entrants)}"
                )
            idx = winner_index(int(data["draw"]), len(entrants))
            if idx != int(data["index"]) or entrants[idx] != data["winner"]:
                raise RuntimeError(
                    f"Slot {event.slot}: winner mismatch: audit={data['winner']} recomputed={entrants[idx]}"
                )

            total = int(data["total"])
            expected_fee = (fee * total) // 100
            if int(data["fee"]) != expected_fee or int(data["amount"]) != total - expected_fee:
                raise RuntimeError(
                    f"Slot {event.slot}: payout mismatch: audit fee={data['fee']} amount={data['amount']}, "
                    f"recomputed fee={expected_fee} amount={total - expected_fee}"
                )
            winners.append({"slot": event.slot, "winner": data["winner"], "amount": int(data["amount"])})
            entrants = []

    return {"ok": True, "rounds": rounds, "winners": winners, "pending_entries": len(entrants)}


def verify_audit(audit_path: str) -> Dict[str, Any]:
    with open(audit_path, "r", encoding="utf-8") as f:
        audit = json.load(f)
    events = [Event.from_dict(raw) for raw in audit["events"]]
    return replay_events(events)
