import json

import pytest

from conftest import contract_address, user
from jackpot_pool.collaborators import Event
from jackpot_pool.project_constants import ONE_COIN
from jackpot_pool.simulate import run_scenario
from jackpot_pool.verify import replay_events, verify_audit


def _scenario() -> dict:
    owner, alice, bob = user("owner"), user("alice"), user("bob")
    return {
        "contract": str(contract_address("pool")),
        "owner": str(owner),
        "fee": 5,
        "entry_price": ONE_COIN,
        "period": 100,
        "seed": 7,
        "balances": {str(alice): 10 * ONE_COIN, str(bob): 10 * ONE_COIN},
        "steps": [
            {"at": 10, "call": "enter", "caller": str(alice), "coins": ONE_COIN},
            {"at": 20, "call": "enter", "caller": str(bob), "coins": 2 * ONE_COIN},
            {"at": 30, "call": "updateFee", "caller": str(owner), "args": {"fee": 2}},
            {"at": 40, "call": "updateFee", "caller": str(alice), "args": {"fee": 0}},
            {"at": 150, "call": "enter", "caller": str(alice), "coins": 3 * ONE_COIN},
            {"advance_to": 500},
        ],
    }


def test_run_scenario_draws_each_round_and_records_rejections() -> None:
    audit = run_scenario(_scenario())

    winners = [e for e in audit["events"] if e["name"] == "JACKPOT_WINNER"]
    assert len(winners) == 2
    assert winners[0]["slot"] == 104
    assert winners[1]["data"]["fee"] == 2 * winners[1]["data"]["total"] // 100
    assert [r["caller"] for r in audit["rejected"]] == [str(user("alice"))]
    assert audit["final_state"]["fee"] == 2

    result = replay_events([Event.from_dict(e) for e in audit["events"]])
    assert result["ok"] is True
    assert len(result["winners"]) == 2
    assert result["pending_entries"] == 0


def test_verify_audit_reads_file(tmp_path) -> None:
    path = tmp_path / "audit.json"
    path.write_text(json.dumps(run_scenario(_scenario())), encoding="utf-8")

    assert verify_audit(str(path))["rounds"] == 5


def test_replay_detects_tampered_winner() -> None:
    audit = run_scenario(_scenario())
    events = [Event.from_dict(e) for e in audit["events"]]
    idx = next(i for i, e in enumerate(events) if e.name == "JACKPOT_WINNER")
    forged = dict(events[idx].data, winner=str(user("mallory")))
    events[idx] = Event(events[idx].name, events[idx].slot, forged)

    with pytest.raises(RuntimeError, match="winner mismatch"):
        replay_events(events)


def test_replay_detects_skimmed_fee() -> None:
    audit = run_scenario(_scenario())
    events = [Event.from_dict(e) for e in audit["events"]]
    idx = next(i for i, e in enumerate(events) if e.name == "JACKPOT_WINNER")
    data = dict(events[idx].data)
    data["fee"] += 1
    data["amount"] -= 1
    events[idx] = Event(events[idx].name, events[idx].slot, data)

    with pytest.raises(RuntimeError, match="payout mismatch"):
        replay_events(events)


def test_run_scenario_refuses_existing_state_file(tmp_path) -> None:
    path = tmp_path / "state.json"
    path.write_text("{}", encoding="utf-8")

    with pytest.raises(FileExistsError):
        run_scenario(_scenario(), state_file=str(path))
    assert path.read_text(encoding="utf-8") == "{}"
