from __future__ import annotations

import argparse
import json
import logging
import time
from datetime import datetime, timedelta, timezone

from .config import Settings
from .draw import to_coins
from .endpoints import encode_args
from .project_constants import SLOT_SECONDS
from .rpc import RpcClient
from .simulate import run_scenario
from .verify import verify_audit

ENCODERS = {
    "construct": ("constructor", ("fee", "entry_price", "period")),
    "relaunch": ("relaunchPool", ("fee", "entry_price", "end_slot")),
    "update-fee": ("updateFee", ("fee",)),
    "update-entry-price": ("updateEntreeValue", ("entry_price",)),
    "update-period": ("updatePeriod", ("period",)),
}


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def cmd_encode_args(args: argparse.Namespace) -> int:
    function, fields = ENCODERS[args.endpoint]
    values = {}
    for name in fields:
        value = getattr(args, name)
        if value is None:
            raise SystemExit(f"{args.endpoint} requires --{name.replace('_', '-')}")
        values[name] = value
    print(encode_args(function, values).hex())
    return 0


def cmd_predict(args: argparse.Namespace) -> int:
    """Calculates the estimated slot for a given time."""
    settings = Settings.from_env(rpc_url_override=args.rpc_url)
    rpc = RpcClient(settings.rpc_url, timeout_s=args.timeout)

    try:
        curr_slot = rpc.get_slot()
    finally:
        rpc.close()

    target_h, target_m = map(int, args.time.split(":"))
    now = datetime.now()
    target_dt = now.replace(hour=target_h, minute=target_m, second=0, microsecond=0)

    # If the time already passed, assume tomorrow
    if target_dt.timestamp() < time.time():
        target_dt += timedelta(days=1)

    seconds_to_wait = target_dt.timestamp() - time.time()
    target_slot = curr_slot + int(seconds_to_wait / SLOT_SECONDS)

    print("--- SLOT PREDICTION ---")
    print(f"Target Time   : {target_dt.strftime('%Y-%m-%d %H:%M:%S')} local")
    print(
        f"Target Time (UTC)   : {target_dt.astimezone(timezone.utc).strftime('%Y-%m-%d %H:%M:%S')}"
    )
    print(f"Current Slot  : {curr_slot}")
    print(f"Projected Slot: {target_slot}")
    print(f"Assumed Slot Time  : {SLOT_SECONDS:g} s (heuristic)")
    print(f"Period from now    : {target_slot - curr_slot}")
    return 0


def cmd_simulate(args: argparse.Namespace) -> int:
    log = logging.getLogger("simulate")
    with open(args.scenario, "r", encoding="utf-8") as f:
        scenario = json.load(f)

    try:
        audit = run_scenario(scenario, state_file=args.state_file)
    except FileExistsError as e:
        raise SystemExit(f"{e}. --state-file only dumps a fresh run; pick a new path.")
    log.info("Events emitted    : %d", len(audit["events"]))
    log.info("Rejected calls    : %d", len(audit["rejected"]))

    with open(args.out, "w", encoding="utf-8") as f:
        json.dump(audit, f, indent=2)

    winners = [e["data"] for e in audit["events"] if e["name"] == "JACKPOT_WINNER"]
    print("========================================")
    print("🎰 JACKPOT POOL SIMULATION")
    print("========================================")
    print(f"Contract      : {audit['metadata']['contract']}")
    print(f"Final slot    : {audit['metadata']['final_slot']}")
    print(f"Rounds won    : {len(winners)}")
    for w in winners:
        print(f"🏆 {w['winner']} won {to_coins(w['amount'])} (fee {to_coins(w['fee'])})")
    print("----------------------------------------")
    print(f"🧾 Wrote audit: {args.out}")
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    result = verify_audit(args.audit)
    print("✅ AUDIT VERIFIED")
    print(f"Rounds        : {result['rounds']}")
    print(f"Draws         : {len(result['winners'])}")
    for w in result["winners"]:
        print(f"Winner        : {w['winner']} ({to_coins(w['amount'])}) at slot {w['slot']}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="jackpot-pool",
        description="Recurring jackpot pool: argument encoding, local simulation and audit tools.",
    )
    p.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    p.add_argument("--rpc-url", default=None, help="Override RPC URL (else use env).")
    p.add_argument("--timeout", type=float, default=60.0, help="RPC timeout seconds.")

    sub = p.add_subparsers(dest="cmd", required=True)

    enc = sub.add_parser("encode-args", help="Print the hex argument buffer for an endpoint.")
    enc.add_argument("endpoint", choices=sorted(ENCODERS))
    enc.add_argument("--fee", type=int, default=None, help="Fee percent (0-5).")
    enc.add_argument("--entry-price", type=int, default=None, help="Entry price in raw units.")
    enc.add_argument("--period", type=int, default=None, help="Round period in slots.")
    enc.add_argument("--end-slot", type=int, default=None, help="Absolute end slot (relaunch).")
    enc.set_defaults(func=cmd_encode_args)

    pred = sub.add_parser(
        "predict", help="Calculate a future slot for a specific time."
    )
    pred.add_argument(
        "--time", required=True, help="Target time in 24h format (e.g. 22:00)"
    )
    pred.set_defaults(func=cmd_predict)

    s = sub.add_parser("simulate", help="Run a scenario on a local chain and write an audit JSON.")
    s.add_argument("--scenario", required=True, help="Path to scenario JSON.")
    s.add_argument("--state-file", default=None, help="Dump pool storage to this (new) JSON file; not resumable.")
    s.add_argument("--out", default="audit.json", help="Audit output JSON path.")
    s.set_defaults(func=cmd_simulate)

    v = sub.add_parser(
        "verify", help="Replay an audit's events and check every draw."
    )
    v.add_argument("--audit", required=True, help="Path to audit.json.")
    v.set_defaults(func=cmd_verify)

    return p


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    setup_logging(args.verbose)
    raise SystemExit(args.func(args))
