"""Endpoint table: decode each argument buffer in its fixed field order, then dispatch."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Callable, Dict, Mapping, Tuple

from .args import Args
from .context import CallContext
from .controller import PoolController
from .errors import ArgsError

Endpoint = Callable[[PoolController, CallContext, bytes], Any]

# Field name and wire type, in buffer order
ARG_LAYOUTS: Dict[str, Tuple[Tuple[str, str], ...]] = {
    "constructor": (("fee", "u8"), ("entry_price", "u64"), ("period", "u64")),
    "updateFee": (("fee", "u8"),),
    "updateEntreeValue": (("entry_price", "u64"),),
    "updatePeriod": (("period", "u64"),),
    "relaunchPool": (("fee", "u8"), ("entry_price", "u64"), ("end_slot", "u64")),
}


def decode_args(function: str, bs: bytes) -> Dict[str, int]:
    args = Args(bs)
    out: Dict[str, int] = {}
    for name, kind in ARG_LAYOUTS.get(function, ()):
        out[name] = args.next_u8() if kind == "u8" else args.next_u64()
    args.finish()
    return out


def encode_args(function: str, values: Mapping[str, int]) -> bytes:
    layout = ARG_LAYOUTS.get(function, ())
    expected = {name for name, _ in layout}
    if set(values) != expected:
        raise ArgsError(f"{function} expects {sorted(expected)}, got {sorted(values)}")
    args = Args()
    for name, kind in layout:
        if kind == "u8":
            args.add_u8(int(values[name]))
        else:
            args.add_u64(int(values[name]))
    return args.serialize()


def constructor(pool: PoolController, ctx: CallContext, bs: bytes) -> None:
    pool.construct(ctx, **decode_args("constructor", bs))


def update_fee(pool: PoolController, ctx: CallContext, bs: bytes) -> None:
    pool.update_fee(ctx, **decode_args("updateFee", bs))


def update_entree_value(pool: PoolController, ctx: CallContext, bs: bytes) -> None:
    pool.update_entry_price(ctx, **decode_args("updateEntreeValue", bs))


def update_period(pool: PoolController, ctx: CallContext, bs: bytes) -> None:
    pool.update_period(ctx, **decode_args("updatePeriod", bs))


def relaunch_pool(pool: PoolController, ctx: CallContext, bs: bytes) -> None:
    pool.relaunch(ctx, **decode_args("relaunchPool", bs))


def enter(pool: PoolController, ctx: CallContext, bs: bytes) -> int:
    decode_args("enter", bs)
    return pool.enter(ctx)


def end_pool(pool: PoolController, ctx: CallContext, bs: bytes) -> None:
    decode_args("endPool", bs)
    pool.end_round(ctx)


def end_pool_manual(pool: PoolController, ctx: CallContext, bs: bytes) -> None:
    decode_args("endPoolManual", bs)
    pool.end_round_manual(ctx)


def owner_address(pool: PoolController, ctx: CallContext, bs: bytes) -> str:
    return str(pool.owner_address())


def pool_info(pool: PoolController, ctx: CallContext, bs: bytes) -> Dict[str, Any]:
    return asdict(pool.pool_info())


ENDPOINTS: Dict[str, Endpoint] = {
    "constructor": constructor,
    "updateFee": update_fee,
    "updateEntreeValue": update_entree_value,
    "updatePeriod": update_period,
    "relaunchPool": relaunch_pool,
    "enter": enter,
    "endPool": end_pool,
    "endPoolManual": end_pool_manual,
    "ownerAddress": owner_address,
    "poolInfo": pool_info,
}

READ_ONLY = frozenset({"ownerAddress", "poolInfo"})


def dispatch(pool: PoolController, function: str, ctx: CallContext, bs: bytes = b"") -> Any:
    endpoint = ENDPOINTS.get(function)
    if endpoint is None:
        raise ArgsError(f"Unknown endpoint: {function}")
    return endpoint(pool, ctx, bs)
