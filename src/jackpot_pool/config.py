from __future__ import annotations

import os
from dataclasses import dataclass
from dotenv import load_dotenv

PUBLIC_NODES = {
    "buildnet": "https://buildnet.massa.net/api/v2",
    "mainnet": "https://mainnet.massa.net/api/v2",
}


@dataclass(frozen=True)
class Settings:
    rpc_url: str

    @staticmethod
    def from_env(rpc_url_override: str | None = None) -> "Settings":
        load_dotenv()

        # If user provides --rpc-url, trust it.
        if rpc_url_override:
            return Settings(rpc_url=rpc_url_override)

        # Otherwise, use RPC_URL from env if present, else the public node of MASSA_NETWORK.
        env_rpc = os.getenv("RPC_URL", "").strip()
        if env_rpc:
            return Settings(rpc_url=env_rpc)

        network = os.getenv("MASSA_NETWORK", "buildnet").strip().lower() or "buildnet"
        if network not in PUBLIC_NODES:
            raise RuntimeError(
                f"Unknown MASSA_NETWORK {network!r}. Use one of: {', '.join(sorted(PUBLIC_NODES))}, or set RPC_URL."
            )

        return Settings(rpc_url=PUBLIC_NODES[network])
