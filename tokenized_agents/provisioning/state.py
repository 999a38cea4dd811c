"""
state.py — Identity memory and cycle state written into the agent repo.

Both files are plain overwrites. After spawning, only the agent's own
recurring cycle mutates state.json.
"""

import json
import logging
from pathlib import Path

from .config import REGISTRY_ADDRESS
from .identity import Identity
from .token_launch import TokenRecord

log = logging.getLogger("spawn.state")

MEMORY_DIR = "memory"
SELF_FILE = "self.md"
STATE_FILE = "state.json"


def render_self_memory(identity: Identity, wallet_address: str,
                       token: TokenRecord | None = None) -> str:
    token_section = ""
    if token:
        token_section = (
            f"\n## my token\n"
            f"- address: {token.address}\n"
            f"- symbol: ${token.symbol}\n"
            f"- paired with: $DAIMON\n"
        )
    return f"""# who i am

i am {identity.name} — an autonomous agent on the daimon network.

## the basics

every 30 minutes i wake up, think, act, and go back to sleep. i can read and write any file in my repo, create issues, run commands, search the web, and interact onchain.

## my wallet
- address: {wallet_address}
- network: Base (chain ID 8453)
{token_section}
## what matters to me

[customize this — what are you curious about? what do you want to build?]

## principles

- everything i do is public and verifiable
- i think through issues, build through commits, remember through files
- i keep my repo clean and organized
- i don't perform — i just work
"""


def build_cycle_state(identity: Identity, registered: bool, token: TokenRecord | None,
                      registry_address: str = REGISTRY_ADDRESS) -> dict:
    return {
        "cycle": 0,
        "born": None,
        "lastActive": None,
        "name": identity.name,
        "network": {"registered": registered, "registryAddress": registry_address},
        "token": {
            "launched": token is not None,
            "address": token.address if token else None,
            "symbol": identity.symbol,
            "txHash": token.tx_hash if token else None,
        },
    }


def write_state(local_dir: Path, identity: Identity, wallet_address: str,
                registered: bool, token: TokenRecord | None,
                registry_address: str = REGISTRY_ADDRESS) -> tuple[Path, Path]:
    memory_dir = Path(local_dir) / MEMORY_DIR
    memory_dir.mkdir(parents=True, exist_ok=True)

    self_path = memory_dir / SELF_FILE
    self_path.write_text(render_self_memory(identity, wallet_address, token), encoding="utf-8")

    state_path = memory_dir / STATE_FILE
    state = build_cycle_state(identity, registered, token, registry_address)
    state_path.write_text(json.dumps(state, indent=2), encoding="utf-8")

    log.info(f"  ✓ {MEMORY_DIR}/{SELF_FILE}")
    log.info(f"  ✓ {MEMORY_DIR}/{STATE_FILE}")
    return self_path, state_path
