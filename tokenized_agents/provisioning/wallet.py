"""
wallet.py — Agent wallet custody.

The wallet file written here is the only durable copy of the agent's
private key produced by the spawner (besides the repository secret set
later). It is created with mode 0600, rewritten atomically on update, and
never deleted.

File layout:
    {
      "address": "0x...",
      "privateKey": "0x...",
      "createdAt": "2026-01-01T00:00:00+00:00",
      "ownerName": "Nova",
      "registration": {"txHash": "0x...", "repo": "https://github.com/..."},
      "token": {"address": "0x...", "symbol": "NOVA", "txHash": "0x..."},
      "repo": "https://github.com/..."
    }
"""

import json
import logging
import os
import re
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from eth_account import Account
from eth_account.signers.local import LocalAccount

log = logging.getLogger("spawn.wallet")

WALLET_FILENAME = "wallet.json"


@dataclass
class Wallet:
    address: str
    private_key: str
    created_at: str
    owner_name: str
    path: Path
    extra: dict = field(default_factory=dict)

    def __repr__(self):
        return f"Wallet(address={self.address!r}, path={str(self.path)!r})"

    @property
    def account(self) -> LocalAccount:
        return Account.from_key(self.private_key)

    @property
    def registration(self) -> dict | None:
        return self.extra.get("registration")

    @property
    def token(self) -> dict | None:
        return self.extra.get("token")


def wallet_slug(name: str) -> str:
    return re.sub(r"[^a-z0-9-]", "-", name.lower())


def wallet_path(name: str, agents_home: Path) -> Path:
    return Path(agents_home) / wallet_slug(name) / WALLET_FILENAME


def _write_private(path: Path, data: dict):
    """Write JSON readable by the owner only, replacing any existing file atomically."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".wallet-", suffix=".tmp")
    try:
        os.fchmod(fd, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        os.unlink(tmp)
        raise


def create_wallet(name: str, agents_home: Path) -> Wallet:
    """Generate a fresh keypair and persist it immediately."""
    acct = Account.create()
    wallet = Wallet(
        address=acct.address,
        private_key="0x" + bytes(acct.key).hex(),
        created_at=datetime.now(timezone.utc).isoformat(),
        owner_name=name,
        path=wallet_path(name, agents_home),
    )
    _write_private(wallet.path, {
        "address": wallet.address,
        "privateKey": wallet.private_key,
        "createdAt": wallet.created_at,
        "ownerName": wallet.owner_name,
    })
    log.info(f"  wallet saved: {wallet.path}")
    return wallet


def load_wallet(path: Path) -> Wallet:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    core = {k: data.pop(k) for k in ("address", "privateKey", "createdAt", "ownerName")}
    return Wallet(
        address=core["address"],
        private_key=core["privateKey"],
        created_at=core["createdAt"],
        owner_name=core["ownerName"],
        path=Path(path),
        extra=data,
    )


def load_or_create_wallet(name: str, agents_home: Path) -> tuple[Wallet, bool]:
    """Reuse the wallet from a previous run if one exists. Returns (wallet, created)."""
    path = wallet_path(name, agents_home)
    if path.exists():
        wallet = load_wallet(path)
        log.info(f"  reusing wallet: {path}")
        return wallet, False
    return create_wallet(name, agents_home), True


def _update(wallet: Wallet, **fields) -> Wallet:
    """Read-modify-write; the custody fields are never touched."""
    data = json.loads(wallet.path.read_text(encoding="utf-8"))
    data.update(fields)
    _write_private(wallet.path, data)
    wallet.extra.update(fields)
    return wallet


def record_registration(wallet: Wallet, tx_hash: str, repo_url: str) -> Wallet:
    return _update(wallet, registration={"txHash": tx_hash, "repo": repo_url})


def record_token(wallet: Wallet, token: dict, repo_url: str) -> Wallet:
    return _update(wallet, token=token, repo=repo_url)
