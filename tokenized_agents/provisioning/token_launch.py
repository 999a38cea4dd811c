"""
token_launch.py — Launch the agent token paired with $DAIMON.

The liquidity SDK (clanker-sdk v4) only exists for Node, so the deploy
runs in clanker_deploy.js. The bridge speaks JSON lines on stdout:

    {"txHash": "0x..."}          deploy submitted
    {"address": "0x..."}         deploy confirmed
    {"error": "..."}             at either point, then a non-zero exit

The config goes in on stdin; the private key goes in through the
environment so it never appears in a process listing.
"""

import json
import logging
import os
import queue
import subprocess
import threading
import time
from dataclasses import dataclass
from pathlib import Path

from .config import DEFAULT_RPC, PAIRED_TOKEN
from .errors import RemoteWriteError
from .identity import Identity
from .wallet import Wallet

log = logging.getLogger("spawn.token")

BRIDGE_SCRIPT = Path(__file__).parent.resolve() / "clanker_deploy.js"

STARTING_TICK = -230400
TICK_SPACING = 200
POSITION_TICK_UPPER = -120000
FULL_WEIGHT_BPS = 10000
DEPLOY_TIMEOUT = 600


@dataclass(frozen=True)
class TokenRecord:
    address: str
    symbol: str
    tx_hash: str

    def to_dict(self) -> dict:
        return {"address": self.address, "symbol": self.symbol, "txHash": self.tx_hash}

    @classmethod
    def from_dict(cls, data: dict) -> "TokenRecord":
        return cls(address=data["address"], symbol=data["symbol"], tx_hash=data["txHash"])


def build_deploy_config(
    identity: Identity,
    admin: str,
    repo_slug: str,
    paired_token: str = PAIRED_TOKEN,
) -> dict:
    """SDK deploy config: one position, all rewards to the agent wallet."""
    return {
        "name": identity.name,
        "symbol": identity.symbol,
        "tokenAdmin": admin,
        "image": f"https://raw.githubusercontent.com/{repo_slug}/main/media/face.jpg",
        "metadata": json.dumps({
            "description": f"{identity.name} — autonomous agent on the daimon network",
        }),
        "pool": {
            "pairedToken": paired_token,
            "tickIfToken0IsClanker": STARTING_TICK,
            "tickSpacing": TICK_SPACING,
            "positions": [{
                "tickLower": STARTING_TICK,
                "tickUpper": POSITION_TICK_UPPER,
                "positionBps": FULL_WEIGHT_BPS,
            }],
        },
        "rewards": {
            "recipients": [{
                "admin": admin,
                "recipient": admin,
                "bps": FULL_WEIGHT_BPS,
                "token": "Both",
            }],
        },
    }


class DeployHandle:
    """A submitted deploy. wait_for_transaction() blocks for the token address.

    Two daemon threads drain the bridge: stdout lines are parsed into a
    queue (None marks EOF), stderr is collected for error reporting. Every
    wait on the queue is bounded by the deploy timeout; a bridge that stays
    silent past it is killed.
    """

    def __init__(self, proc: subprocess.Popen, timeout: float = DEPLOY_TIMEOUT):
        self._proc = proc
        self._timeout = timeout
        self._messages: queue.Queue = queue.Queue()
        self._stderr: list[str] = []
        self.tx_hash: str | None = None
        self.error: str | None = None

        self._stdout_reader = threading.Thread(target=self._read_stdout, daemon=True)
        self._stderr_reader = threading.Thread(target=self._read_stderr, daemon=True)
        self._stdout_reader.start()
        self._stderr_reader.start()

        try:
            first = self._messages.get(timeout=self._timeout)
        except queue.Empty:
            self._kill()
            self.error = f"no response from deploy bridge after {self._timeout}s"
            return
        if first is None:
            self.error = self._exit_error()
        elif "error" in first:
            self.error = str(first["error"])
            self._reap()
        else:
            self.tx_hash = first.get("txHash")

    def _read_stdout(self):
        for line in iter(self._proc.stdout.readline, ""):
            message = _parse_line(line)
            if message:
                self._messages.put(message)
        self._messages.put(None)

    def _read_stderr(self):
        for line in iter(self._proc.stderr.readline, ""):
            self._stderr.append(line)

    def _kill(self):
        self._proc.kill()
        self._proc.wait()

    def _reap(self):
        try:
            self._proc.wait(timeout=self._timeout)
        except subprocess.TimeoutExpired:
            log.warning(f"  deploy bridge still running after {self._timeout}s, killing it")
            self._kill()

    def _exit_error(self) -> str:
        self._reap()
        self._stderr_reader.join(timeout=1)
        text = "".join(self._stderr).strip()
        if text:
            log.debug(f"  bridge stderr:\n{text}")
        return _summarise(text) or f"deploy bridge exited with code {self._proc.returncode}"

    def wait_for_transaction(self) -> dict:
        deadline = time.monotonic() + self._timeout
        result = None
        while True:
            try:
                message = self._messages.get(timeout=max(0.0, deadline - time.monotonic()))
            except queue.Empty as exc:
                self._kill()
                raise RemoteWriteError(
                    f"token deploy not confirmed after {self._timeout}s (tx {self.tx_hash})"
                ) from exc
            if message is None:
                break
            result = message
            if "address" in message or "error" in message:
                break
        if result is None:
            return {"error": self._exit_error()}
        self._reap()
        return result


def _summarise(stderr: str) -> str:
    """The line naming the error in a Node crash, else the last line."""
    lines = [line.strip() for line in stderr.splitlines() if line.strip()]
    if not lines:
        return ""
    return next((line for line in lines if "Error" in line), lines[-1])


def _parse_line(line: str) -> dict | None:
    line = line.strip()
    if not line:
        return None
    try:
        return json.loads(line)
    except json.JSONDecodeError:
        log.debug(f"  bridge: {line}")
        return None


class ClankerDeployer:
    """Runs the Node bridge. Needs `node` and clanker-sdk + viem on NODE_PATH."""

    def __init__(self, private_key: str, rpc_url: str = DEFAULT_RPC,
                 script: Path = BRIDGE_SCRIPT, node: str = "node",
                 timeout: float = DEPLOY_TIMEOUT):
        self.private_key = private_key
        self.rpc_url = rpc_url
        self.script = script
        self.node = node
        self.timeout = timeout

    def deploy(self, config: dict) -> DeployHandle:
        env = {
            **os.environ,
            "SPAWN_DEPLOYER_KEY": self.private_key,
            "BASE_RPC": self.rpc_url,
        }
        try:
            proc = subprocess.Popen(
                [self.node, str(self.script)],
                stdin=subprocess.PIPE, stdout=subprocess.PIPE, stderr=subprocess.PIPE,
                text=True, env=env,
            )
        except FileNotFoundError as exc:
            raise RemoteWriteError("node not found — is Node.js installed?") from exc
        proc.stdin.write(json.dumps(config))
        proc.stdin.close()
        return DeployHandle(proc, self.timeout)


def launch_token(deployer, identity: Identity, wallet: Wallet, repo_slug: str,
                 paired_token: str = PAIRED_TOKEN) -> TokenRecord:
    """Deploy and confirm the token. Any error is fatal for the run."""
    config = build_deploy_config(identity, wallet.address, repo_slug, paired_token)
    result = deployer.deploy(config)
    if result.error:
        raise RemoteWriteError(f"token launch failed: {result.error}")
    log.info(f"  tx: {result.tx_hash}")

    deployed = result.wait_for_transaction()
    if deployed.get("error") or not deployed.get("address"):
        raise RemoteWriteError(
            f"token launch not confirmed: {deployed.get('error', 'no address returned')}"
        )
    token = TokenRecord(address=deployed["address"], symbol=identity.symbol, tx_hash=result.tx_hash)
    log.info(f"  token: {token.address} (${token.symbol})")
    return token
