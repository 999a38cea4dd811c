"""
config.py — Fixed network constants and environment-driven settings.

Environment:
    BASE_RPC              Base mainnet RPC endpoint (default: https://mainnet.base.org)
    DAIMON_AGENTS_HOME    Where wallet files live (default: ~/.daimon-agents)
    DAIMON_TEMPLATE_REPO  Template repository to fork
    DAIMON_WORKDIR        Directory the repository is cloned into (default: cwd)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

# =============================================================================
# Network constants
# =============================================================================

TEMPLATE_REPO = "daimon111/daimon-template"
REPO_NAME = "daimon"
REGISTRY_ADDRESS = "0x3081aE79B403587959748591bBe1a2c12AeF5167"
PAIRED_TOKEN = "0x98c51C8E958ccCD37F798b2B9332d148E2c05D57"
DEFAULT_RPC = "https://mainnet.base.org"
CHAIN_ID = 8453

# The operator is asked for more than the check requires; keep both.
MIN_BALANCE_WEI = 2 * 10**15       # 0.002 ETH
SUGGESTED_FUNDING_ETH = "0.005"

FORK_SETTLE_SECONDS = 2.0
INSTALL_COMMAND = ("npm", "install")

CYCLE_WORKFLOW_NAME = "daimon cycle"
PAGES_BRANCH = "main"
PAGES_PATH = "/docs"
EMAIL_DOMAIN = "daimon.network"
NETWORK_URL = "https://daimon.network"

SECRET_CREDENTIAL = "OPENROUTER_API_KEY"
SECRET_WALLET_KEY = "DAIMON_WALLET_KEY"


@dataclass
class Settings:
    """Per-run settings. Defaults match the public daimon network."""

    rpc_url: str = DEFAULT_RPC
    template_repo: str = TEMPLATE_REPO
    repo_name: str = REPO_NAME
    workdir: Path = field(default_factory=Path.cwd)
    agents_home: Path = field(default_factory=lambda: Path.home() / ".daimon-agents")
    registry_address: str = REGISTRY_ADDRESS
    paired_token: str = PAIRED_TOKEN
    fork_settle_seconds: float = FORK_SETTLE_SECONDS
    install_command: tuple[str, ...] = INSTALL_COMMAND

    @classmethod
    def from_env(cls, **overrides) -> "Settings":
        settings = cls(
            rpc_url=os.getenv("BASE_RPC") or DEFAULT_RPC,
            template_repo=os.getenv("DAIMON_TEMPLATE_REPO") or TEMPLATE_REPO,
        )
        if os.getenv("DAIMON_AGENTS_HOME"):
            settings.agents_home = Path(os.environ["DAIMON_AGENTS_HOME"]).expanduser()
        if os.getenv("DAIMON_WORKDIR"):
            settings.workdir = Path(os.environ["DAIMON_WORKDIR"]).expanduser()
        for key, value in overrides.items():
            if value is not None:
                setattr(settings, key, value)
        return settings

    @property
    def clone_dir(self) -> Path:
        return (self.workdir / self.repo_name).resolve()
