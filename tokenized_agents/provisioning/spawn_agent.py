#!/usr/bin/env python3
"""
spawn_agent.py — Launch your own tokenized autonomous agent

Spawns a daimon:
  1.  Check the gh CLI is installed and logged in
  2.  Ask: name, token symbol, openrouter key
  3.  Fork daimon-template to your github, clone it, npm install
  4.  Generate a wallet (saved to ~/.daimon-agents/<name>/wallet.json)
  5.  Wait for funding (~0.005 ETH on Base)
  6.  Register on the daimon network (onchain)
  7.  Launch your token paired with $DAIMON (onchain)
  8.  Set github secrets
  9.  Write identity + state, commit, push
  10. Enable github actions and pages

After this the agent wakes up every 30 minutes.

Usage:
    spawn-agent
    spawn-agent --name Nova --symbol NOVA --openrouter-key sk-or-...
    spawn-agent --name Nova --dry-run

Environment:
    OPENROUTER_API_KEY    Default for --openrouter-key
    BASE_RPC              Base RPC endpoint (default: https://mainnet.base.org)
    DAIMON_AGENTS_HOME    Wallet directory (default: ~/.daimon-agents)
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from .config import NETWORK_URL, Settings
from .identity import FormInput
from .orchestrator import SpawnReport, Spawner

LOG_FMT = "%(asctime)s %(message)s"
log = logging.getLogger("spawn")


def print_summary(report: SpawnReport):
    ctx = report.context
    repo, wallet, token = ctx.repository, ctx.wallet, ctx.token

    print("\n  ─────────────────────────────")
    print(f"  {ctx.identity.name} is alive.\n")
    print(f"  wallet:   {wallet.address}")
    if token:
        print(f"  token:    {token.address} (${token.symbol})")
    print(f"  network:  {'registered' if ctx.registered else 'not registered'}")
    print(f"  repo:     {repo.url}")
    print(f"  logs:     {repo.url}/actions")
    print(f"  site:     {repo.site_url}")
    print(f"  network:  {NETWORK_URL}")

    if report.advisories:
        print("\n  ⚠️  finish these by hand:")
        for advisory in report.advisories:
            print(f"  • {advisory}")
    print("\n  your daimon wakes up every 30 minutes.\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Launch your own tokenized autonomous agent",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  spawn-agent
  spawn-agent --name Nova --openrouter-key sk-or-...
  spawn-agent --name Nova --dry-run

Anything not passed as a flag is asked for interactively.
        """,
    )
    parser.add_argument("--name", default=None, help="Agent name (1-50 chars: letters, numbers, spaces, _ -)")
    parser.add_argument("--symbol", default=None, help="Token symbol (default: derived from name)")
    parser.add_argument("--openrouter-key", default=None, help="OpenRouter API key (default: $OPENROUTER_API_KEY)")
    parser.add_argument("--workdir", type=Path, default=None, help="Where to clone the repo (default: cwd)")
    parser.add_argument("--rpc", default=None, help="Base RPC URL (default: $BASE_RPC or mainnet.base.org)")
    parser.add_argument("--dry-run", action="store_true", help="Check prerequisites and inputs, change nothing")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv=None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FMT, datefmt="%H:%M:%S",
    )

    print("\n  daimon spawner\n")
    print("  launch your own tokenized autonomous agent.\n")

    settings = Settings.from_env(workdir=args.workdir, rpc_url=args.rpc)
    form = FormInput(
        name=args.name,
        symbol=args.symbol,
        credential=args.openrouter_key or os.getenv("OPENROUTER_API_KEY"),
    )

    try:
        report = Spawner(settings).run(form, dry_run=args.dry_run)
    except KeyboardInterrupt:
        print("\n  interrupted.\n", file=sys.stderr)
        return 1

    failed = report.failed
    if failed:
        print(f"\n  error: {failed.message}\n", file=sys.stderr)
    elif not args.dry_run:
        print_summary(report)
    return report.exit_code


if __name__ == "__main__":
    sys.exit(main())
