"""
publisher.py — Secrets, commit + push, and switching on the agent's automation.

Git steps are hard failures. Secrets, actions, the cycle workflow and
pages are best-effort: each yields a StepOutcome instead of raising.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from .config import CYCLE_WORKFLOW_NAME, EMAIL_DOMAIN, PAGES_BRANCH, PAGES_PATH
from .errors import CommandError, RemoteWriteError, SpawnError
from .github import GitHubCLI, run
from .identity import Identity

log = logging.getLogger("spawn.publish")


@dataclass(frozen=True)
class StepOutcome:
    step: str
    succeeded: bool
    advisory: str = ""


def set_repository_secrets(platform: GitHubCLI, cwd: Path, secrets: dict[str, str]) -> list[StepOutcome]:
    outcomes = []
    for name, value in secrets.items():
        if platform.set_secret(name, value, cwd):
            log.info(f"  {name} set")
            outcomes.append(StepOutcome(name, True))
        else:
            advisory = f"{name} — set manually in repo settings"
            log.warning(f"  {advisory}")
            outcomes.append(StepOutcome(name, False, advisory))
    return outcomes


def _git(cmd: list[str], local_dir: Path):
    try:
        run(cmd, cwd=local_dir)
    except CommandError as exc:
        raise RemoteWriteError(f"{' '.join(cmd[:2])} failed: {exc.detail}") from exc


def _has_staged_changes(local_dir: Path) -> bool:
    """`git diff --cached --quiet` exits 1 when the index differs from HEAD."""
    try:
        run(["git", "diff", "--cached", "--quiet"], cwd=local_dir)
    except CommandError as exc:
        if exc.returncode == 1:
            return True
        raise RemoteWriteError(f"git diff failed: {exc.detail}") from exc
    return False


def commit_and_push(local_dir: Path, identity: Identity, repo_name: str):
    """Stage everything, commit if anything changed, push.

    A re-run after a failed push finds the spawn commit already made and
    only pushes.
    """
    _git(["git", "config", "user.name", identity.name], local_dir)
    _git(["git", "config", "user.email", f"{repo_name}@{EMAIL_DOMAIN}"], local_dir)
    _git(["git", "add", "-A"], local_dir)
    if _has_staged_changes(local_dir):
        _git(["git", "commit", "-m", f"spawn: {identity.name}"], local_dir)
    else:
        log.info("  nothing new to commit")
    _git(["git", "push"], local_dir)


def _enable_actions(platform: GitHubCLI, slug: str) -> StepOutcome:
    try:
        platform.enable_actions(slug)
        log.info("  actions enabled")
        return StepOutcome("actions", True)
    except SpawnError:
        return StepOutcome("actions", False, "enable actions manually: repo → actions tab → enable")


def _enable_cycle_workflow(platform: GitHubCLI, slug: str,
                           workflow_name: str = CYCLE_WORKFLOW_NAME) -> StepOutcome:
    advisory = f"enable the '{workflow_name}' workflow manually: repo → actions → {workflow_name}"
    try:
        workflows = platform.list_workflows(slug)
        match = next((w for w in workflows if w.get("name") == workflow_name), None)
        if match is None:
            return StepOutcome("cycle workflow", False, advisory)
        platform.enable_workflow(slug, match["id"])
        log.info(f"  workflow enabled: {workflow_name}")
        return StepOutcome("cycle workflow", True)
    except (SpawnError, ValueError, KeyError):
        return StepOutcome("cycle workflow", False, advisory)


def _enable_pages(platform: GitHubCLI, slug: str, site_url: str) -> StepOutcome:
    try:
        platform.enable_pages(slug, PAGES_BRANCH, PAGES_PATH)
        log.info(f"  site: {site_url}")
        return StepOutcome("pages", True)
    except SpawnError:
        return StepOutcome(
            "pages", False,
            f"enable pages manually: repo → settings → pages → source: {PAGES_BRANCH} {PAGES_PATH}",
        )


def enable_automation(platform: GitHubCLI, slug: str, site_url: str) -> list[StepOutcome]:
    """Three independent best-effort steps; none blocks the others."""
    log.info("enabling actions...")
    outcomes = [
        _enable_actions(platform, slug),
        _enable_cycle_workflow(platform, slug),
    ]
    log.info("enabling pages...")
    outcomes.append(_enable_pages(platform, slug, site_url))
    for outcome in outcomes:
        if not outcome.succeeded:
            log.warning(f"  {outcome.advisory}")
    return outcomes
