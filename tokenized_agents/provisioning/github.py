"""
github.py — Thin wrapper over the `gh` CLI.

Everything here shells out to an already-authenticated `gh` session.
The wrapper never establishes a session itself; check_authenticated()
only verifies one exists.
"""

import json
import logging
import subprocess
from pathlib import Path

from .errors import CommandError, SetupError

log = logging.getLogger("spawn.github")


def run(cmd: list[str], cwd: Path | str | None = None, input: str | None = None) -> str:
    """Run a command and return its stripped stdout. Raises CommandError."""
    log.debug(f"  $ {' '.join(cmd)}")
    try:
        result = subprocess.run(
            cmd, cwd=cwd, input=input, capture_output=True, text=True,
        )
    except FileNotFoundError as exc:
        raise CommandError(cmd, None, f"{cmd[0]} not found") from exc
    if result.returncode != 0:
        raise CommandError(cmd, result.returncode, result.stderr or result.stdout)
    return result.stdout.strip()


class GitHubCLI:
    """Hosting-platform operations used by the spawner."""

    def __init__(self, binary: str = "gh"):
        self.binary = binary

    def _gh(self, *args: str, cwd=None, input: str | None = None) -> str:
        return run([self.binary, *args], cwd=cwd, input=input)

    # ── prerequisites ────────────────────────────────────────────

    def check_installed(self):
        try:
            self._gh("--version")
        except CommandError as exc:
            raise SetupError(
                "gh CLI is required", "install it: https://cli.github.com",
            ) from exc

    def check_authenticated(self):
        try:
            self._gh("auth", "status")
        except CommandError as exc:
            raise SetupError("not logged into github", "run: gh auth login") from exc

    def current_user(self) -> str:
        return self._gh("api", "user", "-q", ".login")

    # ── repository ───────────────────────────────────────────────

    def fork(self, template: str, name: str):
        self._gh("repo", "fork", template, "--fork-name", name, "--clone=false")

    def clone(self, slug: str, dest: Path):
        self._gh("repo", "clone", slug, str(dest))

    def set_secret(self, name: str, value: str, cwd: Path) -> bool:
        """Set a repository secret from stdin. Returns False on failure."""
        try:
            self._gh("secret", "set", name, cwd=cwd, input=value)
            return True
        except CommandError as exc:
            log.debug(f"  secret {name}: {exc}")
            return False

    # ── automation ───────────────────────────────────────────────

    def enable_actions(self, slug: str):
        self._gh(
            "api", f"repos/{slug}/actions/permissions", "-X", "PUT",
            "-F", "enabled=true", "-f", "allowed_actions=all",
        )

    def list_workflows(self, slug: str) -> list[dict]:
        data = json.loads(self._gh("api", f"repos/{slug}/actions/workflows"))
        return data.get("workflows") or []

    def enable_workflow(self, slug: str, workflow_id: int | str):
        self._gh("api", f"repos/{slug}/actions/workflows/{workflow_id}/enable", "-X", "PUT")

    def enable_pages(self, slug: str, branch: str, path: str):
        self._gh(
            "api", f"repos/{slug}/pages", "-X", "POST",
            "-H", "Accept: application/vnd.github+json",
            "-f", f"source[branch]={branch}", "-f", f"source[path]={path}",
        )
