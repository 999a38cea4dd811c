"""
repository.py — Fork the agent template, clone it, install dependencies.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path

from .config import Settings
from .errors import CommandError, SpawnError
from .github import GitHubCLI, run

log = logging.getLogger("spawn.repo")


@dataclass(frozen=True)
class Repository:
    owner: str
    name: str
    local_dir: Path

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def url(self) -> str:
        return f"https://github.com/{self.slug}"

    @property
    def site_url(self) -> str:
        return f"https://{self.owner}.github.io/{self.name}"


def provision_repository(
    platform: GitHubCLI,
    owner: str,
    settings: Settings,
    sleep=time.sleep,
) -> Repository:
    """Fork (tolerating an existing fork), then clone if not already local."""
    repo = Repository(owner=owner, name=settings.repo_name, local_dir=settings.clone_dir)

    log.info("\nforking template...")
    try:
        platform.fork(settings.template_repo, repo.name)
        log.info(f"  forked: {repo.slug}")
    except CommandError as exc:
        if "already exists" not in exc.stderr:
            raise SpawnError(f"fork failed: {exc.detail}") from exc
        log.info(f"  repo already exists: {repo.slug}")

    # github needs a moment before the fork is cloneable
    sleep(settings.fork_settle_seconds)

    if repo.local_dir.exists():
        log.info("  using existing clone")
    else:
        log.info("  cloning...")
        platform.clone(repo.slug, repo.local_dir)
    log.info(f"  directory: {repo.local_dir}")
    return repo


def install_dependencies(local_dir: Path, command: tuple[str, ...]):
    log.info("\ninstalling dependencies...")
    try:
        run(list(command), cwd=local_dir)
    except CommandError as exc:
        raise SpawnError(
            f"dependency install failed: {exc.detail}",
            f"run `{' '.join(command)}` in {local_dir} and re-run",
        ) from exc
