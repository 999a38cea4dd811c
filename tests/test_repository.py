"""
Tests for forking, cloning and dependency install.
"""

from unittest.mock import patch

import pytest

from conftest import FakePlatform
from tokenized_agents.provisioning.errors import CommandError, SpawnError
from tokenized_agents.provisioning.repository import install_dependencies, provision_repository


def test_fresh_fork_and_clone(settings, platform):
    sleeps = []
    repo = provision_repository(platform, "octo", settings, sleeps.append)
    assert repo.slug == "octo/daimon"
    assert repo.url == "https://github.com/octo/daimon"
    assert repo.site_url == "https://octo.github.io/daimon"
    assert platform.called("fork") == [("fork", "daimon111/daimon-template", "daimon")]
    assert len(platform.called("clone")) == 1
    assert sleeps == [settings.fork_settle_seconds]


def test_existing_fork_is_success(settings):
    platform = FakePlatform(fork_error="octo/daimon already exists")
    repo = provision_repository(platform, "octo", settings, lambda s: None)
    assert repo.slug == "octo/daimon"
    assert len(platform.called("clone")) == 1


def test_other_fork_failure_is_fatal_before_clone(settings):
    platform = FakePlatform(fork_error="HTTP 404: Not Found")
    with pytest.raises(SpawnError, match="fork failed"):
        provision_repository(platform, "octo", settings, lambda s: None)
    assert platform.called("clone") == []


def test_existing_directory_skips_clone(settings, platform):
    settings.clone_dir.mkdir(parents=True)
    repo = provision_repository(platform, "octo", settings, lambda s: None)
    assert platform.called("clone") == []
    assert repo.local_dir == settings.clone_dir


def test_install_runs_in_clone(tmp_path):
    with patch("tokenized_agents.provisioning.repository.run") as run:
        install_dependencies(tmp_path, ("npm", "install"))
    run.assert_called_once_with(["npm", "install"], cwd=tmp_path)


def test_install_failure_is_fatal(tmp_path):
    err = CommandError(["npm", "install"], 1, "ERESOLVE")
    with patch("tokenized_agents.provisioning.repository.run", side_effect=err):
        with pytest.raises(SpawnError, match="dependency install failed"):
            install_dependencies(tmp_path, ("npm", "install"))
