"""
Pytest configuration and shared fakes for spawner tests.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from tokenized_agents.provisioning.config import Settings  # noqa: E402
from tokenized_agents.provisioning.errors import CommandError, SetupError  # noqa: E402


def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "integration: drives the full spawn state machine with fakes"
    )


class FakePlatform:
    """In-memory stand-in for GitHubCLI. Records every call."""

    def __init__(self, user="octo", fork_error=None, installed=True, authenticated=True,
                 secret_ok=True, workflows=None, actions_ok=True, pages_ok=True):
        self.user = user
        self.fork_error = fork_error
        self.installed = installed
        self.authenticated = authenticated
        self.secret_ok = secret_ok
        self.workflows = workflows if workflows is not None else [{"id": 7, "name": "daimon cycle"}]
        self.actions_ok = actions_ok
        self.pages_ok = pages_ok
        self.calls = []

    def _fail(self, *cmd):
        raise CommandError(["gh", *cmd], 1, "HTTP 403")

    def check_installed(self):
        self.calls.append("check_installed")
        if not self.installed:
            raise SetupError("gh CLI is required", "install it: https://cli.github.com")

    def check_authenticated(self):
        self.calls.append("check_authenticated")
        if not self.authenticated:
            raise SetupError("not logged into github", "run: gh auth login")

    def current_user(self):
        return self.user

    def fork(self, template, name):
        self.calls.append(("fork", template, name))
        if self.fork_error:
            raise CommandError(["gh", "repo", "fork"], 1, self.fork_error)

    def clone(self, slug, dest):
        self.calls.append(("clone", slug, str(dest)))
        Path(dest).mkdir(parents=True)

    def set_secret(self, name, value, cwd):
        self.calls.append(("secret", name))
        return self.secret_ok

    def enable_actions(self, slug):
        self.calls.append(("actions", slug))
        if not self.actions_ok:
            self._fail("api", "actions/permissions")

    def list_workflows(self, slug):
        return self.workflows

    def enable_workflow(self, slug, workflow_id):
        self.calls.append(("workflow", workflow_id))

    def enable_pages(self, slug, branch, path):
        self.calls.append(("pages", branch, path))
        if not self.pages_ok:
            self._fail("api", "pages")

    def called(self, name):
        return [c for c in self.calls if c == name or (isinstance(c, tuple) and c[0] == name)]


class FakeChain:
    def __init__(self, balances=None, register_error=None):
        self.balances = list(balances or [10**18])
        self.register_error = register_error
        self.balance_calls = 0
        self.registrations = []

    def get_balance(self, address):
        self.balance_calls += 1
        if len(self.balances) > 1:
            return self.balances.pop(0)
        return self.balances[0]

    def register(self, account, repo_url, name):
        if self.register_error:
            raise self.register_error
        self.registrations.append((account.address, repo_url, name))
        return {"status": 1, "transactionHash": bytes.fromhex("ab" * 32)}


class FakeHandle:
    def __init__(self, tx_hash="0x" + "cd" * 32, address="0x" + "12" * 20, error=None,
                 wait_result=None):
        self.tx_hash = tx_hash
        self.error = error
        self._wait = wait_result if wait_result is not None else {"address": address}
        self.waited = False

    def wait_for_transaction(self):
        self.waited = True
        return self._wait


class FakeDeployer:
    def __init__(self, handle=None):
        self.handle = handle or FakeHandle()
        self.configs = []

    def deploy(self, config):
        self.configs.append(config)
        return self.handle


@pytest.fixture
def settings(tmp_path):
    return Settings(
        workdir=tmp_path / "work",
        agents_home=tmp_path / "agents",
        fork_settle_seconds=0,
    )


@pytest.fixture
def platform():
    return FakePlatform()


@pytest.fixture
def chain():
    return FakeChain()


@pytest.fixture
def deployer():
    return FakeDeployer()
