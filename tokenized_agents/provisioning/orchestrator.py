"""
orchestrator.py — The spawn state machine.

    CHECK_PREREQS → COLLECT_FORM → PROVISION_REPO → INSTALL_DEPS →
    CREATE_WALLET → AWAIT_FUNDING → REGISTER → LAUNCH_TOKEN →
    SET_SECRETS → WRITE_STATE → COMMIT_PUSH → ENABLE_AUTOMATION → DONE

Every stage is a Spawner method taking the run context. A stage raising
SpawnError yields a FATAL result and stops the run. SET_SECRETS and
ENABLE_AUTOMATION never fail the run; their StepOutcomes surface as
ADVISORY results.

Registration followed by a failed token launch leaves the identity
registered without a token. Nothing compensates for that; a re-run with
the same name reuses the wallet and skips the registration.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable

from .chain import ChainClient
from .config import SECRET_CREDENTIAL, SECRET_WALLET_KEY, SUGGESTED_FUNDING_ETH, Settings
from .errors import FundingTimeout, SpawnError
from .funding import FundingPolicy, await_funding
from .github import GitHubCLI
from .identity import FormInput, Identity, collect_identity
from .publisher import StepOutcome, commit_and_push, enable_automation, set_repository_secrets
from .repository import Repository, install_dependencies, provision_repository
from .state import write_state
from .token_launch import ClankerDeployer, TokenRecord, launch_token
from .wallet import Wallet, load_or_create_wallet, record_registration, record_token

log = logging.getLogger("spawn")


class Stage(Enum):
    CHECK_PREREQS = auto()
    COLLECT_FORM = auto()
    PROVISION_REPO = auto()
    INSTALL_DEPS = auto()
    CREATE_WALLET = auto()
    AWAIT_FUNDING = auto()
    REGISTER = auto()
    LAUNCH_TOKEN = auto()
    SET_SECRETS = auto()
    WRITE_STATE = auto()
    COMMIT_PUSH = auto()
    ENABLE_AUTOMATION = auto()
    DONE = auto()


class StageStatus(Enum):
    SUCCESS = "success"
    FATAL = "fatal"
    ADVISORY = "advisory"


@dataclass
class StageResult:
    stage: Stage
    status: StageStatus
    message: str = ""
    advisories: list[str] = field(default_factory=list)

    @property
    def fatal(self) -> bool:
        return self.status is StageStatus.FATAL


@dataclass
class SpawnContext:
    """Everything a run learns, owned by that run and passed stage to stage."""

    form: FormInput = field(default_factory=FormInput)
    owner: str | None = None
    identity: Identity | None = None
    repository: Repository | None = None
    wallet: Wallet | None = None
    registered: bool = False
    token: TokenRecord | None = None
    outcomes: list[StepOutcome] = field(default_factory=list)


@dataclass
class SpawnReport:
    context: SpawnContext
    results: list[StageResult] = field(default_factory=list)

    @property
    def failed(self) -> StageResult | None:
        return next((r for r in self.results if r.fatal), None)

    @property
    def completed(self) -> bool:
        return bool(self.results) and self.results[-1].stage is Stage.DONE

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0

    @property
    def advisories(self) -> list[str]:
        return [a for r in self.results for a in r.advisories]


class Spawner:
    """Runs the stages in order against injected collaborators."""

    def __init__(
        self,
        settings: Settings,
        platform: GitHubCLI | None = None,
        chain: ChainClient | None = None,
        deployer_factory: Callable[[Wallet], object] | None = None,
        funding: FundingPolicy = FundingPolicy(),
        prompt: Callable[[str], str] = input,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings
        self.platform = platform or GitHubCLI()
        self.chain = chain or ChainClient(settings.rpc_url, settings.registry_address)
        self.deployer_factory = deployer_factory or (
            lambda wallet: ClankerDeployer(wallet.private_key, settings.rpc_url)
        )
        self.funding = funding
        self.prompt = prompt
        self.sleep = sleep

    @property
    def stages(self) -> list[tuple[Stage, Callable[[SpawnContext], StageResult]]]:
        return [
            (Stage.CHECK_PREREQS, self.check_prereqs),
            (Stage.COLLECT_FORM, self.collect_form),
            (Stage.PROVISION_REPO, self.provision_repo),
            (Stage.INSTALL_DEPS, self.install_deps),
            (Stage.CREATE_WALLET, self.create_wallet),
            (Stage.AWAIT_FUNDING, self.await_funding),
            (Stage.REGISTER, self.register),
            (Stage.LAUNCH_TOKEN, self.launch_token),
            (Stage.SET_SECRETS, self.set_secrets),
            (Stage.WRITE_STATE, self.write_state),
            (Stage.COMMIT_PUSH, self.commit_push),
            (Stage.ENABLE_AUTOMATION, self.enable_automation),
        ]

    def run_stage(self, stage: Stage, fn, ctx: SpawnContext) -> StageResult:
        try:
            result = fn(ctx)
        except SpawnError as exc:
            log.debug(f"  {stage.name} failed", exc_info=True)
            return StageResult(stage, StageStatus.FATAL, str(exc))
        return result or StageResult(stage, StageStatus.SUCCESS)

    def run(self, form: FormInput | None = None, dry_run: bool = False) -> SpawnReport:
        ctx = SpawnContext(form=form or FormInput())
        report = SpawnReport(context=ctx)
        for stage, fn in self.stages:
            result = self.run_stage(stage, fn, ctx)
            report.results.append(result)
            if result.fatal:
                return report
            if dry_run and stage is Stage.COLLECT_FORM:
                self._log_plan(ctx)
                break
        report.results.append(StageResult(Stage.DONE, StageStatus.SUCCESS))
        return report

    def _log_plan(self, ctx: SpawnContext):
        s = self.settings
        log.info("\n[DRY RUN] would now:")
        log.info(f"  fork {s.template_repo} → {ctx.owner}/{s.repo_name}, clone to {s.clone_dir}")
        log.info(f"  run {' '.join(s.install_command)}")
        log.info(f"  create wallet under {s.agents_home}")
        log.info(f"  wait for {self.funding.threshold_wei} wei on {s.rpc_url}")
        log.info(f"  register '{ctx.identity.name}' at {s.registry_address}")
        log.info(f"  launch ${ctx.identity.symbol} paired with {s.paired_token}")
        log.info("  set secrets, write memory/, commit, push, enable actions + pages")

    # ── stages ───────────────────────────────────────────────────

    def check_prereqs(self, ctx: SpawnContext) -> None:
        self.platform.check_installed()
        self.platform.check_authenticated()
        ctx.owner = self.platform.current_user()
        log.info(f"  github: {ctx.owner}")

    def collect_form(self, ctx: SpawnContext) -> None:
        ctx.identity = collect_identity(ctx.form, self.prompt)

    def provision_repo(self, ctx: SpawnContext) -> None:
        ctx.repository = provision_repository(self.platform, ctx.owner, self.settings, self.sleep)

    def install_deps(self, ctx: SpawnContext) -> None:
        install_dependencies(ctx.repository.local_dir, self.settings.install_command)

    def create_wallet(self, ctx: SpawnContext) -> None:
        log.info("\ngenerating wallet...")
        try:
            ctx.wallet, _created = load_or_create_wallet(ctx.identity.name, self.settings.agents_home)
        except (OSError, ValueError, KeyError) as exc:
            raise SpawnError(
                f"wallet file unusable: {exc!r}",
                f"check {self.settings.agents_home} (never delete a funded wallet file)",
            ) from exc
        log.info(f"  address: {ctx.wallet.address}")

    def await_funding(self, ctx: SpawnContext) -> None:
        address = ctx.wallet.address
        print(f"\n  send ~{SUGGESTED_FUNDING_ETH} ETH (Base) to:")
        print(f"  {address}\n")
        log.info("waiting for funds...")
        if not await_funding(self.chain.get_balance, address, self.funding, self.sleep):
            raise FundingTimeout("timed out waiting for funds", "fund the wallet and run again")

    def register(self, ctx: SpawnContext) -> StageResult:
        wallet, repo = ctx.wallet, ctx.repository
        if wallet.registration:
            log.info(f"\nalready registered (tx {wallet.registration.get('txHash')})")
            ctx.registered = True
            return StageResult(Stage.REGISTER, StageStatus.SUCCESS, "already registered")
        log.info("\nregistering on network...")
        receipt = self.chain.register(wallet.account, repo.url, ctx.identity.name)
        tx_hash = receipt["transactionHash"]
        if not isinstance(tx_hash, str):
            tx_hash = "0x" + bytes(tx_hash).hex()
        self._record(record_registration, wallet, tx_hash, repo.url)
        ctx.registered = True
        log.info("  registered")
        return StageResult(Stage.REGISTER, StageStatus.SUCCESS)

    def launch_token(self, ctx: SpawnContext) -> StageResult:
        wallet, repo = ctx.wallet, ctx.repository
        if wallet.token:
            ctx.token = TokenRecord.from_dict(wallet.token)
            log.info(f"\ntoken already launched: {ctx.token.address} (${ctx.token.symbol})")
            return StageResult(Stage.LAUNCH_TOKEN, StageStatus.SUCCESS, "already launched")
        log.info("\nlaunching token...")
        deployer = self.deployer_factory(wallet)
        ctx.token = launch_token(deployer, ctx.identity, wallet, repo.slug, self.settings.paired_token)
        self._record(record_token, wallet, ctx.token.to_dict(), repo.url)
        return StageResult(Stage.LAUNCH_TOKEN, StageStatus.SUCCESS)

    def set_secrets(self, ctx: SpawnContext) -> StageResult:
        log.info("\nsetting secrets...")
        outcomes = set_repository_secrets(self.platform, ctx.repository.local_dir, {
            SECRET_CREDENTIAL: ctx.identity.credential,
            SECRET_WALLET_KEY: ctx.wallet.private_key,
        })
        return self._best_effort(Stage.SET_SECRETS, outcomes, ctx)

    def write_state(self, ctx: SpawnContext) -> None:
        log.info("\nwriting identity...")
        try:
            write_state(
                ctx.repository.local_dir, ctx.identity, ctx.wallet.address,
                ctx.registered, ctx.token, self.settings.registry_address,
            )
        except OSError as exc:
            raise SpawnError(f"could not write memory files: {exc}") from exc

    def commit_push(self, ctx: SpawnContext) -> None:
        log.info("\npushing...")
        commit_and_push(ctx.repository.local_dir, ctx.identity, self.settings.repo_name)

    def enable_automation(self, ctx: SpawnContext) -> StageResult:
        repo = ctx.repository
        outcomes = enable_automation(self.platform, repo.slug, repo.site_url)
        return self._best_effort(Stage.ENABLE_AUTOMATION, outcomes, ctx)

    @staticmethod
    def _record(update, wallet: Wallet, *args):
        try:
            update(wallet, *args)
        except OSError as exc:
            raise SpawnError(
                f"could not update wallet file: {exc}", f"record it by hand in {wallet.path}",
            ) from exc

    @staticmethod
    def _best_effort(stage: Stage, outcomes: list[StepOutcome], ctx: SpawnContext) -> StageResult:
        ctx.outcomes.extend(outcomes)
        advisories = [o.advisory for o in outcomes if not o.succeeded]
        status = StageStatus.ADVISORY if advisories else StageStatus.SUCCESS
        return StageResult(stage, status, advisories=advisories)
