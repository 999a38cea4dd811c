"""
errors.py — Failure taxonomy for agent spawning.

Every fatal condition is a SpawnError. The orchestrator turns a raised
SpawnError into a FATAL stage result; the CLI prints it on one line and
exits 1.
"""


class SpawnError(Exception):
    """Base class for errors that abort a spawn run."""

    def __init__(self, message: str, advice: str = ""):
        super().__init__(message)
        self.advice = advice

    def __str__(self):
        msg = super().__str__()
        if self.advice:
            return f"{msg} ({self.advice})"
        return msg


class SetupError(SpawnError):
    """Operator setup problem: missing or unauthenticated CLI."""


class InputError(SpawnError):
    """Invalid or missing form input."""


class FundingTimeout(SpawnError):
    """Wallet was not funded within the polling budget. Re-run to resume."""


class RemoteReadError(SpawnError):
    """A read from the chain RPC failed."""


class RemoteWriteError(SpawnError):
    """A state-mutating remote call (register, launch, push) failed."""


class CommandError(SpawnError):
    """An external command exited non-zero or could not be started."""

    def __init__(self, cmd: list[str], returncode: int | None, stderr: str = ""):
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr.strip()
        super().__init__(f"`{' '.join(cmd)}` failed: {self.detail}")

    @property
    def detail(self) -> str:
        """First line of the command's output, or its exit code."""
        lines = [line.strip() for line in self.stderr.splitlines() if line.strip()]
        return lines[0] if lines else f"exit code {self.returncode}"
