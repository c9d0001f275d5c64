"""Reusable test utilities and recording stubs for the test suite."""

from raspi_provisioning.common.types import CommandResult


class RecordingLogger:
    """In-memory logger capturing log messages and setup calls."""

    def __init__(self):
        self.messages: list[str] = []
        self.setup_calls: list[bool] = []

    def setup(self, verbose: bool, log_file: str | None = None) -> None:
        self.setup_calls.append(verbose)

    def log(self, msg: str) -> None:
        self.messages.append(msg)

    def debug(self, msg: str, *args) -> None:  # pragma: no cover - simple passthrough
        self.messages.append(f"DEBUG:{msg % args if args else msg}")

    def info(self, msg: str) -> None:
        self.messages.append(f"[INFO] {msg}")

    def success(self, msg: str) -> None:
        self.messages.append(f"[SUCCESS] {msg}")

    def warning(self, msg: str) -> None:
        self.messages.append(f"[WARNING] {msg}")

    def error(self, msg: str) -> None:
        self.messages.append(f"[ERROR] {msg}")

    def has(self, fragment: str) -> bool:
        return any(fragment in msg for msg in self.messages)


class RecordingShell:
    """Record issued commands and return canned results.

    ``responses`` maps a command tuple to its result; unknown commands get
    ``default_rc``. ``failing`` lists command prefixes that exit with rc=1.
    """

    def __init__(
        self,
        responses: dict[tuple[str, ...], CommandResult] | None = None,
        default_rc: int = 0,
        failing: list[tuple[str, ...]] | None = None,
    ):
        self.responses = responses or {}
        self.default_rc = default_rc
        self.failing = failing or []
        self.calls: list[list[str]] = []
        self.envs: list[dict | None] = []
        self.cwds: list[str | None] = []
        self.spawned: list[list[str]] = []

    def cmd_str(self, cmd: list[str]) -> str:
        return " ".join(cmd)

    def run_cmd(self, cmd: list[str], timeout=5, env=None, cwd=None) -> CommandResult:
        self.calls.append(list(cmd))
        self.envs.append(dict(env) if env else None)
        self.cwds.append(cwd)
        key = tuple(cmd)
        if key in self.responses:
            return self.responses[key]
        if any(key[: len(prefix)] == prefix for prefix in self.failing):
            return CommandResult(cmd=list(cmd), returncode=1, stdout="", stderr="simulated failure")
        return CommandResult(cmd=list(cmd), returncode=self.default_rc, stdout="", stderr="")

    def spawn(self, cmd: list[str], env=None, cwd=None) -> CommandResult:
        self.spawned.append(list(cmd))
        self.envs.append(dict(env) if env else None)
        return CommandResult(cmd=list(cmd), returncode=0, stdout="4242", stderr="")


def ok(stdout: str = "") -> CommandResult:
    return CommandResult(cmd=[], returncode=0, stdout=stdout, stderr="")


def failed(rc: int = 1, stderr: str = "") -> CommandResult:
    return CommandResult(cmd=[], returncode=rc, stdout="", stderr=stderr)
