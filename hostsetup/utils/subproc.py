from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass, field
from typing import Mapping

from ..host.privileged import elevate, is_escalation_refusal

logger = logging.getLogger(__name__)

COMMAND_NOT_FOUND = "command-not-found"
PERMISSION_DENIED = "permission-denied"
NON_ZERO_EXIT = "non-zero-exit"


@dataclass(frozen=True)
class CommandSpec:
    program: str
    args: tuple[str, ...] = ()
    cwd: str | None = None
    elevated: bool = False
    env_overrides: Mapping[str, str] = field(default_factory=dict)

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]


@dataclass(frozen=True)
class RunResult:
    command_str: str
    stdout: str
    stderr: str
    exit_code: int
    error: str | None = None  # command-not-found|permission-denied|non-zero-exit
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @property
    def diagnostic(self) -> str:
        text = self.stderr.strip() or self.stdout.strip()
        return text


def internal(command_str: str, *, stdout: str = "", stderr: str = "", exit_code: int = 0, skipped: bool = False) -> RunResult:
    """Build a RunResult for work done in-process rather than by a collaborator."""

    return RunResult(
        command_str=command_str,
        stdout=stdout,
        stderr=stderr,
        exit_code=exit_code,
        error=None if exit_code == 0 else NON_ZERO_EXIT,
        skipped=skipped,
    )


def _classify(exit_code: int) -> str | None:
    if exit_code == 0:
        return None
    if exit_code == 127:
        return COMMAND_NOT_FOUND
    if exit_code == 126:
        return PERMISSION_DENIED
    return NON_ZERO_EXIT


def run(spec: CommandSpec) -> RunResult:
    """Run one external command synchronously and capture its outcome."""

    argv = spec.argv
    if spec.elevated:
        if spec.env_overrides:
            # sudo resets the environment; pass overrides on the command line.
            argv = ["env", *(f"{k}={v}" for k, v in spec.env_overrides.items()), *argv]
        elevated = elevate(argv)
        if elevated is None:
            command_str = " ".join(shlex.quote(p) for p in argv)
            return RunResult(
                command_str=command_str,
                stdout="",
                stderr="Elevated privileges required but neither sudo nor pkexec is available",
                exit_code=126,
                error=PERMISSION_DENIED,
            )
        argv = elevated

    command_str = " ".join(shlex.quote(p) for p in argv)
    env = {**os.environ, **(spec.env_overrides or {})}
    logger.debug("Running %s (cwd=%s)", command_str, spec.cwd or os.getcwd())

    try:
        proc = subprocess.run(
            argv,
            cwd=spec.cwd,
            text=True,
            capture_output=True,
            env=env,
        )
    except FileNotFoundError as exc:
        # Either the program or the working directory is missing.
        if spec.cwd is not None and not os.path.isdir(spec.cwd):
            return RunResult(command_str, "", f"Working directory not found: {spec.cwd}", 1, NON_ZERO_EXIT)
        return RunResult(command_str, "", f"Command not found: {exc.filename or argv[0]}", 127, COMMAND_NOT_FOUND)
    except PermissionError as exc:
        return RunResult(command_str, "", f"Permission denied: {exc}", 126, PERMISSION_DENIED)

    error = _classify(proc.returncode)
    if spec.elevated and is_escalation_refusal(argv, proc.returncode, proc.stderr):
        error = PERMISSION_DENIED

    return RunResult(
        command_str=command_str,
        stdout=proc.stdout,
        stderr=proc.stderr,
        exit_code=proc.returncode,
        error=error,
    )
