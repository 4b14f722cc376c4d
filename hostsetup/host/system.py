"""Host capabilities backed by the real system tools (apt-get, git, make, grub)."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Sequence

from .base import CheckoutInfo, CheckoutState, HostState
from ..utils.subproc import CommandSpec, RunResult, run

logger = logging.getLogger(__name__)

_APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


def normalize_remote(url: str) -> str:
    url = url.strip().rstrip("/")
    if url.endswith(".git"):
        url = url[: -len(".git")]
    return url.lower()


def _sed_escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("|", "\\|").replace("&", "\\&")


class AptPackageManager:
    def update_index(self) -> RunResult:
        return run(CommandSpec("apt-get", ("update",), elevated=True, env_overrides=_APT_ENV))

    def install(self, packages: Sequence[str]) -> RunResult:
        return run(CommandSpec("apt-get", ("install", "-y", *packages), elevated=True, env_overrides=_APT_ENV))


class SystemFilesystem:
    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def read_text(self, path: str) -> str:
        # Only substring tests are done on the text; stray Latin-1 bytes must not fail the read.
        return Path(path).read_text(encoding="utf-8", errors="surrogateescape")

    def substitute(self, path: str, old: str, new: str) -> RunResult:
        expr = f"s|{_sed_escape(old)}|{_sed_escape(new)}|g"
        return run(CommandSpec("sed", ("-i", expr, path), elevated=True))

    def ensure_dir(self, path: str) -> RunResult:
        return run(CommandSpec("mkdir", ("-p", path), elevated=True))

    def symlink_force(self, target: str, link_path: str) -> RunResult:
        return run(CommandSpec("ln", ("-sfn", target, link_path), elevated=True))


class GitVersionControl:
    _ENV = {"GIT_TERMINAL_PROMPT": "0"}

    def _git(self, *args: str, cwd: str | None = None) -> RunResult:
        return run(CommandSpec("git", tuple(args), cwd=cwd, env_overrides=self._ENV))

    def inspect(self, directory: str, *, repo_url: str, branch: str) -> CheckoutInfo:
        if not os.path.lexists(directory):
            return CheckoutInfo(CheckoutState.ABSENT)

        if not os.path.isdir(directory):
            return CheckoutInfo(CheckoutState.CONFLICTING, detail=f"{directory} exists and is not a directory")

        if not os.path.exists(os.path.join(directory, ".git")):
            try:
                entries = os.listdir(directory)
            except OSError as exc:
                return CheckoutInfo(CheckoutState.CONFLICTING, detail=f"{directory} cannot be inspected: {exc}")
            if not entries:
                # git clone accepts an empty directory.
                return CheckoutInfo(CheckoutState.ABSENT, detail=f"{directory} exists but is empty")
            return CheckoutInfo(CheckoutState.CONFLICTING, detail=f"{directory} exists and is not a git checkout")

        remote_res = self._git("-C", directory, "config", "--get", "remote.origin.url")
        branch_res = self._git("-C", directory, "rev-parse", "--abbrev-ref", "HEAD")
        remote = remote_res.stdout.strip() if remote_res.ok else None
        current = branch_res.stdout.strip() if branch_res.ok else None

        if remote is None or normalize_remote(remote) != normalize_remote(repo_url):
            return CheckoutInfo(
                CheckoutState.CONFLICTING,
                remote=remote,
                branch=current,
                detail=f"{directory} is a checkout of {remote or '(no origin)'}, expected {repo_url}",
            )

        if current != branch:
            return CheckoutInfo(
                CheckoutState.CONFLICTING,
                remote=remote,
                branch=current,
                detail=f"{directory} is on branch {current or '(unknown)'}, expected {branch}",
            )

        return CheckoutInfo(CheckoutState.MATCHING, remote=remote, branch=current)

    def clone(self, repo_url: str, branch: str, directory: str) -> RunResult:
        return self._git("clone", "-b", branch, "--single-branch", repo_url, directory)


class MakeBuildTool:
    def __init__(self, jobs: int | None = None) -> None:
        self.jobs = jobs

    def build(self, directory: str) -> RunResult:
        args: tuple[str, ...] = ()
        if self.jobs:
            args = (f"-j{self.jobs}",)
        return run(CommandSpec("make", args, cwd=directory))


class GrubBootLoader:
    def __init__(self, cmdline_script: str = "./update-cmdline.sh") -> None:
        self.cmdline_script = cmdline_script

    def update_cmdline(self, source_dir: str) -> RunResult:
        return run(CommandSpec(self.cmdline_script, cwd=source_dir))

    def apply(self) -> RunResult:
        return run(CommandSpec("update-grub", elevated=True))


class SystemPower:
    def reboot(self) -> RunResult:
        return run(CommandSpec("reboot", elevated=True))


def system_host(config) -> HostState:
    return HostState(
        packages=AptPackageManager(),
        fs=SystemFilesystem(),
        vcs=GitVersionControl(),
        build=MakeBuildTool(jobs=config.build_jobs),
        boot=GrubBootLoader(cmdline_script=config.cmdline_script),
        power=SystemPower(),
    )
