from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, Sequence

from ..utils.subproc import RunResult


class PackageManager(Protocol):
    def update_index(self) -> RunResult: ...

    def install(self, packages: Sequence[str]) -> RunResult: ...


class Filesystem(Protocol):
    def exists(self, path: str) -> bool: ...

    def read_text(self, path: str) -> str: ...

    def substitute(self, path: str, old: str, new: str) -> RunResult: ...

    def ensure_dir(self, path: str) -> RunResult: ...

    def symlink_force(self, target: str, link_path: str) -> RunResult: ...


class CheckoutState(str, Enum):
    ABSENT = "absent"
    MATCHING = "matching"
    CONFLICTING = "conflicting"


@dataclass(frozen=True)
class CheckoutInfo:
    state: CheckoutState
    remote: str | None = None
    branch: str | None = None
    detail: str = ""


class VersionControl(Protocol):
    def inspect(self, directory: str, *, repo_url: str, branch: str) -> CheckoutInfo: ...

    def clone(self, repo_url: str, branch: str, directory: str) -> RunResult: ...


class BuildTool(Protocol):
    def build(self, directory: str) -> RunResult: ...


class BootLoader(Protocol):
    def update_cmdline(self, source_dir: str) -> RunResult: ...

    def apply(self) -> RunResult: ...


class Power(Protocol):
    def reboot(self) -> RunResult: ...


@dataclass(frozen=True)
class HostState:
    """Capabilities the pipeline uses to read and mutate the host.

    Steps only talk to the host through these, so they can run against fakes.
    """

    packages: PackageManager
    fs: Filesystem
    vcs: VersionControl
    build: BuildTool
    boot: BootLoader
    power: Power
