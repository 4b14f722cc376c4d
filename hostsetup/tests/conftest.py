from __future__ import annotations

import os
import tempfile
from pathlib import Path

import pytest


# Safety default: during pytest, never read the operator's real config or
# write logs into their state directory.
os.environ.setdefault("RVM_SETUP_CONFIG_DIR", tempfile.mkdtemp(prefix="rvm-setup-test-config-"))
os.environ.setdefault("RVM_SETUP_LOG_DIR", tempfile.mkdtemp(prefix="rvm-setup-test-logs-"))


UPSTREAM = "http://archive.ubuntu.com"
MIRROR = "http://mirrors.tuna.tsinghua.edu.cn"
REPO = "https://github.com/rvm-rtos/jailhouse.git"

# Operations that change host state when they succeed.
MUTATING_OPS = (
    "substitute",
    "update_index",
    "install",
    "ensure_dir",
    "symlink_force",
    "clone",
    "build",
    "update_cmdline",
    "apply",
    "reboot",
)


class FakeHost:
    """In-memory stand-in for every host capability.

    Records each call in `calls`, counts real state changes in `mutations`, and
    fails any operation listed in `fail` as {op: (exit_code, error)}.
    """

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.mutations = 0
        self.fail: dict[str, tuple[int, str]] = {}
        self.unreadable: set[str] = set()

        self.files: dict[str, str] = {}
        self.present: set[str] = set()
        self.dirs: set[str] = set()
        self.links: dict[str, str] = {}
        self.checkouts: dict[str, tuple[str, str]] = {}
        self.plain_dirs: set[str] = set()
        self.installed: set[str] = set()
        self.index_fresh = False
        self.built: set[str] = set()
        self.cmdline_updates = 0
        self.grub_applied = 0
        self.reboots = 0

    def _result(self, op: str, command: str):
        from hostsetup.utils.subproc import RunResult

        self.calls.append(op)
        failure = self.fail.get(op)
        if failure is not None:
            code, error = failure
            return RunResult(command, "", f"{op} failed", code, error)
        return RunResult(command, f"{op} ok\n", "", 0)

    # PackageManager
    def update_index(self):
        res = self._result("update_index", "apt-get update")
        if res.ok:
            self.index_fresh = True
        return res

    def install(self, packages):
        res = self._result("install", "apt-get install -y " + " ".join(packages))
        if res.ok:
            missing = set(packages) - self.installed
            if missing:
                self.installed |= missing
                self.mutations += 1
        return res

    # Filesystem
    def exists(self, path):
        return (
            path in self.files
            or path in self.present
            or path in self.dirs
            or path in self.links
            or path in self.checkouts
            or path in self.plain_dirs
        )

    def read_text(self, path):
        self.calls.append("read_text")
        if path in self.unreadable:
            raise PermissionError(13, "Permission denied", path)
        return self.files[path]

    def substitute(self, path, old, new):
        res = self._result("substitute", f"sed -i s|{old}|{new}|g {path}")
        if res.ok and old in self.files[path]:
            self.files[path] = self.files[path].replace(old, new)
            self.mutations += 1
        return res

    def ensure_dir(self, path):
        res = self._result("ensure_dir", f"mkdir -p {path}")
        if res.ok and path not in self.dirs:
            self.dirs.add(path)
            self.mutations += 1
        return res

    def symlink_force(self, target, link_path):
        res = self._result("symlink_force", f"ln -sfn {target} {link_path}")
        if res.ok and self.links.get(link_path) != target:
            self.links[link_path] = target
            self.mutations += 1
        return res

    # VersionControl
    def inspect(self, directory, *, repo_url, branch):
        from hostsetup.host.base import CheckoutInfo, CheckoutState
        from hostsetup.host.system import normalize_remote

        self.calls.append("inspect")
        if directory in self.plain_dirs:
            return CheckoutInfo(CheckoutState.CONFLICTING, detail=f"{directory} is not a git checkout")
        if directory not in self.checkouts:
            return CheckoutInfo(CheckoutState.ABSENT)
        remote, current = self.checkouts[directory]
        if normalize_remote(remote) != normalize_remote(repo_url) or current != branch:
            return CheckoutInfo(
                CheckoutState.CONFLICTING,
                remote=remote,
                branch=current,
                detail=f"{directory} is a checkout of {remote} ({current})",
            )
        return CheckoutInfo(CheckoutState.MATCHING, remote=remote, branch=current)

    def clone(self, repo_url, branch, directory):
        res = self._result("clone", f"git clone -b {branch} --single-branch {repo_url} {directory}")
        if res.ok:
            self.checkouts[directory] = (repo_url, branch)
            self.mutations += 1
        return res

    # BuildTool
    def build(self, directory):
        res = self._result("build", "make")
        if res.ok:
            self.built.add(directory)
        return res

    # BootLoader
    def update_cmdline(self, source_dir):
        res = self._result("update_cmdline", "./update-cmdline.sh")
        if res.ok:
            self.cmdline_updates += 1
        return res

    def apply(self):
        res = self._result("apply", "update-grub")
        if res.ok:
            self.grub_applied += 1
        return res

    # Power
    def reboot(self):
        res = self._result("reboot", "reboot")
        if res.ok:
            self.reboots += 1
        return res

    def host_state(self):
        from hostsetup.host.base import HostState

        return HostState(packages=self, fs=self, vcs=self, build=self, boot=self, power=self)


@pytest.fixture
def fake_host() -> FakeHost:
    """A fresh stock host: apt sources on the upstream archive, firmware image in $HOME."""

    host = FakeHost()
    host.files["/etc/apt/sources.list"] = f"deb {UPSTREAM}/ubuntu jammy main restricted\n"
    return host


@pytest.fixture
def make_config(tmp_path: Path):
    """Factory for a ProvisionConfig rooted in tmp_path (reboot confirmed by default)."""

    def _make(**overrides):
        from hostsetup.config.config import ProvisionConfig
        from hostsetup.config.defaults import DEFAULTS

        settings = {
            **DEFAULTS,
            "sources_files": ["/etc/apt/sources.list"],
            "firmware_link_target": str(tmp_path / "rvm-intel.bin"),
            "source_dir": str(tmp_path / "jailhouse"),
            "log_dir": str(tmp_path / "logs"),
            "skip_confirmation": True,
        }
        settings.update(overrides)
        return ProvisionConfig.from_settings(settings)

    return _make


@pytest.fixture
def stock_host(fake_host, make_config):
    """Return (config, host) with the firmware image present on the fake host."""

    config = make_config()
    fake_host.present.add(config.resolved_link_target)
    return config, fake_host
