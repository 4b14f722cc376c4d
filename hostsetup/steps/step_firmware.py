from __future__ import annotations

import os

from ..core.errors import FilesystemFailure
from ..utils.subproc import RunResult


def firmware_link_path(config) -> str:
    return os.path.join(config.firmware_dir, os.path.basename(config.resolved_link_target))


def firmware_dir_runner(config, host) -> RunResult:
    return host.fs.ensure_dir(config.firmware_dir)


def firmware_link_runner(config, host) -> RunResult:
    target = config.resolved_link_target
    # ln -sf happily creates a dangling link; the hypervisor would then fail at load time.
    if not host.fs.exists(target):
        raise FilesystemFailure(
            f"Hypervisor image not found: {target}",
            diagnostic="Copy the built image there or pass --firmware-link-target",
        )
    return host.fs.symlink_force(target, firmware_link_path(config))
