from __future__ import annotations

import re
from functools import partial
from pathlib import Path

from ..core.confirm import confirm_reboot
from ..core.errors import (
    BootConfigFailure,
    BuildFailure,
    CloneFailure,
    ConfigWriteFailure,
    FilesystemFailure,
    PackageIndexFailure,
    PackageInstallFailure,
    PrivilegeDenied,
    RebootFailure,
)
from ..core.model import Pipeline, Step
from .step_boot import apply_boot_config_runner, update_cmdline_runner
from .step_firmware import firmware_dir_runner, firmware_link_runner
from .step_packages import install_deps_runner, refresh_index_runner
from .step_reboot import confirm_and_reboot_runner
from .step_source import build_runner, clone_runner
from .step_sources import repoint_sources_runner


def _log(log_dir: Path, number: int, name: str) -> Path:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return log_dir / f"step-{number:02d}-{slug}.log"


def steps(config, host, *, confirm=confirm_reboot) -> list[Step]:
    log_dir = config.resolved_log_dir

    def step(number: int, name: str, description: str, runner, **policy) -> Step:
        return Step(
            number=number,
            name=name,
            description=description,
            log_file=_log(log_dir, number, name),
            runner=partial(runner, config, host),
            **policy,
        )

    return [
        step(
            1,
            "Repoint package sources",
            f"Rewrite apt sources from {config.upstream_url} to {config.mirror_url}",
            repoint_sources_runner,
            failure=ConfigWriteFailure,
            fatal=False,
            fatal_errors=(ConfigWriteFailure, PrivilegeDenied),
            provides=("package-sources",),
        ),
        step(
            2,
            "Refresh package index",
            "apt-get update",
            refresh_index_runner,
            failure=PackageIndexFailure,
            provides=("package-index",),
        ),
        step(
            3,
            "Install build dependencies",
            "apt-get install -y " + " ".join(config.packages),
            install_deps_runner,
            failure=PackageInstallFailure,
            requires=("package-index",),
            provides=("build-deps",),
        ),
        step(
            4,
            "Create firmware directory",
            f"mkdir -p {config.firmware_dir}",
            firmware_dir_runner,
            failure=FilesystemFailure,
            fatal=False,
            provides=("firmware-dir",),
        ),
        step(
            5,
            "Link firmware artifact",
            f"Link {config.firmware_link_target} into {config.firmware_dir}",
            firmware_link_runner,
            failure=FilesystemFailure,
            requires=("firmware-dir",),
            provides=("firmware-link",),
        ),
        step(
            6,
            "Clone hypervisor source",
            f"git clone -b {config.branch} --single-branch {config.repo_url}",
            clone_runner,
            failure=CloneFailure,
            idempotent=False,
            provides=("hypervisor-source",),
        ),
        step(
            7,
            "Build hypervisor source",
            f"make in {config.source_dir}",
            build_runner,
            failure=BuildFailure,
            requires=("build-deps", "hypervisor-source"),
            provides=("hypervisor-build",),
        ),
        step(
            8,
            "Update kernel command line",
            f"{config.cmdline_script} in {config.source_dir}",
            update_cmdline_runner,
            failure=BootConfigFailure,
            idempotent=False,
            requires=("hypervisor-source",),
            provides=("kernel-cmdline",),
        ),
        step(
            9,
            "Apply boot-loader configuration",
            "update-grub",
            apply_boot_config_runner,
            failure=BootConfigFailure,
            requires=("kernel-cmdline",),
            provides=("boot-config",),
        ),
        Step(
            number=10,
            name="Confirm and reboot",
            description="Ask for confirmation, then reboot",
            log_file=_log(log_dir, 10, "Confirm and reboot"),
            runner=partial(confirm_and_reboot_runner, config, host, confirm=confirm),
            failure=RebootFailure,
            idempotent=False,
            requires=("firmware-link", "hypervisor-build", "boot-config"),
            terminal=True,
        ),
    ]


def pipeline(config, host, *, confirm=confirm_reboot) -> Pipeline:
    return Pipeline(tuple(steps(config, host, confirm=confirm)))
