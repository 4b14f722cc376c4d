from __future__ import annotations

from ..utils.subproc import RunResult


def update_cmdline_runner(config, host) -> RunResult:
    return host.boot.update_cmdline(config.resolved_source_dir)


def apply_boot_config_runner(config, host) -> RunResult:
    return host.boot.apply()
