from __future__ import annotations

from ..utils.subproc import RunResult


def refresh_index_runner(config, host) -> RunResult:
    return host.packages.update_index()


def install_deps_runner(config, host) -> RunResult:
    return host.packages.install(list(config.packages))
