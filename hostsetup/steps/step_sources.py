from __future__ import annotations

import logging

from ..core.errors import ConfigWriteFailure, FilesystemFailure
from ..utils.subproc import RunResult, internal

logger = logging.getLogger(__name__)


def repoint_sources_runner(config, host) -> RunResult:
    """Rewrite the upstream archive URL to the mirror in every apt sources file.

    Files already pointing at the mirror are left alone. A file that mentions
    neither URL is also left alone: the substitution is a no-op, which counts
    as success but is logged as a warning.
    """

    existing = [p for p in config.sources_files if host.fs.exists(p)]
    if not existing:
        raise FilesystemFailure(
            "No package source file found",
            diagnostic="Checked: " + ", ".join(config.sources_files),
        )

    commands: list[str] = []
    report: list[str] = []

    for path in existing:
        try:
            text = host.fs.read_text(path)
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigWriteFailure(f"Cannot read package sources {path}", diagnostic=str(exc)) from exc

        if config.mirror_url in text:
            # Checked first: the mirror URL may itself contain the upstream URL.
            report.append(f"{path}: already uses {config.mirror_url}")
        elif config.upstream_url in text:
            result = host.fs.substitute(path, config.upstream_url, config.mirror_url)
            if not result.ok:
                return result
            commands.append(result.command_str)
            report.append(f"{path}: {config.upstream_url} -> {config.mirror_url}")
        else:
            logger.warning("%s does not mention %s; substitution was a no-op", path, config.upstream_url)
            report.append(f"{path}: {config.upstream_url} not found, unchanged")

    return internal(
        "; ".join(commands) or "(no substitution needed)",
        stdout="\n".join(report) + "\n",
    )
