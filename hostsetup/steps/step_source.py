from __future__ import annotations

import logging

from ..core.errors import SourceAlreadyExists
from ..host.base import CheckoutState
from ..utils.subproc import RunResult, internal

logger = logging.getLogger(__name__)


def clone_runner(config, host) -> RunResult:
    """Clone the hypervisor source unless a checkout is already in place.

    git clone fails on an existing directory, so the target is inspected first:
    a matching checkout is reused (or rejected with on_existing_source=fail),
    anything else there is reported as SourceAlreadyExists.
    """

    directory = config.resolved_source_dir
    info = host.vcs.inspect(directory, repo_url=config.repo_url, branch=config.branch)

    if info.state is CheckoutState.CONFLICTING:
        raise SourceAlreadyExists(
            f"{directory} already exists and is not a checkout of {config.repo_url} ({config.branch})",
            diagnostic=info.detail,
        )

    if info.state is CheckoutState.MATCHING:
        if config.on_existing_source == "fail":
            raise SourceAlreadyExists(
                f"{directory} already contains {config.repo_url} ({config.branch})",
                diagnostic="Remove the directory or rerun with --on-existing-source=skip",
            )
        logger.info("Reusing existing checkout at %s", directory)
        return internal(
            f"git clone -b {config.branch} --single-branch {config.repo_url} {directory}",
            stdout=f"{directory} already contains {config.repo_url} ({config.branch}); reusing it\n",
            skipped=True,
        )

    return host.vcs.clone(config.repo_url, config.branch, directory)


def build_runner(config, host) -> RunResult:
    return host.build.build(config.resolved_source_dir)
