from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Iterable

from .errors import USAGE_EXIT_CODE, ConfigError, PipelineDefinitionError
from .runner import run
from ..config import ProvisionConfig, load_config
from ..config.config import EXISTING_SOURCE_POLICIES
from ..host.system import system_host
from ..steps.step_defs import pipeline as build_pipeline
from ..utils.logging_setup import configure_logging

logger = logging.getLogger(__name__)


def _list_steps(config: ProvisionConfig) -> None:
    for s in build_pipeline(config, system_host(config)):
        if s.terminal:
            policy = "terminal"
        else:
            policy = "fatal" if s.fatal else "non-fatal"
        print(f"  {s.number:>2}  {s.name:<32} {policy:<9} - {s.description}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rvm-host-setup",
        description="Provision this host to boot the RVM hypervisor, then reboot.",
    )
    parser.add_argument("--config", type=Path, help="JSON config file (default: ~/.config/rvm-host-setup/config.json)")
    parser.add_argument("--mirror-url", help="Package mirror to rewrite apt sources to")
    parser.add_argument("--upstream-url", help="Archive URL to replace in apt sources")
    parser.add_argument("--firmware-link-target", help="Hypervisor image to link into the firmware directory")
    parser.add_argument("--firmware-dir", help="Firmware directory (default: /lib/firmware)")
    parser.add_argument("--repo-url", help="Hypervisor repository to clone")
    parser.add_argument("--branch", help="Branch to clone")
    parser.add_argument("--source-dir", help="Where to clone the hypervisor source")
    parser.add_argument(
        "--on-existing-source",
        choices=EXISTING_SOURCE_POLICIES,
        help="What to do when the source directory already holds the repository",
    )
    parser.add_argument("--jobs", type=int, dest="build_jobs", help="Parallel make jobs")
    parser.add_argument("--yes", action="store_true", default=None, dest="skip_confirmation", help="Reboot without asking")
    parser.add_argument(
        "--confirm-timeout",
        type=float,
        dest="confirm_timeout_s",
        help="Give up waiting for reboot confirmation after this many seconds",
    )
    parser.add_argument("--no-reboot", action="store_false", default=None, dest="reboot", help="Do not reboot at the end")
    parser.add_argument("--log-dir", help="Directory for step logs and the run summary")
    parser.add_argument("--list-steps", action="store_true", help="List steps and exit")
    parser.add_argument("--verbose", action="store_true", help="Print stdout/stderr for steps")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


_OVERRIDES = (
    "mirror_url",
    "upstream_url",
    "firmware_link_target",
    "firmware_dir",
    "repo_url",
    "branch",
    "source_dir",
    "on_existing_source",
    "build_jobs",
    "skip_confirmation",
    "confirm_timeout_s",
    "reboot",
    "log_dir",
)


def main(argv: Iterable[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    configure_logging(debug=args.debug)

    try:
        config = load_config(args.config).with_overrides(**{k: getattr(args, k) for k in _OVERRIDES})
    except ConfigError as exc:
        print(f"Configuration error: {exc}")
        return USAGE_EXIT_CODE

    try:
        if args.list_steps:
            _list_steps(config)
            return 0

        pipeline = build_pipeline(config, system_host(config))
    except PipelineDefinitionError as exc:
        print(str(exc))
        return USAGE_EXIT_CODE

    try:
        outcome = run(pipeline, verbose=args.verbose, log_dir=config.resolved_log_dir)
    except KeyboardInterrupt:
        print("\nInterrupted.")
        return 130

    if outcome.completed:
        logger.debug("Pipeline %s", outcome.describe())
    else:
        print(f"Provisioning {outcome.describe()}: exit code {outcome.exit_code}")

    return outcome.exit_code
