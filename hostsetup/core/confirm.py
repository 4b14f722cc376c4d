from __future__ import annotations

import logging
import select
import sys
from typing import TextIO

logger = logging.getLogger(__name__)

_ACCEPT = {"", "y", "yes"}


def _wait_readable(stream: TextIO, timeout_s: float) -> bool:
    try:
        fd = stream.fileno()
    except (AttributeError, OSError, ValueError):
        # In-memory streams are always ready.
        return True
    ready, _, _ = select.select([fd], [], [], timeout_s)
    return bool(ready)


def confirm_reboot(
    *,
    assume_yes: bool = False,
    timeout_s: float | None = None,
    stream: TextIO | None = None,
    out: TextIO | None = None,
) -> bool:
    """Ask the operator to confirm the reboot.

    Returns True when confirmed (Enter, "y" or "yes", or *assume_yes*). EOF, any
    other answer, or no answer within *timeout_s* seconds declines. A timeout
    of None waits indefinitely.
    """

    if assume_yes:
        logger.info("Reboot confirmation bypassed")
        return True

    stream = stream if stream is not None else sys.stdin
    out = out if out is not None else sys.stdout

    out.write("\nSetup OK!\n")
    if timeout_s is None:
        out.write("Press ENTER to reboot (or type 'n' to cancel)... ")
    else:
        out.write(f"Press ENTER within {timeout_s:g}s to reboot (or type 'n' to cancel)... ")
    out.flush()

    if timeout_s is not None and not _wait_readable(stream, timeout_s):
        out.write("\n")
        logger.warning("No confirmation within %gs; not rebooting", timeout_s)
        return False

    line = stream.readline()
    if not line:
        logger.warning("No confirmation (end of input); not rebooting")
        return False

    answer = line.strip().lower()
    if answer in _ACCEPT:
        return True

    logger.info("Reboot cancelled by operator (%r)", answer)
    return False
