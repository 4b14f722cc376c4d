from __future__ import annotations

import logging
import os
import shutil

logger = logging.getLogger(__name__)


def is_root() -> bool:
    return os.geteuid() == 0


def escalation_tool() -> str | None:
    """Return the privilege-escalation program to prefix elevated commands with.

    sudo is preferred over pkexec: it keeps the working directory and works in
    a plain SSH session without a polkit agent.
    """

    override = os.environ.get("RVM_SETUP_ESCALATION")
    if override:
        return shutil.which(override)

    sudo = shutil.which("sudo")
    if sudo:
        return sudo

    pkexec = shutil.which("pkexec")
    if pkexec:
        return pkexec

    return None


def elevate(argv: list[str]) -> list[str] | None:
    """Return *argv* prefixed for elevated execution, or None if impossible."""

    if is_root():
        return list(argv)

    tool = escalation_tool()
    if tool is None:
        logger.debug("No sudo/pkexec available to run %s", argv[0] if argv else "?")
        return None

    return [tool, *argv]


def is_escalation_refusal(argv: list[str], exit_code: int, stderr: str) -> bool:
    """Best-effort check whether the escalation tool itself refused to run *argv*.

    pkexec reports 126 (dismissed) / 127 (not authorized). sudo exits 1 and
    prints a recognizable message on stderr.
    """

    if not argv:
        return False

    tool = os.path.basename(argv[0])
    if tool == "pkexec":
        return exit_code in (126, 127)

    if tool == "sudo" and exit_code == 1:
        msg = (stderr or "").lower()
        return (
            "incorrect password" in msg
            or "a password is required" in msg
            or "is not in the sudoers file" in msg
            or "not allowed to execute" in msg
            or "a terminal is required" in msg
        )

    return False
