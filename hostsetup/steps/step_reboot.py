from __future__ import annotations

from ..core.confirm import confirm_reboot
from ..core.errors import RebootDeclined
from ..utils.subproc import RunResult, internal


def confirm_and_reboot_runner(config, host, *, confirm=confirm_reboot) -> RunResult:
    if not config.reboot:
        return internal(
            "reboot",
            stdout="Reboot disabled; reboot manually to boot the new configuration.\n",
            skipped=True,
        )

    if not confirm(assume_yes=config.skip_confirmation, timeout_s=config.confirm_timeout_s):
        raise RebootDeclined(
            "Reboot not confirmed",
            diagnostic="Provisioning finished; reboot manually to boot the new configuration.",
        )

    return host.power.reboot()
