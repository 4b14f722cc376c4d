from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone


def iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class StepLogRecord:
    number: int
    step_name: str
    command: str
    duration_s: float
    status: str
    exit_code: int
    stdout: str
    stderr: str
    error: str = ""


def format_standard_log(record: StepLogRecord) -> str:
    """Render one step's log file.

    The layout is fixed so the logs from a failed provisioning run can be
    grepped or parsed by whatever collects them afterwards.
    """

    stdout = record.stdout if record.stdout.strip() else "(no stdout)"
    stderr = record.stderr if record.stderr.strip() else "(no stderr)"
    header = [
        f"=== [{record.number}] {record.step_name} - {iso_now()} ===",
        f"Command: {record.command}",
        f"Duration: ({record.duration_s:.1f}s)",
        f"Status: {record.status}",
        f"Exit Code: {record.exit_code}",
    ]
    if record.error:
        header.append(f"Error: {record.error}")

    return "\n".join(header) + (
        f"\n\n=== STDOUT ===\n{stdout}\n\n"
        f"=== STDERR ===\n{stderr}\n\n"
        f"=== END ===\n"
    )
