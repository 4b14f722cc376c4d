from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class StepSummary:
    number: int
    name: str
    status: str  # success|failure|skipped
    exit_code: int
    duration_s: float
    error: str = ""


@dataclass(frozen=True)
class ProvisionSummary:
    state: str  # completed|aborted
    failed_step: str | None
    exit_code: int
    total_duration_s: float
    steps: list[StepSummary]


def write_summary(log_dir: Path, summary: ProvisionSummary) -> None:
    log_dir.mkdir(parents=True, exist_ok=True)

    json_path = log_dir / "provision-summary.json"
    md_path = log_dir / "provision-summary.md"

    payload = {
        "state": summary.state,
        "failed_step": summary.failed_step,
        "exit_code": summary.exit_code,
        "total_duration_s": summary.total_duration_s,
        "steps": [vars(s) for s in summary.steps],
    }
    json_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")

    lines: list[str] = []
    lines.append("# Provisioning summary")
    lines.append("")
    lines.append(f"- State: {summary.state}")
    if summary.failed_step:
        lines.append(f"- Failed step: {summary.failed_step}")
    lines.append(f"- Exit code: {summary.exit_code}")
    lines.append(f"- Duration: {summary.total_duration_s:.1f}s")
    lines.append("")
    lines.append("| Step | Name | Status | Duration | Exit | Error |")
    lines.append("|---:|---|---|---:|---:|---|")

    for s in summary.steps:
        lines.append(
            f"| {s.number} | {s.name} | {s.status} | {s.duration_s:.1f}s | {s.exit_code} | {s.error} |"
        )

    md_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
