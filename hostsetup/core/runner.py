from __future__ import annotations

import logging
import time
from pathlib import Path

from .errors import PrivilegeDenied, ProvisionError
from .model import ABORTED, COMPLETED, Pipeline, PipelineOutcome, Step, StepOutcome
from .summary import ProvisionSummary, StepSummary, write_summary
from ..utils.log_format import StepLogRecord, format_standard_log
from ..utils.subproc import PERMISSION_DENIED, RunResult

logger = logging.getLogger(__name__)


def _write_log(step: Step, record: StepLogRecord) -> None:
    try:
        step.log_file.parent.mkdir(parents=True, exist_ok=True)
        step.log_file.write_text(format_standard_log(record), encoding="utf-8")
    except OSError as exc:
        # A read-only log location must not change the provisioning outcome.
        logger.warning("Could not write step log %s: %s", step.log_file, exc)


def _error_for(step: Step, result: RunResult) -> ProvisionError:
    diagnostic = result.diagnostic
    if result.error == PERMISSION_DENIED:
        return PrivilegeDenied(f"{step.name}: permission denied running {result.command_str}", diagnostic=diagnostic)
    return step.failure(
        f"{step.name}: {result.command_str} exited with {result.exit_code}",
        diagnostic=diagnostic,
    )


def run_step(step: Step, *, verbose: bool) -> tuple[StepOutcome, ProvisionError | None]:
    start = time.time()

    error: ProvisionError | None = None
    try:
        result = step.runner()
    except ProvisionError as exc:
        error = exc
        result = RunResult(
            command_str="(internal) " + step.name,
            stdout="",
            stderr=exc.diagnostic or str(exc),
            exit_code=exc.exit_code,
            error=None,
        )
    except OSError as exc:
        error = step.failure(f"{step.name}: {exc}", diagnostic=str(exc))
        result = RunResult(
            command_str="(internal) " + step.name,
            stdout="",
            stderr=str(exc),
            exit_code=error.exit_code,
            error=None,
        )
    else:
        if not result.ok:
            error = _error_for(step, result)

    duration = time.time() - start

    if error is not None:
        status = "failure"
    elif result.skipped:
        status = "skipped"
    else:
        status = "success"

    _write_log(
        step,
        StepLogRecord(
            number=step.number,
            step_name=step.name,
            command=result.command_str,
            duration_s=duration,
            status=status,
            exit_code=result.exit_code,
            stdout=result.stdout,
            stderr=result.stderr,
            error=error.kind if error is not None else "",
        ),
    )

    label = {"success": "OK", "failure": "FAIL", "skipped": "SKIPPED"}[status]
    print(f"[{step.number}] {step.name}: {label} ({duration:.1f}s)")

    if verbose or error is not None or result.skipped:
        if result.stdout.strip():
            print(result.stdout.rstrip())
        if result.stderr.strip():
            print(result.stderr.rstrip())

    message = result.diagnostic if error is None else (error.diagnostic or str(error))
    outcome = StepOutcome(
        number=step.number,
        name=step.name,
        status=status,
        exit_code=result.exit_code,
        duration_s=duration,
        message=message,
        error=error.kind if error is not None else "",
        fatal=step.fatal,
    )
    return outcome, error


def run(pipeline: Pipeline, *, verbose: bool = False, log_dir: Path) -> PipelineOutcome:
    """Execute *pipeline* in order until completion or the first fatal failure."""

    print(f"RVM host setup (logs: {log_dir})")

    started = time.time()
    results: list[StepOutcome] = []

    def _finish(outcome: PipelineOutcome) -> PipelineOutcome:
        summary = ProvisionSummary(
            state=outcome.state,
            failed_step=outcome.failed_step,
            exit_code=outcome.exit_code,
            total_duration_s=time.time() - started,
            steps=[
                StepSummary(
                    number=r.number,
                    name=r.name,
                    status=r.status,
                    exit_code=r.exit_code,
                    duration_s=r.duration_s,
                    error=r.error,
                )
                for r in results
            ],
        )
        try:
            write_summary(log_dir, summary)
        except OSError as exc:
            logger.warning("Could not write provisioning summary to %s: %s", log_dir, exc)
        return outcome

    for step in pipeline:
        outcome, error = run_step(step, verbose=verbose)
        results.append(outcome)

        if error is None:
            continue

        if step.aborts_on(error):
            print(f"Stopped on failure in step {step.number}: {step.name}")
            print(f"  {error.kind}: {error}")
            if error.diagnostic:
                print(f"  {error.diagnostic}")
            return _finish(
                PipelineOutcome(
                    state=ABORTED,
                    results=list(results),
                    failed_step=step.name,
                    error=error,
                )
            )

        logger.warning("Non-fatal failure in step %d (%s): %s", step.number, step.name, error.diagnostic or error)

    return _finish(PipelineOutcome(state=COMPLETED, results=list(results)))
