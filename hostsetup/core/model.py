from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable

from .errors import PipelineDefinitionError, ProvisionError
from ..utils.subproc import RunResult


@dataclass(frozen=True)
class Step:
    number: int
    name: str
    description: str
    log_file: Path
    runner: Callable[[], RunResult]
    failure: type[ProvisionError] = ProvisionError
    fatal: bool = True
    # Errors that abort the pipeline even when the step itself is non-fatal.
    fatal_errors: tuple[type[ProvisionError], ...] = ()
    idempotent: bool = True
    requires: tuple[str, ...] = ()
    provides: tuple[str, ...] = ()
    terminal: bool = False

    def aborts_on(self, error: ProvisionError) -> bool:
        return self.fatal or self.terminal or isinstance(error, self.fatal_errors)


def validate_steps(steps: Iterable[Step]) -> list[str]:
    """Return a list of problems with the step sequence (empty when valid)."""

    steps = list(steps)
    problems: list[str] = []

    if not steps:
        return ["pipeline has no steps"]

    seen_names: set[str] = set()
    provided: set[str] = set()
    last_number: int | None = None

    for index, step in enumerate(steps):
        if last_number is not None and step.number <= last_number:
            problems.append(
                f"step {step.name!r} has number {step.number}, not greater than previous {last_number}"
            )
        last_number = step.number

        if step.name.lower() in seen_names:
            problems.append(f"duplicate step name {step.name!r}")
        seen_names.add(step.name.lower())

        for token in step.requires:
            if token not in provided:
                problems.append(f"step {step.name!r} requires {token!r} which no earlier step provides")
        provided.update(step.provides)

        if step.terminal and index != len(steps) - 1:
            problems.append(f"terminal step {step.name!r} must be the last step")

    return problems


@dataclass(frozen=True)
class Pipeline:
    steps: tuple[Step, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "steps", tuple(self.steps))
        problems = validate_steps(self.steps)
        if problems:
            raise PipelineDefinitionError(problems)

    def __iter__(self):
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)


@dataclass(frozen=True)
class StepOutcome:
    number: int
    name: str
    status: str  # success|failure|skipped
    exit_code: int
    duration_s: float
    message: str = ""
    error: str = ""
    fatal: bool = True


COMPLETED = "completed"
ABORTED = "aborted"


@dataclass(frozen=True)
class PipelineOutcome:
    state: str  # completed|aborted
    results: list[StepOutcome] = field(default_factory=list)
    failed_step: str | None = None
    error: ProvisionError | None = None

    @property
    def completed(self) -> bool:
        return self.state == COMPLETED

    @property
    def exit_code(self) -> int:
        if self.completed:
            return 0
        return self.error.exit_code if self.error is not None else 1

    def describe(self) -> str:
        if self.completed:
            return "Completed"
        return f"Aborted({self.failed_step!r})"
