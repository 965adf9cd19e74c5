from __future__ import annotations

from dataclasses import dataclass, fields

from .model import StepOutcome

__all__ = ["Report"]

_OUTCOME_FIELDS = {
    StepOutcome.PASSED: "passed_steps",
    StepOutcome.FAILED: "failed_steps",
    StepOutcome.PENDING: "pending_steps",
    StepOutcome.SKIPPED: "skipped_steps",
    StepOutcome.UNDEFINED: "undefined_steps",
}


@dataclass(frozen=True)
class Report:
    """
    Counts for a run.

    ``Report()`` is the zero and ``+`` adds field by field, so reports can be folded in any order.
    """

    scenario_count: int = 0
    passed_steps: int = 0
    failed_steps: int = 0
    pending_steps: int = 0
    skipped_steps: int = 0
    undefined_steps: int = 0

    def __add__(self, other: Report) -> Report:
        if not isinstance(other, Report):
            return NotImplemented
        return Report(
            **{f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)}
        )

    @classmethod
    def for_outcome(cls, outcome: StepOutcome) -> Report:
        return cls(**{_OUTCOME_FIELDS[outcome]: 1})

    @property
    def steps(self) -> int:
        return (
            self.passed_steps
            + self.failed_steps
            + self.pending_steps
            + self.skipped_steps
            + self.undefined_steps
        )

    @property
    def ok(self) -> bool:
        return not (self.failed_steps or self.undefined_steps)

    def summary(self) -> str:
        noun = "scenario" if self.scenario_count == 1 else "scenarios"
        return (
            f"{self.scenario_count} {noun} ({self.passed_steps} passed, {self.failed_steps} failed, "
            f"{self.pending_steps} pending, {self.skipped_steps} skipped, "
            f"{self.undefined_steps} undefined steps)"
        )
