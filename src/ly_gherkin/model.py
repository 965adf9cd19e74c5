from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Mapping

__all__ = ["Document", "Scenario", "ScenarioOutline", "Step", "StepOutcome"]

_PLACEHOLDER = re.compile(r"<([^<>]+)>")


class StepOutcome(enum.Enum):
    PASSED = "passed"
    FAILED = "failed"
    PENDING = "pending"
    SKIPPED = "skipped"
    UNDEFINED = "undefined"


@dataclass
class Step:
    """A single step line with any table attached to it."""

    text: str
    original: str = ""
    columns: list[str] = field(default_factory=list)
    rows: list[dict[str, str]] = field(default_factory=list)
    outcome: StepOutcome | None = None
    errors: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        return self.text

    @property
    def is_pending(self) -> bool:
        return self.outcome is StepOutcome.PENDING

    def add_row(self, row: dict[str, str]):
        self.rows.append(row)

    def fresh(self) -> Step:
        """Copy the step without any execution results."""
        return Step(
            text=self.text,
            original=self.original,
            columns=list(self.columns),
            rows=[dict(row) for row in self.rows],
        )


@dataclass
class Scenario:
    heading: str = ""
    steps: list[Step] = field(default_factory=list)
    background: bool = False

    def add_step(self, step: Step):
        self.steps.append(step)

    def last(self) -> Step | None:
        return self.steps[-1] if self.steps else None


@dataclass
class ScenarioOutline(Scenario):
    """
    A templated scenario.

    Steps may contain ``<key>`` placeholders. ``columns`` stays ``None`` until the first row of an
    ``Examples:`` table names them.
    """

    columns: list[str] | None = None

    def expand(self, example: Mapping[str, str]) -> Scenario:
        """Create an ordinary scenario with the placeholders of every step replaced."""

        def substitute(value: str) -> str:
            return _PLACEHOLDER.sub(lambda m: example.get(m.group(1), m.group(0)), value)

        steps = [
            Step(
                text=substitute(step.text),
                original=substitute(step.original),
                columns=list(step.columns),
                rows=[{key: substitute(cell) for key, cell in row.items()} for row in step.rows],
            )
            for step in self.steps
        ]
        return Scenario(heading=self.heading, steps=steps)


@dataclass
class Document:
    """Everything parsed out of one feature file."""

    feature: str = ""
    scenarios: list[Scenario] = field(default_factory=list)
    background: Scenario | None = None
