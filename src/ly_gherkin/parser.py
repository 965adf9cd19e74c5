"""
Turn the text of a feature file into a :class:`~ly_gherkin.model.Document`.

Parsing is a single pass over the lines. Each line is classified on its own and then applied to a
:class:`ParserContext` which tracks the scenario being built and what kind of lines are expected.
"""
from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field
from typing import Sequence

from .model import Document, Scenario, ScenarioOutline, Step

logger = logging.getLogger(__name__)

__all__ = ["Line", "LineKind", "MalformedTable", "Mode", "ParserContext", "classify", "parse"]


class LineKind(enum.Enum):
    FEATURE = "feature"
    SCENARIO = "scenario"
    SCENARIO_OUTLINE = "scenario outline"
    EXAMPLES = "examples"
    BACKGROUND = "background"
    STEP = "step"
    TABLE_ROW = "table row"
    UNRECOGNIZED = "unrecognized"


_STEP = re.compile(r"^\s*(?:Given|When|Then|And|But|\*)\s+(.*?)\s*$")
_TABLE_ROW = re.compile(r"^\s*\|(.*)\|\s*$")
_HEADINGS = [
    (LineKind.SCENARIO_OUTLINE, re.compile(r"^\s*Scenario Outline:\s*(.*?)\s*$")),
    (LineKind.SCENARIO, re.compile(r"^\s*Scenario:\s*(.*?)\s*$")),
    (LineKind.FEATURE, re.compile(r"^\s*Feature:\s*(.*?)\s*$")),
    (LineKind.BACKGROUND, re.compile(r"^\s*Background:\s*(.*?)\s*$")),
    (LineKind.EXAMPLES, re.compile(r"^\s*Examples:\s*(.*?)\s*$")),
]


@dataclass(frozen=True)
class Line:
    """
    A classified line.

    ``text`` is the step text with its keyword removed, or the label of a heading. ``cells`` is only
    filled for table rows.
    """

    kind: LineKind
    original: str
    text: str = ""
    cells: Sequence[str] = ()


def classify(line: str) -> Line:
    original = line.strip()
    step = _STEP.match(line)
    if step:
        return Line(LineKind.STEP, original, text=step.group(1))
    for kind, pattern in _HEADINGS:
        heading = pattern.match(line)
        if heading:
            return Line(kind, original, text=heading.group(1))
    cells = _table_cells(line)
    if cells:
        return Line(LineKind.TABLE_ROW, original, cells=cells)
    return Line(LineKind.UNRECOGNIZED, original)


def _table_cells(line: str) -> list[str]:
    row = _TABLE_ROW.match(line)
    if not row:
        return []
    return [cell.strip() for cell in row.group(1).split("|")]


class MalformedTable(ValueError):
    """A table row does not have the same number of cells as the table has columns."""

    def __init__(self, line: str, expected: int, found: int):
        super().__init__(
            f"Wrong number of fields in multi-line step [{line}] - "
            f"expected {expected} fields but found {found}"
        )
        self.line = line
        self.expected = expected
        self.found = found


def _table_row(line: Line, columns: Sequence[str]) -> dict[str, str]:
    if len(line.cells) != len(columns):
        raise MalformedTable(line.original, expected=len(columns), found=len(line.cells))
    return dict(zip(columns, line.cells))


class Mode(enum.Enum):
    NORMAL = "normal"
    BACKGROUND = "background"
    EXAMPLES = "examples"


@dataclass
class ParserContext:
    """State carried from one line to the next."""

    document: Document = field(default_factory=Document)
    mode: Mode = Mode.NORMAL
    current: Scenario | None = None

    def __post_init__(self):
        if self.current is None:
            # Steps before the first heading still belong to a scenario.
            self.start(Scenario())

    def current_step(self) -> Step | None:
        return self.current.last() if self.current is not None else None

    def start(self, scenario: Scenario):
        self.current = scenario
        self.mode = Mode.NORMAL
        if not isinstance(scenario, ScenarioOutline):
            self.document.scenarios.append(scenario)

    def feed(self, raw: str):
        line = classify(raw)
        kind = line.kind
        if kind is LineKind.STEP and self.current is not None and self.mode is Mode.BACKGROUND:
            assert self.document.background is not None
            self.document.background.add_step(Step(line.text, line.original))
        elif kind is LineKind.STEP and self.current is not None:
            self.current.add_step(Step(line.text, line.original))
        elif kind is LineKind.SCENARIO_OUTLINE:
            logger.debug("Scenario outline %r", line.text)
            self.start(ScenarioOutline(heading=line.original))
        elif kind is LineKind.SCENARIO:
            logger.debug("Scenario %r", line.text)
            self.start(Scenario(heading=line.original))
        elif kind is LineKind.FEATURE:
            self.document.feature = line.text
        elif kind is LineKind.BACKGROUND:
            background = Scenario(heading=line.original, background=True)
            self.current = self.document.background = background
            self.mode = Mode.BACKGROUND
        elif kind is LineKind.EXAMPLES:
            self.mode = Mode.EXAMPLES
        elif kind is LineKind.TABLE_ROW and self.mode is Mode.EXAMPLES:
            self._example_row(line)
        elif kind is LineKind.TABLE_ROW:
            self._step_row(line)

    def _example_row(self, line: Line):
        outline = self.current
        if not isinstance(outline, ScenarioOutline):
            return
        if outline.columns is None:
            outline.columns = list(line.cells)
            return
        example = _table_row(line, outline.columns)
        logger.debug("Expanding %r with %s", outline.heading, example)
        self.document.scenarios.append(outline.expand(example))

    def _step_row(self, line: Line):
        step = self.current_step()
        if step is None:
            return
        if not step.columns:
            step.columns = list(line.cells)
        else:
            step.add_row(_table_row(line, step.columns))

    def finish(self) -> Document:
        # The anonymous leading scenario only counts if it has steps.
        self.document.scenarios = [
            scenario for scenario in self.document.scenarios if scenario.steps or scenario.heading
        ]
        return self.document


def parse(text: str) -> Document:
    """Parse a whole feature file. Raises :class:`MalformedTable` before anything runs."""
    context = ParserContext()
    for raw in text.split("\n"):
        context.feed(raw)
    return context.finish()
