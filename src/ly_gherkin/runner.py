from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import reduce
from operator import add
from pathlib import Path
from typing import Callable, Iterable, Pattern, Protocol

from .discovery import DEFAULT_INCLUDE, find_feature_files
from .model import Document, Scenario, Step, StepOutcome
from .parser import MalformedTable, parse
from .report import Report
from .steps import CaptureError, StepDefinition, StepHandler, StepPending, StepRegistry

logger = logging.getLogger(__name__)

__all__ = ["FeatureFileError", "Hook", "Runner", "TextSink"]

Hook = Callable[[], object]


class FeatureFileError(Exception):
    """A feature file stopped the run with a malformed table or a capture overrun."""

    def __init__(self, path: Path, error: Exception):
        super().__init__(f"{path.as_posix()}: {error}")
        self.path = path
        self.error = error


class TextSink(Protocol):
    def write(self, text: str, /) -> object:
        ...


_TRACE_PREFIX = {
    StepOutcome.PASSED: "        - ",
    StepOutcome.FAILED: "FAILED  - ",
    StepOutcome.PENDING: "PENDING - ",
    StepOutcome.SKIPPED: "Skipped - ",
    StepOutcome.UNDEFINED: "UNDEFINED - ",
}


@dataclass
class Runner:
    """
    Parse feature files and run their scenarios against registered step definitions.

    Nothing is shared between runners; create one, register step definitions and hooks on it, then
    call :meth:`execute` once per feature file. Trace lines go to ``output`` when it is set.
    """

    output: TextSink | None = None
    registry: StepRegistry = field(default_factory=StepRegistry)
    _set_up: Hook | None = field(default=None, init=False, repr=False)
    _tear_down: Hook | None = field(default=None, init=False, repr=False)

    def register_step_def(self, pattern: str, handler: StepHandler) -> StepDefinition:
        return self.registry.register(pattern, handler)

    def step(self, pattern: str) -> Callable[[StepHandler], StepHandler]:
        return self.registry.step(pattern)

    given = when = then = and_ = but = step

    def set_up(self, hook: Hook) -> Hook:
        """Call ``hook`` at the start of every scenario, before the background."""
        self._set_up = hook
        return hook

    def tear_down(self, hook: Hook) -> Hook:
        """Call ``hook`` at the end of every scenario."""
        self._tear_down = hook
        return hook

    def execute(self, text: str) -> Report:
        """Parse and run one feature file."""
        return self.execute_document(parse(text))

    def execute_document(self, document: Document) -> Report:
        logger.debug("Running feature %r", document.feature)
        reports = (
            self.execute_scenario(scenario, document.background)
            for scenario in document.scenarios
        )
        return reduce(add, reports, Report())

    def run(self, paths: Iterable[Path], include: Pattern[str] = DEFAULT_INCLUDE) -> Report:
        """
        Run every feature file found in ``paths``.

        Files named directly are run as they are when they match ``include``, so an already
        discovered list can be passed back in. A malformed table or a capture overrun stops the
        run with a :class:`FeatureFileError` naming the file.
        """
        report = Report()
        for path in find_feature_files(paths, include):
            logger.debug("Executing %s", path)
            try:
                report += self.execute(path.read_text(encoding="utf8"))
            except (MalformedTable, CaptureError) as e:
                raise FeatureFileError(path, e) from e
        return report

    def execute_scenario(self, scenario: Scenario, background: Scenario | None = None) -> Report:
        report = Report(scenario_count=1)
        self._call_hook(self._set_up)
        try:
            pending = False
            if background is not None:
                self._heading(background.heading)
                # Every background step runs, even after one goes pending.
                for step in [step.fresh() for step in background.steps]:
                    outcome = self._execute_step(step)
                    pending = pending or outcome is StepOutcome.PENDING
                    report += Report.for_outcome(outcome)
            self._heading(scenario.heading)
            for step in scenario.steps:
                if pending:
                    step.outcome = StepOutcome.SKIPPED
                    self._trace(step, [])
                else:
                    pending = self._execute_step(step) is StepOutcome.PENDING
                assert step.outcome is not None
                report += Report.for_outcome(step.outcome)
        finally:
            self._call_hook(self._tear_down)
        return report

    def _execute_step(self, step: Step) -> StepOutcome:
        errors_before = len(step.errors)
        try:
            matched = self.registry.dispatch(step)
        except StepPending:
            step.outcome = StepOutcome.PENDING
        else:
            if not matched:
                step.outcome = StepOutcome.UNDEFINED
            elif len(step.errors) > errors_before:
                step.outcome = StepOutcome.FAILED
            else:
                step.outcome = StepOutcome.PASSED
        self._trace(step, step.errors[errors_before:])
        return step.outcome

    def _call_hook(self, hook: Hook | None):
        if hook is not None:
            logger.debug("Calling %s", getattr(hook, "__name__", hook))
            hook()

    def _trace(self, step: Step, errors: Iterable[str]):
        assert step.outcome is not None
        self._emit(_TRACE_PREFIX[step.outcome] + (step.original or step.text))
        for error in errors:
            self._emit(error)

    def _heading(self, heading: str):
        # Steps before the first heading belong to an anonymous scenario.
        if heading:
            self._emit(heading)

    def _emit(self, line: str):
        if self.output is not None:
            self.output.write(line + "\n")
