from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, NoReturn, Pattern, Sequence

from .model import Step

logger = logging.getLogger(__name__)

__all__ = [
    "CaptureError",
    "StepDefinition",
    "StepHandler",
    "StepPending",
    "StepRegistry",
    "World",
    "pending",
]


class StepPending(Exception):
    """The step definition is not finished yet."""


class CaptureError(IndexError):
    """A step definition asked for more regex captures than its pattern has."""


def pending() -> NoReturn:
    """Mark the running step, and the rest of its scenario, as pending."""
    raise StepPending()


class World:
    """Passed to each step definition."""

    def __init__(self, params: Sequence[str], rows: Sequence[dict[str, str]]):
        self._params = list(params)
        self._index = 0
        self.rows = list(rows)
        self.errors: list[str] = []

    def param(self) -> str:
        """Return the next regex capture group, starting from the first."""
        if self._index >= len(self._params):
            raise CaptureError("param() called too many times.")
        value = self._params[self._index]
        self._index += 1
        return value

    def error(self, message: str, *args: Any):
        """Record a diagnostic. The step is reported as failed."""
        self.errors.append(message % args if args else message)

    @property
    def failed(self) -> bool:
        return bool(self.errors)


StepHandler = Callable[[World], Any]


@dataclass(frozen=True)
class StepDefinition:
    pattern: Pattern[str]
    handler: StepHandler

    def __str__(self) -> str:
        return self.pattern.pattern

    def match(self, text: str) -> re.Match[str] | None:
        return self.pattern.search(text)


@dataclass
class StepRegistry:
    """Step definitions in registration order. The first match wins."""

    definitions: list[StepDefinition] = field(default_factory=list)

    def register(self, pattern: str, handler: StepHandler) -> StepDefinition:
        definition = StepDefinition(re.compile(pattern), handler)
        self.definitions.append(definition)
        return definition

    def step(self, pattern: str) -> Callable[[StepHandler], StepHandler]:
        def decorator(handler: StepHandler) -> StepHandler:
            self.register(pattern, handler)
            return handler

        return decorator

    given = when = then = and_ = but = step

    def find(self, text: str) -> tuple[StepDefinition, re.Match[str]] | None:
        for definition in self.definitions:
            match = definition.match(text)
            if match:
                return definition, match
        return None

    def dispatch(self, step: Step) -> bool:
        """
        Run the first step definition matching the step.

        Diagnostics written by the handler are copied onto the step, even when it raises.
        Returns False, without calling anything, when no definition matches.
        """
        found = self.find(step.text)
        if found is None:
            logger.debug("No step definition for %r", step.text)
            step.errors.append(f'Could not find step definition for "{step.original or step.text}"')
            return False
        definition, match = found
        world = World(match.groups(default=""), step.rows)
        try:
            definition.handler(world)
        finally:
            step.errors.extend(world.errors)
        return True
