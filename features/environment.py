"""Behave hooks that give every scenario a fresh temporary project."""
from __future__ import annotations

from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Iterable

from behave import fixture, use_fixture
from behave.model import Scenario

from features.steps.gherkin_env import GherkinContext, GherkinEnvironment


@fixture
def gherkin_environment(context: GherkinContext) -> Iterable[GherkinEnvironment]:
    with TemporaryDirectory() as tmp_dir:
        gherkin = GherkinEnvironment(_path=Path(tmp_dir), verbose=False, project_files={})
        context.gherkin = gherkin
        yield gherkin


def before_scenario(context: GherkinContext, _scenario: Scenario):
    use_fixture(gherkin_environment, context)
