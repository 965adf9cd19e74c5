#!/usr/bin/env python
"""
Run feature files against the step definitions of a project.

Configuration is read from the ``[tool.gherkin]`` table of the nearest ``pyproject.toml``:

* ``features``: files or directories with feature files
* ``include``: regular expression a feature file path must match
* ``steps``: step definition files, or directories of them, each defining ``register(runner)``
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Sequence

import click

from .config import GherkinConfiguration, NoProjectFile
from .discovery import find_feature_files
from .loader import StepModuleError, load_step_modules
from .runner import FeatureFileError, Runner

logger = logging.getLogger(__name__)

__all__ = ["main"]


@click.command()
@click.option("--verbose", is_flag=True, default=False)
@click.option("--quiet", is_flag=True, default=False, help="Only print the summary")
@click.argument("files", nargs=-1, type=click.Path(path_type=Path))
@click.version_option(package_name="ly-gherkin")
def main(verbose: bool, quiet: bool, files: Sequence[Path]):
    if verbose:
        logging.basicConfig()
        logging.getLogger("ly_gherkin").setLevel(logging.DEBUG)

    try:
        config = GherkinConfiguration.get_config()
    except NoProjectFile as e:
        click.echo(
            f'"{e.proj_filename}" could not be located in the search paths: {e.search_paths!s}'
        )
        sys.exit(1)

    feature_files = find_feature_files(files or config.features, config.include)
    if not feature_files:
        click.echo("No feature files found.")
        sys.exit(0)

    runner = Runner(output=None if quiet else click.get_text_stream("stdout"))
    try:
        load_step_modules(runner, config.steps)
    except StepModuleError as e:
        click.echo(f"Could not load step definitions from {e}")
        sys.exit(1)

    try:
        report = runner.run(feature_files, config.include)
    except FeatureFileError as e:
        click.echo(str(e))
        sys.exit(1)
    click.echo(report.summary())
    if not report.ok:
        sys.exit(1)
