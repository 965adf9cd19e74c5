from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, ClassVar, Mapping, Pattern, Sequence

import toml

from .discovery import DEFAULT_INCLUDE

__all__ = ["GherkinConfiguration", "NoProjectFile"]


@dataclass
class GherkinConfiguration:
    """Where to find feature files and step definitions, read from ``[tool.gherkin]``."""

    name: str
    features: Sequence[Path]
    steps: Sequence[Path]
    include: Pattern[str] = DEFAULT_INCLUDE
    _config_file: ClassVar[Path] = Path("pyproject.toml")

    @classmethod
    def get_config(cls) -> GherkinConfiguration:
        pyproject = cls.get_configfile()
        gherkin_config: Mapping[str, Any] = toml.load(pyproject).get("tool", {}).get("gherkin", {})
        root = pyproject.parent
        include = re.compile(gherkin_config.get("include", DEFAULT_INCLUDE.pattern))
        features = [root / path for path in gherkin_config.get("features", ["features"])]
        steps = [root / path for path in gherkin_config.get("steps", ["features/steps"])]
        return GherkinConfiguration(
            name=root.name, features=features, steps=steps, include=include
        )

    @classmethod
    def get_configfile(cls) -> Path:
        cwd = Path.cwd().absolute()
        paths = [cwd] + list(cwd.parents)
        for path in paths:
            pyproject = path / cls._config_file
            if pyproject.exists() and pyproject.is_file():
                break
        else:
            raise NoProjectFile(cls._config_file, search_paths=paths)
        return pyproject


class NoProjectFile(Exception):
    """No project file could be found."""

    def __init__(self, proj_filename: Path, search_paths: Sequence[Path]):
        self.proj_filename = proj_filename.as_posix()
        self.search_paths = [path.as_posix() for path in search_paths]
