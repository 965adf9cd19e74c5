from __future__ import annotations

import hashlib
import importlib.util
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Iterable, Iterator, Sequence

from .runner import Runner

logger = logging.getLogger(__name__)

__all__ = ["StepModuleError", "load_step_modules"]


class StepModuleError(Exception):
    """A step module could not be loaded or has nothing to register."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"{path.as_posix()}: {reason}")
        self.path = path
        self.reason = reason


def _step_files(paths: Iterable[Path]) -> Iterator[Path]:
    for path in paths:
        if path.is_dir():
            yield from (file_ for file_ in sorted(path.glob("*.py")) if file_.name[0] != "_")
        elif path.is_file():
            yield path


def _import(path: Path) -> ModuleType:
    # Step files are not part of an importable package, so give each a unique private name.
    digest = hashlib.md5(path.resolve().as_posix().encode("utf8")).hexdigest()[:12]
    spec = importlib.util.spec_from_file_location(f"_gherkin_steps_{path.stem}_{digest}", path)
    if spec is None or spec.loader is None:
        raise StepModuleError(path, "not a python module")
    module = importlib.util.module_from_spec(spec)
    # Dataclasses and pickling look the module up by name while it executes.
    sys.modules[spec.name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        del sys.modules[spec.name]
        raise StepModuleError(path, f"{type(e).__name__}: {e}") from e
    return module


def load_step_modules(runner: Runner, paths: Iterable[Path]) -> Sequence[ModuleType]:
    """Import every step file and call its ``register(runner)``."""
    modules: list[ModuleType] = []
    for path in _step_files(paths):
        logger.debug("Loading step definitions from %s", path)
        module = _import(path)
        register = getattr(module, "register", None)
        if not callable(register):
            raise StepModuleError(path, "no register(runner) function")
        register(runner)
        modules.append(module)
    return modules
