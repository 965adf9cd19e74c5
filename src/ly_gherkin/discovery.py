from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, Pattern, Sequence

__all__ = ["DEFAULT_INCLUDE", "find_feature_files"]

DEFAULT_INCLUDE = re.compile(r"\.feature$")


def find_feature_files(
    paths: Iterable[Path], include: Pattern[str] = DEFAULT_INCLUDE
) -> Sequence[Path]:
    """Recursively search directories; files are taken as they are if they match ``include``."""
    found: list[Path] = []
    for part in paths:
        candidates = sorted(part.rglob("*")) if part.is_dir() else [part]
        for file_ in candidates:
            if include.search(file_.as_posix()) and file_.is_file() and file_ not in found:
                found.append(file_)
    return found
