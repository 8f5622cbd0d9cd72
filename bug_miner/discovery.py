"""
Discovery of the source files worth mining under a repository root.
"""

import os
from fnmatch import fnmatch
from pathlib import Path, PurePosixPath

from .config import ALWAYS_EXCLUDED_DIRS, DEFAULT_NAMES, DEFAULT_NAMES_EXCLUDE


def split_csv(value) -> list[str]:
    """Turn "a, b,c" into ['a', 'b', 'c']; lists pass through"""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(',')
    return [item.strip() for item in value if item and item.strip()]


def find_files(root, names=None, names_exclude=None, exclude=None) -> list[str]:
    """
    List files under root as sorted repository-relative POSIX paths.

    A file qualifies when its name matches one of the names globs and none
    of the names_exclude globs, and no directory on its path is listed in
    exclude (by name or by path relative to root).
    """
    root = Path(root)
    names = DEFAULT_NAMES if names is None else names
    names_exclude = DEFAULT_NAMES_EXCLUDE if names_exclude is None else names_exclude
    excluded = set(ALWAYS_EXCLUDED_DIRS)
    excluded.update(str(PurePosixPath(d)) for d in exclude or [])

    found = []
    for dirpath, dirnames, filenames in os.walk(root):
        relative_dir = PurePosixPath(Path(dirpath).relative_to(root).as_posix())
        dirnames[:] = sorted(
            d for d in dirnames
            if d not in excluded and str(relative_dir / d) not in excluded
        )
        for filename in filenames:
            if not any(fnmatch(filename, pattern) for pattern in names):
                continue
            if any(fnmatch(filename, pattern) for pattern in names_exclude):
                continue
            found.append(str(relative_dir / filename))

    return sorted(found)
