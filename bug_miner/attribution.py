"""
Attribution of diff lines to the files and functions they change.
"""

from dataclasses import dataclass, field
from typing import Callable, Iterable

import unidiff
from unidiff.patch import Line as PatchLine

from .errors import DiffParseError, StructuralAnalysisError
from .functions import FunctionIndex, NullFunctionIndex

ADDED = 'added'
REMOVED = 'removed'
UNCHANGED = 'unchanged'


def _line_type(line: PatchLine) -> str | None:
    if line.is_added:
        return ADDED
    if line.is_removed:
        return REMOVED
    if line.is_context:
        return UNCHANGED
    # "\ No newline at end of file" markers occupy no line
    return None


@dataclass
class DiffLine:
    type: str
    text: str = ''


@dataclass
class Hunk:
    """A run of diff lines; start is the first post-image line number"""
    start: int
    lines: list[DiffLine] = field(default_factory=list)


@dataclass
class DiffEntry:
    from_path: str
    hunks: list[Hunk] = field(default_factory=list)


@dataclass
class ChangeSet:
    """Distinct files and functions touched by one revision"""
    files: set[str] = field(default_factory=set)
    functions: set[str] = field(default_factory=set)


def parse_diff(text: str) -> list[DiffEntry]:
    """Parse `git diff` output into DiffEntry records"""
    try:
        patch = unidiff.PatchSet(text)
    except unidiff.UnidiffParseError as e:
        raise DiffParseError(str(e)) from e

    entries = []
    for patched_file in patch:
        hunks = []
        for hunk in patched_file:
            lines = [
                DiffLine(_line_type(line), line.value)
                for line in hunk
                if _line_type(line) is not None
            ]
            hunks.append(Hunk(hunk.target_start, lines))
        entries.append(DiffEntry(patched_file.source_file, hunks))
    return entries


def normalize_path(path: str) -> str:
    """Strip the a/ or b/ prefix git puts in front of diff paths"""
    if path[:2] in ('a/', 'b/'):
        return path[2:]
    return path


def attribute_hunk(hunk: Hunk, index: FunctionIndex) -> set[str]:
    """
    Walk a hunk with a post-image line counter and collect the functions
    owning each added or removed line.

    Removed lines do not exist in the post-image, so they are looked up at
    the current counter without advancing it.
    """
    functions = set()
    line_nr = hunk.start
    for line in hunk.lines:
        if line.type != UNCHANGED:
            function = index.function_at(line_nr)
            if function is not None:
                functions.add(function)
        if line.type != REMOVED:
            line_nr += 1
    return functions


def attribute_diff(
    entries: Iterable[DiffEntry],
    relevant_files: set[str],
    index_factory: Callable[[str], FunctionIndex],
    quiet: bool = False,
) -> ChangeSet:
    """
    Collect changed files and functions for the entries whose source path is
    in relevant_files.

    index_factory is called once per qualifying file with its
    repository-relative path and must describe the file as currently
    checked out.
    """
    changes = ChangeSet()

    for entry in entries:
        path = normalize_path(entry.from_path)
        if path not in relevant_files:
            continue

        changes.files.add(path)

        try:
            index = index_factory(path)
        except StructuralAnalysisError as e:
            if not quiet:
                print(f"  Skipping function attribution for {path}: {e}", flush=True)
            index = NullFunctionIndex()

        for hunk in entry.hunks:
            changes.functions |= attribute_hunk(hunk, index)

    return changes
