"""
Bug Miner - Bug-Prone Code from Commit History
==============================================

Walks a Git repository's history, attributes every changed line to the file
and function it belongs to, links revisions to the bugs their messages say
they fix, and stores the facts in SQLite.

Key insight: the code that changed in bug-fix commits before is where the
next bug fix will land. The store's views rank files and functions by how
often they were changed, changed in bug fixes, and changed together.
"""

from .config import (
    DEFAULT_NAMES,
    BUG_FIX_PATTERN,
    MIN_REVISIONS,
)

from .errors import (
    BugMinerError,
    RepositoryAccessError,
    DiffParseError,
    StructuralAnalysisError,
    StoreError,
)

from .classifier import classify_bug_fix

from .functions import (
    FunctionIndex,
    NullFunctionIndex,
    PythonFunctionIndex,
    function_index_for,
    load_function_index,
)

from .attribution import (
    ChangeSet,
    DiffEntry,
    DiffLine,
    Hunk,
    attribute_diff,
    parse_diff,
)

from .store import FactStore
from .vcs import GitRepository, Revision
from .discovery import find_files

from .pipeline import (
    Miner,
    MinerState,
    MiningResult,
    mine_repository,
)

__version__ = "1.0.0"

__all__ = [
    # Config
    "DEFAULT_NAMES",
    "BUG_FIX_PATTERN",
    "MIN_REVISIONS",
    # Errors
    "BugMinerError",
    "RepositoryAccessError",
    "DiffParseError",
    "StructuralAnalysisError",
    "StoreError",
    # Classification
    "classify_bug_fix",
    # Structural analysis
    "FunctionIndex",
    "NullFunctionIndex",
    "PythonFunctionIndex",
    "function_index_for",
    "load_function_index",
    # Attribution
    "ChangeSet",
    "DiffEntry",
    "DiffLine",
    "Hunk",
    "attribute_diff",
    "parse_diff",
    # Storage
    "FactStore",
    # Repository access
    "GitRepository",
    "Revision",
    "find_files",
    # Pipeline
    "Miner",
    "MinerState",
    "MiningResult",
    "mine_repository",
]
