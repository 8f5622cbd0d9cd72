"""
Exception hierarchy for the mining pipeline.
"""


class BugMinerError(Exception):
    """Base class for every error the pipeline surfaces"""


class RepositoryAccessError(BugMinerError):
    """A VCS command failed: bad ref, failed checkout, not a repository"""


class DiffParseError(BugMinerError):
    """Diff text could not be parsed into files and hunks"""


class StructuralAnalysisError(BugMinerError):
    """
    A file could not be read or parsed at the checked-out snapshot.

    Recoverable: the file still counts as changed, but none of its lines
    are attributed to a function.
    """


class StoreError(BugMinerError):
    """The fact store rejected a write or could not be reached"""
