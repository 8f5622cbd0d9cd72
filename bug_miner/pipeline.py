"""
Revision-mining pipeline: walk history, attribute changes, record facts.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable

from tqdm import tqdm

from .attribution import attribute_diff, parse_diff
from .classifier import classify_bug_fix
from .config import MIN_REVISIONS
from .discovery import find_files
from .functions import load_function_index
from .store import FactStore
from .vcs import GitRepository, Revision


class MinerState(Enum):
    IDLE = 'idle'
    WALKING = 'walking'
    DIFFING = 'diffing'
    CHECKED_OUT = 'checked-out'
    ATTRIBUTING = 'attributing'
    CLASSIFYING = 'classifying'
    RECORDING = 'recording'
    RESTORING = 'restoring'
    DONE = 'done'
    ABORTED = 'aborted'


@dataclass
class MiningResult:
    processed: int = 0
    skipped: int = 0
    cancelled: bool = False


class Miner:
    """
    Walks a repository's history and records one set of facts per revision.

    The walk checks out every mined revision in the shared working tree, so
    two miners must never run against the same checkout at once. Whatever
    happens, the ref that was checked out before the walk is checked out
    again before run() returns or raises.

    Args:
        repository: GitRepository (or anything with the same methods)
        store: FactStore receiving the facts
        finder: callable returning the repository-relative paths to mine,
                evaluated after each checkout
        index_factory: callable mapping a relative path to a FunctionIndex;
                       defaults to indexing the checked-out file on disk
    """

    def __init__(
        self,
        repository: GitRepository,
        store: FactStore,
        finder: Callable[[], list[str]],
        index_factory=None,
        progress: bool = False,
        quiet: bool = False,
    ):
        self.repository = repository
        self.store = store
        self.finder = finder
        self.index_factory = index_factory or self._load_index
        self.progress = progress
        self.quiet = quiet
        self.state = MinerState.IDLE

    def _log(self, message: str):
        if not self.quiet:
            print(message, flush=True)

    def _load_index(self, path: str):
        return load_function_index(Path(self.repository.working_tree) / path)

    def run(self, should_cancel: Callable[[], bool] | None = None) -> MiningResult:
        result = MiningResult()
        try:
            with self.repository.preserved_ref():
                try:
                    self._walk(result, should_cancel)
                finally:
                    self.state = MinerState.RESTORING
        except Exception:
            self.state = MinerState.ABORTED
            raise

        self.state = MinerState.DONE
        return result

    def _walk(self, result: MiningResult, should_cancel):
        self.state = MinerState.WALKING
        revisions = self.repository.revisions()
        count = len(revisions)
        self._log(f"  Found {count} revisions")

        if count < MIN_REVISIONS:
            return

        # The newest revision is never mined; it only bounds the walk
        with tqdm(total=count - 2, desc='revisions', disable=not self.progress) as bar:
            for i in range(1, count - 1):
                if should_cancel is not None and should_cancel():
                    self._log(f"  Cancelled after {result.processed} revisions")
                    result.cancelled = True
                    return

                if self.store.has_revision(revisions[i].sha1):
                    result.skipped += 1
                else:
                    self._process(revisions[i - 1], revisions[i])
                    result.processed += 1

                bar.update(1)

    def _process(self, previous: Revision, revision: Revision):
        self.state = MinerState.DIFFING
        entries = parse_diff(self.repository.diff(previous.sha1, revision.sha1))

        self.state = MinerState.CHECKED_OUT
        self.repository.checkout(revision.sha1)
        relevant_files = set(self.finder())

        self.state = MinerState.ATTRIBUTING
        changes = attribute_diff(entries, relevant_files, self.index_factory, quiet=self.quiet)

        self.state = MinerState.CLASSIFYING
        bug_id = classify_bug_fix(revision.message)

        self.state = MinerState.RECORDING
        self.store.record_revision(
            revision.sha1,
            changes.files,
            changes.functions,
            bug_id,
            message=revision.message,
        )
        self.state = MinerState.WALKING


def mine_repository(
    database,
    repository,
    names=None,
    names_exclude=None,
    exclude=None,
    progress: bool = False,
    quiet: bool = False,
    should_cancel=None,
) -> MiningResult:
    """Mine a repository on disk into a SQLite database"""
    if not quiet:
        print(f"\nProcessing: {Path(repository).resolve().name}", flush=True)

    git_repository = GitRepository(repository)
    root = git_repository.working_tree

    with FactStore(database) as store:
        miner = Miner(
            git_repository,
            store,
            finder=lambda: find_files(root, names, names_exclude, exclude),
            progress=progress,
            quiet=quiet,
        )
        result = miner.run(should_cancel)

        if not quiet:
            counts = store.counts()
            print(f"  Recorded {result.processed} revisions ({result.skipped} already known)")
            print(f"  Store: {counts['revisions']} revisions, {counts['bugs']} bug fixes, "
                  f"{counts['files']} files, {counts['functions']} functions")

    return result
