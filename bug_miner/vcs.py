"""
Git access for the history walk.
"""

from contextlib import contextmanager
from dataclasses import dataclass

from git import Repo
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from .errors import RepositoryAccessError


@dataclass
class Revision:
    sha1: str
    message: str


class GitRepository:
    """Thin wrapper over a GitPython Repo; every git failure becomes RepositoryAccessError"""

    def __init__(self, path):
        self.path = str(path)
        try:
            self.repo = Repo(self.path)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise RepositoryAccessError(f"not a git repository: {self.path}") from e

    @property
    def working_tree(self) -> str:
        return self.repo.working_tree_dir

    def current_ref(self) -> str:
        """Current branch name, or the commit sha1 when HEAD is detached"""
        try:
            return self.repo.active_branch.name
        except TypeError:
            pass
        try:
            return self.repo.head.commit.hexsha
        except ValueError as e:
            raise RepositoryAccessError(f"{self.path} has no commits") from e

    def revisions(self) -> list[Revision]:
        """All non-merge commits reachable from HEAD, oldest first"""
        if not self.repo.head.is_valid():
            # Unborn branch: no commits yet
            return []
        try:
            return [
                Revision(commit.hexsha, commit.message)
                for commit in self.repo.iter_commits(
                    'HEAD', no_merges=True, date_order=True, reverse=True
                )
            ]
        except (GitCommandError, ValueError) as e:
            raise RepositoryAccessError(f"cannot list revisions of {self.path}: {e}") from e

    def diff(self, from_sha1: str, to_sha1: str) -> str:
        try:
            # Unquoted paths, so non-ASCII names match the files on disk
            return self.repo.git(c='core.quotePath=false').diff(
                '--no-ext-diff', '--no-color', '--src-prefix=a/', '--dst-prefix=b/',
                from_sha1, to_sha1,
            )
        except GitCommandError as e:
            raise RepositoryAccessError(f"cannot diff {from_sha1}..{to_sha1}: {e}") from e

    def checkout(self, ref: str):
        """Check out ref, discarding local modifications to tracked files"""
        try:
            self.repo.git.checkout('--force', '--quiet', ref)
        except GitCommandError as e:
            raise RepositoryAccessError(f"cannot check out {ref}: {e}") from e

    @contextmanager
    def preserved_ref(self):
        """
        Remember the current ref and check it out again on the way out.

        An unborn branch has nothing to check out, so nothing is restored.
        """
        ref = self.current_ref()
        unborn = not self.repo.head.is_valid()
        try:
            yield ref
        finally:
            if not unborn:
                self.checkout(ref)
