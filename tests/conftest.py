import shutil
from pathlib import Path
from typing import Dict, Generator, List, Optional, Sequence, Set

import git
import pytest

from agent_commit.config import Config
from agent_commit.exceptions import BackendError
from agent_commit.models import AuthorIdentity, EditEvent, LogEntry, RepoStatus
from agent_commit.vcs.base import VersionControlBackend


class FakeBackend(VersionControlBackend):
    """In-memory working tree and index.

    ``failures`` maps a method name to the exception it should raise. Paths in
    ``ignored`` are silently skipped by ``add``, like backend-side ignore rules.
    """

    def __init__(self) -> None:
        self.modified: List[str] = []
        self.created: List[str] = []
        self.deleted: List[str] = []
        self.staged: List[str] = []
        self.ignored: Set[str] = set()
        self.commits: List[Dict[str, object]] = []
        self.config: Dict[str, str] = {"user.name": "Test User", "user.email": "test@example.com"}
        self.failures: Dict[str, Exception] = {}
        self.calls: List[str] = []

    def _maybe_fail(self, name: str) -> None:
        self.calls.append(name)
        if name in self.failures:
            raise self.failures[name]

    async def status(self) -> RepoStatus:
        self._maybe_fail("status")
        return RepoStatus(
            modified=list(self.modified),
            created=list(self.created),
            deleted=list(self.deleted),
            staged=list(self.staged),
        )

    async def add(self, paths: Sequence[str]) -> None:
        self._maybe_fail("add")
        for path in paths:
            if path not in self.ignored and path not in self.staged:
                self.staged.append(path)

    async def commit(self, message: str, author: Optional[AuthorIdentity] = None) -> str:
        self._maybe_fail("commit")
        commit_hash = f"{len(self.commits) + 1:040x}"
        self.commits.append({"message": message, "author": author, "files": list(self.staged),
                             "hash": commit_hash})
        for bucket in (self.modified, self.created, self.deleted):
            bucket[:] = [p for p in bucket if p not in self.staged]
        self.staged.clear()
        return commit_hash

    async def log(self, limit: int = 1) -> List[LogEntry]:
        self._maybe_fail("log")
        entries = []
        for commit in reversed(self.commits[-limit:]):
            author = commit["author"]
            entries.append(LogEntry(commit["hash"], author.name if author else "",
                                    author.email if author else "", commit["message"]))
        return entries

    async def reset(self, mode: str, ref: str) -> None:
        self._maybe_fail("reset")
        if not self.commits:
            raise BackendError("ambiguous argument 'HEAD~1'")
        commit = self.commits.pop()
        self.staged.extend(commit["files"])

    async def get_config(self, key: str) -> Optional[str]:
        self._maybe_fail("get_config")
        return self.config.get(key)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def config() -> Config:
    return Config()


@pytest.fixture
def make_event():
    """Build EditEvents tersely: make_event(0.5, "abc", deleted=0)."""

    def factory(timestamp: float, text: str = "", deleted: int = 0, undo: bool = False) -> EditEvent:
        return EditEvent(timestamp=timestamp, inserted_text=text, deleted_length=deleted, is_undo=undo)

    return factory


@pytest.fixture
def temp_git_repo(tmp_path_factory) -> Generator[Path, None, None]:
    """Create a temporary Git repository with one initial commit."""
    repo_dir = tmp_path_factory.mktemp("git_repo")
    repo = git.Repo.init(repo_dir)

    # Configure git user for commits
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")

    readme = repo_dir / "README.md"
    readme.write_text("# Sample project\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")

    yield repo_dir
    shutil.rmtree(repo_dir, ignore_errors=True)


@pytest.fixture
def git_repo(temp_git_repo: Path) -> git.Repo:
    return git.Repo(temp_git_repo)
