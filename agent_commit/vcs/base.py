from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from agent_commit.models import AuthorIdentity, LogEntry, RepoStatus


class VersionControlBackend(ABC):
    """Asynchronous contract the orchestrator drives.

    Every method may raise :class:`~agent_commit.exceptions.BackendError`; the
    caller treats the store as shared and re-reads it before acting.
    """

    @abstractmethod
    async def status(self) -> RepoStatus:
        pass

    @abstractmethod
    async def add(self, paths: Sequence[str]) -> None:
        pass

    @abstractmethod
    async def commit(self, message: str, author: Optional[AuthorIdentity] = None) -> str:
        """Commit the index and return the new commit hash."""

    @abstractmethod
    async def log(self, limit: int = 1) -> List[LogEntry]:
        pass

    @abstractmethod
    async def reset(self, mode: str, ref: str) -> None:
        pass

    @abstractmethod
    async def get_config(self, key: str) -> Optional[str]:
        pass
