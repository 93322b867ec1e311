"""Version-control backends."""

from agent_commit.vcs.base import VersionControlBackend
from agent_commit.vcs.git import GitBackend, parse_porcelain_status

__all__ = ["VersionControlBackend", "GitBackend", "parse_porcelain_status"]
