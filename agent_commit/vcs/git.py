"""Git backend built on the ``git`` command line.

Commands run in a worker thread through :class:`SubprocessHandler` so the event
loop driving the classifier is never blocked by a slow repository.
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from agent_commit.exceptions import BackendError, BackendUnavailableError
from agent_commit.models import AuthorIdentity, LogEntry, RepoStatus
from agent_commit.utils import SubprocessHandler
from agent_commit.vcs.base import VersionControlBackend

logger = logging.getLogger(__name__)

FIELD_SEP = "\x1f"
NO_COMMITS_MARKERS = ("does not have any commits", "unknown revision", "bad default revision")


def parse_porcelain_status(output: str) -> RepoStatus:
    """Parse ``git status --porcelain=v1 -z`` output.

    Untracked files are reported as created. For renames only the new path enters
    the change set.
    """
    status = RepoStatus()
    entries = output.split("\0")
    i = 0
    while i < len(entries):
        entry = entries[i]
        i += 1
        if len(entry) < 4:
            continue
        x, y, path = entry[0], entry[1], entry[3:]

        if x == "?" and y == "?":
            status.created.append(path)
            continue
        if x == "!":
            continue

        if x in "RC":
            old_path = entries[i] if i < len(entries) else ""
            i += 1
            if x == "R":
                status.renamed.append((old_path, path))
            else:
                status.created.append(path)
        elif x == "A":
            status.created.append(path)
        elif "D" in (x, y):
            status.deleted.append(path)
        elif x in "MTU" or y in "MTU":
            status.modified.append(path)

        if x not in " ?!":
            status.staged.append(path)

    return status


class GitBackend(VersionControlBackend):
    """Version-control backend for the repository containing ``root``."""

    def __init__(self, root: Union[str, Path] = ".", handler: Optional[SubprocessHandler] = None,
                 git_executable: str = "git") -> None:
        self.root = Path(root)
        self.handler = handler or SubprocessHandler()
        self.git_executable = git_executable
        self._checked = False

    def run_git_command(self, args: Sequence[str], check: bool = True) -> Tuple[str, str, int]:
        """Run ``git <args>`` synchronously inside the repository.

        Raises:
            BackendUnavailableError: If git cannot be executed.
            BackendError: On timeout, or on a non-zero exit when ``check`` is set.
        """
        command = [self.git_executable, *args]
        try:
            stdout, stderr, code = self.handler.run_command(command, cwd=str(self.root))
        except FileNotFoundError as e:
            raise BackendUnavailableError(f"git executable not found: {e}", command=command) from e
        except NotADirectoryError as e:
            raise BackendUnavailableError(f"Repository path is not a directory: {self.root}",
                                          command=command) from e
        except TimeoutError as e:
            raise BackendError(str(e), command=command) from e

        if check and code != 0:
            raise BackendError(
                f"git {args[0]} failed: {stderr.strip() or stdout.strip() or f'exit code {code}'}",
                command=command,
                returncode=code,
            )
        return stdout, stderr, code

    async def _git(self, *args: str, check: bool = True) -> Tuple[str, str, int]:
        if not self._checked:
            await asyncio.to_thread(self._ensure_repository)
        return await asyncio.to_thread(self.run_git_command, args, check)

    def _ensure_repository(self) -> None:
        if not self.root.is_dir():
            raise BackendUnavailableError(f"Path does not exist: {self.root}")
        stdout, stderr, code = self.run_git_command(["rev-parse", "--is-inside-work-tree"], check=False)
        if code != 0 or stdout.strip() != "true":
            raise BackendUnavailableError(f"Not a git repository: {self.root} ({stderr.strip()})")
        self._checked = True

    async def status(self) -> RepoStatus:
        stdout, _, _ = await self._git("status", "--porcelain=v1", "-z", "--untracked-files=all")
        return parse_porcelain_status(stdout)

    async def add(self, paths: Sequence[str]) -> None:
        if not paths:
            return
        await self._git("add", "-A", "--", *paths)
        logger.debug("Staged %d files: %s", len(paths), list(paths))

    async def commit(self, message: str, author: Optional[AuthorIdentity] = None) -> str:
        args = ["commit", "--quiet", "-m", message]
        if author is not None:
            args.extend(["--author", author.formatted()])
        await self._git(*args)
        stdout, _, _ = await self._git("rev-parse", "HEAD")
        return stdout.strip()

    async def log(self, limit: int = 1) -> List[LogEntry]:
        fmt = FIELD_SEP.join(["%H", "%an", "%ae", "%s"])
        stdout, stderr, code = await self._git("log", f"-n{limit}", f"--format={fmt}", check=False)
        if code != 0:
            if any(marker in stderr for marker in NO_COMMITS_MARKERS):
                return []
            raise BackendError(f"git log failed: {stderr.strip()}", returncode=code)

        entries = []
        for line in stdout.splitlines():
            parts = line.split(FIELD_SEP)
            if len(parts) == 4:
                entries.append(LogEntry(*parts))
        return entries

    async def reset(self, mode: str, ref: str) -> None:
        await self._git("reset", f"--{mode}", ref)

    async def get_config(self, key: str) -> Optional[str]:
        stdout, stderr, code = await self._git("config", "--get", key, check=False)
        if code == 1:
            return None
        if code != 0:
            raise BackendError(f"git config failed: {stderr.strip()}", returncode=code)
        return stdout.strip() or None
