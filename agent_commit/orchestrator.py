"""Commit orchestration.

Turns a trigger into at most one commit: eligibility, change detection,
exclusion filtering, staging, message resolution, authorship and the commit
itself. Every failure is returned as a :class:`CommitOutcome`; nothing raised
by the backend or the message generator escapes :meth:`CommitOrchestrator.on_trigger`.
"""

import asyncio
import logging
from typing import Callable, Dict, List, Optional, Sequence

import pathspec

from agent_commit.config import Config
from agent_commit.exceptions import BackendError, BackendUnavailableError, GeneratorError
from agent_commit.messages import AIMessageGenerator, generate_fallback_message
from agent_commit.models import (
    AuthorIdentity,
    ClassificationMode,
    CommitErrorKind,
    CommitOutcome,
    CommitPolicy,
    RepoStatus,
)
from agent_commit.vcs.base import VersionControlBackend

logger = logging.getLogger(__name__)

DEFAULT_AUTHOR_NAME = "Unknown"
DEFAULT_AUTHOR_EMAIL = "unknown@example.com"


def filter_excluded(paths: Sequence[str], patterns: Sequence[str]) -> List[str]:
    """Drop paths matching any gitignore-style exclusion pattern."""
    if not patterns:
        return list(paths)
    spec = pathspec.PathSpec.from_lines("gitwildmatch", patterns)
    return [p for p in paths if not spec.match_file(p)]


class CommitOrchestrator:
    """Stages and commits agent-attributed changes for one workspace."""

    def __init__(self, backend: VersionControlBackend, config: Config,
                 mode_provider: Callable[[], ClassificationMode],
                 generator: Optional[AIMessageGenerator] = None) -> None:
        """
        Args:
            backend: Repository the commits go to.
            config: Settings; replaced through :meth:`update_config`.
            mode_provider: Returns the workspace's current classification mode.
            generator: Optional external message generator, used when
                ``config.use_ai_generator`` is set.
        """
        self.backend = backend
        self.config = config
        self.mode_provider = mode_provider
        self.generator = generator
        self.last_commit_hash: Optional[str] = None
        self._lock = asyncio.Lock()

    @property
    def in_flight(self) -> bool:
        return self._lock.locked()

    def update_config(self, config: Config) -> None:
        self.config = config

    def is_eligible(self, policy: CommitPolicy) -> bool:
        if policy is CommitPolicy.MANUAL:
            return True
        return self.config.enabled and self.mode_provider() is ClassificationMode.AGENT_LIKELY

    async def on_trigger(self, policy: CommitPolicy, message: Optional[str] = None) -> CommitOutcome:
        """Run the commit pipeline once.

        A second trigger arriving while one is in progress is rejected with
        ``BUSY`` rather than queued; the running attempt already sees its changes.
        """
        if self._lock.locked():
            return CommitOutcome.failure(CommitErrorKind.BUSY, "A commit is already in progress")

        async with self._lock:
            try:
                return await self._run(policy, message)
            except BackendUnavailableError as e:
                logger.warning("Repository unavailable: %s", e)
                return CommitOutcome.failure(CommitErrorKind.BACKEND_UNAVAILABLE, str(e))
            except Exception as e:
                logger.exception("Unexpected error while committing")
                return CommitOutcome.failure(CommitErrorKind.COMMIT_FAILED, str(e) or type(e).__name__)

    async def _run(self, policy: CommitPolicy, message: Optional[str]) -> CommitOutcome:
        if not self.is_eligible(policy):
            return CommitOutcome.failure(
                CommitErrorKind.NOT_ELIGIBLE,
                f"Not committing under {policy.value} policy: changes look human-made",
            )

        status = await self._read_status()
        change_set = status.change_set()
        if not change_set:
            return CommitOutcome.failure(CommitErrorKind.NO_CHANGES, "No changes to commit")

        if self.config.auto_stage:
            candidates = filter_excluded(change_set, self.config.exclude_patterns)
            if not candidates:
                logger.info("No files to stage after filtering")
            else:
                try:
                    await self.backend.add(candidates)
                except BackendUnavailableError:
                    raise
                except BackendError as e:
                    logger.error("Error staging files: %s", e)
                    return CommitOutcome.failure(CommitErrorKind.STAGE_FAILED, f"Failed to stage files: {e}")

        status = await self._read_status()
        if not status.staged:
            return CommitOutcome.failure(CommitErrorKind.NOTHING_STAGED, "No staged changes to commit")

        commit_message = await self.resolve_message(status, message)
        author = await self.derive_author()

        try:
            commit_hash = await self.backend.commit(commit_message, author)
        except BackendUnavailableError:
            raise
        except BackendError as e:
            logger.error("Error committing changes: %s", e)
            return CommitOutcome.failure(CommitErrorKind.COMMIT_FAILED, str(e))

        self.last_commit_hash = commit_hash or None
        logger.info("Committed %s as %s: %s", commit_hash[:8], author.formatted(), commit_message)
        return CommitOutcome(success=True, message=commit_message, hash=commit_hash)

    async def _read_status(self) -> RepoStatus:
        try:
            return await self.backend.status()
        except BackendUnavailableError:
            raise
        except BackendError as e:
            raise BackendUnavailableError(f"Could not read repository status: {e}") from e

    async def resolve_message(self, status: RepoStatus, message: Optional[str] = None) -> str:
        """Caller message, else the model, else the synthesizer."""
        if message and message.strip():
            return message.strip()

        staged = status.staged
        created = [p for p in status.created if p in staged]
        created.extend(new for _, new in status.renamed if new in staged)
        deleted = [p for p in status.deleted if p in staged]

        if self.config.use_ai_generator and self.generator is not None:
            try:
                return await self.generator.generate(staged, created, deleted)
            except GeneratorError as e:
                logger.info("Falling back to synthesized message: %s", e)
            except Exception as e:
                logger.warning("Message generator raised unexpectedly, falling back: %s", e)

        return generate_fallback_message(staged, created, deleted, self.config.commit_message_template)

    async def current_author(self) -> AuthorIdentity:
        try:
            name = await self.backend.get_config("user.name")
            email = await self.backend.get_config("user.email")
        except BackendError as e:
            logger.warning("Error getting git author info: %s", e)
            return AuthorIdentity(DEFAULT_AUTHOR_NAME, DEFAULT_AUTHOR_EMAIL)
        return AuthorIdentity(name or DEFAULT_AUTHOR_NAME, email or DEFAULT_AUTHOR_EMAIL)

    async def derive_author(self) -> AuthorIdentity:
        """Ambient git identity with the agent suffix, read fresh for every commit."""
        current = await self.current_author()
        suffix = self.config.ai_author_suffix.strip()
        name = f"{current.name} {suffix}" if suffix else current.name
        return AuthorIdentity(name=name, email=current.email)

    async def revert_last(self) -> bool:
        """Soft-reset one commit, keeping the working tree and index contents.

        Returns False without touching the repository while a commit is in
        progress, since HEAD~1 would then name the commit before it.
        """
        if self._lock.locked():
            logger.warning("Not reverting: a commit is in progress")
            return False

        async with self._lock:
            try:
                await self.backend.reset("soft", "HEAD~1")
            except BackendError as e:
                logger.error("Error reverting last commit: %s", e)
                return False
            self.last_commit_hash = await self.last_commit()
            return True

    async def last_commit(self) -> Optional[str]:
        try:
            entries = await self.backend.log(1)
        except BackendError as e:
            logger.warning("Error getting last commit: %s", e)
            return None
        return entries[0].hash if entries else None

    async def status_summary(self) -> Dict[str, object]:
        """Counts and paths for the presentation layer.

        Raises:
            BackendError: If the repository cannot be read.
        """
        status = await self.backend.status()
        return {
            "modified": len(status.modified),
            "created": len(status.created),
            "deleted": len(status.deleted),
            "renamed": len(status.renamed),
            "staged": len(status.staged),
            "files": status.change_set(),
            "last_commit": await self.last_commit(),
        }
