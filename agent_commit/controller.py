"""Workspace wiring between editor events, the classifier and the orchestrator.

One :class:`WorkspaceController` exists per workspace. It owns the
classification state and hands the orchestrator a read-only view of it, so two
workspaces never share a mode flag.
"""

import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Union

from agent_commit.config import Config
from agent_commit.detection.classifier import EditClassifier
from agent_commit.messages import AIMessageGenerator
from agent_commit.models import ClassificationMode, CommitOutcome, CommitPolicy, EditEvent, TypingStatus
from agent_commit.notifications import ModeChanged, Notifier
from agent_commit.orchestrator import CommitOrchestrator
from agent_commit.scheduler import DebouncedTrigger
from agent_commit.vcs.base import VersionControlBackend
from agent_commit.vcs.git import GitBackend

logger = logging.getLogger(__name__)

RawEvent = Union[EditEvent, Mapping[str, Any]]


class WorkspaceController:
    """Receives editor notifications for one workspace and commits agent edits."""

    def __init__(self, backend: VersionControlBackend, config: Optional[Config] = None,
                 generator: Optional[AIMessageGenerator] = None,
                 notifier: Optional[Notifier] = None,
                 clock: Callable[[], float] = time.monotonic) -> None:
        self.config = config or Config()
        self.notifier = notifier or Notifier(self.config.show_notifications)
        self.clock = clock
        self.classifier = EditClassifier(self.config, on_mode_change=self._mode_changed, clock=clock)
        self._generator = generator
        self.orchestrator = CommitOrchestrator(
            backend,
            self.config,
            mode_provider=lambda: self.classifier.mode,
            generator=self._ensure_generator(),
        )
        self.debouncer = DebouncedTrigger(self.config.debounce_seconds)

    @classmethod
    def for_repository(cls, root: Union[str, Path], config: Optional[Config] = None,
                       **kwargs: Any) -> "WorkspaceController":
        return cls(GitBackend(root), config, **kwargs)

    @property
    def mode(self) -> ClassificationMode:
        return self.classifier.mode

    def typing_status(self) -> TypingStatus:
        return self.classifier.typing_status()

    def handle_text_change(self, payload: RawEvent) -> ClassificationMode:
        """Classify one document change.

        Under the immediate policy an agent-like edit schedules a debounced
        commit, so the call must then come from a running event loop.

        Raises:
            InvalidEditEventError: If ``payload`` is not a valid edit event.
            RuntimeError: If a commit has to be scheduled and no event loop is running.
        """
        event = payload if isinstance(payload, EditEvent) else EditEvent.from_raw(payload, self.clock())
        if not self.config.enabled:
            return self.classifier.mode

        mode = self.classifier.observe(event)
        if (self.config.commit_frequency is CommitPolicy.IMMEDIATE
                and mode is ClassificationMode.AGENT_LIKELY):
            self.debouncer.schedule(lambda: self._auto_commit(CommitPolicy.IMMEDIATE))
        return mode

    def handle_undo(self) -> None:
        self.classifier.flag_human_action("undo")

    def handle_redo(self) -> None:
        self.classifier.flag_human_action("redo")

    async def handle_save(self, path: Optional[str] = None) -> Optional[CommitOutcome]:
        """Commit on save when automatic commits apply and the edits look agent-made.

        Returns None when the save was skipped without touching the repository.
        """
        policy = self.config.commit_frequency
        if not self.config.enabled or policy is CommitPolicy.MANUAL:
            return None
        if self.classifier.mode is not ClassificationMode.AGENT_LIKELY:
            logger.debug("Skipping commit for human changes: %s", path or "<workspace>")
            return None

        self.debouncer.cancel()
        logger.debug("Auto-committing agent changes for file: %s", path or "<workspace>")
        return await self._auto_commit(policy)

    async def commit_now(self, message: Optional[str] = None) -> CommitOutcome:
        """Explicit user request; bypasses classification."""
        self.debouncer.cancel()
        outcome = await self.orchestrator.on_trigger(CommitPolicy.MANUAL, message)
        self.notifier.commit_outcome(outcome)
        return outcome

    async def revert_last(self) -> bool:
        return await self.orchestrator.revert_last()

    async def status_summary(self) -> Dict[str, object]:
        summary = await self.orchestrator.status_summary()
        summary["mode"] = self.classifier.mode.value
        summary["enabled"] = self.config.enabled
        summary["commit_frequency"] = self.config.commit_frequency.value
        summary["auto_stage"] = self.config.auto_stage
        return summary

    def update_config(self, config: Config) -> None:
        self.config = config
        self.classifier.update_config(config)
        self.orchestrator.update_config(config)
        self.orchestrator.generator = self._ensure_generator()
        self.debouncer.delay = config.debounce_seconds
        self.notifier.show_notifications = config.show_notifications
        if not config.enabled:
            self.debouncer.cancel()

    def dispose(self) -> None:
        self.debouncer.dispose()
        self.classifier.dispose()

    async def _auto_commit(self, policy: CommitPolicy) -> CommitOutcome:
        outcome = await self.orchestrator.on_trigger(policy)
        self.notifier.commit_outcome(outcome)
        return outcome

    def _ensure_generator(self) -> Optional[AIMessageGenerator]:
        if self._generator is None and self.config.use_ai_generator:
            self._generator = AIMessageGenerator(self.config)
        elif self._generator is not None:
            self._generator.config = self.config
        return self._generator

    def _mode_changed(self, mode: ClassificationMode) -> None:
        self.notifier.publish(ModeChanged(mode))
