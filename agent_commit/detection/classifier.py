"""Workspace classification state machine.

Combines the human-action filter and the speed verdict into a single
``ClassificationMode`` per workspace. Human signals win immediately and clear
the running session; speed verdicts only change the mode once the session has
enough characters to be judged.
"""

import logging
import time
from typing import Callable, List, Optional

from agent_commit.config import Config
from agent_commit.detection.filters import human_action_reason
from agent_commit.detection.session import SessionTracker
from agent_commit.detection.speed import calculate_wpm, evaluate
from agent_commit.models import (
    ClassificationMode,
    EditEvent,
    SessionRecord,
    TypingStatus,
    Verdict,
)

logger = logging.getLogger(__name__)

ModeListener = Callable[[ClassificationMode], None]


class EditClassifier:
    """Holds the mode flag of one workspace.

    The commit orchestrator only reads :attr:`mode`; every mutation goes through
    :meth:`observe`, :meth:`flag_human_action` or :meth:`set_agent_flag`.
    """

    def __init__(self, config: Config, on_mode_change: Optional[ModeListener] = None,
                 clock: Callable[[], float] = time.monotonic) -> None:
        self.config = config
        self.tracker = SessionTracker(config.session_timeout_seconds, config.session_history_size)
        self._mode = ClassificationMode.HUMAN
        self._last_user_action: Optional[float] = None
        self._on_mode_change = on_mode_change
        self._clock = clock

    @property
    def mode(self) -> ClassificationMode:
        return self._mode

    @property
    def last_user_action(self) -> Optional[float]:
        return self._last_user_action

    @property
    def session_history(self) -> List[SessionRecord]:
        return self.tracker.history

    def observe(self, event: EditEvent) -> ClassificationMode:
        """Classify one edit and return the resulting mode."""
        reason = human_action_reason(event)
        if reason is not None:
            self.flag_human_action(reason, now=event.timestamp)
            return self._mode

        snapshot = self.tracker.observe(event, event.timestamp)
        verdict = evaluate(
            snapshot,
            self.config.min_characters_for_analysis,
            self.config.typing_speed_threshold,
        )
        if verdict is Verdict.INSUFFICIENT:
            return self._mode

        wpm = calculate_wpm(snapshot.accumulated_characters, snapshot.elapsed)
        logger.debug("%s typing: %.1f WPM (threshold: %s)",
                     "Agent" if verdict is Verdict.AGENT_LIKELY else "Human",
                     wpm, self.config.typing_speed_threshold)
        self._set_mode(verdict.to_mode())
        return self._mode

    def flag_human_action(self, action: str, now: Optional[float] = None) -> None:
        """Force the mode to HUMAN and drop the active session."""
        now = self._clock() if now is None else now
        self._last_user_action = now
        self.tracker.reset(now)
        logger.debug("Human action detected: %s", action)
        self._set_mode(ClassificationMode.HUMAN)

    def set_agent_flag(self, is_agent: bool) -> None:
        """Manual override used by external triggers and tests."""
        logger.debug("Agent flag manually set to: %s", is_agent)
        self._set_mode(ClassificationMode.AGENT_LIKELY if is_agent else ClassificationMode.HUMAN)

    def typing_status(self) -> TypingStatus:
        return TypingStatus(
            is_human=self._mode is ClassificationMode.HUMAN,
            last_user_action=self._last_user_action,
        )

    def update_config(self, config: Config) -> None:
        """Apply new thresholds; the active session is kept."""
        self.config = config
        self.tracker.session_timeout = config.session_timeout_seconds

    def dispose(self) -> None:
        self.tracker.dispose()

    def _set_mode(self, mode: ClassificationMode) -> None:
        changed = mode is not self._mode
        self._mode = mode
        if changed and self._on_mode_change is not None:
            self._on_mode_change(mode)
