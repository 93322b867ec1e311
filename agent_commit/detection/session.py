"""Typing session accumulation.

A session starts with the first observed edit and keeps a running character
count. Duration is measured from the session start, so the resulting WPM is a
cumulative average over the whole session rather than per keystroke.
"""

import logging
from collections import deque
from typing import Deque, List, Optional

from agent_commit.models import EditEvent, SessionRecord, SessionSnapshot, TypingSession

logger = logging.getLogger(__name__)


class SessionTracker:
    """Owns the single active typing session of a workspace."""

    def __init__(self, session_timeout: float, history_size: int = 10) -> None:
        """
        Args:
            session_timeout: Seconds after the session start beyond which the next
                edit opens a new session.
            history_size: Number of finalized sessions to keep.
        """
        self.session_timeout = session_timeout
        self._active: Optional[TypingSession] = None
        self._history: Deque[SessionRecord] = deque(maxlen=history_size)
        self._last_seen: Optional[float] = None

    @property
    def active(self) -> Optional[TypingSession]:
        return self._active

    @property
    def history(self) -> List[SessionRecord]:
        return list(self._history)

    def observe(self, event: EditEvent, now: float) -> SessionSnapshot:
        characters = len(event.inserted_text)
        previous, self._last_seen = self._last_seen, now

        if self._active is None:
            self._active = TypingSession(start_time=now, accumulated_characters=characters)
        elif now - self._active.start_time > self.session_timeout:
            self._finalize(previous)
            self._active = TypingSession(start_time=now, accumulated_characters=characters)
        else:
            self._active.accumulated_characters += characters

        return SessionSnapshot(
            accumulated_characters=self._active.accumulated_characters,
            elapsed=now - self._active.start_time,
        )

    def reset(self, now: Optional[float] = None) -> None:
        """Finalize and drop the active session, if any."""
        self._finalize(now)

    def dispose(self) -> None:
        self._finalize(None)

    def _finalize(self, now: Optional[float]) -> None:
        if self._active is None:
            return
        end = now if now is not None else self._last_seen
        duration = max(0.0, (end if end is not None else self._active.start_time) - self._active.start_time)
        self._history.append(SessionRecord(
            start_time=self._active.start_time,
            characters=self._active.accumulated_characters,
            duration=duration,
        ))
        logger.debug("Session finalized: %d characters over %.2fs",
                     self._active.accumulated_characters, duration)
        self._active = None
