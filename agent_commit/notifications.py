"""Outbound events for the presentation layer."""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Union

from rich.console import Console
from rich.markup import escape

from agent_commit.models import ClassificationMode, CommitErrorKind, CommitOutcome
from agent_commit.utils import console as default_console

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommitCompleted:
    message: str
    hash: Optional[str]


@dataclass(frozen=True)
class CommitFailed:
    error: str
    kind: Optional[CommitErrorKind]


@dataclass(frozen=True)
class ModeChanged:
    mode: ClassificationMode


Notification = Union[CommitCompleted, CommitFailed, ModeChanged]
Listener = Callable[[Notification], None]


class Notifier:
    """Fans notifications out to listeners and, optionally, the console."""

    def __init__(self, show_notifications: bool = True, console: Optional[Console] = None) -> None:
        self.show_notifications = show_notifications
        self.console = console or default_console
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; the returned callable unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, notification: Notification) -> None:
        for listener in list(self._listeners):
            try:
                listener(notification)
            except Exception:
                logger.exception("Notification listener failed")
        if self.show_notifications:
            self._render(notification)

    def commit_outcome(self, outcome: CommitOutcome) -> None:
        if outcome.success:
            self.publish(CommitCompleted(outcome.message, outcome.hash))
        else:
            self.publish(CommitFailed(outcome.error or "Unknown error", outcome.kind))

    def _render(self, notification: Notification) -> None:
        if isinstance(notification, CommitCompleted):
            short = (notification.hash or "")[:8]
            self.console.print(f"[green]✓ AI change committed[/green] [dim]{short}[/dim] "
                               f"{escape(notification.message)}")
        elif isinstance(notification, CommitFailed):
            # silent for routine short-circuits
            if notification.kind in (CommitErrorKind.NO_CHANGES, CommitErrorKind.NOT_ELIGIBLE,
                                     CommitErrorKind.BUSY):
                return
            self.console.print(f"[red]✗ Commit failed:[/red] {escape(notification.error)}")
