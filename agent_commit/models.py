"""Data types shared by the classification engine and the commit pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional, Tuple

from agent_commit.exceptions import InvalidEditEventError

__all__ = [
    "EditEvent",
    "parse_timestamp",
    "TypingSession",
    "SessionRecord",
    "SessionSnapshot",
    "ClassificationMode",
    "Verdict",
    "CommitPolicy",
    "CommitErrorKind",
    "CommitOutcome",
    "AuthorIdentity",
    "RepoStatus",
    "TypingStatus",
    "LogEntry",
]


class ClassificationMode(str, Enum):
    HUMAN = "human"
    AGENT_LIKELY = "agent_likely"


class Verdict(str, Enum):
    HUMAN = "human"
    AGENT_LIKELY = "agent_likely"
    INSUFFICIENT = "insufficient"

    def to_mode(self) -> Optional[ClassificationMode]:
        if self is Verdict.INSUFFICIENT:
            return None
        return ClassificationMode(self.value)


class CommitPolicy(str, Enum):
    IMMEDIATE = "immediate"
    ON_SAVE = "onSave"
    MANUAL = "manual"


class CommitErrorKind(str, Enum):
    NO_CHANGES = "no_changes"
    NOTHING_STAGED = "nothing_staged"
    STAGE_FAILED = "stage_failed"
    COMMIT_FAILED = "commit_failed"
    BACKEND_UNAVAILABLE = "backend_unavailable"
    NOT_ELIGIBLE = "not_eligible"
    BUSY = "busy"


def parse_timestamp(value: Any) -> float:
    """Validate an editor timestamp.

    Raises:
        InvalidEditEventError: If ``value`` is not a number.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidEditEventError("timestamp must be a number")
    return float(value)


@dataclass(frozen=True)
class EditEvent:
    """A single text change reported by the editor.

    Attributes:
        timestamp: Time of the change in seconds (monotonic clock).
        inserted_text: Text inserted by the change, empty for pure deletions.
        deleted_length: Number of characters replaced or removed.
        is_undo: Whether the change came from an undo operation.
    """

    timestamp: float
    inserted_text: str = ""
    deleted_length: int = 0
    is_undo: bool = False

    @classmethod
    def from_raw(cls, payload: Mapping[str, Any], default_timestamp: float = 0.0) -> "EditEvent":
        """Validate an untyped editor payload into an EditEvent.

        Accepts both the editor's own key names (``text``, ``rangeLength``,
        ``isUndo``) and the longer ``insertedText`` / ``deletedLength`` forms.

        Raises:
            InvalidEditEventError: If a field has the wrong type or a negative length.
        """
        if not isinstance(payload, Mapping):
            raise InvalidEditEventError(f"Edit event must be a mapping, got {type(payload).__name__}")

        text = payload.get("insertedText", payload.get("text", ""))
        if text is None:
            text = ""
        if not isinstance(text, str):
            raise InvalidEditEventError("insertedText must be a string")

        deleted = payload.get("deletedLength", payload.get("rangeLength", 0))
        if isinstance(deleted, bool) or not isinstance(deleted, int) or deleted < 0:
            raise InvalidEditEventError("deletedLength must be a non-negative integer")

        is_undo = payload.get("isUndo", False)
        if not isinstance(is_undo, bool):
            raise InvalidEditEventError("isUndo must be a boolean")

        timestamp = parse_timestamp(payload.get("timestamp", default_timestamp))

        return cls(
            timestamp=timestamp,
            inserted_text=text,
            deleted_length=deleted,
            is_undo=is_undo,
        )


@dataclass
class TypingSession:
    start_time: float
    accumulated_characters: int = 0


@dataclass(frozen=True)
class SessionRecord:
    start_time: float
    characters: int
    duration: float


@dataclass(frozen=True)
class SessionSnapshot:
    accumulated_characters: int
    elapsed: float  # seconds


@dataclass(frozen=True)
class TypingStatus:
    is_human: bool
    last_user_action: Optional[float]


@dataclass(frozen=True)
class AuthorIdentity:
    name: str
    email: str

    def formatted(self) -> str:
        return f"{self.name} <{self.email}>"


@dataclass
class CommitOutcome:
    """Result of one orchestration attempt, handed back to the caller."""

    success: bool
    message: str = ""
    hash: Optional[str] = None
    error: Optional[str] = None
    kind: Optional[CommitErrorKind] = None

    @classmethod
    def failure(cls, kind: CommitErrorKind, error: str, message: str = "") -> "CommitOutcome":
        return cls(success=False, message=message, error=error, kind=kind)


@dataclass
class RepoStatus:
    """Working tree state as reported by the backend."""

    modified: List[str] = field(default_factory=list)
    created: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    renamed: List[Tuple[str, str]] = field(default_factory=list)  # (from, to)
    staged: List[str] = field(default_factory=list)

    def change_set(self) -> List[str]:
        """Ordered, distinct paths that are modified, created, renamed or deleted."""
        paths = [*self.modified, *self.created, *(to for _, to in self.renamed), *self.deleted]
        return list(dict.fromkeys(paths))

    @property
    def is_clean(self) -> bool:
        return not self.change_set() and not self.staged


@dataclass(frozen=True)
class LogEntry:
    hash: str
    author_name: str
    author_email: str
    subject: str
