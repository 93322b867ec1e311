"""Configuration module for agent-commit.

This module provides a configuration class that holds every setting consumed by
the classification engine and the commit orchestrator. Settings arrive from the
editor as a flat key/value mapping using the editor's camelCase names; they are
validated once and then treated as read-only.
"""

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Union

import g4f  # type: ignore

from agent_commit.models import CommitPolicy

logger = logging.getLogger(__name__)

# Type alias for the supported model types
MODEL_TYPE = Union[g4f.Model, str]

# Editor setting name -> Config attribute
SETTING_KEYS: Dict[str, str] = {
    "enabled": "enabled",
    "typingSpeedThreshold": "typing_speed_threshold",
    "minCharactersForAnalysis": "min_characters_for_analysis",
    "sessionTimeout": "session_timeout",
    "commitFrequency": "commit_frequency",
    "autoStage": "auto_stage",
    "excludePatterns": "exclude_patterns",
    "commitMessageTemplate": "commit_message_template",
    "aiAuthorSuffix": "ai_author_suffix",
    "useCursorAI": "use_ai_generator",
    "showNotifications": "show_notifications",
    "debounceDelay": "debounce_delay",
    "model": "model",
    "fallbackTimeout": "fallback_timeout",
    "sessionHistorySize": "session_history_size",
}


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass
class Config:
    """Configuration class for agent-commit.

    Attributes:
        enabled: Master switch for automatic commits.
        typing_speed_threshold: Words per minute above which typing counts as agent-like.
        min_characters_for_analysis: Characters a session needs before speed is judged.
        session_timeout: Idle time in milliseconds that closes a typing session.
        commit_frequency: When automatic commits happen (immediate, onSave, manual).
        auto_stage: Whether changed files are staged before committing.
        exclude_patterns: Glob patterns for paths that are never staged.
        commit_message_template: Template with ``{type}`` and ``{description}`` placeholders.
        ai_author_suffix: Suffix appended to the git user name for agent commits.
        use_ai_generator: Ask the g4f model for a commit message before synthesizing one.
        show_notifications: Print commit notifications to the console.
        debounce_delay: Delay in milliseconds before acting on an agent-like edit.
        model: The g4f model used for message generation.
        fallback_timeout: Seconds to wait for the model before falling back.
        session_history_size: Number of finalized typing sessions kept for diagnostics.
    """

    MIN_WPM_THRESHOLD: ClassVar[int] = 50
    MAX_WPM_THRESHOLD: ClassVar[int] = 500
    MIN_CHARACTERS: ClassVar[int] = 5
    MAX_CHARACTERS: ClassVar[int] = 50
    MIN_SESSION_TIMEOUT: ClassVar[int] = 500
    MAX_SESSION_TIMEOUT: ClassVar[int] = 10000
    MAX_DEBOUNCE_DELAY: ClassVar[int] = 10000
    MIN_TIMEOUT: ClassVar[float] = 1.0
    MAX_TIMEOUT: ClassVar[float] = 60.0

    enabled: bool = True
    typing_speed_threshold: float = 150
    min_characters_for_analysis: int = 10
    session_timeout: int = 2000
    commit_frequency: CommitPolicy = CommitPolicy.ON_SAVE
    auto_stage: bool = True
    exclude_patterns: List[str] = field(default_factory=list)
    commit_message_template: str = "AI: {description}"
    ai_author_suffix: str = "(agent)"
    use_ai_generator: bool = False
    show_notifications: bool = True
    debounce_delay: int = 1000
    model: MODEL_TYPE = field(default_factory=lambda: g4f.models.gpt_4o_mini)
    fallback_timeout: float = 10.0
    session_history_size: int = 10

    def __post_init__(self) -> None:
        if isinstance(self.commit_frequency, str) and not isinstance(self.commit_frequency, CommitPolicy):
            try:
                self.commit_frequency = CommitPolicy(self.commit_frequency)
            except ValueError:
                pass  # reported by _validate
        error = self._validate()
        if error:
            raise ValueError(f"Invalid configuration: {error}")

    def _validate(self) -> Optional[str]:
        """Return the first validation error, or None when the configuration is valid."""
        for name in ("enabled", "auto_stage", "use_ai_generator", "show_notifications"):
            if not isinstance(getattr(self, name), bool):
                return f"{name} must be a boolean value"

        if not _is_number(self.typing_speed_threshold) or not (
            self.MIN_WPM_THRESHOLD <= self.typing_speed_threshold <= self.MAX_WPM_THRESHOLD
        ):
            return (f"typing_speed_threshold must be a number between "
                    f"{self.MIN_WPM_THRESHOLD} and {self.MAX_WPM_THRESHOLD}")

        if not _is_int(self.min_characters_for_analysis) or not (
            self.MIN_CHARACTERS <= self.min_characters_for_analysis <= self.MAX_CHARACTERS
        ):
            return (f"min_characters_for_analysis must be an integer between "
                    f"{self.MIN_CHARACTERS} and {self.MAX_CHARACTERS}")

        if not _is_number(self.session_timeout) or not (
            self.MIN_SESSION_TIMEOUT <= self.session_timeout <= self.MAX_SESSION_TIMEOUT
        ):
            return (f"session_timeout must be a number of milliseconds between "
                    f"{self.MIN_SESSION_TIMEOUT} and {self.MAX_SESSION_TIMEOUT}")

        if not isinstance(self.commit_frequency, CommitPolicy):
            choices = ", ".join(p.value for p in CommitPolicy)
            return f"commit_frequency must be one of: {choices}"

        if not isinstance(self.exclude_patterns, list) or not all(
            isinstance(p, str) for p in self.exclude_patterns
        ):
            return "exclude_patterns must be a list of strings"

        if not isinstance(self.commit_message_template, str) or not self.commit_message_template.strip():
            return "commit_message_template must be a non-empty string"

        if not isinstance(self.ai_author_suffix, str):
            return "ai_author_suffix must be a string"

        if not _is_number(self.debounce_delay) or not (0 <= self.debounce_delay <= self.MAX_DEBOUNCE_DELAY):
            return f"debounce_delay must be a number of milliseconds between 0 and {self.MAX_DEBOUNCE_DELAY}"

        if not _is_number(self.fallback_timeout) or not (
            self.MIN_TIMEOUT <= self.fallback_timeout <= self.MAX_TIMEOUT
        ):
            return f"fallback_timeout must be a number between {self.MIN_TIMEOUT} and {self.MAX_TIMEOUT}"

        if not _is_int(self.session_history_size) or self.session_history_size < 0:
            return "session_history_size must be a non-negative integer"

        return None

    def is_valid(self) -> bool:
        return self._validate() is None

    @property
    def session_timeout_seconds(self) -> float:
        return self.session_timeout / 1000.0

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_delay / 1000.0

    @classmethod
    def from_mapping(cls, settings: Mapping[str, Any]) -> "Config":
        """Build a configuration from the editor's key/value settings.

        Both the editor names (``typingSpeedThreshold``) and the attribute names
        (``typing_speed_threshold``) are accepted. Unknown keys are ignored.
        """
        attributes = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in settings.items():
            name = SETTING_KEYS.get(key, key)
            if name not in attributes:
                logger.debug("Ignoring unknown setting %r", key)
                continue
            kwargs[name] = value
        return cls(**kwargs)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "Config":
        """Load settings from a JSON file.

        A top-level ``agentCommit`` object is used when present, so the file can
        be an editor ``settings.json`` shared with other tools.
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Invalid configuration: {path} must contain a JSON object")
        section = data.get("agentCommit", data)
        if not isinstance(section, dict):
            raise ValueError(f"Invalid configuration: agentCommit in {path} must be a JSON object")
        return cls.from_mapping(section)


# Default configuration instance
default_config = Config()
