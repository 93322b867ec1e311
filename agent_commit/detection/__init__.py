"""Edit classification: typing sessions, human-action overrides and speed verdicts."""

from agent_commit.detection.classifier import EditClassifier
from agent_commit.detection.filters import human_action_reason, is_human_action
from agent_commit.detection.session import SessionTracker
from agent_commit.detection.speed import calculate_wpm, evaluate

__all__ = [
    "EditClassifier",
    "SessionTracker",
    "calculate_wpm",
    "evaluate",
    "human_action_reason",
    "is_human_action",
]
