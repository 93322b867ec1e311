"""
Agent-Commit: Automatic Git Commits for Agent-Generated Edits

Key Features:
    - Typing-speed analysis of editor changes (words per minute over a session)
    - Unconditional human signals: deletions, backspaces, micro-edits, pastes, undo
    - Automatic staging with exclusion patterns
    - Conventional commit messages, from a g4f model or a local heuristic
    - Agent-attributed author identity derived from the git user
    - Soft revert of the last commit

Usage:
    Feed editor events to a WorkspaceController:

    >>> controller = WorkspaceController.for_repository(".")
    >>> controller.handle_text_change({"text": "def f():", "rangeLength": 0})
    >>> await controller.handle_save("module.py")

    Or use the command line:
    $ agent-commit commit
"""

__version__ = "1.0.0"
__author__ = "Alaamer"

from agent_commit.config import Config, default_config
from agent_commit.controller import WorkspaceController
from agent_commit.detection import EditClassifier
from agent_commit.messages import synthesize
from agent_commit.models import ClassificationMode, CommitOutcome, CommitPolicy, EditEvent
from agent_commit.orchestrator import CommitOrchestrator

__all__ = [
    "ClassificationMode",
    "CommitOrchestrator",
    "CommitOutcome",
    "CommitPolicy",
    "Config",
    "EditClassifier",
    "EditEvent",
    "WorkspaceController",
    "default_config",
    "synthesize",
    "__version__",
    "__author__",
]
