"""Exception hierarchy for agent-commit.

Backend and generator failures are raised as these types and converted into
failed ``CommitOutcome`` values at the orchestration boundary.
"""


class AgentCommitError(Exception):
    """Base class for all agent-commit errors."""


class BackendError(AgentCommitError):
    """A version-control command failed."""

    def __init__(self, message: str, command=None, returncode=None) -> None:
        super().__init__(message)
        self.command = command
        self.returncode = returncode


class BackendUnavailableError(BackendError):
    """No usable repository (git missing, or not inside a work tree)."""


class GeneratorError(AgentCommitError):
    """The external commit message generator failed or returned nothing."""


class InvalidEditEventError(AgentCommitError, ValueError):
    """An editor payload could not be turned into an EditEvent."""
