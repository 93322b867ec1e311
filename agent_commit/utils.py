import logging
import os
import subprocess
import time
from typing import Any, Dict, Optional, Sequence, Tuple

from rich.console import Console
from rich.logging import RichHandler

__all__ = ["console", "configure_logging", "SubprocessHandler"]

console = Console()

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    """Route the package loggers through rich.

    Args:
        verbose: Log at DEBUG instead of WARNING.
    """
    root = logging.getLogger("agent_commit")
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        root.addHandler(RichHandler(console=console, show_path=False, rich_tracebacks=True))


class SubprocessHandler:
    """Runs external commands with a timeout and guaranteed cleanup.

    Every git call made by the backend goes through one of these so that a hung
    process is terminated (and killed if needed) instead of blocking the caller.
    """

    def __init__(self, timeout: Optional[int] = None,
                 max_termination_retries: Optional[int] = None,
                 termination_wait: Optional[float] = None) -> None:
        """Initialize the handler.

        Args:
            timeout: Maximum time in seconds to wait for a process to complete.
            max_termination_retries: Maximum number of attempts to terminate a process.
            termination_wait: Time to wait between termination attempts in seconds.
        """
        self.timeout: int = timeout or 30
        self.max_termination_retries: int = max_termination_retries or 3
        self.termination_wait: float = termination_wait or 0.5

    @staticmethod
    def create_env() -> Dict[str, str]:
        """Environment for child processes: UTF-8 output, no interactive prompts."""
        env = os.environ.copy()
        env['PYTHONIOENCODING'] = 'utf-8'
        env['GIT_TERMINAL_PROMPT'] = '0'
        env['LC_ALL'] = env.get('LC_ALL', 'C')
        return env

    def run_command(self, command: Sequence[str], cwd: Optional[str] = None,
                    timeout: Optional[int] = None) -> Tuple[str, str, int]:
        """Execute a command and return its output.

        Args:
            command: Command to execute as a list of strings.
            cwd: Working directory for the command.
            timeout: Maximum time in seconds to wait for the process to complete.

        Returns:
            Tuple[str, str, int]: stdout, stderr, and return code.

        Raises:
            TimeoutError: If the process exceeds the timeout.
            FileNotFoundError: If the executable does not exist.
        """
        limit = timeout or self.timeout
        process: Optional[subprocess.Popen[Any]] = None
        try:
            process = subprocess.Popen(
                list(command),
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=self.create_env(),
            )
            stdout_bytes, stderr_bytes = process.communicate(timeout=limit)
            stdout = stdout_bytes.decode('utf-8', errors='replace')
            stderr = stderr_bytes.decode('utf-8', errors='replace')
            return stdout, stderr, process.returncode
        except subprocess.TimeoutExpired:
            self._terminate_process(process)
            raise TimeoutError(f"Command timed out after {limit} seconds: {' '.join(command)}")
        except Exception as e:
            logger.debug("Error in subprocess execution: %s", e)
            self._terminate_process(process)
            raise
        finally:
            self._cleanup_process(process)

    def _terminate_process(self, process: Optional[subprocess.Popen[Any]]) -> None:
        """Terminate a process, escalating to kill after the retries run out."""
        if process is None or process.poll() is not None:
            return

        try:
            process.terminate()
            for _ in range(self.max_termination_retries):
                if process.poll() is not None:
                    return
                time.sleep(self.termination_wait)

            if process.poll() is None:
                process.kill()
        except OSError:
            # Process might already be gone
            pass

    def _cleanup_process(self, process: Optional[subprocess.Popen[Any]]) -> None:
        if process is None:
            return

        for fd in [process.stdout, process.stderr]:
            if fd is not None:
                try:
                    fd.close()
                except (IOError, OSError):
                    pass

        self._terminate_process(process)
