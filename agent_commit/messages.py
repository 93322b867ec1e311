"""Commit message synthesis.

``synthesize`` is a deterministic, explainable heuristic over file paths that
picks a conventional commit type and a short description. ``AIMessageGenerator``
asks a g4f model instead; callers always fall back to ``synthesize`` when it
fails.
"""

import asyncio
import concurrent.futures
import logging
import os
import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence

from g4f.client import Client  # type: ignore

from agent_commit.config import Config
from agent_commit.exceptions import GeneratorError

logger = logging.getLogger(__name__)

COMMIT_TYPES = ("feat", "fix", "docs", "style", "refactor", "test", "chore")

CONVENTIONAL_PREFIX = re.compile(r"^(feat|fix|docs|style|refactor|test|chore|build|ci|perf|revert):")

DOC_EXTENSIONS = (".md", ".txt")
STYLE_EXTENSIONS = (".css", ".scss", ".sass", ".less")
CONFIG_EXTENSIONS = (".json", ".yml", ".yaml")


@dataclass(frozen=True)
class ChangeAnalysis:
    type: str
    description: str


def is_test_file(path: str) -> bool:
    return "test" in path or "spec" in path


def is_doc_file(path: str) -> bool:
    return path.endswith(DOC_EXTENSIONS) or "doc" in path


def is_style_file(path: str) -> bool:
    return path.endswith(STYLE_EXTENSIONS)


def is_config_file(path: str) -> bool:
    return "config" in path or path.endswith(CONFIG_EXTENSIONS)


def is_build_file(path: str) -> bool:
    return any(marker in path for marker in ("build", "webpack", "rollup")) or path.endswith(".lock")


def is_fix_file(path: str) -> bool:
    return "fix" in path or "bug" in path


def determine_commit_type(paths: Sequence[str], has_new: bool, has_deleted: bool) -> str:
    if any(is_test_file(p) for p in paths) and not has_new:
        return "test"
    if any(is_doc_file(p) for p in paths):
        return "docs"
    if any(is_style_file(p) for p in paths):
        return "style"
    if any(is_config_file(p) or is_build_file(p) for p in paths):
        return "chore"
    if has_deleted and not has_new:
        return "refactor"
    if any(is_fix_file(p) for p in paths):
        return "fix"
    return "feat"


def describe_changes(paths: Sequence[str], has_new: bool, has_deleted: bool) -> str:
    extensions = list(dict.fromkeys(ext for ext in (os.path.splitext(p)[1] for p in paths) if ext))

    if has_new and has_deleted:
        description = "add and remove files"
    elif has_new:
        description = "add new files"
    elif has_deleted:
        description = "remove files"
    elif len(extensions) == 1:
        description = f"update {extensions[0]} files"
    elif len(extensions) > 1:
        description = "update multiple file types"
    else:
        description = "update files"

    if len(paths) > 1:
        description += f" ({len(paths)} files)"
    return description


def synthesize(paths: Iterable[str], created: Iterable[str] = (),
               deleted: Iterable[str] = ()) -> ChangeAnalysis:
    """Pick a conventional type and description for a set of changed paths.

    Args:
        paths: Changed file paths, relative to the repository root.
        created: The subset of ``paths`` that are new files.
        deleted: The subset of ``paths`` that were removed.
    """
    paths = list(dict.fromkeys(paths))
    members = set(paths)
    has_new = any(p in members for p in created)
    has_deleted = any(p in members for p in deleted)
    return ChangeAnalysis(
        type=determine_commit_type(paths, has_new, has_deleted),
        description=describe_changes(paths, has_new, has_deleted),
    )


def format_commit_message(analysis: ChangeAnalysis, template: str) -> str:
    """Render an analysis through the configured template.

    A template that neither uses ``{type}`` nor starts with a conventional prefix
    is ignored in favour of ``"<type>: <description>"``.
    """
    if "{type}" not in template and not CONVENTIONAL_PREFIX.match(template):
        return f"{analysis.type}: {analysis.description}"
    return template.replace("{description}", analysis.description).replace("{type}", analysis.type)


def generate_fallback_message(paths: Iterable[str], created: Iterable[str], deleted: Iterable[str],
                              template: str) -> str:
    return format_commit_message(synthesize(paths, created, deleted), template)


def build_prompt(paths: Sequence[str], created: Sequence[str], deleted: Sequence[str]) -> str:
    lines = []
    for path in paths:
        if path in created:
            marker = "A"
        elif path in deleted:
            marker = "D"
        else:
            marker = "M"
        lines.append(f"{marker} {path}")
    file_list = "\n".join(lines)
    return (
        "Generate a brief, single-line conventional commit message "
        f"(one of: {', '.join(COMMIT_TYPES)}) for these changes made by a coding agent.\n"
        "Reply with the commit message only, no quotes or explanation.\n\n"
        f"{file_list}\n\nFiles changed: {len(paths)}"
    )


class AIMessageGenerator:
    """Commit messages from a g4f chat model."""

    def __init__(self, config: Config, client: Optional[Any] = None) -> None:
        self.config = config
        self.client = client or Client()

    def _request(self, prompt: str) -> str:
        response = self.client.chat.completions.create(
            model=self.config.model,
            messages=[
                {"role": "system", "content": "You write git commit messages."},
                {"role": "user", "content": prompt},
            ],
        )
        if not response or not response.choices:
            raise GeneratorError("No response received from model")
        return response.choices[0].message.content or ""

    async def generate(self, paths: Sequence[str], created: Sequence[str] = (),
                       deleted: Sequence[str] = ()) -> str:
        """Ask the model for a message.

        Raises:
            GeneratorError: On any provider failure, timeout or empty answer.
        """
        prompt = build_prompt(paths, created, deleted)
        loop = asyncio.get_running_loop()
        # not the default executor: asyncio.run joins that one, timed-out requests included
        executor = concurrent.futures.ThreadPoolExecutor(max_workers=1, thread_name_prefix="agent-commit-model")
        try:
            content = await asyncio.wait_for(
                loop.run_in_executor(executor, self._request, prompt),
                timeout=self.config.fallback_timeout,
            )
        except GeneratorError:
            raise
        except asyncio.TimeoutError as e:
            raise GeneratorError(f"Model timed out after {self.config.fallback_timeout} seconds") from e
        except Exception as e:
            raise GeneratorError(f"Model request failed: {e}") from e
        finally:
            executor.shutdown(wait=False)

        message = clean_model_message(content)
        if not message:
            raise GeneratorError("Model returned an empty commit message")
        return message


def clean_model_message(content: str) -> str:
    """Strip code fences and surrounding quotes a model tends to add."""
    lines: List[str] = [line for line in content.strip().splitlines() if not line.strip().startswith("```")]
    return "\n".join(lines).strip().strip('"').strip("'").strip()
