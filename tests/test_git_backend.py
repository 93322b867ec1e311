"""Tests for the git backend: porcelain parsing and real repositories."""

from unittest.mock import MagicMock

import git
import pytest

from agent_commit.config import Config
from agent_commit.exceptions import BackendError, BackendUnavailableError
from agent_commit.models import AuthorIdentity, ClassificationMode, CommitErrorKind, CommitPolicy
from agent_commit.orchestrator import CommitOrchestrator
from agent_commit.utils import SubprocessHandler
from agent_commit.vcs.git import GitBackend, parse_porcelain_status


class TestParsePorcelainStatus:

    def test_empty_output(self):
        status = parse_porcelain_status("")
        assert status.is_clean

    def test_untracked_files_are_created(self):
        status = parse_porcelain_status("?? new.py\0?? src/other.py\0")
        assert status.created == ["new.py", "src/other.py"]
        assert status.staged == []

    def test_worktree_and_index_modifications(self):
        status = parse_porcelain_status(" M a.py\0M  b.py\0MM c.py\0")
        assert status.modified == ["a.py", "b.py", "c.py"]
        assert status.staged == ["b.py", "c.py"]

    def test_deletions(self):
        status = parse_porcelain_status(" D gone.py\0D  staged_gone.py\0")
        assert status.deleted == ["gone.py", "staged_gone.py"]
        assert status.staged == ["staged_gone.py"]

    def test_added_file(self):
        status = parse_porcelain_status("A  added.py\0")
        assert status.created == ["added.py"]
        assert status.staged == ["added.py"]

    def test_rename_consumes_source_entry(self):
        status = parse_porcelain_status("R  new_name.py\0old_name.py\0 M other.py\0")
        assert status.renamed == [("old_name.py", "new_name.py")]
        assert status.modified == ["other.py"]
        assert status.change_set() == ["other.py", "new_name.py"]

    def test_copy_reports_created(self):
        status = parse_porcelain_status("C  copy.py\0original.py\0")
        assert status.created == ["copy.py"]
        assert status.renamed == []

    def test_paths_with_spaces(self):
        status = parse_porcelain_status("?? docs/release notes.md\0")
        assert status.created == ["docs/release notes.md"]

    def test_ignored_entries_are_skipped(self):
        status = parse_porcelain_status("!! build/out.o\0")
        assert status.is_clean


class TestRunGitCommand:

    def test_missing_executable(self, tmp_path):
        handler = MagicMock(spec=SubprocessHandler)
        handler.run_command.side_effect = FileNotFoundError("git")
        backend = GitBackend(tmp_path, handler=handler)
        with pytest.raises(BackendUnavailableError):
            backend.run_git_command(["status"])

    def test_timeout_becomes_backend_error(self, tmp_path):
        handler = MagicMock(spec=SubprocessHandler)
        handler.run_command.side_effect = TimeoutError("Command timed out after 30 seconds")
        backend = GitBackend(tmp_path, handler=handler)
        with pytest.raises(BackendError, match="timed out"):
            backend.run_git_command(["status"])

    def test_non_zero_exit(self, tmp_path):
        handler = MagicMock(spec=SubprocessHandler)
        handler.run_command.return_value = ("", "fatal: bad revision\n", 128)
        backend = GitBackend(tmp_path, handler=handler)
        with pytest.raises(BackendError) as excinfo:
            backend.run_git_command(["log"])
        assert excinfo.value.returncode == 128
        assert "git log failed: fatal: bad revision" in str(excinfo.value)

        assert backend.run_git_command(["log"], check=False)[2] == 128


class TestGitBackend:

    @pytest.mark.asyncio
    async def test_not_a_repository(self, tmp_path):
        backend = GitBackend(tmp_path / "missing")
        with pytest.raises(BackendUnavailableError):
            await backend.status()

    @pytest.mark.asyncio
    async def test_status_reports_all_kinds(self, temp_git_repo, git_repo):
        (temp_git_repo / "README.md").write_text("# Changed\n")
        (temp_git_repo / "src").mkdir()
        (temp_git_repo / "src" / "app.py").write_text("print('hi')\n")

        status = await GitBackend(temp_git_repo).status()

        assert status.modified == ["README.md"]
        assert status.created == ["src/app.py"]
        assert status.staged == []

    @pytest.mark.asyncio
    async def test_status_reports_renames(self, temp_git_repo, git_repo):
        git_repo.git.mv("README.md", "GUIDE.md")

        status = await GitBackend(temp_git_repo).status()

        assert status.renamed == [("README.md", "GUIDE.md")]
        assert status.staged == ["GUIDE.md"]

    @pytest.mark.asyncio
    async def test_add_commit_and_log(self, temp_git_repo, git_repo):
        (temp_git_repo / "app.py").write_text("x = 1\n")
        (temp_git_repo / "README.md").unlink()
        backend = GitBackend(temp_git_repo)

        await backend.add(["app.py", "README.md"])
        status = await backend.status()
        assert sorted(status.staged) == ["README.md", "app.py"]

        commit_hash = await backend.commit("feat: add app", AuthorIdentity("Test User (agent)", "test@example.com"))

        head = git_repo.head.commit
        assert head.hexsha == commit_hash
        assert head.message.strip() == "feat: add app"
        assert head.author.name == "Test User (agent)"
        assert head.author.email == "test@example.com"

        entries = await backend.log(2)
        assert [e.subject for e in entries] == ["feat: add app", "Initial commit"]
        assert entries[0].hash == commit_hash
        assert entries[0].author_name == "Test User (agent)"

    @pytest.mark.asyncio
    async def test_log_without_commits(self, tmp_path):
        git.Repo.init(tmp_path)
        assert await GitBackend(tmp_path).log(1) == []

    @pytest.mark.asyncio
    async def test_soft_reset_keeps_changes_staged(self, temp_git_repo, git_repo):
        (temp_git_repo / "app.py").write_text("x = 1\n")
        backend = GitBackend(temp_git_repo)
        await backend.add(["app.py"])
        await backend.commit("feat: add app")

        await backend.reset("soft", "HEAD~1")

        assert git_repo.head.commit.message.strip() == "Initial commit"
        assert (await backend.status()).staged == ["app.py"]

    @pytest.mark.asyncio
    async def test_commit_with_nothing_staged_fails(self, temp_git_repo):
        with pytest.raises(BackendError):
            await GitBackend(temp_git_repo).commit("chore: nothing")

    @pytest.mark.asyncio
    async def test_get_config(self, temp_git_repo):
        backend = GitBackend(temp_git_repo)
        assert await backend.get_config("user.name") == "Test User"
        assert await backend.get_config("agentcommit.missing-key") is None


class TestOrchestratorWithGit:
    """The full pipeline against a real repository."""

    @pytest.fixture
    def orchestrator(self, temp_git_repo):
        return CommitOrchestrator(
            GitBackend(temp_git_repo),
            Config(exclude_patterns=["*.log"]),
            mode_provider=lambda: ClassificationMode.AGENT_LIKELY,
        )

    @pytest.mark.asyncio
    async def test_commits_once_then_reports_no_changes(self, orchestrator, temp_git_repo, git_repo):
        (temp_git_repo / "parser.py").write_text("def parse():\n    pass\n")
        (temp_git_repo / "debug.log").write_text("trace\n")

        outcome = await orchestrator.on_trigger(CommitPolicy.ON_SAVE)

        assert outcome.success is True
        assert outcome.message == "feat: add new files"
        assert git_repo.head.commit.author.name == "Test User (agent)"
        assert list(git_repo.head.commit.stats.files) == ["parser.py"]
        assert git_repo.untracked_files == ["debug.log"]

        second = await orchestrator.on_trigger(CommitPolicy.ON_SAVE)
        assert second.success is False
        assert second.kind is CommitErrorKind.NOTHING_STAGED

    @pytest.mark.asyncio
    async def test_clean_tree_reports_no_changes(self, orchestrator):
        outcome = await orchestrator.on_trigger(CommitPolicy.ON_SAVE)
        assert outcome.kind is CommitErrorKind.NO_CHANGES

    @pytest.mark.asyncio
    async def test_deleting_a_file(self, orchestrator, temp_git_repo, git_repo):
        (temp_git_repo / "README.md").unlink()

        outcome = await orchestrator.on_trigger(CommitPolicy.ON_SAVE)

        assert outcome.success is True
        assert outcome.message == "docs: remove files"
        assert not (temp_git_repo / "README.md").exists()

    @pytest.mark.asyncio
    async def test_revert_last(self, orchestrator, temp_git_repo, git_repo):
        initial = git_repo.head.commit.hexsha
        (temp_git_repo / "parser.py").write_text("x = 1\n")
        await orchestrator.on_trigger(CommitPolicy.ON_SAVE)

        assert await orchestrator.revert_last() is True
        assert git_repo.head.commit.hexsha == initial
        assert orchestrator.last_commit_hash == initial
        assert (temp_git_repo / "parser.py").exists()

    @pytest.mark.asyncio
    async def test_outside_repository(self, tmp_path):
        orchestrator = CommitOrchestrator(GitBackend(tmp_path / "nowhere"), Config(),
                                          mode_provider=lambda: ClassificationMode.AGENT_LIKELY)
        outcome = await orchestrator.on_trigger(CommitPolicy.MANUAL)
        assert outcome.kind is CommitErrorKind.BACKEND_UNAVAILABLE
