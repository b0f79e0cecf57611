# Tests for ccbundle.output.console
# Rich-based console output

from datetime import datetime
from io import StringIO
from pathlib import Path

from rich.console import Console as RichConsole

from ccbundle.backup import BackupInfo
from ccbundle.config.schema import Category, PeerTool
from ccbundle.install import DependencyResult, InstallResult
from ccbundle.output.console import Console, create_console
from ccbundle.symlink import LinkResult
from ccbundle.sync.classifier import SyncAnalysis
from ccbundle.sync.item import ApplyResult, HookSyncItem, SyncItem, SyncStatus


def _make_console(verbose: bool = False) -> Console:
    """Create a console with captured output."""
    console = Console(verbose=verbose, colored=False)
    console._console = RichConsole(file=StringIO(), no_color=True, width=120, soft_wrap=True)
    return console


def _get_output(console: Console) -> str:
    """Get captured output from console."""
    console._console.file.seek(0)
    return console._console.file.read()


def _analysis() -> SyncAnalysis:
    return SyncAnalysis(
        items=[
            SyncItem("commit.md", Category.COMMANDS, SyncStatus.NEW),
            SyncItem("push.md", Category.COMMANDS, SyncStatus.UNCHANGED),
            SyncItem("review/SKILL.md", Category.SKILLS, SyncStatus.NEW),
            SyncItem("review/refs/a.md", Category.SKILLS, SyncStatus.NEW),
            SyncItem("plan/SKILL.md", Category.SKILLS, SyncStatus.MODIFIED),
            SyncItem("old", Category.AGENTS, SyncStatus.DELETED, is_folder=True),
        ],
        hooks=[HookSyncItem("PreToolUse", "mcp__fs", SyncStatus.NEW)],
    )


class TestConsoleBasic:
    """Tests for basic console methods."""

    def test_print_error(self):
        c = _make_console()
        c.print_error("something failed")
        output = _get_output(c)
        assert "Error:" in output
        assert "something failed" in output

    def test_print_warning(self):
        c = _make_console()
        c.print_warning("be careful")
        assert "Warning: be careful" in _get_output(c)

    def test_print_success_and_info(self):
        c = _make_console()
        c.print_success("all good")
        c.print_info("fyi")
        output = _get_output(c)
        assert "all good" in output
        assert "fyi" in output


class TestPrintAnalysis:
    """Tests for print_analysis()."""

    def test_grouped_output(self):
        c = _make_console()
        c.print_analysis(_analysis())
        output = _get_output(c)

        assert "commands" in output
        assert "+ commit.md" in output
        assert "push.md" not in output
        assert "+ review/ (2 new)" in output
        assert "~ plan/ (1 modified)" in output
        assert "- old/" in output
        assert "PreToolUse[mcp__fs]" in output
        assert "4 new, 1 modified, 1 deleted, 1 unchanged" in output

    def test_verbose_shows_unchanged(self):
        c = _make_console(verbose=True)
        c.print_analysis(_analysis())
        assert "= push.md" in _get_output(c)


class TestPrintResults:
    """Tests for result printers."""

    def test_apply_result_ok(self):
        c = _make_console()
        c.print_apply_result(ApplyResult(success=3, deleted=1))
        output = _get_output(c)
        assert "Sync completed" in output
        assert "3 updated, 1 deleted, 0 failed" in output

    def test_apply_result_errors(self):
        c = _make_console()
        c.print_apply_result(ApplyResult(success=1, failed=1, errors=["commands/x.md: boom"]))
        output = _get_output(c)
        assert "Sync completed with errors" in output
        assert "commands/x.md: boom" in output

    def test_progress_only_verbose(self):
        quiet = _make_console()
        quiet.print_progress("commands/a.md", "adding")
        assert _get_output(quiet) == ""

        loud = _make_console(verbose=True)
        loud.print_progress("commands/a.md", "adding")
        assert "adding commands/a.md" in _get_output(loud)

    def test_install_result(self):
        c = _make_console()
        c.print_install_result(InstallResult(files_copied={"commands": 4}, hooks_merged=2, errors=["song: denied"]))
        output = _get_output(c)
        assert "4 files" in output
        assert "kept" in output
        assert "song: denied" in output

    def test_dependency_results(self):
        c = _make_console()
        c.print_dependency_results(
            [
                DependencyResult(Path("/t/scripts/a"), "bun", True),
                DependencyResult(Path("/t/scripts/b"), None, False, "neither bun nor npm is installed"),
            ]
        )
        output = _get_output(c)
        assert "bun install in /t/scripts/a" in output
        assert "Dependency install failed in /t/scripts/b" in output

    def test_backups(self, temp_dir):
        path = temp_dir / "2025-01-01-10-00-00"
        (path / "commands").mkdir(parents=True)
        (path / "settings.json").write_text("{}", encoding="utf-8")

        c = _make_console()
        c.print_backups(
            [BackupInfo(path.name, path, datetime(2025, 1, 1, 10, 0))],
            now=datetime(2025, 1, 1, 12, 0),
        )
        output = _get_output(c)
        assert "2025-01-01-10-00-00" in output
        assert "2 hours ago" in output
        assert "commands, settings.json" in output

    def test_no_backups(self):
        c = _make_console()
        c.print_backups([])
        assert "No backups found" in _get_output(c)

    def test_link_results(self):
        c = _make_console()
        c.print_link_results(
            [
                LinkResult(PeerTool.CODEX, "commands", Path("/h/.claude/commands"), Path("/h/.codex/prompts"), True),
                LinkResult(
                    PeerTool.FACTORYAI, "agents", Path("/h/.claude/agents"), Path("/h/.factory/droids"), False, "in the way"
                ),
            ]
        )
        output = _get_output(c)
        assert "Codex (commands)" in output
        assert "FactoryAI (agents): in the way" in output
        assert "1 created, 1 skipped" in output


class TestConfirm:
    """Tests for confirm()."""

    def test_answers(self, monkeypatch):
        c = _make_console()
        for answer, expected in (("y", True), ("yes", True), ("n", False), ("", False)):
            monkeypatch.setattr("builtins.input", lambda *args, answer=answer: answer)
            assert c.confirm("Apply?") is expected

    def test_default_yes(self, monkeypatch):
        c = _make_console()
        monkeypatch.setattr("builtins.input", lambda *args: "")
        assert c.confirm("Apply?", default=True) is True

    def test_prompt_shows_choices(self, monkeypatch):
        c = _make_console()
        monkeypatch.setattr("builtins.input", lambda *args: "n")
        c.confirm("Apply?")
        assert "Apply? [y/N]: " in _get_output(c)


def test_create_console():
    console = create_console(verbose=True, colored=False)
    assert isinstance(console, Console)
    assert console.verbose is True
