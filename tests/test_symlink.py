# CCBundle Symlink Tests

from pathlib import Path

import pytest

from ccbundle.config.schema import PeerTool
from ccbundle.symlink import ContentType, create_symlink, get_tool_paths, link_tools


class TestGetToolPaths:
    """Tests for get_tool_paths()."""

    def test_defaults(self, temp_home):
        claude = get_tool_paths(PeerTool.CLAUDE_CODE, home=temp_home)
        assert claude.commands == temp_home / ".claude" / "commands"
        assert claude.agents == temp_home / ".claude" / "agents"

        assert get_tool_paths(PeerTool.CODEX, home=temp_home).commands == temp_home / ".codex" / "prompts"
        assert get_tool_paths(PeerTool.CODEX, home=temp_home).agents is None
        assert get_tool_paths(PeerTool.OPENCODE, home=temp_home).commands == (
            temp_home / ".config" / "opencode" / "command"
        )
        assert get_tool_paths(PeerTool.FACTORYAI, home=temp_home).agents == temp_home / ".factory" / "droids"

    def test_custom_folder(self, temp_home, temp_dir):
        paths = get_tool_paths(PeerTool.CODEX, temp_dir / "codex-home", home=temp_home)
        assert paths.root == temp_dir / "codex-home"
        assert paths.commands == temp_dir / "codex-home" / "prompts"


class TestCreateSymlink:
    """Tests for create_symlink()."""

    def test_creates_parents(self, temp_dir):
        source = temp_dir / "src"
        source.mkdir()
        target = temp_dir / "a" / "b" / "link"

        assert create_symlink(source, target) is True
        assert target.is_symlink()
        assert target.resolve() == source.resolve()

    def test_replaces_existing_link(self, temp_dir):
        old = temp_dir / "old"
        new = temp_dir / "new"
        old.mkdir()
        new.mkdir()
        target = temp_dir / "link"
        target.symlink_to(old, target_is_directory=True)

        assert create_symlink(new, target) is True
        assert target.resolve() == new.resolve()

    def test_keeps_real_directory(self, temp_dir):
        source = temp_dir / "src"
        source.mkdir()
        target = temp_dir / "real"
        target.mkdir()
        (target / "mine.md").write_text("x", encoding="utf-8")

        assert create_symlink(source, target) is False
        assert not target.is_symlink()
        assert (target / "mine.md").exists()


class TestLinkTools:
    """Tests for link_tools()."""

    @pytest.fixture
    def claude_home(self, temp_home: Path) -> Path:
        (temp_home / ".claude" / "commands").mkdir(parents=True)
        (temp_home / ".claude" / "agents").mkdir(parents=True)
        return temp_home

    def test_commands_into_codex_and_opencode(self, claude_home):
        results = link_tools(PeerTool.CLAUDE_CODE, [PeerTool.CODEX, PeerTool.OPENCODE], home=claude_home)

        assert [(r.tool, r.content, r.created) for r in results] == [
            (PeerTool.CODEX, "commands", True),
            (PeerTool.OPENCODE, "commands", True),
        ]
        assert (claude_home / ".codex" / "prompts").is_symlink()

    def test_both_skips_unsupported_agents(self, claude_home):
        results = link_tools(
            PeerTool.CLAUDE_CODE, [PeerTool.CODEX, PeerTool.FACTORYAI], ContentType.BOTH, home=claude_home
        )

        assert [(r.tool, r.content) for r in results] == [
            (PeerTool.CODEX, "commands"),
            (PeerTool.FACTORYAI, "commands"),
            (PeerTool.FACTORYAI, "agents"),
        ]
        assert (claude_home / ".factory" / "droids").resolve() == (claude_home / ".claude" / "agents").resolve()

    def test_source_tool_skipped(self, claude_home):
        assert link_tools(PeerTool.CLAUDE_CODE, [PeerTool.CLAUDE_CODE], home=claude_home) == []

    def test_blocked_by_real_directory(self, claude_home):
        (claude_home / ".codex" / "prompts").mkdir(parents=True)

        [result] = link_tools(PeerTool.CLAUDE_CODE, [PeerTool.CODEX], home=claude_home)

        assert result.created is False
        assert "not a symlink" in result.message

    def test_custom_folders(self, claude_home, temp_dir):
        results = link_tools(
            PeerTool.CLAUDE_CODE,
            [PeerTool.CODEX],
            custom_folders={PeerTool.CODEX: str(temp_dir / "codex")},
            home=claude_home,
        )
        assert results[0].target == temp_dir / "codex" / "prompts"
        assert results[0].target.is_symlink()


class TestContentType:
    """Tests for ContentType."""

    def test_flags(self):
        assert ContentType.BOTH.includes_commands and ContentType.BOTH.includes_agents
        assert not ContentType.COMMANDS.includes_agents
        assert not ContentType.AGENTS.includes_commands
