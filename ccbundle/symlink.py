# CCBundle Peer Tool Symlinks
# Share commands and agents with other coding assistants

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from ccbundle.config.schema import PeerTool
from ccbundle.utils.paths import ensure_dir, expand_path

logger = logging.getLogger(__name__)


class ContentType(str, Enum):
    """Content that can be linked between tools."""

    COMMANDS = "commands"
    AGENTS = "agents"
    BOTH = "both"

    @property
    def includes_commands(self) -> bool:
        return self in (ContentType.COMMANDS, ContentType.BOTH)

    @property
    def includes_agents(self) -> bool:
        return self in (ContentType.AGENTS, ContentType.BOTH)


@dataclass(frozen=True)
class ToolPaths:
    """Where a tool keeps its commands and agents (None if unsupported)."""

    tool: PeerTool
    root: Path
    commands: Optional[Path]
    agents: Optional[Path]


@dataclass(frozen=True)
class LinkResult:
    """Outcome of one symlink request."""

    tool: PeerTool
    content: str
    source: Path
    target: Path
    created: bool
    message: str = ""


TOOL_LABELS: dict[PeerTool, str] = {
    PeerTool.CLAUDE_CODE: "Claude Code",
    PeerTool.CODEX: "Codex",
    PeerTool.OPENCODE: "OpenCode",
    PeerTool.FACTORYAI: "FactoryAI",
}


def get_tool_paths(tool: PeerTool, custom_folder: Optional[str | Path] = None, *, home: Optional[Path] = None) -> ToolPaths:
    """
    Resolve command and agent folders of a tool.

    Args:
        tool: Tool to resolve.
        custom_folder: Tool config folder overriding the default location.
        home: Home directory (default ``Path.home()``).

    Returns:
        ToolPaths for the tool.
    """
    home = home or Path.home()

    if tool == PeerTool.CLAUDE_CODE:
        root = expand_path(custom_folder) if custom_folder else home / ".claude"
        return ToolPaths(tool, root, root / "commands", root / "agents")
    if tool == PeerTool.CODEX:
        root = expand_path(custom_folder) if custom_folder else home / ".codex"
        return ToolPaths(tool, root, root / "prompts", None)
    if tool == PeerTool.OPENCODE:
        root = expand_path(custom_folder) if custom_folder else home / ".config" / "opencode"
        return ToolPaths(tool, root, root / "command", None)
    if tool == PeerTool.FACTORYAI:
        root = expand_path(custom_folder) if custom_folder else home / ".factory"
        return ToolPaths(tool, root, root / "commands", root / "droids")
    raise ValueError(f"Unknown tool: {tool}")


def create_symlink(source: Path, target: Path) -> bool:
    """
    Point ``target`` at ``source``.

    An existing symlink at ``target`` is replaced. A real file or directory
    is left untouched.

    Args:
        source: Directory the link points to.
        target: Link path.

    Returns:
        True if the link was created, False if something else is in the way.
    """
    if target.is_symlink():
        target.unlink()
    elif target.exists():
        logger.debug("%s exists and is not a symlink", target)
        return False

    ensure_dir(target.parent)
    target.symlink_to(source, target_is_directory=True)
    return True


def link_tools(
    source_tool: PeerTool,
    destinations: Iterable[PeerTool],
    content: ContentType = ContentType.COMMANDS,
    *,
    custom_folders: Optional[Mapping[PeerTool, Optional[str]]] = None,
    home: Optional[Path] = None,
) -> list[LinkResult]:
    """
    Link a source tool's commands and/or agents into other tools.

    Destinations that do not support a content type are skipped silently.

    Args:
        source_tool: Tool that owns the content.
        destinations: Tools receiving the links.
        content: What to link.
        custom_folders: Per-tool config folder overrides.
        home: Home directory.

    Returns:
        One LinkResult per attempted link.
    """
    folders = custom_folders or {}
    source = get_tool_paths(source_tool, folders.get(source_tool), home=home)
    results: list[LinkResult] = []

    for dest_tool in destinations:
        if dest_tool == source_tool:
            continue
        dest = get_tool_paths(dest_tool, folders.get(dest_tool), home=home)

        pairs = []
        if content.includes_commands:
            pairs.append(("commands", source.commands, dest.commands))
        if content.includes_agents:
            pairs.append(("agents", source.agents, dest.agents))

        for label, source_path, target_path in pairs:
            if source_path is None or target_path is None:
                continue
            try:
                created = create_symlink(source_path, target_path)
            except OSError as e:
                results.append(LinkResult(dest_tool, label, source_path, target_path, False, str(e)))
                continue
            message = "" if created else "path already exists and is not a symlink"
            results.append(LinkResult(dest_tool, label, source_path, target_path, created, message))

    return results
