# CCBundle Configuration Schema
# Pydantic models for YAML configuration validation

import os
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ccbundle.utils.paths import DEFAULT_IGNORE


class Category(str, Enum):
    """Top-level content groups synced into the target tree."""

    COMMANDS = "commands"
    AGENTS = "agents"
    SKILLS = "skills"
    SCRIPTS = "scripts"


class PeerTool(str, Enum):
    """Coding assistants that can share commands/agents via symlinks."""

    CLAUDE_CODE = "claude-code"
    CODEX = "codex"
    OPENCODE = "opencode"
    FACTORYAI = "factoryai"


TOKEN_ENV_VARS: tuple[str, ...] = ("CCBUNDLE_GITHUB_TOKEN", "GITHUB_TOKEN")


class RemoteConfig(BaseModel):
    """GitHub repository that provides the configuration bundle."""

    repository: str = Field(default="Melvynx/aiblueprint-cli", description="owner/name of the repository")
    branch: str = Field(default="main", description="Branch to read from")
    base_path: str = Field(default="claude-code-config", description="Bundle root inside the repository")
    token: Optional[str] = Field(default=None, description="Token for private repositories")
    api_url: str = Field(default="https://api.github.com", description="Contents API base URL")
    raw_url: str = Field(default="https://raw.githubusercontent.com", description="Raw content base URL")
    timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")

    @field_validator("repository")
    @classmethod
    def validate_repository(cls, v: str) -> str:
        """Require owner/name form."""
        parts = v.strip().strip("/").split("/")
        if len(parts) != 2 or not all(parts):
            raise ValueError("repository must be in 'owner/name' form")
        return "/".join(parts)

    @field_validator("base_path")
    @classmethod
    def strip_base_path(cls, v: str) -> str:
        """Normalize slashes around the base path."""
        return v.strip("/")

    @property
    def clone_url(self) -> str:
        """HTTPS clone URL of the repository."""
        return f"https://github.com/{self.repository}.git"

    def resolve_token(self) -> Optional[str]:
        """Token from config, falling back to environment variables."""
        if self.token:
            return self.token
        for var in TOKEN_ENV_VARS:
            value = os.environ.get(var)
            if value:
                return value
        return None


class TargetConfig(BaseModel):
    """Local tree being provisioned."""

    path: str = Field(default="~/.claude", validate_default=True, description="Target directory")
    tool_dir: str = Field(default=".claude", description="Directory name baked into authored paths")
    categories: list[Category] = Field(
        default_factory=lambda: list(Category),
        description="Categories to sync",
    )
    ignore: list[str] = Field(
        default_factory=lambda: sorted(DEFAULT_IGNORE),
        description="Entry names never compared or copied",
    )

    @field_validator("path")
    @classmethod
    def expand_path(cls, v: str) -> str:
        """Expand ~ in path."""
        return str(Path(v).expanduser())

    @property
    def ignore_set(self) -> frozenset[str]:
        return frozenset(self.ignore)


class BackupConfig(BaseModel):
    """Backup settings."""

    enabled: bool = Field(default=True, description="Back up before destructive operations")
    root: str = Field(default="~/.config/ccbundle/backup", validate_default=True, description="Backup root directory")

    @field_validator("root")
    @classmethod
    def expand_root(cls, v: str) -> str:
        """Expand ~ in path."""
        return str(Path(v).expanduser())


class CacheConfig(BaseModel):
    """Clone cache and external process settings."""

    dir: str = Field(default="~/.cache/ccbundle", validate_default=True, description="Directory for cached clones")
    git_timeout: float = Field(default=120.0, gt=0, description="Timeout for git clone/pull in seconds")
    install_timeout: float = Field(default=300.0, gt=0, description="Timeout for dependency installs in seconds")

    @field_validator("dir")
    @classmethod
    def expand_dir(cls, v: str) -> str:
        """Expand ~ in path."""
        return str(Path(v).expanduser())


class PeerToolsConfig(BaseModel):
    """Custom config folders for peer tools (None = tool default)."""

    codex: Optional[str] = Field(default=None, description="Codex folder (default ~/.codex)")
    opencode: Optional[str] = Field(default=None, description="OpenCode folder (default ~/.config/opencode)")
    factoryai: Optional[str] = Field(default=None, description="FactoryAI folder (default ~/.factory)")


class OutputConfig(BaseModel):
    """Output and logging configuration."""

    verbose: bool = Field(default=False, description="Enable verbose output")
    colored: bool = Field(default=True, description="Enable colored output")


class BundleConfig(BaseModel):
    """Root configuration model for ccbundle."""

    remote: RemoteConfig = Field(default_factory=RemoteConfig, description="Remote repository")
    target: TargetConfig = Field(default_factory=TargetConfig, description="Local target tree")
    backup: BackupConfig = Field(default_factory=BackupConfig, description="Backup settings")
    cache: CacheConfig = Field(default_factory=CacheConfig, description="Clone cache settings")
    peers: PeerToolsConfig = Field(default_factory=PeerToolsConfig, description="Peer tool folders")
    output: OutputConfig = Field(default_factory=OutputConfig, description="Output settings")

    @property
    def target_dir(self) -> Path:
        return Path(self.target.path)

    @property
    def backup_root(self) -> Path:
        return Path(self.backup.root)
