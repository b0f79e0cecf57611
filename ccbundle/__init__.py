"""ccbundle - configuration bundle installer for Claude Code.

Installs and incrementally updates commands, agents, skills, scripts and
hooks from a GitHub repository into ~/.claude, with backups and symlinks
for peer tools (Codex, OpenCode, FactoryAI).
"""

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "GitHubClient",
    "PlatformContext",
    "SyncAnalysis",
    "SyncItem",
    "HookSyncItem",
    "SyncStatus",
    "analyze_changes",
    "apply_items",
    "apply_hooks",
    "detect_platform",
]


def __getattr__(name: str):
    """Lazy import to avoid loading dependencies during setup."""
    if name == "GitHubClient":
        from ccbundle.remote import GitHubClient

        return GitHubClient
    if name in ("PlatformContext", "detect_platform"):
        from ccbundle.utils import platform

        return getattr(platform, name)
    if name in ("SyncAnalysis", "SyncItem", "HookSyncItem", "SyncStatus", "analyze_changes", "apply_items", "apply_hooks"):
        from ccbundle import sync

        return getattr(sync, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
