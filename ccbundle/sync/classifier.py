# CCBundle Change Classifier
# Three-way comparison of remote listings against the local target tree

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ccbundle.config.schema import Category
from ccbundle.remote.github import GitHubClient, RemoteEntry
from ccbundle.sync.hooks import classify_hooks, fetch_remote_settings
from ccbundle.sync.item import HookSyncItem, SyncItem, SyncStatus
from ccbundle.sync.settings import SETTINGS_FILE, load_settings
from ccbundle.sync.state import SyncState
from ccbundle.utils.hashing import file_hash
from ccbundle.utils.paths import DEFAULT_IGNORE, list_local_tree
from ccbundle.utils.platform import PlatformContext

logger = logging.getLogger(__name__)


@dataclass
class SyncAnalysis:
    """Result of comparing the remote bundle with the target tree."""

    items: list[SyncItem] = field(default_factory=list)
    hooks: list[HookSyncItem] = field(default_factory=list)

    def _count(self, status: SyncStatus) -> int:
        return sum(1 for item in self.items if item.status == status) + sum(
            1 for hook in self.hooks if hook.status == status
        )

    @property
    def new_count(self) -> int:
        return self._count(SyncStatus.NEW)

    @property
    def modified_count(self) -> int:
        return self._count(SyncStatus.MODIFIED)

    @property
    def deleted_count(self) -> int:
        return self._count(SyncStatus.DELETED)

    @property
    def unchanged_count(self) -> int:
        return self._count(SyncStatus.UNCHANGED)

    @property
    def changed_items(self) -> list[SyncItem]:
        """Items that are not unchanged."""
        return [item for item in self.items if item.status != SyncStatus.UNCHANGED]

    @property
    def changed_hooks(self) -> list[HookSyncItem]:
        return [hook for hook in self.hooks if hook.status != SyncStatus.UNCHANGED]

    @property
    def has_changes(self) -> bool:
        return bool(self.changed_items or self.changed_hooks)


@dataclass
class FolderSummary:
    """Per top-level folder counts for folder-shaped categories."""

    category: Category
    name: str
    new: int = 0
    modified: int = 0
    deleted: int = 0
    unchanged: int = 0

    @property
    def status(self) -> SyncStatus:
        """Overall status of the folder as a unit."""
        if self.new and not (self.modified or self.deleted or self.unchanged):
            return SyncStatus.NEW
        if self.deleted and not (self.new or self.modified or self.unchanged):
            return SyncStatus.DELETED
        if self.new or self.modified or self.deleted:
            return SyncStatus.MODIFIED
        return SyncStatus.UNCHANGED


def classify_category(
    category: Category,
    remote_entries: Iterable[RemoteEntry],
    local_root: Path,
    *,
    ignore: frozenset[str] | set[str] = DEFAULT_IGNORE,
    state: Optional[SyncState] = None,
) -> list[SyncItem]:
    """
    Classify every file of one category.

    Remote files become ``new`` when absent locally, otherwise ``modified`` or
    ``unchanged`` by blob hash. Local paths known to neither the remote files
    nor the remote directories become ``deleted``; paths below an already
    deleted directory are not reported separately. A file whose hash differs
    from the remote blob still counts as ``unchanged`` when ``state`` shows
    ccbundle wrote it from that same blob and it was not edited since.

    Args:
        category: Category being classified.
        remote_entries: Recursive remote listing of the category.
        local_root: Local directory of the category.
        ignore: Entry names skipped on the local side.
        state: Recorded hashes of files written by earlier syncs.

    Returns:
        Classified items, remote files first, then deletions.
    """
    items: list[SyncItem] = []
    remote_files: set[str] = set()
    remote_dirs: set[str] = set()

    for entry in remote_entries:
        if entry.is_folder:
            remote_dirs.add(entry.relative_path)
            continue

        remote_files.add(entry.relative_path)
        local_hash = file_hash(local_root / entry.relative_path)

        if local_hash is None:
            status = SyncStatus.NEW
        elif local_hash == entry.sha:
            status = SyncStatus.UNCHANGED
        elif state is not None and state.matches(f"{category.value}/{entry.relative_path}", entry.sha, local_hash):
            status = SyncStatus.UNCHANGED
        else:
            status = SyncStatus.MODIFIED

        items.append(
            SyncItem(
                name=entry.relative_path,
                category=category,
                status=status,
                remote_hash=entry.sha,
                local_hash=local_hash,
            )
        )

    deleted_dirs: list[str] = []
    for local in list_local_tree(local_root, ignore=ignore):
        path = local.relative_path
        if path in remote_files or path in remote_dirs:
            continue
        if any(path.startswith(f"{parent}/") for parent in deleted_dirs):
            continue

        if local.is_dir:
            deleted_dirs.append(path)

        items.append(
            SyncItem(
                name=path,
                category=category,
                status=SyncStatus.DELETED,
                is_folder=local.is_dir,
                local_hash=None if local.is_dir else file_hash(local_root / path),
            )
        )

    return items


def analyze_changes(
    client: GitHubClient,
    target_dir: Path,
    platform: PlatformContext,
    *,
    categories: Optional[Sequence[Category]] = None,
    ignore: frozenset[str] | set[str] = DEFAULT_IGNORE,
    include_hooks: bool = True,
    tool_dir: str = ".claude",
    state: Optional[SyncState] = None,
) -> SyncAnalysis:
    """
    Compare the remote bundle with the target tree.

    A category missing upstream (or listed empty) yields no items, so its
    local files are never reported as deleted.

    Args:
        client: Remote client for the bundle.
        target_dir: Local target directory.
        platform: Resolved platform context, used to transform hooks.
        categories: Categories to compare (all by default).
        ignore: Entry names skipped on both sides.
        include_hooks: Also classify settings.json hooks.
        tool_dir: Tool directory name baked into authored paths.
        state: Recorded hashes of files written by earlier syncs.

    Returns:
        SyncAnalysis with every item classified.

    Raises:
        RemoteListingError: If any category listing fails.
        SettingsError: If a settings document cannot be parsed.
    """
    analysis = SyncAnalysis()

    for category in categories or list(Category):
        logger.debug("Classifying %s", category.value)
        remote_entries = client.list_recursive(category.value)
        if not remote_entries:
            logger.debug("%s missing or empty upstream, skipped", category.value)
            continue
        analysis.items.extend(
            classify_category(category, remote_entries, target_dir / category.value, ignore=ignore, state=state)
        )

    if include_hooks:
        remote_settings = fetch_remote_settings(client)
        if remote_settings is not None:
            local_settings = load_settings(target_dir / SETTINGS_FILE)
            analysis.hooks.extend(
                classify_hooks(remote_settings, local_settings, target_dir, platform, tool_dir=tool_dir)
            )

    return analysis


def group_by_category(items: Iterable[SyncItem]) -> dict[Category, list[SyncItem]]:
    """Group items by category, keeping category declaration order."""
    grouped: dict[Category, list[SyncItem]] = {}
    for item in items:
        grouped.setdefault(item.category, []).append(item)
    return {category: grouped[category] for category in Category if category in grouped}


def summarize_folders(items: Iterable[SyncItem], category: Category) -> list[FolderSummary]:
    """
    Aggregate a folder-shaped category per top-level folder.

    Args:
        items: Classified items (other categories are ignored).
        category: Category to summarize, typically skills or scripts.

    Returns:
        One summary per top-level name, sorted by name.
    """
    summaries: dict[str, FolderSummary] = {}
    for item in items:
        if item.category != category:
            continue
        summary = summaries.setdefault(item.top_level, FolderSummary(category=category, name=item.top_level))
        if item.status == SyncStatus.NEW:
            summary.new += 1
        elif item.status == SyncStatus.MODIFIED:
            summary.modified += 1
        elif item.status == SyncStatus.DELETED:
            summary.deleted += 1
        else:
            summary.unchanged += 1
    return [summaries[name] for name in sorted(summaries)]
