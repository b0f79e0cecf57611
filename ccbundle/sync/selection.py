# CCBundle Change Selection
# Picks the user-approved subset of an analysis

import fnmatch
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Optional

from ccbundle.sync.classifier import SyncAnalysis
from ccbundle.sync.item import HookSyncItem, SyncItem, SyncStatus


@dataclass
class Selection:
    """Items and hooks approved for applying."""

    items: list[SyncItem] = field(default_factory=list)
    hooks: list[HookSyncItem] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.items and not self.hooks

    @property
    def count(self) -> int:
        return len(self.items) + len(self.hooks)


def _item_matches(item: SyncItem, patterns: Sequence[str]) -> bool:
    folder = f"{item.category.value}/{item.top_level}"
    return any(
        fnmatch.fnmatchcase(item.relative_path, pattern) or fnmatch.fnmatchcase(folder, pattern)
        for pattern in patterns
    )


def _hook_matches(hook: HookSyncItem, patterns: Sequence[str]) -> bool:
    return any(
        fnmatch.fnmatchcase(hook.selection_key, pattern) or fnmatch.fnmatchcase("settings.json", pattern)
        for pattern in patterns
    )


def select_changes(
    analysis: SyncAnalysis,
    *,
    include_deleted: bool = False,
    patterns: Optional[Sequence[str]] = None,
) -> Selection:
    """
    Select the changes to apply.

    Without patterns every new and modified item is selected (plus deletions
    when ``include_deleted`` is set). With patterns only matching changes are
    selected; a pattern matches an item's path (``commands/foo.md``), its
    top-level folder (``skills/foo``) or a hook key
    (``settings.json:PreToolUse[Bash]``). Hooks are never deleted.

    Args:
        analysis: Classified changes.
        include_deleted: Also select deletions.
        patterns: Optional fnmatch patterns.

    Returns:
        Selection of items and hooks.
    """
    wanted = {SyncStatus.NEW, SyncStatus.MODIFIED}
    if include_deleted:
        wanted.add(SyncStatus.DELETED)

    items = [item for item in analysis.items if item.status in wanted]
    hooks = [hook for hook in analysis.hooks if hook.status in wanted]

    if patterns:
        items = [item for item in items if _item_matches(item, patterns)]
        hooks = [hook for hook in hooks if _hook_matches(hook, patterns)]

    return Selection(items=items, hooks=hooks)
