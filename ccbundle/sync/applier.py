# CCBundle Selective Applier
# Writes approved file changes into the target tree

import logging
import os
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Optional

from ccbundle.errors import BundleError
from ccbundle.remote.github import GitHubClient
from ccbundle.sync.item import ApplyResult, SyncItem, SyncStatus
from ccbundle.sync.state import SyncState
from ccbundle.sync.transform import DEFAULT_TOOL_DIR, is_text_file, transform_file_content
from ccbundle.utils.hashing import blob_hash, file_hash
from ccbundle.utils.paths import atomic_write, is_relative_to, safe_delete
from ccbundle.utils.platform import PlatformContext

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str], None]

_ACTIONS = {
    SyncStatus.NEW: "adding",
    SyncStatus.MODIFIED: "updating",
    SyncStatus.DELETED: "deleting",
}


def apply_items(
    client: GitHubClient,
    target_dir: Path,
    items: Iterable[SyncItem],
    platform: PlatformContext,
    *,
    tool_dir: str = DEFAULT_TOOL_DIR,
    on_progress: Optional[ProgressCallback] = None,
    state: Optional[SyncState] = None,
) -> ApplyResult:
    """
    Apply approved file changes.

    Deleted items are removed from the target tree; new and modified items
    are downloaded and written, text files through the content transformer.
    A failing item is counted and the batch continues. When ``state`` is
    given, every written file is recorded with its upstream blob hash and
    deleted paths are forgotten.

    Args:
        client: Remote client for the bundle.
        target_dir: Local target directory.
        items: Approved items (unchanged items are skipped).
        platform: Resolved platform context.
        tool_dir: Tool directory name baked into authored paths.
        on_progress: Optional ``(path, action)`` callback.
        state: Sync state updated in place.

    Returns:
        ApplyResult tally.
    """
    result = ApplyResult()
    root = Path(os.path.normpath(target_dir.absolute()))

    for item in items:
        action = _ACTIONS.get(item.status)
        if action is None:
            continue

        if on_progress:
            on_progress(item.relative_path, action)

        destination = Path(os.path.normpath(root / item.relative_path))
        if not is_relative_to(destination, root) or destination == root:
            result.failed += 1
            result.errors.append(f"{item.relative_path}: path escapes target directory")
            continue

        try:
            if item.status == SyncStatus.DELETED:
                safe_delete(destination, missing_ok=True)
                result.deleted += 1
                if state is not None:
                    state.remove_item(item.relative_path)
                continue

            content = _write_item(client, destination, item, target_dir, platform, tool_dir)
            if content is None:
                result.failed += 1
                result.errors.append(f"{item.relative_path}: not found upstream")
                continue

            if state is not None:
                state.set_item(item.relative_path, blob_hash(content), file_hash(destination) or "")
            result.success += 1
        except (BundleError, OSError, UnicodeDecodeError) as e:
            logger.debug("Failed %s %s: %s", action, item.relative_path, e)
            result.failed += 1
            result.errors.append(f"{item.relative_path}: {e}")

    return result


def _write_item(
    client: GitHubClient,
    destination: Path,
    item: SyncItem,
    target_dir: Path,
    platform: PlatformContext,
    tool_dir: str,
) -> Optional[bytes]:
    """Download one file and write it, returning the upstream bytes or None when missing."""
    content = client.fetch_file(item.relative_path)
    if content is None:
        return None

    if is_text_file(item.name):
        text = transform_file_content(content.decode("utf-8"), target_dir, platform, tool_dir)
        atomic_write(destination, text)
    else:
        atomic_write(destination, content)
    return content
