# CCBundle Hook Sync
# Classification and merge of hook declarations in settings.json

import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any, Optional

from ccbundle.errors import SettingsError
from ccbundle.remote.github import GitHubClient
from ccbundle.sync.item import ApplyResult, HookSyncItem, SyncStatus
from ccbundle.sync.settings import SETTINGS_FILE, SettingsDocument, load_settings, parse_settings, save_settings
from ccbundle.sync.transform import DEFAULT_TOOL_DIR, transform_hook
from ccbundle.utils.platform import PlatformContext

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str], None]


def fetch_remote_settings(client: GitHubClient) -> Optional[dict[str, Any]]:
    """
    Download and parse the bundle's settings.json.

    Returns:
        Parsed document, or None if the bundle has no settings.json.

    Raises:
        RemoteFetchError: If the download fails.
        SettingsError: If the document is not a valid JSON object.
    """
    content = client.fetch_file(SETTINGS_FILE)
    if content is None:
        logger.debug("Remote bundle has no %s", SETTINGS_FILE)
        return None

    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise SettingsError(f"Remote {SETTINGS_FILE} is not UTF-8 text") from e

    return parse_settings(text, source=f"remote {SETTINGS_FILE}").to_dict()


def classify_hooks(
    remote_settings: dict[str, Any],
    local_settings: SettingsDocument,
    target_dir: Path,
    platform: PlatformContext,
    *,
    tool_dir: str = DEFAULT_TOOL_DIR,
) -> list[HookSyncItem]:
    """
    Classify remote hook declarations against the local settings.

    Declarations are keyed by hook type and matcher (an absent matcher
    counts as empty). The remote declaration is transformed for this
    machine before comparison, so an already applied hook is unchanged.

    Args:
        remote_settings: Parsed remote settings.json.
        local_settings: Local settings document.
        target_dir: Local target directory.
        platform: Resolved platform context.
        tool_dir: Tool directory name baked into authored paths.

    Returns:
        Items for new and modified declarations only.
    """
    remote_hooks = remote_settings.get("hooks") or {}
    if not isinstance(remote_hooks, dict):
        raise SettingsError("Remote 'hooks' must be a JSON object")

    items: list[HookSyncItem] = []
    for hook_type, declarations in remote_hooks.items():
        if not isinstance(declarations, list):
            continue

        for declaration in declarations:
            if not isinstance(declaration, dict):
                continue

            matcher = declaration.get("matcher") or ""
            local = local_settings.find_hook(hook_type, matcher)

            if local is None:
                status = SyncStatus.NEW
            elif local != transform_hook(declaration, target_dir, platform, tool_dir):
                status = SyncStatus.MODIFIED
            else:
                continue

            items.append(
                HookSyncItem(
                    hook_type=hook_type,
                    matcher=matcher,
                    status=status,
                    remote_hook=declaration,
                    local_hook=local,
                )
            )

    return items


def apply_hooks(
    target_dir: Path,
    hooks: Iterable[HookSyncItem],
    platform: PlatformContext,
    *,
    tool_dir: str = DEFAULT_TOOL_DIR,
    on_progress: Optional[ProgressCallback] = None,
) -> ApplyResult:
    """
    Merge selected hook declarations into the local settings.json.

    Each declaration is transformed, then replaces the entry with the same
    matcher in its hook-type array or is appended. Unrelated entries and
    top-level keys are kept. The document is written once, atomically.

    Args:
        target_dir: Local target directory.
        hooks: Approved hook items.
        platform: Resolved platform context.
        tool_dir: Tool directory name baked into authored paths.
        on_progress: Optional ``(path, action)`` callback.

    Returns:
        ApplyResult with one success per merged declaration.

    Raises:
        SettingsError: If the local settings.json cannot be parsed.
    """
    hooks = list(hooks)
    result = ApplyResult()
    if not hooks:
        return result

    settings_path = target_dir / SETTINGS_FILE
    document = load_settings(settings_path)

    for hook in hooks:
        if on_progress:
            on_progress(hook.selection_key, "adding" if hook.status == SyncStatus.NEW else "updating")

        transformed = transform_hook(hook.remote_hook, target_dir, platform, tool_dir)
        document.upsert_hook(hook.hook_type, transformed)
        result.success += 1

    try:
        save_settings(settings_path, document)
    except OSError as e:
        logger.debug("Failed to write %s: %s", settings_path, e)
        return ApplyResult(failed=len(hooks), errors=[f"{SETTINGS_FILE}: {e}"])

    return result
