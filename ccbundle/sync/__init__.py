# CCBundle Sync Module
# Change analysis, transformation and selective apply

from ccbundle.sync.applier import apply_items
from ccbundle.sync.classifier import (
    FolderSummary,
    SyncAnalysis,
    analyze_changes,
    classify_category,
    group_by_category,
    summarize_folders,
)
from ccbundle.sync.hooks import apply_hooks, classify_hooks, fetch_remote_settings
from ccbundle.sync.item import ApplyResult, HookSyncItem, SyncItem, SyncStatus
from ccbundle.sync.selection import Selection, select_changes
from ccbundle.sync.settings import SettingsDocument, load_settings, save_settings
from ccbundle.sync.state import StateManager, SyncState
from ccbundle.sync.transform import (
    get_play_sound_command,
    is_text_file,
    transform_audio_command,
    transform_file_content,
    transform_hook,
    transform_path,
)

__all__ = [
    # Item
    "SyncItem",
    "HookSyncItem",
    "SyncStatus",
    "ApplyResult",
    # Classifier
    "SyncAnalysis",
    "FolderSummary",
    "analyze_changes",
    "classify_category",
    "group_by_category",
    "summarize_folders",
    # Selection
    "Selection",
    "select_changes",
    # Hooks
    "fetch_remote_settings",
    "classify_hooks",
    "apply_hooks",
    # Applier
    "apply_items",
    # Settings
    "SettingsDocument",
    "load_settings",
    "save_settings",
    # State
    "SyncState",
    "StateManager",
    # Transform
    "transform_path",
    "transform_audio_command",
    "transform_hook",
    "transform_file_content",
    "get_play_sound_command",
    "is_text_file",
]
