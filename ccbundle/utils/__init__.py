# CCBundle Utilities Module
# Helper functions for path handling, hashing and platform detection

from ccbundle.utils.hashing import (
    blob_hash,
    file_hash,
    folder_hash,
)
from ccbundle.utils.paths import (
    DEFAULT_IGNORE,
    LocalEntry,
    atomic_write,
    copy_tree,
    ensure_dir,
    expand_path,
    list_local_tree,
    safe_delete,
    walk_tree,
)
from ccbundle.utils.platform import (
    PlatformContext,
    detect_platform,
    get_current_platform,
    is_path_safe_for_shell,
    quote_shell_arg,
)

__all__ = [
    # Platform
    "PlatformContext",
    "detect_platform",
    "get_current_platform",
    "is_path_safe_for_shell",
    "quote_shell_arg",
    # Paths
    "DEFAULT_IGNORE",
    "LocalEntry",
    "expand_path",
    "ensure_dir",
    "walk_tree",
    "list_local_tree",
    "copy_tree",
    "safe_delete",
    "atomic_write",
    # Hashing
    "blob_hash",
    "file_hash",
    "folder_hash",
]
