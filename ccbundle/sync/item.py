# CCBundle Sync Items
# Classified files and hooks produced by change analysis

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from ccbundle.config.schema import Category


class SyncStatus(str, Enum):
    """Classification of an item against the remote bundle."""

    NEW = "new"
    MODIFIED = "modified"
    UNCHANGED = "unchanged"
    DELETED = "deleted"


@dataclass
class SyncItem:
    """
    A file (or deleted directory) inside a tracked category.

    ``name`` is relative to the category root, e.g. ``foo/bar.ts`` in
    ``scripts``. ``is_folder`` is only set on deleted directories.
    """

    name: str
    category: Category
    status: SyncStatus
    is_folder: bool = False
    remote_hash: Optional[str] = None
    local_hash: Optional[str] = None

    @property
    def relative_path(self) -> str:
        """Path relative to the target tree root."""
        return f"{self.category.value}/{self.name}"

    @property
    def top_level(self) -> str:
        """First path component below the category root."""
        return self.name.split("/", 1)[0]


@dataclass
class HookSyncItem:
    """A hook declaration that is new or differs from the local settings."""

    hook_type: str
    matcher: str
    status: SyncStatus
    remote_hook: dict[str, Any] = field(default_factory=dict)
    local_hook: Optional[dict[str, Any]] = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.hook_type, self.matcher)

    @property
    def label(self) -> str:
        """Display label, ``*`` standing in for an empty matcher."""
        return f"{self.hook_type}[{self.matcher or '*'}]"

    @property
    def selection_key(self) -> str:
        return f"settings.json:{self.label}"


@dataclass
class ApplyResult:
    """Tally of an apply pass."""

    success: int = 0
    failed: int = 0
    deleted: int = 0
    errors: list[str] = field(default_factory=list)

    def __add__(self, other: "ApplyResult") -> "ApplyResult":
        return ApplyResult(
            success=self.success + other.success,
            failed=self.failed + other.failed,
            deleted=self.deleted + other.deleted,
            errors=self.errors + other.errors,
        )

    @property
    def total(self) -> int:
        return self.success + self.failed + self.deleted

    @property
    def ok(self) -> bool:
        return self.failed == 0
