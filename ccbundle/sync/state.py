# CCBundle Sync State
# Remembers which upstream blob each installed file was written from

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import yaml

from ccbundle.utils.paths import atomic_write

logger = logging.getLogger(__name__)

STATE_FILE = ".ccbundle-state.yaml"


@dataclass
class ItemState:
    """Hashes recorded when a file was last written by ccbundle."""

    remote_hash: str
    local_hash: str
    last_synced: Optional[str] = None  # ISO format datetime

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ItemState":
        return cls(
            remote_hash=str(data.get("remote_hash", "")),
            local_hash=str(data.get("local_hash", "")),
            last_synced=data.get("last_synced"),
        )


@dataclass
class SyncState:
    """
    Per-target record of installed files, keyed by ``category/path``.

    Transformed text files never hash like their upstream blob. A file still
    holding exactly the bytes ccbundle wrote from a given blob is treated as
    matching that blob.
    """

    version: str = "1"
    last_sync: Optional[str] = None
    items: dict[str, ItemState] = field(default_factory=dict)

    def get_item(self, relative_path: str) -> Optional[ItemState]:
        return self.items.get(relative_path)

    def set_item(self, relative_path: str, remote_hash: str, local_hash: str) -> ItemState:
        item = ItemState(remote_hash=remote_hash, local_hash=local_hash, last_synced=datetime.now().isoformat())
        self.items[relative_path] = item
        return item

    def remove_item(self, relative_path: str) -> int:
        """Forget a file, or every file below a directory. Returns the count removed."""
        prefix = f"{relative_path}/"
        keys = [key for key in self.items if key == relative_path or key.startswith(prefix)]
        for key in keys:
            del self.items[key]
        return len(keys)

    def matches(self, relative_path: str, remote_hash: Optional[str], local_hash: Optional[str]) -> bool:
        """True if the local file is ccbundle's untouched rendering of ``remote_hash``."""
        item = self.items.get(relative_path)
        if item is None or remote_hash is None or local_hash is None:
            return False
        return item.remote_hash == remote_hash and item.local_hash == local_hash

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "last_sync": self.last_sync,
            "items": {key: item.to_dict() for key, item in sorted(self.items.items())},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SyncState":
        items = {}
        for key, item_data in (data.get("items") or {}).items():
            if isinstance(item_data, dict):
                items[str(key)] = ItemState.from_dict(item_data)

        return cls(
            version=str(data.get("version", "1")),
            last_sync=data.get("last_sync"),
            items=items,
        )


class StateManager:
    """
    Loads and saves the sync state of one target tree.

    The state file lives in the target directory, next to settings.json.
    """

    def __init__(self, target_dir: Path, state_path: Optional[Path] = None):
        self.state_path = state_path or target_dir / STATE_FILE
        self._state: Optional[SyncState] = None

    @property
    def state(self) -> SyncState:
        """Current state, loaded on first access."""
        if self._state is None:
            self._state = self.load()
        return self._state

    def load(self) -> SyncState:
        """
        Load state from disk.

        A missing file is an empty state. An unreadable file is logged and
        treated as empty, which only makes transformed files show as modified.
        """
        if not self.state_path.is_file():
            return SyncState()

        try:
            data = yaml.safe_load(self.state_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            logger.warning("Ignoring unreadable sync state %s: %s", self.state_path, e)
            return SyncState()

        if not isinstance(data, dict):
            return SyncState()
        return SyncState.from_dict(data)

    def save(self) -> None:
        """Write the state, stamping the sync time."""
        state = self.state
        state.last_sync = datetime.now().isoformat()
        content = yaml.dump(state.to_dict(), default_flow_style=False, sort_keys=False, allow_unicode=True)
        atomic_write(self.state_path, content)
