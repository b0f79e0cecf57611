# CCBundle Backup
# Timestamped snapshots of the tracked parts of the target tree

import logging
import re
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from ccbundle.sync.state import STATE_FILE
from ccbundle.utils.paths import copy_tree, ensure_dir, safe_delete

logger = logging.getLogger(__name__)

# Entries of the target tree that are copied into a backup and restored from it
BACKUP_ITEMS: tuple[str, ...] = ("commands", "agents", "skills", "scripts", "song", "settings.json")

BACKUP_NAME_FORMAT = "%Y-%m-%d-%H-%M-%S"

# Timestamp, plus "-N" (N >= 2) for later backups taken in the same second
_BACKUP_NAME_RE = re.compile(r"^(\d{4}-\d{2}-\d{2}-\d{2}-\d{2}-\d{2})(?:-([2-9]|[1-9]\d+))?$")

# Directory entries that do not count as content
_NOISE_ENTRIES = frozenset({".DS_Store", STATE_FILE})


@dataclass(frozen=True)
class BackupInfo:
    """A backup directory found under the backup root."""

    name: str
    path: Path
    date: datetime


def get_backup_root() -> Path:
    """Default backup root directory."""
    return Path.home() / ".config" / "ccbundle" / "backup"


def parse_backup_name(name: str) -> Optional[datetime]:
    """
    Parse a backup directory name.

    Returns:
        Timestamp encoded in the name, or None if it does not match exactly.
    """
    match = _BACKUP_NAME_RE.match(name)
    if match is None:
        return None
    try:
        return datetime.strptime(match.group(1), BACKUP_NAME_FORMAT)
    except ValueError:
        return None


def _backup_sequence(name: str) -> int:
    match = _BACKUP_NAME_RE.match(name)
    return int(match.group(2)) if match and match.group(2) else 1


def _new_backup_path(root: Path, stamp: str) -> Path:
    """Create a fresh backup directory, never reusing an existing one."""
    ensure_dir(root)
    candidate = root / stamp
    sequence = 2
    while True:
        try:
            candidate.mkdir()
            return candidate
        except FileExistsError:
            candidate = root / f"{stamp}-{sequence}"
            sequence += 1


def _copy_item(source: Path, dest: Path) -> None:
    if source.is_dir():
        copy_tree(source, dest, ignore=frozenset())
    else:
        ensure_dir(dest.parent)
        shutil.copy2(source, dest)


def create_backup(
    target_dir: Path,
    backup_root: Optional[Path] = None,
    *,
    now: Optional[datetime] = None,
) -> Optional[Path]:
    """
    Snapshot the tracked items of a target tree.

    Args:
        target_dir: Target directory to back up.
        backup_root: Directory holding backups (default ``get_backup_root()``).
        now: Timestamp for the backup name (default current local time).

    Returns:
        Path of the new backup, or None if the target is missing or holds
        nothing but OS metadata.
    """
    if not target_dir.is_dir():
        return None

    if not any(entry.name not in _NOISE_ENTRIES for entry in target_dir.iterdir()):
        return None

    root = backup_root or get_backup_root()
    backup_path = _new_backup_path(root, (now or datetime.now()).strftime(BACKUP_NAME_FORMAT))

    for item in BACKUP_ITEMS:
        source = target_dir / item
        if source.exists():
            _copy_item(source, backup_path / item)

    logger.debug("Backed up %s to %s", target_dir, backup_path)
    return backup_path


def list_backups(backup_root: Optional[Path] = None) -> list[BackupInfo]:
    """
    List backups, newest first.

    Entries whose name is not a backup timestamp are ignored.

    Args:
        backup_root: Directory holding backups (default ``get_backup_root()``).

    Returns:
        BackupInfo list, empty if the root does not exist.
    """
    root = backup_root or get_backup_root()
    if not root.is_dir():
        return []

    backups: list[BackupInfo] = []
    for entry in root.iterdir():
        if not entry.is_dir():
            continue
        date = parse_backup_name(entry.name)
        if date is not None:
            backups.append(BackupInfo(name=entry.name, path=entry, date=date))

    backups.sort(key=lambda b: (b.date, _backup_sequence(b.name)), reverse=True)
    return backups


def load_backup(backup_path: Path, target_dir: Path) -> list[str]:
    """
    Restore a backup into the target tree.

    Tracked directories present in the backup replace their counterpart
    wholesale; settings.json is overwritten. Items absent from the backup
    are left alone.

    Args:
        backup_path: Backup directory.
        target_dir: Target directory to restore into.

    Returns:
        Names of the restored items.

    Raises:
        FileNotFoundError: If the backup directory does not exist.
    """
    if not backup_path.is_dir():
        raise FileNotFoundError(f"Backup not found: {backup_path}")

    ensure_dir(target_dir)
    restored: list[str] = []

    for item in BACKUP_ITEMS:
        source = backup_path / item
        if not source.exists():
            continue

        dest = target_dir / item
        if source.is_dir():
            safe_delete(dest, missing_ok=True)
        _copy_item(source, dest)
        restored.append(item)

    return restored


def format_backup_age(date: datetime, now: Optional[datetime] = None) -> str:
    """Human readable age of a backup, e.g. ``3 hours ago``."""
    delta = (now or datetime.now()) - date
    minutes = int(delta.total_seconds() // 60)

    if minutes < 60:
        value, unit = minutes, "minute"
    elif minutes < 60 * 24:
        value, unit = minutes // 60, "hour"
    elif minutes < 60 * 24 * 7:
        value, unit = minutes // (60 * 24), "day"
    else:
        return date.strftime("%Y-%m-%d")

    return f"{value} {unit}{'' if value == 1 else 's'} ago"
