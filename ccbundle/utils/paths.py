# CCBundle Path Utilities
# Tree walking, safe file operations and atomic writes

import os
import shutil
import tempfile
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

# Entries never compared, copied or backed up (dependency caches, OS metadata)
DEFAULT_IGNORE: frozenset[str] = frozenset(
    {
        "node_modules",
        ".DS_Store",
        "Thumbs.db",
        "__pycache__",
        ".git",
    }
)

TreeVisitor = Callable[[Path, str, bool], None]
FileHandler = Callable[[Path, Path, str], None]


@dataclass(frozen=True)
class LocalEntry:
    """A file or directory found under a local root."""

    relative_path: str
    is_dir: bool


def expand_path(path: str | Path) -> Path:
    """
    Expand ~ and environment variables in path.

    Args:
        path: Path string or Path object.

    Returns:
        Expanded Path object.
    """
    path_str = str(path)
    path_str = os.path.expanduser(path_str)
    path_str = os.path.expandvars(path_str)
    return Path(path_str).resolve()


def ensure_dir(path: Path) -> Path:
    """
    Ensure directory exists, creating if necessary.

    Args:
        path: Directory path.

    Returns:
        The path that was ensured.
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def walk_tree(
    root: Path,
    visitor: TreeVisitor,
    *,
    ignore: frozenset[str] | set[str] = DEFAULT_IGNORE,
    _prefix: str = "",
) -> None:
    """
    Visit every entry below root, depth-first in sorted name order.

    The visitor receives ``(path, relative_posix_path, is_dir)``. Directories
    are visited before their children. Entries whose name is in ``ignore``
    are skipped together with everything below them.

    Args:
        root: Directory to walk. Missing roots are a no-op.
        visitor: Callback invoked per entry.
        ignore: Entry names to skip.
    """
    if not root.is_dir():
        return

    for entry in sorted(root.iterdir(), key=lambda p: p.name):
        if entry.name in ignore:
            continue

        rel_path = f"{_prefix}{entry.name}"
        is_dir = entry.is_dir() and not entry.is_symlink()
        visitor(entry, rel_path, is_dir)

        if is_dir:
            walk_tree(entry, visitor, ignore=ignore, _prefix=f"{rel_path}/")


def list_local_tree(
    root: Path,
    *,
    ignore: frozenset[str] | set[str] = DEFAULT_IGNORE,
) -> list[LocalEntry]:
    """
    List files and directories below root as relative POSIX paths.

    Args:
        root: Directory to list.
        ignore: Entry names to skip.

    Returns:
        Flat list of entries, empty if root does not exist.
    """
    entries: list[LocalEntry] = []

    def collect(entry: Path, rel_path: str, is_dir: bool) -> None:
        entries.append(LocalEntry(relative_path=rel_path, is_dir=is_dir))

    walk_tree(root, collect, ignore=ignore)
    return entries


def copy_tree(
    source: Path,
    dest: Path,
    *,
    file_handler: FileHandler | None = None,
    ignore: frozenset[str] | set[str] = DEFAULT_IGNORE,
) -> int:
    """
    Recursively copy a directory, overwriting existing files.

    Args:
        source: Source directory.
        dest: Destination directory (created if missing).
        file_handler: Optional callback ``(source_file, dest_file, rel_path)``
                      that writes a single file. Defaults to a metadata
                      preserving copy.
        ignore: Entry names to skip.

    Returns:
        Number of files copied.
    """
    ensure_dir(dest)
    copied = 0

    def visit(entry: Path, rel_path: str, is_dir: bool) -> None:
        nonlocal copied
        target = dest / rel_path
        if is_dir:
            ensure_dir(target)
            return

        ensure_dir(target.parent)
        if file_handler is not None:
            file_handler(entry, target, rel_path)
        else:
            shutil.copy2(entry, target)
        copied += 1

    walk_tree(source, visit, ignore=ignore)
    return copied


def safe_delete(path: Path, *, missing_ok: bool = False) -> bool:
    """
    Safely delete file or directory.

    Args:
        path: Path to delete.
        missing_ok: If True, don't raise error if path doesn't exist.

    Returns:
        True if something was deleted, False if path didn't exist.

    Raises:
        FileNotFoundError: If path doesn't exist and missing_ok is False.
    """
    if not path.exists() and not path.is_symlink():
        if missing_ok:
            return False
        raise FileNotFoundError(f"Path does not exist: {path}")

    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()
    return True


def atomic_write(path: Path, content: str | bytes, *, encoding: str = "utf-8") -> None:
    """
    Atomically write content to file.

    Uses a temporary file and atomic rename.

    Args:
        path: Target file path.
        content: Content to write (str or bytes).
        encoding: Encoding for string content (default utf-8).
    """
    ensure_dir(path.parent)

    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        if isinstance(content, str):
            with os.fdopen(fd, "w", encoding=encoding, newline="") as f:
                f.write(content)
        else:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
        os.replace(temp_path, path)
    except Exception:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


def is_relative_to(path: Path, base: Path) -> bool:
    """Check whether path lies below base."""
    try:
        path.relative_to(base)
        return True
    except ValueError:
        return False
