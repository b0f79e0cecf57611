# CCBundle Hashing Utilities
# Git blob hashing for content-addressed change detection

import hashlib
from pathlib import Path

from ccbundle.utils.paths import DEFAULT_IGNORE, walk_tree


def blob_hash(content: str | bytes) -> str:
    """
    Calculate the Git blob hash of content.

    Matches the ``sha`` reported by the GitHub contents API, so local files
    can be compared against a remote listing without downloading anything.

    Args:
        content: String (encoded as UTF-8) or bytes content.

    Returns:
        Hex digest of sha1("blob <len>\\0" + content).
    """
    if isinstance(content, str):
        content = content.encode("utf-8")

    hasher = hashlib.sha1()
    hasher.update(f"blob {len(content)}\0".encode("ascii"))
    hasher.update(content)
    return hasher.hexdigest()


def file_hash(path: Path) -> str | None:
    """
    Calculate blob hash of file content.

    Args:
        path: Path to file.

    Returns:
        Hex digest of hash, or None if file doesn't exist.
    """
    if not path.exists() or not path.is_file():
        return None

    return blob_hash(path.read_bytes())


def folder_hash(path: Path, *, ignore: frozenset[str] | set[str] = DEFAULT_IGNORE) -> str | None:
    """
    Calculate an aggregate hash of every file below a directory.

    Per-file blob hashes are sorted before being combined, so enumeration
    order does not matter. File names are not part of the hash: two files
    swapping content produce the same aggregate.

    Args:
        path: Path to directory.
        ignore: Entry names to skip while walking.

    Returns:
        Hex digest of hash, or None if the directory is missing or empty.
    """
    if not path.exists() or not path.is_dir():
        return None

    hashes: list[str] = []

    def collect(entry: Path, rel_path: str, is_dir: bool) -> None:
        if not is_dir:
            hashes.append(blob_hash(entry.read_bytes()))

    walk_tree(path, collect, ignore=ignore)

    if not hashes:
        return None

    hashes.sort()
    return hashlib.sha1("".join(hashes).encode("ascii")).hexdigest()
