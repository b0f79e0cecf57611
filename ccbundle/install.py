# CCBundle Installer
# Full installation from a cached clone and script dependency setup

import logging
import shutil
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ccbundle.config.schema import Category
from ccbundle.errors import BundleError
from ccbundle.sync.hooks import apply_hooks, classify_hooks
from ccbundle.sync.settings import SETTINGS_FILE, load_settings, save_settings
from ccbundle.sync.state import SyncState
from ccbundle.sync.transform import DEFAULT_TOOL_DIR, is_text_file, transform_file_content, transform_hook
from ccbundle.utils.hashing import blob_hash, file_hash
from ccbundle.utils.paths import DEFAULT_IGNORE, atomic_write, copy_tree, walk_tree
from ccbundle.utils.platform import PlatformContext

logger = logging.getLogger(__name__)

# Bundle directory holding sound assets referenced by hooks
SONG_DIR = "song"
SCRIPTS_DIR = "scripts"


@dataclass
class InstallResult:
    """Outcome of a full installation."""

    files_copied: dict[str, int] = field(default_factory=dict)
    hooks_merged: int = 0
    status_line_installed: bool = False
    errors: list[str] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return sum(self.files_copied.values())


@dataclass
class DependencyResult:
    """Outcome of installing script dependencies in one directory."""

    path: Path
    tool: Optional[str]
    success: bool
    message: str = ""


def _transforming_copy(
    target_dir: Path,
    platform: PlatformContext,
    tool_dir: str,
    *,
    state: Optional[SyncState] = None,
    prefix: str = "",
) -> Callable[[Path, Path, str], None]:
    """File handler for ``copy_tree`` that rewrites text files for this machine."""

    def handler(source: Path, dest: Path, rel_path: str) -> None:
        if is_text_file(source):
            try:
                text = source.read_text(encoding="utf-8")
            except UnicodeDecodeError:
                shutil.copy2(source, dest)
            else:
                atomic_write(dest, transform_file_content(text, target_dir, platform, tool_dir))
                shutil.copymode(source, dest)
        else:
            shutil.copy2(source, dest)

        if state is not None:
            state.set_item(f"{prefix}/{rel_path}", blob_hash(source.read_bytes()), file_hash(dest) or "")

    return handler


def install_from_source(
    source_dir: Path,
    target_dir: Path,
    platform: PlatformContext,
    *,
    categories: Optional[Sequence[Category]] = None,
    include_hooks: bool = True,
    force_status_line: bool = False,
    ignore: frozenset[str] | set[str] = DEFAULT_IGNORE,
    tool_dir: str = DEFAULT_TOOL_DIR,
    state: Optional[SyncState] = None,
) -> InstallResult:
    """
    Install a bundle checkout into the target tree.

    Categories and the ``song`` directory are copied, text files through
    the content transformer. Every hook of the bundle's settings.json is
    merged into the local one. The statusLine declaration is installed only
    when the local settings have none, unless forced.

    Args:
        source_dir: Bundle root inside the checkout.
        target_dir: Local target directory.
        platform: Resolved platform context.
        categories: Categories to install (all by default).
        include_hooks: Merge settings.json hooks.
        force_status_line: Replace an existing statusLine.
        ignore: Entry names never copied.
        tool_dir: Tool directory name baked into authored paths.
        state: Sync state recording every category file written.

    Returns:
        InstallResult summary.

    Raises:
        BundleError: If the source directory does not exist.
        SettingsError: If either settings.json cannot be parsed.
    """
    if not source_dir.is_dir():
        raise BundleError(f"Bundle directory not found in checkout: {source_dir}")

    result = InstallResult()

    names = [category.value for category in (categories or list(Category))] + [SONG_DIR]
    for name in names:
        handler = _transforming_copy(
            target_dir, platform, tool_dir, state=None if name == SONG_DIR else state, prefix=name
        )
        source = source_dir / name
        if not source.is_dir():
            logger.debug("Bundle has no %s directory", name)
            continue
        try:
            result.files_copied[name] = copy_tree(source, target_dir / name, file_handler=handler, ignore=ignore)
        except OSError as e:
            result.errors.append(f"{name}: {e}")

    remote_settings_path = source_dir / SETTINGS_FILE
    if not remote_settings_path.is_file():
        return result

    remote = load_settings(remote_settings_path)

    if include_hooks:
        local = load_settings(target_dir / SETTINGS_FILE)
        hooks = classify_hooks(remote.to_dict(), local, target_dir, platform, tool_dir=tool_dir)
        hook_result = apply_hooks(target_dir, hooks, platform, tool_dir=tool_dir)
        result.hooks_merged = hook_result.success
        result.errors.extend(hook_result.errors)

    if remote.status_line is not None:
        result.status_line_installed = install_status_line(
            target_dir, remote.status_line, platform, force=force_status_line, tool_dir=tool_dir
        )

    return result


def install_status_line(
    target_dir: Path,
    status_line: dict,
    platform: PlatformContext,
    *,
    force: bool = False,
    tool_dir: str = DEFAULT_TOOL_DIR,
) -> bool:
    """
    Install a statusLine declaration into the local settings.json.

    Returns:
        True if the declaration was written.
    """
    settings_path = target_dir / SETTINGS_FILE
    document = load_settings(settings_path)

    if document.status_line is not None and not force:
        logger.debug("Keeping existing statusLine")
        return False

    document.status_line = transform_hook(status_line, target_dir, platform, tool_dir)
    save_settings(settings_path, document)
    return True


def find_package_dirs(scripts_dir: Path) -> list[Path]:
    """Directories below ``scripts_dir`` (inclusive) holding a package.json."""
    found: list[Path] = []
    if (scripts_dir / "package.json").is_file():
        found.append(scripts_dir)

    def visit(entry: Path, rel_path: str, is_dir: bool) -> None:
        if is_dir and (entry / "package.json").is_file():
            found.append(entry)

    walk_tree(scripts_dir, visit)
    return found


def install_scripts_dependencies(
    target_dir: Path,
    *,
    timeout: float = 300.0,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> list[DependencyResult]:
    """
    Install JavaScript dependencies of bundled scripts.

    Runs ``bun install`` (``npm install`` when bun is missing) in every
    directory under ``scripts`` that holds a package.json. Failures are
    reported in the results and never raised.

    Args:
        target_dir: Local target directory.
        timeout: Seconds allowed per install.
        which: Executable lookup.

    Returns:
        One DependencyResult per package directory.
    """
    package_dirs = find_package_dirs(target_dir / SCRIPTS_DIR)
    if not package_dirs:
        return []

    tool = next((name for name in ("bun", "npm") if which(name)), None)
    results: list[DependencyResult] = []

    for package_dir in package_dirs:
        if tool is None:
            results.append(DependencyResult(package_dir, None, False, "neither bun nor npm is installed"))
            continue

        logger.debug("Running %s install in %s", tool, package_dir)
        try:
            completed = subprocess.run(
                [tool, "install"],
                cwd=package_dir,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            results.append(DependencyResult(package_dir, tool, False, f"timed out after {timeout:g}s"))
            continue
        except OSError as e:
            results.append(DependencyResult(package_dir, tool, False, str(e)))
            continue

        if completed.returncode != 0:
            message = (completed.stderr or completed.stdout or "").strip().splitlines()
            results.append(
                DependencyResult(package_dir, tool, False, message[-1] if message else f"exit {completed.returncode}")
            )
        else:
            results.append(DependencyResult(package_dir, tool, True))

    return results
