# CCBundle Git Operations
# Shallow clone cache of the bundle repository

import logging
import subprocess
from pathlib import Path
from typing import Optional

from ccbundle.errors import BundleError
from ccbundle.utils.paths import ensure_dir, safe_delete

logger = logging.getLogger(__name__)


class GitError(BundleError):
    """Exception raised for git operation errors."""

    def __init__(self, message: str, returncode: int = 1, stderr: str = ""):
        self.message = message
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


def _run_git(
    *args: str,
    cwd: Optional[Path] = None,
    check: bool = True,
    timeout: Optional[float] = None,
) -> subprocess.CompletedProcess[str]:
    """
    Run a git command.

    Args:
        *args: Git command arguments.
        cwd: Working directory.
        check: Whether to raise on non-zero exit.
        timeout: Seconds before the process is killed.

    Returns:
        CompletedProcess with result.

    Raises:
        GitError: If command fails and check is True, or times out.
    """
    cmd = ["git", *args]
    logger.debug("Running %s", " ".join(cmd))
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            check=False,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        raise GitError("git command not found. Is git installed?")
    except subprocess.TimeoutExpired:
        raise GitError(f"Git command timed out after {timeout}s: {' '.join(cmd)}")

    if check and result.returncode != 0:
        raise GitError(
            f"Git command failed: {' '.join(cmd)}",
            returncode=result.returncode,
            stderr=result.stderr.strip() if result.stderr else "",
        )
    return result


def is_git_repo(path: Path) -> bool:
    """
    Check if path is the root of a git checkout.

    Args:
        path: Directory to check.

    Returns:
        True if path contains a .git entry and git recognizes it.
    """
    if not (path / ".git").exists():
        return False
    try:
        _run_git("rev-parse", "--git-dir", cwd=path)
        return True
    except GitError:
        return False


def clone_repository(
    url: str,
    dest: Path,
    *,
    branch: Optional[str] = None,
    timeout: Optional[float] = None,
) -> Path:
    """
    Shallow-clone a repository.

    Args:
        url: Clone URL.
        dest: Destination directory (must not exist).
        branch: Branch to check out.
        timeout: Seconds before git is killed.

    Returns:
        Path of the checkout.

    Raises:
        GitError: If the clone fails.
    """
    ensure_dir(dest.parent)
    args = ["clone", "--depth", "1"]
    if branch:
        args.extend(["--branch", branch])
    args.extend([url, str(dest)])

    _run_git(*args, timeout=timeout)
    return dest


def pull(path: Path, *, timeout: Optional[float] = None) -> bool:
    """
    Fast-forward an existing checkout.

    Args:
        path: Repository path.
        timeout: Seconds before git is killed.

    Returns:
        True if successful.
    """
    try:
        _run_git("pull", "--ff-only", cwd=path, timeout=timeout)
        return True
    except GitError as e:
        logger.debug("Pull failed in %s: %s %s", path, e, e.stderr)
        return False


def clone_or_update(
    url: str,
    dest: Path,
    *,
    branch: Optional[str] = None,
    timeout: Optional[float] = None,
) -> Path:
    """
    Make ``dest`` an up to date checkout of ``url``.

    An existing checkout is pulled; when the pull fails the checkout is
    removed and cloned again.

    Returns:
        Path of the checkout.

    Raises:
        GitError: If the fresh clone fails.
    """
    if is_git_repo(dest):
        if pull(dest, timeout=timeout):
            return dest
        logger.debug("Re-cloning %s into %s", url, dest)

    safe_delete(dest, missing_ok=True)
    return clone_repository(url, dest, branch=branch, timeout=timeout)
