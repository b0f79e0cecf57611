# CCBundle Git Module
# Git operations for the bundle clone cache

from ccbundle.git.operations import (
    GitError,
    clone_or_update,
    clone_repository,
    is_git_repo,
    pull,
)

__all__ = [
    "GitError",
    "is_git_repo",
    "clone_repository",
    "pull",
    "clone_or_update",
]
