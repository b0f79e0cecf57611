# CCBundle Remote Module
# Access to the GitHub repository providing the bundle

from ccbundle.remote.github import GitHubClient, RemoteEntry

__all__ = [
    "GitHubClient",
    "RemoteEntry",
]
