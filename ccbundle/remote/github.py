"""
GitHub contents API client.

Lists bundle directories through the contents API and downloads raw files
from the raw content host. Private repositories are supported through a
token sent as an ``Authorization`` header.

Listing is strict: a missing directory (HTTP 404) is an empty listing, but
any other failure raises, because a partial listing would make absent
subtrees look intentionally deleted. Nothing is retried.

Example:
    >>> with GitHubClient("owner/repo", base_path="claude-code-config") as client:
    ...     entries = client.list_recursive("commands")
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from ccbundle.errors import RemoteFetchError, RemoteListingError
from ccbundle.utils.paths import DEFAULT_IGNORE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemoteEntry:
    """
    One entry of a remote directory listing.

    Attributes:
        name: Entry name.
        relative_path: Path relative to the listed root (equal to name for
                       single-level listings).
        is_folder: True for directories.
        sha: Git blob hash reported by the API (tree hash for directories).
        download_url: Raw download URL, None for directories.
    """

    name: str
    relative_path: str
    is_folder: bool
    sha: Optional[str] = None
    download_url: Optional[str] = None

    @property
    def can_download(self) -> bool:
        return not self.is_folder


class GitHubClient:
    """
    Read-only client for one repository branch and bundle root.

    Wraps an ``httpx.Client``; pass ``transport`` to route requests through
    a mock transport in tests.
    """

    def __init__(
        self,
        repository: str,
        *,
        branch: str = "main",
        base_path: str = "",
        token: Optional[str] = None,
        api_url: str = "https://api.github.com",
        raw_url: str = "https://raw.githubusercontent.com",
        timeout: float = 30.0,
        ignore: frozenset[str] | set[str] = DEFAULT_IGNORE,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.repository = repository
        self.branch = branch
        self.base_path = base_path.strip("/")
        self.api_url = api_url.rstrip("/")
        self.raw_url = raw_url.rstrip("/")
        self.ignore = ignore
        self._token = token

        headers = {"User-Agent": "ccbundle"}
        if token:
            headers["Authorization"] = f"token {token}"

        self._client = httpx.Client(
            headers=headers,
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    @classmethod
    def from_config(cls, remote: Any, *, ignore: frozenset[str] | set[str] = DEFAULT_IGNORE, **kwargs: Any) -> "GitHubClient":
        """Build a client from a ``RemoteConfig``."""
        return cls(
            remote.repository,
            branch=remote.branch,
            base_path=remote.base_path,
            token=remote.resolve_token(),
            api_url=remote.api_url,
            raw_url=remote.raw_url,
            timeout=remote.timeout,
            ignore=ignore,
            **kwargs,
        )

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    @property
    def authenticated(self) -> bool:
        return bool(self._token)

    def _repo_path(self, path: str) -> str:
        path = path.strip("/")
        if self.base_path and path:
            return f"{self.base_path}/{path}"
        return self.base_path or path

    def contents_url(self, path: str) -> str:
        return f"{self.api_url}/repos/{self.repository}/contents/{self._repo_path(path)}"

    def raw_file_url(self, path: str) -> str:
        return f"{self.raw_url}/{self.repository}/{self.branch}/{self._repo_path(path)}"

    def list_directory(self, path: str) -> list[RemoteEntry]:
        """
        List one directory level.

        Args:
            path: Directory path relative to the bundle root.

        Returns:
            Entries of the directory, empty if it does not exist upstream.

        Raises:
            RemoteListingError: On any non-404 failure or malformed payload.
        """
        url = self.contents_url(path)
        params: Optional[dict[str, Any]] = {"ref": self.branch}
        entries: list[RemoteEntry] = []
        seen: set[str] = set()
        first = True

        while url and url not in seen:
            seen.add(url)
            logger.debug("GET %s", url)
            try:
                response = self._client.get(
                    url,
                    params=params,
                    headers={"Accept": "application/vnd.github.v3+json"},
                )
            except httpx.HTTPError as e:
                raise RemoteListingError(f"Failed to list {path or '/'}: {e}") from e

            if response.status_code == 404 and first:
                logger.debug("%s not found upstream", path)
                return []

            if not response.is_success:
                raise RemoteListingError(
                    f"Failed to list {path or '/'}: HTTP {response.status_code}",
                    status_code=response.status_code,
                )

            entries.extend(self._parse_listing(path, response))

            # Directories arrive whole unless the API sends a Link header
            url = response.links.get("next", {}).get("url")
            params = None
            first = False

        return entries

    def _parse_listing(self, path: str, response: httpx.Response) -> list[RemoteEntry]:
        """Validate a contents API payload."""
        try:
            payload = response.json()
        except ValueError as e:
            raise RemoteListingError(f"Invalid JSON listing for {path or '/'}") from e

        if not isinstance(payload, list):
            raise RemoteListingError(f"Unexpected listing for {path or '/'}: expected a directory")

        entries: list[RemoteEntry] = []
        for raw in payload:
            if not isinstance(raw, dict) or not isinstance(raw.get("name"), str) or raw.get("type") not in ("file", "dir"):
                if isinstance(raw, dict) and raw.get("type") in ("symlink", "submodule"):
                    continue
                raise RemoteListingError(f"Malformed entry in listing for {path or '/'}: {raw!r}")

            entries.append(
                RemoteEntry(
                    name=raw["name"],
                    relative_path=raw["name"],
                    is_folder=raw["type"] == "dir",
                    sha=raw.get("sha"),
                    download_url=raw.get("download_url"),
                )
            )
        return entries

    def list_recursive(self, path: str) -> list[RemoteEntry]:
        """
        List a directory tree depth-first.

        Args:
            path: Directory path relative to the bundle root.

        Returns:
            Flat list of files and directories with ``relative_path`` set
            relative to ``path``. Noise entries are skipped.

        Raises:
            RemoteListingError: If any level fails to list.
        """
        results: list[RemoteEntry] = []
        self._collect(path.strip("/"), "", results)
        return results

    def _collect(self, path: str, prefix: str, results: list[RemoteEntry]) -> None:
        for entry in sorted(self.list_directory(path), key=lambda e: e.name):
            if entry.name in self.ignore:
                continue

            rel_path = f"{prefix}{entry.name}"
            results.append(
                RemoteEntry(
                    name=entry.name,
                    relative_path=rel_path,
                    is_folder=entry.is_folder,
                    sha=entry.sha,
                    download_url=entry.download_url,
                )
            )
            if entry.is_folder:
                child = f"{path}/{entry.name}" if path else entry.name
                self._collect(child, f"{rel_path}/", results)

    def fetch_file(self, path: str) -> Optional[bytes]:
        """
        Download a file's raw bytes.

        Args:
            path: File path relative to the bundle root.

        Returns:
            File content, or None if the file does not exist upstream.

        Raises:
            RemoteFetchError: On any other failure.
        """
        url = self.raw_file_url(path)
        logger.debug("GET %s", url)
        try:
            response = self._client.get(url, headers={"Accept": "application/vnd.github.v3.raw"})
        except httpx.HTTPError as e:
            raise RemoteFetchError(f"Failed to download {path}: {e}") from e

        if response.status_code == 404:
            return None

        if not response.is_success:
            raise RemoteFetchError(
                f"Failed to download {path}: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        return response.content
