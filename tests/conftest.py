# CCBundle Test Fixtures
# Pytest fixtures for ccbundle tests

import tempfile
from collections.abc import Generator
from pathlib import Path
from typing import Callable, Optional

import httpx
import pytest
import yaml

from ccbundle.remote.github import GitHubClient
from ccbundle.utils.hashing import blob_hash
from ccbundle.utils.platform import PlatformContext


class FakeGitHub:
    """
    In-memory repository served through httpx.MockTransport.

    ``files`` maps bundle-relative paths to content; directories are
    implied by the paths. ``failures`` maps a bundle-relative path to an
    HTTP status returned for both listing and download.
    """

    def __init__(
        self,
        files: dict[str, str | bytes],
        *,
        repository: str = "owner/bundle",
        branch: str = "main",
        base_path: str = "claude-code-config",
        failures: Optional[dict[str, int]] = None,
        page_size: Optional[int] = None,
    ):
        self.files = {k: v.encode("utf-8") if isinstance(v, str) else v for k, v in files.items()}
        self.repository = repository
        self.branch = branch
        self.base_path = base_path
        self.failures = failures or {}
        self.page_size = page_size
        self.requests: list[httpx.Request] = []
        self.clients: list[GitHubClient] = []

    @property
    def dirs(self) -> set[str]:
        result = {""}
        for path in self.files:
            parts = path.split("/")
            for i in range(1, len(parts)):
                result.add("/".join(parts[:i]))
        return result

    def _children(self, path: str) -> list[dict]:
        prefix = f"{path}/" if path else ""
        names: dict[str, str] = {}
        for candidate in list(self.files) + sorted(self.dirs - {""}):
            if not candidate.startswith(prefix):
                continue
            rest = candidate[len(prefix) :]
            if not rest or "/" in rest:
                continue
            names[rest] = "file" if candidate in self.files else "dir"

        entries = []
        for name, kind in sorted(names.items()):
            full = f"{prefix}{name}"
            entries.append(
                {
                    "name": name,
                    "path": full,
                    "type": kind,
                    "sha": blob_hash(self.files[full]) if kind == "file" else "0" * 40,
                    "download_url": f"https://raw.githubusercontent.com/{self.repository}/{self.branch}/{full}"
                    if kind == "file"
                    else None,
                }
            )
        return entries

    def _relative(self, path: str, prefix: str) -> str:
        rel = path[len(prefix) :].strip("/")
        if self.base_path:
            if rel == self.base_path:
                return ""
            rel = rel[len(self.base_path) + 1 :] if rel.startswith(f"{self.base_path}/") else f"\0{rel}"
        return rel

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.url.host == "api.github.com":
            rel = self._relative(request.url.path, f"/repos/{self.repository}/contents/")
            if rel in self.failures:
                return httpx.Response(self.failures[rel])
            if rel in self.dirs:
                entries = self._children(rel)
                headers = {}
                if self.page_size:
                    page = int(request.url.params.get("page", "1"))
                    if page * self.page_size < len(entries):
                        next_url = request.url.copy_set_param("page", str(page + 1))
                        headers["Link"] = f'<{next_url}>; rel="next"'
                    entries = entries[(page - 1) * self.page_size : page * self.page_size]
                return httpx.Response(200, json=entries, headers=headers)
            if rel in self.files:
                return httpx.Response(200, json={"name": rel.rsplit("/", 1)[-1], "type": "file"})
            return httpx.Response(404, json={"message": "Not Found"})

        rel = self._relative(request.url.path, f"/{self.repository}/{self.branch}/")
        if rel in self.failures:
            return httpx.Response(self.failures[rel])
        if rel in self.files:
            return httpx.Response(200, content=self.files[rel])
        return httpx.Response(404, text="404: Not Found")

    def client(self, token: Optional[str] = None, **kwargs) -> GitHubClient:
        """Create a client bound to this fake repository."""
        client = GitHubClient(
            self.repository,
            branch=self.branch,
            base_path=self.base_path,
            token=token,
            transport=httpx.MockTransport(self.handler),
            **kwargs,
        )
        self.clients.append(client)
        return client


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_home(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a temporary home directory."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("CCBUNDLE_CONFIG", raising=False)
    monkeypatch.delenv("CCBUNDLE_GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    return home


@pytest.fixture
def target_dir(temp_home: Path) -> Path:
    """Create an empty ~/.claude target tree."""
    target = temp_home / ".claude"
    target.mkdir()
    return target


@pytest.fixture
def linux_platform(temp_home: Path) -> PlatformContext:
    """Native Linux with paplay available."""
    return PlatformContext(system="linux", home=temp_home, audio_player="paplay")


@pytest.fixture
def mac_platform(temp_home: Path) -> PlatformContext:
    """macOS with afplay."""
    return PlatformContext(system="macos", home=temp_home, audio_player="afplay")


@pytest.fixture
def fake_github() -> Generator[Callable[..., FakeGitHub], None, None]:
    """Factory for in-memory GitHub repositories."""
    fakes: list[FakeGitHub] = []

    def make(files: dict[str, str | bytes], **kwargs) -> FakeGitHub:
        fake = FakeGitHub(files, **kwargs)
        fakes.append(fake)
        return fake

    yield make

    for fake in fakes:
        for client in fake.clients:
            client.close()


@pytest.fixture
def config_file(temp_home: Path, target_dir: Path) -> Path:
    """Create a configuration file pointing at the temporary home."""
    config_dir = temp_home / ".config" / "ccbundle"
    config_dir.mkdir(parents=True)
    config_path = config_dir / "config.yaml"

    data = {
        "remote": {"repository": "owner/bundle", "branch": "main", "base_path": "claude-code-config"},
        "target": {"path": str(target_dir)},
        "backup": {"enabled": True, "root": str(temp_home / "backups")},
        "cache": {"dir": str(temp_home / "cache")},
        "output": {"verbose": False, "colored": False},
    }
    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False)

    return config_path
