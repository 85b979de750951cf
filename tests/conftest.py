import base64
from unittest.mock import patch
from urllib.parse import unquote

import pytest
import requests

from repo_analyzer.config import API_URL


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return self._payload

    def raise_for_status(self):
        if not self.ok:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)


class FakeGitHub:
    """In-memory stand-in for requests.Session against the GitHub REST API.

    `files` maps repo paths to content (str or bytes); its insertion order is
    the listing order. `sizes` overrides the declared size of a path.
    """

    def __init__(self, files, owner="octo", repo="demo", sizes=None, repo_status=200):
        self.owner = owner
        self.repo = repo
        self.files = {path: (c.encode("utf-8") if isinstance(c, str) else c) for path, c in files.items()}
        self.sizes = sizes or {}
        self.repo_status = repo_status
        self.broken_paths = set()
        self.endpoints = {
            "languages": {"TypeScript": 2048},
            "commits": [],
            "branches": [{"name": "main", "protected": True}],
            "pulls": [],
        }
        self.requested = []

    @property
    def prefix(self):
        return f"{API_URL}/repos/{self.owner}/{self.repo}"

    def content_requests(self, path):
        return [url for url in self.requested if url == f"{self.prefix}/contents/{path}"]

    def _size(self, path):
        return self.sizes.get(path, len(self.files[path]))

    def _listing(self, path):
        base = f"{path}/" if path else ""
        seen = []
        entries = []
        for file_path in self.files:
            if not file_path.startswith(base):
                continue
            rest = file_path[len(base):]
            head = rest.split("/", 1)[0]
            if head in seen:
                continue
            seen.append(head)
            if "/" in rest:
                entries.append({"type": "dir", "name": head, "path": base + head, "size": 0})
            else:
                entries.append({"type": "file", "name": head, "path": file_path, "size": self._size(file_path)})
        return entries

    def get(self, url, params=None, timeout=None):
        self.requested.append(url)
        if url == self.prefix:
            if self.repo_status != 200:
                return FakeResponse(self.repo_status, {"message": "Not Found"})
            return FakeResponse(200, {
                "name": self.repo,
                "owner": {"login": self.owner},
                "description": "Demo repository",
                "stargazers_count": 42,
                "forks_count": 7,
                "language": "TypeScript",
                "open_issues_count": 3,
                "topics": ["demo"],
                "updated_at": "2024-05-01T00:00:00Z",
                "default_branch": "main",
            })

        rest = url[len(self.prefix) + 1:]
        if rest == "contents" or rest.startswith("contents/"):
            path = unquote(rest[len("contents/"):]) if rest.startswith("contents/") else ""
            if path in self.broken_paths:
                return FakeResponse(500, {"message": "Server Error"})
            if path in self.files:
                encoded = base64.encodebytes(self.files[path]).decode("ascii")
                return FakeResponse(200, {"type": "file", "path": path, "content": encoded, "encoding": "base64"})
            listing = self._listing(path)
            if not listing:
                return FakeResponse(404, {"message": "Not Found"})
            return FakeResponse(200, listing)

        if rest == "readme":
            for path, content in self.files.items():
                if path.lower().startswith("readme"):
                    return FakeResponse(200, {"content": base64.encodebytes(content).decode("ascii")})
            return FakeResponse(404, {"message": "Not Found"})

        if rest in self.endpoints:
            return FakeResponse(200, self.endpoints[rest])
        return FakeResponse(404, {"message": "Not Found"})

    def close(self):
        pass


@pytest.fixture(autouse=True)
def no_sleep():
    with patch("repo_analyzer.collector.time.sleep") as mock_sleep:
        yield mock_sleep


@pytest.fixture
def scenario_a_repo():
    return FakeGitHub({
        "src/app.ts": "x" * 2048,
        "README.md": "# Demo\n" + "y" * 1017,
        "dist/bundle.min.js": "z" * 500 * 1024,
    })
