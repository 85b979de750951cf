import base64
from unittest.mock import MagicMock

import pytest
import requests

from repo_analyzer.github_client import (
    create_session, decode_base64_content, get_file_content, get_readme, get_repo_data,
    list_directory, parse_github_url,
)

from conftest import FakeGitHub, FakeResponse


@pytest.mark.parametrize("url, expected", [
    ("https://github.com/octo/demo", ("octo", "demo")),
    ("https://github.com/octo/demo/", ("octo", "demo")),
    ("https://github.com/octo/demo.git", ("octo", "demo")),
    ("https://github.com/octo/demo/tree/main/src", ("octo", "demo")),
])
def test_parse_github_url_valid(url, expected):
    assert parse_github_url(url) == expected


@pytest.mark.parametrize("url", [
    "https://github.com/onlyowner",
    "https://github.com/",
    "https://gitlab.com/octo/demo",
    "https://www.github.com/octo/demo",
    "github.com/octo/demo",
    "not a url",
    "",
    None,
])
def test_parse_github_url_invalid(url):
    assert parse_github_url(url) is None


def test_create_session_sets_token_header():
    session = create_session("abc123")
    assert session.headers["Authorization"] == "token abc123"
    assert "Authorization" not in create_session().headers


def test_list_directory_maps_entries():
    github = FakeGitHub({"src/app.py": "print(1)", "README.md": "# hi", "docs/a.md": "a"})
    entries = list_directory("octo", "demo", "", github)

    assert [(e.name, e.kind) for e in entries] == [("src", "dir"), ("README.md", "file"), ("docs", "dir")]
    assert entries[1].size == 4


def test_list_directory_swallows_transport_errors():
    session = MagicMock()
    session.get.side_effect = requests.exceptions.ConnectionError("boom")
    assert list_directory("octo", "demo", "src", session) == []


def test_list_directory_ignores_non_list_payload():
    session = MagicMock()
    session.get.return_value = FakeResponse(200, {"type": "file"})
    assert list_directory("octo", "demo", "README.md", session) == []


def test_get_file_content_decodes_wrapped_base64():
    github = FakeGitHub({"src/long.py": "print('hello')\n" * 20})
    assert get_file_content("octo", "demo", "src/long.py", github) == "print('hello')\n" * 20


def test_get_file_content_rejects_invalid_utf8():
    session = MagicMock()
    session.get.return_value = FakeResponse(200, {"content": base64.b64encode(b"\xff\xfe").decode()})
    with pytest.raises(ValueError):
        get_file_content("octo", "demo", "x.bin", session)


def test_get_file_content_without_content_field():
    session = MagicMock()
    session.get.return_value = FakeResponse(200, [])
    with pytest.raises(ValueError):
        get_file_content("octo", "demo", "src", session)


def test_decode_base64_content_replaces_when_asked():
    encoded = base64.b64encode(b"ok \xff").decode()
    assert decode_base64_content(encoded, errors="replace") == "ok �"


def test_get_repo_data_propagates_http_errors():
    github = FakeGitHub({}, repo_status=404)
    with pytest.raises(requests.exceptions.HTTPError) as excinfo:
        get_repo_data("octo", "demo", github)
    assert excinfo.value.response.status_code == 404


def test_get_readme_with_null_content():
    session = MagicMock()
    session.get.return_value = FakeResponse(200, {"content": None})
    assert get_readme("octo", "demo", session) == ""
