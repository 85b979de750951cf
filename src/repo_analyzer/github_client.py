# src/repo_analyzer/github_client.py
import base64
import logging
import re
from urllib.parse import urlparse, quote

import requests

from .config import API_URL, GITHUB_HOST, REQUEST_TIMEOUT
from .models import TreeEntry

logger = logging.getLogger(__name__)


def parse_github_url(url):
    """
    Parses a repository URL of the form https://github.com/<owner>/<repo>.

    Returns an (owner, repo) tuple, or None when the host is not github.com
    or the path lacks a repository segment. Never touches the network.
    """
    if not url:
        return None
    try:
        parsed_url = urlparse(url.strip())
    except ValueError:
        return None
    if parsed_url.hostname != GITHUB_HOST:
        return None
    path_parts = [part for part in parsed_url.path.split('/') if part]
    if len(path_parts) < 2:
        return None
    owner, repo = path_parts[0], path_parts[1]
    return owner, re.sub(r'\.git$', '', repo)


def create_session(gh_token=None):
    session = requests.Session()
    session.headers.update({'Accept': 'application/vnd.github+json'})
    if gh_token:
        session.headers.update({'Authorization': f'token {gh_token}'})
    return session


def _repo_url(owner, repo, suffix=""):
    url = f"{API_URL}/repos/{owner}/{repo}"
    return f"{url}/{suffix}" if suffix else url


def _contents_url(owner, repo, path):
    path = path.strip('/')
    if not path:
        return _repo_url(owner, repo, "contents")
    return _repo_url(owner, repo, f"contents/{quote(path)}")


def get_repo_data(owner, repo, session):
    """Fetch the repository record. HTTP errors propagate: this request is fatal."""
    response = session.get(_repo_url(owner, repo), timeout=REQUEST_TIMEOUT)
    response.raise_for_status()
    return response.json()


def list_directory(owner, repo, path, session, ref=None):
    """
    List one directory through the contents endpoint.

    A failed or non-success listing is logged and treated as an empty directory.
    """
    params = {'ref': ref} if ref else None
    try:
        response = session.get(_contents_url(owner, repo, path), params=params, timeout=REQUEST_TIMEOUT)
    except requests.exceptions.RequestException as e:
        logger.warning("Could not list '%s': %s", path or "/", e)
        return []
    if not response.ok:
        logger.warning("Could not list '%s': HTTP %s", path or "/", response.status_code)
        return []
    try:
        items = response.json()
    except ValueError as e:
        logger.warning("Invalid listing for '%s': %s", path or "/", e)
        return []
    if not isinstance(items, list):
        return []

    entries = []
    for item in items:
        kind = item.get('type')
        if kind not in ('file', 'dir'):
            continue
        entries.append(TreeEntry(
            path=item.get('path', ''),
            name=item.get('name', ''),
            kind=kind,
            size=item.get('size') or 0,
        ))
    return entries


def decode_base64_content(content, errors='strict'):
    """Decode the contents API's base64 payload, which is wrapped with newlines."""
    raw = base64.b64decode(re.sub(r'\s', '', content), validate=True)
    return raw.decode('utf-8', errors=errors)


def get_file_content(owner, repo, path, session, ref=None):
    """
    Fetch and decode a single file.

    Raises requests exceptions on transport or HTTP failure and ValueError
    (binascii.Error, UnicodeDecodeError) when the payload is not valid text.
    """
    params = {'ref': ref} if ref else None
    response = session.get(_contents_url(owner, repo, path), params=params, timeout=REQUEST_TIMEOUT)
    response.raise_for_status()
    payload = response.json()
    content = payload.get('content') if isinstance(payload, dict) else None
    if content is None:
        raise ValueError(f"No content returned for {path}")
    return decode_base64_content(content)


def get_readme(owner, repo, session):
    try:
        response = session.get(_repo_url(owner, repo, "readme"), timeout=REQUEST_TIMEOUT)
        if response.status_code != 200:
            return None
        return decode_base64_content(response.json().get('content') or '', errors='replace')
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.warning("Could not fetch README: %s", e)
        return None


def get_languages(owner, repo, session):
    try:
        response = session.get(_repo_url(owner, repo, "languages"), timeout=REQUEST_TIMEOUT)
        if response.status_code == 200:
            return response.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.warning("Could not fetch languages: %s", e)
    return {}


def _get_list(owner, repo, suffix, params, session, label):
    try:
        response = session.get(_repo_url(owner, repo, suffix), params=params, timeout=REQUEST_TIMEOUT)
        if response.status_code == 200:
            items = response.json()
            return items if isinstance(items, list) else []
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.warning("Could not fetch %s: %s", label, e)
    return []


def get_commits(owner, repo, session):
    return _get_list(owner, repo, "commits", {'per_page': 30}, session, "commits")


def get_branches(owner, repo, session):
    return _get_list(owner, repo, "branches", {'per_page': 100}, session, "branches")


def get_pull_requests(owner, repo, session):
    params = {'state': 'all', 'per_page': 20, 'sort': 'updated'}
    return _get_list(owner, repo, "pulls", params, session, "pull requests")
