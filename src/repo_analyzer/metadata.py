# src/repo_analyzer/metadata.py
import logging
import re

from .collector import collect_repository_files
from .config import DEFAULT_LIMITS, STRUCTURE_MAX_DEPTH
from .github_client import (
    get_branches, get_commits, get_languages, get_pull_requests, get_readme,
    get_repo_data, list_directory,
)
from .models import BranchInfo, CommitInfo, PullRequestInfo, RepoMetadata, TestFileInfo

logger = logging.getLogger(__name__)

CICD_PATTERNS = [
    '.github/workflows',
    '.gitlab-ci.yml',
    '.circleci',
    'Jenkinsfile',
    '.travis.yml',
    'azure-pipelines.yml',
    'bitbucket-pipelines.yml',
    '.drone.yml',
]

TEST_TYPE_PATTERNS = [
    ("e2e", re.compile(r'(e2e|end-to-end|cypress|playwright|selenium)\.(js|ts|jsx|tsx|py|java|go|rb)$', re.IGNORECASE)),
    ("integration", re.compile(r'(integration|integration-test)\.(js|ts|jsx|tsx|py|java|go|rb)$', re.IGNORECASE)),
    ("unit", re.compile(r'(test|spec)\.(js|ts|jsx|tsx|py|java|go|rb)$', re.IGNORECASE)),
]


def walk_structure(owner, repo, session, path="", max_depth=STRUCTURE_MAX_DEPTH, current_depth=0):
    """
    Depth-limited walk used only for the human-readable structure listing.

    Returns (depth, TreeEntry) pairs in listing order.
    """
    if current_depth >= max_depth:
        return []
    walked = []
    for entry in list_directory(owner, repo, path, session):
        walked.append((current_depth, entry))
        if entry.is_dir and current_depth < max_depth - 1:
            walked.extend(walk_structure(owner, repo, session, entry.path, max_depth, current_depth + 1))
    return walked


def render_structure(walked):
    lines = []
    for depth, entry in walked:
        prefix = '  ' * depth
        if entry.is_dir:
            lines.append(f"{prefix}📁 {entry.name}/")
        else:
            lines.append(f"{prefix}📄 {entry.name}")
    return lines


def detect_test_files(paths):
    """Classify every path whose name mentions test or spec."""
    test_files = []
    for path in paths:
        file_name = path.rsplit('/', 1)[-1]
        if 'test' not in file_name and 'spec' not in file_name:
            continue
        test_type = 'unknown'
        for candidate, pattern in TEST_TYPE_PATTERNS:
            if pattern.search(file_name):
                test_type = candidate
                break
        test_files.append(TestFileInfo(path=path, type=test_type))
    return test_files


def detect_cicd_configs(paths):
    configs = []
    for pattern in CICD_PATTERNS:
        for path in paths:
            if path == pattern or path.startswith(pattern + '/') or path.rsplit('/', 1)[-1] == pattern:
                configs.append(pattern)
                break
    return len(configs) > 0, configs


def _has_file(names, *prefixes):
    return any(name.upper().startswith(prefix) for name in names for prefix in prefixes)


def _parse_commits(items):
    commits = []
    for item in items:
        commit = item.get('commit') or {}
        author = commit.get('author') or {}
        commits.append(CommitInfo(
            sha=(item.get('sha') or '')[:7],
            message=(commit.get('message') or '').split('\n')[0],
            author=author.get('name', ''),
            date=author.get('date', ''),
            url=item.get('html_url', ''),
        ))
    return commits


def _parse_branches(items):
    return [BranchInfo(name=item.get('name', ''), protected=bool(item.get('protected'))) for item in items]


def _parse_pull_requests(items):
    return [
        PullRequestInfo(
            number=item.get('number', 0),
            title=item.get('title', ''),
            state=item.get('state', ''),
            merged=bool(item.get('merged') or item.get('merged_at')),
            created_at=item.get('created_at', ''),
        )
        for item in items
    ]


def fetch_repo_data(owner, repo, session, limits=DEFAULT_LIMITS):
    """
    Gather everything the analysis prompt needs about a repository.

    Only the repository record itself is mandatory: its HTTPError propagates
    to the caller. Every other request degrades to an empty value.
    """
    repo_data = get_repo_data(owner, repo, session)
    default_branch = repo_data.get('default_branch') or 'main'

    repo_name = f"{owner}/{repo}"
    logger.info("Fetching README and languages for %s", repo_name)
    readme_content = get_readme(owner, repo, session)
    languages = get_languages(owner, repo, session)

    logger.info("Walking project structure for %s", repo_name)
    walked = walk_structure(owner, repo, session)
    file_structure = render_structure(walked)
    walked_paths = [entry.path for _, entry in walked]
    walked_files = [entry for _, entry in walked if entry.is_file]
    names = [entry.name for _, entry in walked]
    has_cicd, cicd_configs = detect_cicd_configs(walked_paths)

    commits = _parse_commits(get_commits(owner, repo, session))
    branches = _parse_branches(get_branches(owner, repo, session))
    pull_requests = _parse_pull_requests(get_pull_requests(owner, repo, session))

    collection = collect_repository_files(owner, repo, session, ref=default_branch, limits=limits)

    owner_info = repo_data.get('owner') or {}
    return RepoMetadata(
        owner=owner_info.get('login', owner),
        name=repo_data.get('name', repo),
        description=repo_data.get('description') or "No description provided.",
        stars=repo_data.get('stargazers_count', 0),
        forks=repo_data.get('forks_count', 0),
        language=repo_data.get('language') or "Unknown",
        open_issues=repo_data.get('open_issues_count', 0),
        topics=repo_data.get('topics') or [],
        readme_content=readme_content,
        file_structure=file_structure,
        last_update=repo_data.get('updated_at', ''),
        commits=commits,
        branches=branches,
        pull_requests=pull_requests,
        test_files=detect_test_files([entry.path for entry in walked_files]),
        has_cicd=has_cicd,
        cicd_configs=cicd_configs,
        languages=languages,
        total_files=len(walked_files),
        has_license=_has_file(names, 'LICENSE', 'LICENCE'),
        has_contributing=_has_file(names, 'CONTRIBUTING'),
        has_code_of_conduct=_has_file(names, 'CODE_OF_CONDUCT'),
        default_branch=default_branch,
        code_files=collection.files,
        files_analyzed=collection.files_analyzed,
        files_skipped=collection.files_skipped,
        total_code_size=collection.total_code_size,
    )
