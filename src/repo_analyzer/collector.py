# src/repo_analyzer/collector.py
"""
Bounded collection of a repository's source files through the contents API.

Files are filtered before any content request is issued, classified by
priority and role, fetched one at a time, and accumulated under a file-count
and an aggregate-size ceiling. The result is deduplicated, ordered by
priority and truncated to the count ceiling.
"""
import logging
import re
import time

import requests

from .config import DEFAULT_LIMITS
from .github_client import get_file_content, list_directory
from .models import (
    CollectedFile, CollectionResult, CollectionState, Priority, PRIORITY_ORDER,
)

logger = logging.getLogger(__name__)

# --- Pre-defined Constants ---
SKIP_DIRECTORIES = frozenset({
    "node_modules", "bower_components", "vendor", ".git", ".svn", ".hg",
    "dist", "build", "out", "target", "coverage", ".next", ".nuxt",
    "__pycache__", ".pytest_cache", ".mypy_cache", ".tox", ".cache",
    "venv", ".venv", ".idea", ".vscode", ".gradle", ".dart_tool", "pods",
})

BINARY_EXTENSIONS = frozenset({
    # Images
    "png", "jpg", "jpeg", "gif", "bmp", "ico", "svg", "webp", "tiff", "psd",
    # Archives
    "zip", "tar", "gz", "tgz", "bz2", "xz", "rar", "7z", "jar", "war", "whl", "egg",
    # Executables & native objects
    "exe", "dll", "so", "dylib", "bin", "o", "a", "obj", "class", "apk", "aab",
    # Fonts
    "woff", "woff2", "ttf", "otf", "eot",
    # Media
    "mp3", "mp4", "avi", "mov", "wav", "flac", "ogg", "webm", "mkv",
    # Compiled bytecode
    "pyc", "pyo", "wasm",
    # Documents & data blobs
    "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "db", "sqlite", "sqlite3",
    # Generated web assets
    "map",
})

GENERATED_MARKERS = (".min.", ".bundle.", ".chunk.")

# Environment files are never collected, only their templates.
SECRET_FILE_PATTERN = re.compile(r'(^\.env(\..*)?|\.env)$', re.IGNORECASE)
SECRET_TEMPLATE_PATTERN = re.compile(r'^\.env\.(example|sample|template|dist)$', re.IGNORECASE)

SOURCE_ROOT_PATTERN = re.compile(
    r'^(src|source|lib|app|components|pages|routes|controllers|services|models|utils|helpers|api)/',
    re.IGNORECASE,
)

LANGUAGE_BY_EXTENSION = {
    "js": "JavaScript", "jsx": "JavaScript", "mjs": "JavaScript", "cjs": "JavaScript",
    "ts": "TypeScript", "tsx": "TypeScript",
    "py": "Python", "pyw": "Python", "pyi": "Python",
    "java": "Java", "kt": "Kotlin", "kts": "Kotlin", "scala": "Scala",
    "go": "Go", "rs": "Rust", "rb": "Ruby", "php": "PHP",
    "c": "C", "h": "C", "cpp": "C++", "cc": "C++", "cxx": "C++", "hpp": "C++",
    "cs": "C#", "swift": "Swift", "dart": "Dart",
    "vue": "Vue", "svelte": "Svelte",
    "html": "HTML", "css": "CSS", "scss": "SCSS", "sass": "Sass", "less": "Less",
    "sh": "Shell", "bash": "Shell", "zsh": "Shell", "ps1": "PowerShell",
    "sql": "SQL", "r": "R", "lua": "Lua", "ex": "Elixir", "exs": "Elixir",
    "json": "JSON", "yaml": "YAML", "yml": "YAML", "toml": "TOML", "xml": "XML",
    "md": "Markdown", "markdown": "Markdown", "rst": "reStructuredText",
}

SOURCE_EXTENSIONS = frozenset({
    "js", "jsx", "mjs", "cjs", "ts", "tsx", "py", "pyw", "java", "kt", "kts",
    "scala", "go", "rs", "rb", "php", "c", "h", "cpp", "cc", "cxx", "hpp",
    "cs", "swift", "dart", "vue", "svelte", "sh", "bash", "sql", "r", "lua",
    "ex", "exs",
})

MANIFEST_FILENAMES = frozenset({
    "package.json", "requirements.txt", "pyproject.toml", "setup.py", "setup.cfg",
    "pipfile", "go.mod", "cargo.toml", "pom.xml", "build.gradle", "build.gradle.kts",
    "gemfile", "composer.json", "pubspec.yaml", "mix.exs", "environment.yml",
})

INFRA_FILE_PATTERN = re.compile(
    r'^(dockerfile|docker-compose\.ya?ml|\.env\.example|\.editorconfig|\.eslintrc.*|\.prettierrc.*)$',
    re.IGNORECASE,
)

CONFIG_FILE_PATTERN = re.compile(
    r'^(webpack|vite|babel|rollup|jest|vitest|karma|tailwind|postcss|next\.config|nuxt\.config|'
    r'tsconfig|eslint|prettier|\.babelrc)',
    re.IGNORECASE,
)
CONFIG_EXTENSIONS = frozenset({
    "json", "yaml", "yml", "toml", "ini", "cfg", "conf", "xml", "properties",
})

DOC_FILE_PATTERN = re.compile(
    r'^(readme|changelog|contributing|license|licence|code_of_conduct|authors|security)(\..*)?$',
    re.IGNORECASE,
)
DOC_EXTENSIONS = frozenset({"md", "markdown", "txt", "rst", "adoc"})

TEST_FILE_PATTERNS = [
    re.compile(r'\.(test|spec)\.(js|jsx|ts|tsx|mjs|cjs)$', re.IGNORECASE),
    re.compile(r'^test_.*\.py$', re.IGNORECASE),
    re.compile(r'_test\.(py|go)$', re.IGNORECASE),
    re.compile(r'Tests?\.(java|kt|cs|php)$'),
    re.compile(r'_spec\.rb$', re.IGNORECASE),
]


def _basename(path):
    return path.rsplit('/', 1)[-1]


def _extension(path):
    name = _basename(path)
    if '.' not in name:
        return ""
    return name.rsplit('.', 1)[-1].lower()


def is_skipped_directory(name):
    return name.lower() in SKIP_DIRECTORIES


def _is_secret_file(path):
    name = _basename(path)
    return bool(SECRET_FILE_PATTERN.search(name)) and not SECRET_TEMPLATE_PATTERN.match(name)


def is_admissible(path, size, limits=DEFAULT_LIMITS):
    """Decide whether a listed file is worth fetching. Pure; any rule rejects."""
    if size > limits.max_file_size:
        return False
    if any(is_skipped_directory(part) for part in path.split('/')):
        return False
    if _extension(path) in BINARY_EXTENSIONS:
        return False
    if _is_secret_file(path):
        return False
    lowered = path.lower()
    if any(marker in lowered for marker in GENERATED_MARKERS):
        return False
    return True


def infer_language(path):
    return LANGUAGE_BY_EXTENSION.get(_extension(path))


def _is_source_root(path):
    return bool(SOURCE_ROOT_PATTERN.match(path))


def _is_source_extension(path):
    return _extension(path) in SOURCE_EXTENSIONS


def _is_manifest(path):
    return _basename(path).lower() in MANIFEST_FILENAMES


def _is_infra_file(path):
    return bool(INFRA_FILE_PATTERN.match(_basename(path)))


def is_config_file(path):
    return bool(CONFIG_FILE_PATTERN.match(_basename(path))) or _extension(path) in CONFIG_EXTENSIONS


def is_documentation_file(path):
    return bool(DOC_FILE_PATTERN.match(_basename(path))) or _extension(path) in DOC_EXTENSIONS


def is_test_file(path):
    name = _basename(path)
    return any(pattern.search(name) for pattern in TEST_FILE_PATTERNS)


# Evaluated in order, first match wins.
PRIORITY_RULES = [
    (Priority.HIGH, _is_source_root),
    (Priority.HIGH, _is_source_extension),
    (Priority.HIGH, _is_manifest),
    (Priority.HIGH, _is_infra_file),
    (Priority.MEDIUM, is_config_file),
    (Priority.MEDIUM, is_documentation_file),
]


def classify_priority(path):
    for priority, predicate in PRIORITY_RULES:
        if predicate(path):
            return priority
    return Priority.LOW


def classify_path(path):
    """Return (priority, is_test, is_config, is_documentation) for a path."""
    return (
        classify_priority(path),
        is_test_file(path),
        is_config_file(path) or _is_infra_file(path),
        is_documentation_file(path),
    )


def _fetch_file(owner, repo, path, size, session, ref):
    try:
        content = get_file_content(owner, repo, path, session, ref=ref)
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.warning("Skipping %s: %s", path, e)
        return None

    priority, is_test, is_config, is_documentation = classify_path(path)
    return CollectedFile(
        path=path,
        content=content,
        size=size,
        language=infer_language(path),
        is_test=is_test,
        is_config=is_config,
        is_documentation=is_documentation,
        priority=priority,
    )


def _has_room(state, size, limits):
    if len(state.files) >= limits.max_files:
        return False
    return state.total_size + size <= limits.max_total_size


def _walk(owner, repo, path, session, ref, state, limits):
    for entry in list_directory(owner, repo, path, session, ref=ref):
        if entry.is_dir:
            if is_skipped_directory(entry.name):
                continue
            _walk(owner, repo, entry.path, session, ref, state, limits)
            continue

        if not is_admissible(entry.path, entry.size, limits):
            continue
        state.discovered += 1
        if state.exhausted:
            continue
        if not _has_room(state, entry.size, limits):
            logger.info("Collection ceiling reached at %s, no further files will be fetched", entry.path)
            state.exhausted = True
            continue

        collected = _fetch_file(owner, repo, entry.path, entry.size, session, ref)
        if collected is None:
            continue
        state.files.append(collected)
        state.total_size += collected.size
        time.sleep(limits.fetch_delay)


def finalize_collection(state, limits=DEFAULT_LIMITS):
    """Deduplicate by path, order by priority (stable) and apply the count ceiling."""
    unique = {}
    for collected in state.files:
        unique[collected.path] = collected
    ordered = sorted(unique.values(), key=lambda f: PRIORITY_ORDER[f.priority])
    files = ordered[:limits.max_files]
    return CollectionResult(
        files=files,
        total_code_size=sum(f.size for f in files),
        files_analyzed=len(files),
        files_skipped=max(0, state.discovered - len(files)),
    )


def collect_repository_files(owner, repo, session, ref=None, path="", limits=DEFAULT_LIMITS):
    """
    Walk a repository depth-first and collect the files worth analyzing.

    Requests are issued sequentially with a fixed pause after each fetched
    file. Unreachable directories and unreadable files are logged and left
    out; they never abort the walk.
    """
    state = CollectionState()
    logger.info("Collecting files from %s/%s (ref: %s)", owner, repo, ref or "default")
    _walk(owner, repo, path, session, ref, state, limits)
    result = finalize_collection(state, limits)
    logger.info(
        "Collected %d files (%d bytes), skipped %d",
        result.files_analyzed, result.total_code_size, result.files_skipped,
    )
    return result
