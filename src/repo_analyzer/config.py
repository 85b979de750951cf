# src/repo_analyzer/config.py
import os
from dataclasses import dataclass

API_URL = 'https://api.github.com'
GITHUB_HOST = 'github.com'

# --- Collection ceilings ---
MAX_FILE_SIZE = 1024 * 1024
MAX_TOTAL_SIZE = 10 * 1024 * 1024
MAX_FILES = 500
FETCH_DELAY_SECONDS = 0.05

STRUCTURE_MAX_DEPTH = 3
REQUEST_TIMEOUT = 30

DEFAULT_MODEL = "gemini-2.5-flash"


@dataclass(frozen=True)
class CollectorLimits:
    max_file_size: int = MAX_FILE_SIZE
    max_total_size: int = MAX_TOTAL_SIZE
    max_files: int = MAX_FILES
    fetch_delay: float = FETCH_DELAY_SECONDS


DEFAULT_LIMITS = CollectorLimits()


def get_github_token():
    return os.environ.get("GITHUB_TOKEN") or None


def get_gemini_api_key():
    """The LLM credential; API_KEY is accepted as a fallback name."""
    return os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY") or None


def get_gemini_model():
    return os.environ.get("GEMINI_MODEL", DEFAULT_MODEL)
