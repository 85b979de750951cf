# src/repo_analyzer/analyzer.py
import logging

import requests

from .config import DEFAULT_LIMITS
from .github_client import create_session, parse_github_url
from .llm_client import AnalysisError, analyze_repository
from .metadata import fetch_repo_data

logger = logging.getLogger(__name__)


def run_repo_analysis(repo_url, gh_token=None, api_key=None, model_name=None, limits=DEFAULT_LIMITS):
    """
    Fetch a repository and have it assessed by the LLM.

    Returns a (repo_data, analysis, error) tuple; error is a user-facing
    message and the other two are None when it is set. repo_data is kept
    when only the LLM step failed.
    """
    repo_info = parse_github_url(repo_url)
    if not repo_info:
        return None, None, "Error: Invalid GitHub URL. Please use format: https://github.com/owner/repo"
    owner, repo = repo_info

    session = create_session(gh_token)
    try:
        repo_data = fetch_repo_data(owner, repo, session, limits=limits)
    except requests.exceptions.HTTPError as e:
        error_msg = f"Error analyzing {repo_url}: {e}"
        if e.response is not None and e.response.status_code == 403:
            error_msg += "\n(Hint: GitHub API rate limit exceeded. Please try again later or provide a GitHub PAT.)"
        elif e.response is not None and e.response.status_code == 404:
            error_msg += "\n(Hint: Repository not found (or private). Please check the URL.)"
        return None, None, error_msg
    except requests.exceptions.RequestException as e:
        return None, None, f"Error: Could not reach the GitHub API for {repo_url}.\nDetails: {e}"
    finally:
        session.close()

    try:
        analysis = analyze_repository(repo_data, api_key=api_key, model_name=model_name)
    except AnalysisError as e:
        return repo_data, None, f"Error: {e}"
    return repo_data, analysis, None
