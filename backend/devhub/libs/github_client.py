"""
GitHub API Client Library

Read-only wrapper around the public GitHub REST API used by the repository
importer:
- Listing an account's public repositories
- Checking rate limit status

No token is required. If GITHUB_TOKEN is set it is sent along, which only
raises the rate limit.
"""

import logging
import os
from typing import Dict, List, Optional

import requests

from devhub.libs.models import GitHubRepo

logger = logging.getLogger(__name__)


class GitHubError(Exception):
    """Custom exception for GitHub API errors"""
    def __init__(self, message: str, status_code: Optional[int] = None, response: Optional[Dict] = None):
        self.message = message
        self.status_code = status_code
        self.response = response
        super().__init__(self.message)


class GitHubNotFoundError(GitHubError):
    """The requested account does not exist"""


class GitHubRateLimitError(GitHubError):
    """The unauthenticated request quota is exhausted"""
    def __init__(self, message: str, reset: Optional[int] = None, **kwargs):
        self.reset = reset
        super().__init__(message, **kwargs)


def _json_or_none(response) -> Optional[Dict]:
    try:
        return response.json() if response.text else None
    except ValueError:
        return None


class GitHubClient:
    """
    GitHub API Client

    Handles the read-only calls the importer needs.
    """

    BASE_URL = "https://api.github.com"

    def __init__(self, token: Optional[str] = None, session: Optional[requests.Session] = None, timeout: float = 15.0):
        """
        Initialize GitHub client

        Args:
            token: Optional personal access token. Falls back to GITHUB_TOKEN.
            session: HTTP session to issue requests with
            timeout: Per-request timeout in seconds
        """
        self.token = token or os.environ.get("GITHUB_TOKEN")
        self.session = session or requests.Session()
        self.timeout = timeout

        self.headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28"
        }
        if self.token:
            self.headers["Authorization"] = f"Bearer {self.token}"

    def _raise_for_status(self, response, what: str) -> None:
        if response.status_code == 200:
            return

        body = _json_or_none(response)
        remaining = response.headers.get("x-ratelimit-remaining")

        if response.status_code == 404:
            raise GitHubNotFoundError(
                f"{what}: not found",
                status_code=404,
                response=body
            )

        if response.status_code == 429 or (response.status_code == 403 and remaining == "0"):
            reset = response.headers.get("x-ratelimit-reset")
            raise GitHubRateLimitError(
                f"{what}: GitHub API rate limit exceeded",
                reset=int(reset) if reset and reset.isdigit() else None,
                status_code=response.status_code,
                response=body
            )

        raise GitHubError(
            f"{what}: {response.status_code}",
            status_code=response.status_code,
            response=body
        )

    def list_user_repositories(
        self,
        username: str,
        sort: str = "updated",  # created, updated, pushed, full_name
        per_page: int = 30,
        page: int = 1
    ) -> List[GitHubRepo]:
        """
        List an account's public repositories

        Args:
            username: GitHub account name
            sort: Sort by field (created, updated, pushed, full_name)
            per_page: Results per page (max 100)
            page: Page number

        Returns:
            List of GitHubRepo objects, forks included
        """
        params = {
            "sort": sort,
            "per_page": min(per_page, 100),
            "page": page
        }

        try:
            response = self.session.get(
                f"{self.BASE_URL}/users/{username}/repos",
                headers=self.headers,
                params=params,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise GitHubError(f"Failed to reach GitHub for '{username}': {e}") from e

        self._raise_for_status(response, f"Failed to list repositories for '{username}'")

        repos_data = response.json()
        if not isinstance(repos_data, list):
            raise GitHubError(
                f"Unexpected repository listing for '{username}'",
                status_code=response.status_code,
                response=repos_data if isinstance(repos_data, dict) else None
            )

        logger.info("Listed %d repositories for %s", len(repos_data), username)
        return [GitHubRepo(**repo) for repo in repos_data]
