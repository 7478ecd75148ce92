"""GitHub API client for repository information.

Provides a lightweight REST client for the two GitHub resources the fork
tooling needs: raw file contents at a ref, and pull request metadata.
"""
from __future__ import annotations

import os
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from ..constants import Constants
from ..common.http_client import get_ok
from ..errors import RemoteFetchError


class GitHubClient:
    """Lightweight REST client for GitHub API operations.

    Supports optional authentication via the GITHUB_TOKEN environment variable.
    One client is built per command and handed to whatever needs it.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize GitHub client.

        Args:
            base_url: Base URL for GitHub API (defaults to Constants.GITHUB_API_BASE)
            token: GitHub access token (defaults to GITHUB_TOKEN env var)
            session: Optional requests session to reuse connections
            timeout: Request timeout in seconds (defaults to Constants.REQUEST_TIMEOUT)
        """
        self.base_url = (base_url or Constants.GITHUB_API_BASE).rstrip("/")
        self.token = token or os.environ.get(Constants.ENV_GITHUB_TOKEN)
        self.session = session
        self.timeout = timeout

    def _get_headers(self, accept: str = "application/vnd.github+json") -> Dict[str, str]:
        """Get request headers including authorization if token is available."""
        headers = {
            "Accept": accept,
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def get_file_contents(self, owner: str, repo: str, path: str, ref: Optional[str] = None) -> bytes:
        """Download a single file from a repository.

        Args:
            owner: Repository owner/organisation
            repo: Repository name
            path: Path of the file inside the repository
            ref: Branch, tag or commit (defaults to the default branch)

        Returns:
            Raw file content

        Raises:
            RemoteFetchError: If the repository, ref or file can't be fetched
        """
        url = f"{self.base_url}/repos/{owner}/{repo}/contents/{quote(path)}"
        params = {"ref": ref} if ref else None
        try:
            res = get_ok(
                url,
                context="github",
                headers=self._get_headers("application/vnd.github.raw+json"),
                params=params,
                session=self.session,
                timeout=self.timeout,
            )
        except RemoteFetchError as exc:
            where = f"{owner}/{repo}@{ref}" if ref else f"{owner}/{repo}"
            raise RemoteFetchError(f"Couldn't fetch {path} from {where}: {exc}") from exc
        return res.content

    def get_pull_request(self, owner: str, repo: str, number: int) -> Dict[str, Any]:
        """Fetch pull request metadata.

        Args:
            owner: Repository owner/organisation
            repo: Repository name
            number: Pull request number

        Returns:
            Pull request JSON as returned by the API

        Raises:
            RemoteFetchError: If the pull request can't be fetched or isn't JSON
        """
        url = f"{self.base_url}/repos/{owner}/{repo}/pulls/{number}"
        try:
            res = get_ok(
                url,
                context="github",
                headers=self._get_headers(),
                session=self.session,
                timeout=self.timeout,
            )
        except RemoteFetchError as exc:
            raise RemoteFetchError(f"Couldn't fetch pull request {owner}/{repo}#{number}: {exc}") from exc
        try:
            data = res.json()
        except ValueError as exc:
            raise RemoteFetchError(
                f"Pull request {owner}/{repo}#{number} response was not valid JSON"
            ) from exc
        if not isinstance(data, dict):
            raise RemoteFetchError(f"Pull request {owner}/{repo}#{number} response was not an object")
        return data
