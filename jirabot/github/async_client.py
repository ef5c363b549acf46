"""Async HTTP client for the GitHub REST API using httpx.

Implements ``PullRequestBackend`` for the classifier.
"""
from __future__ import annotations
from typing import Any, Dict, Optional

import httpx

from jirabot.config import Config, get_config
from jirabot.utils.logger import log_api_response

GITHUB_API_VERSION = "2022-11-28"


class AsyncGitHubClient:
    """Async GitHub API client with connection pooling."""

    def __init__(self, config: Optional[Config] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config or get_config()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            headers=self._headers(),
            timeout=httpx.Timeout(self.config.http_timeout),
            limits=httpx.Limits(
                max_keepalive_connections=10,
                max_connections=20
            ),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._client:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.gh_key}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }

    async def get_detail(self, api_url: str) -> Any:
        """Fetch and decode a pull-request detail endpoint.

        Args:
            api_url: API-form URL, e.g. ``https://api.github.com/repos/o/r/pulls/1``

        Returns:
            The decoded JSON body

        Raises:
            httpx.HTTPError: transport failure or non-2xx status
            ValueError: the body is not valid JSON
        """
        if not self._client:
            raise RuntimeError("AsyncGitHubClient not initialized - use 'async with' context")
        resp = await self._client.get(api_url)
        resp.raise_for_status()
        log_api_response("GitHub pull request detail", resp.status_code)
        return resp.json()
