"""Async HTTP client for the Jira REST API using httpx.

Implements ``TicketBackend`` for the reconciler. Uses connection pooling
and a bearer token; errors propagate to the caller as ``httpx.HTTPError``.
"""
from __future__ import annotations
from typing import Any, Dict, FrozenSet, Optional

import httpx

from jirabot.config import Config, get_config
from jirabot.jira.utils import ticket_from_issue
from jirabot.models import SearchPage
from jirabot.utils.logger import log_api_response


class AsyncJiraClient:
    """Async Jira API client with connection pooling."""

    def __init__(self, config: Optional[Config] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        """Initialize async client with configuration.

        Args:
            config: Settings to use (defaults to the global config)
            transport: Optional httpx transport, mainly for tests
        """
        self.config = config or get_config()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        """Context manager entry - creates HTTP client."""
        self._client = httpx.AsyncClient(
            base_url=self.config.jira_url,
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
        """Context manager exit - closes HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.jira_key}",
            "Accept": "application/json",
        }

    def _require_client(self) -> httpx.AsyncClient:
        if not self._client:
            raise RuntimeError("AsyncJiraClient not initialized - use 'async with' context")
        return self._client

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        resp = await self._require_client().get(path, params=params)
        resp.raise_for_status()
        log_api_response(f"Jira GET {path}", resp.status_code)
        return resp.json()

    async def search(self, jql: str, *, start_at: int, max_results: int) -> SearchPage:
        """Run one page of a JQL search.

        Args:
            jql: JQL query string
            start_at: Offset of the first result
            max_results: Page size

        Returns:
            The page's tickets and the total number of matches

        Raises:
            httpx.HTTPError: the request failed
            ValueError: the response body is not a well-formed search page
        """
        data = await self._get(
            "/rest/api/2/search",
            params={
                "jql": jql,
                "startAt": start_at,
                "maxResults": max_results,
                "fields": f"summary,status,assignee,{self.config.jira_linked_pr_field}",
            },
        )
        if not isinstance(data, dict):
            raise ValueError(f"malformed search page: expected object, got {type(data).__name__}")
        issues = data.get("issues") or []
        total = data.get("total", 0)
        if not isinstance(issues, list) or isinstance(total, bool) or not isinstance(total, int):
            raise ValueError("malformed search page: 'issues' must be a list and 'total' an integer")
        tickets = [
            ticket_from_issue(issue, jira_url=self.config.jira_url,
                              linked_pr_field=self.config.jira_linked_pr_field)
            for issue in issues
        ]
        return SearchPage(tickets=tickets, total=total)

    async def get_legal_transitions(self, issue_id: str) -> FrozenSet[str]:
        """Return the names of the transitions currently available on an issue."""
        data = await self._get(f"/rest/api/2/issue/{issue_id}/transitions")
        return frozenset(t.get("name", "") for t in data.get("transitions") or [])
