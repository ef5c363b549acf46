"""Capability interfaces the core depends on.

The concrete httpx clients in ``jirabot.jira`` and ``jirabot.github``
implement these; tests substitute in-memory fakes.
"""
from __future__ import annotations

from typing import Any, FrozenSet, Protocol, runtime_checkable

from jirabot.models import SearchPage


@runtime_checkable
class TicketBackend(Protocol):
    async def search(self, jql: str, *, start_at: int, max_results: int) -> SearchPage:
        """Return one page of tickets matching ``jql`` plus the total match count."""
        ...

    async def get_legal_transitions(self, issue_id: str) -> FrozenSet[str]:
        """Return the workflow state names currently reachable from the issue."""
        ...


@runtime_checkable
class PullRequestBackend(Protocol):
    async def get_detail(self, api_url: str) -> Any:
        """Return the decoded JSON body of a pull-request detail endpoint."""
        ...
