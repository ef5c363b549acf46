"""Pytest configuration and fixtures for jirabot tests."""

import os
import sys
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional

import httpx
import pytest

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from jirabot.models import Assignee, SearchPage, StateMapping, Ticket  # noqa: E402
from jirabot.reporter import DriftReporter  # noqa: E402
from jirabot.run_config import RunConfig  # noqa: E402
from jirabot.utils.deadline import Deadline  # noqa: E402

ALL_STATES = frozenset({"To Do", "In Progress", "Code Review", "Closed"})


def pr_url(owner: str = "org", repo: str = "repo", number: int = 1) -> str:
    return f"https://github.com/{owner}/{repo}/pull/{number}"


def api_url(owner: str = "org", repo: str = "repo", number: int = 1) -> str:
    return f"https://api.github.com/repos/{owner}/{repo}/pulls/{number}"


OPEN = {"state": "open", "draft": False}
DRAFT = {"state": "open", "draft": True}
CLOSED = {"state": "closed", "draft": False}


def make_ticket(key: str = "MON-1", status: str = "To Do", prs=(), *, absent: bool = False,
                assignee: Optional[Assignee] = None, transitions: FrozenSet[str] = frozenset()) -> Ticket:
    return Ticket(
        key=key,
        id=key.split("-")[-1],
        summary=f"Summary of {key}",
        status=status,
        url=f"https://issues.redhat.com/browse/{key}",
        assignee=assignee,
        linked_pr_field=None if absent else tuple(prs),
        legal_transitions=transitions,
    )


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTicketBackend:
    """In-memory ``TicketBackend``."""

    def __init__(self, tickets: List[Ticket], transitions: Optional[Dict[str, FrozenSet[str]]] = None,
                 total: Optional[int] = None, fail_at: Optional[int] = None):
        self.tickets = tickets
        self.transitions = transitions or {}
        self.total = len(tickets) if total is None else total
        self.fail_at = fail_at
        self.search_calls: List[Dict[str, Any]] = []
        self.transition_calls: List[str] = []
        self.on_search = None

    async def search(self, jql: str, *, start_at: int, max_results: int) -> SearchPage:
        self.search_calls.append({"jql": jql, "start_at": start_at, "max_results": max_results})
        if self.on_search:
            self.on_search()
        if self.fail_at is not None and start_at >= self.fail_at:
            raise httpx.ConnectError("connection refused")
        return SearchPage(tickets=self.tickets[start_at:start_at + max_results], total=self.total)

    async def get_legal_transitions(self, issue_id: str) -> FrozenSet[str]:
        self.transition_calls.append(issue_id)
        return self.transitions.get(issue_id, ALL_STATES)


class FakePullRequestBackend:
    """In-memory ``PullRequestBackend`` keyed by API URL."""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        self.details = details or {}
        self.calls: List[str] = []
        self.on_call = None

    async def get_detail(self, url: str) -> Any:
        self.calls.append(url)
        if self.on_call:
            self.on_call(url)
        detail = self.details[url]
        if isinstance(detail, Exception):
            raise detail
        return detail


@pytest.fixture
def mapping():
    return StateMapping(initial="To Do", intermediate="In Progress", final="Code Review")


@pytest.fixture
def run_config(mapping):
    return RunConfig(jql_filter="project = MON", mapping=mapping, structured_output=True)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def deadline(clock):
    return Deadline(300.0, clock=clock)


@pytest.fixture
def reporter():
    return DriftReporter(structured=True)


@pytest.fixture
def temp_env():
    """Temporary environment variables for testing."""
    original_env = os.environ.copy()

    test_env = {
        "JIRA_KEY": "test-jira-token",
        "GH_KEY": "test-gh-token",
        "CI": "false",
    }
    os.environ.update(test_env)

    yield test_env

    os.environ.clear()
    os.environ.update(original_env)
