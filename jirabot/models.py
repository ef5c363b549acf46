"""Core data types shared by the fetcher, classifier, aggregator and reporter."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple


class PullRequestState(Enum):
    """Review-relevant state of an upstream pull request."""

    OPEN = "open"  # ready for review
    DRAFT = "draft"  # open, not ready for review
    CLOSED = "closed"  # merged or closed


@dataclass(frozen=True)
class Assignee:
    display_name: str
    email: str = ""


@dataclass(frozen=True)
class Ticket:
    """A Jira issue as seen by one reconciliation pass.

    ``linked_pr_field`` holds the raw value of the linked pull-request custom
    field, or ``None`` when Jira did not return the field at all.
    ``legal_transitions`` is empty until the orchestrator looks it up.
    """

    key: str
    id: str
    summary: str
    status: str
    url: str = ""
    assignee: Optional[Assignee] = None
    linked_pr_field: Optional[Tuple[Any, ...]] = None
    legal_transitions: FrozenSet[str] = frozenset()

    @property
    def linked_pull_requests(self) -> Optional[Tuple[Any, ...]]:
        """Linked pull-request references in listed order.

        Returns ``None`` when the field is absent and an empty tuple when it
        is present but empty.
        """
        return self.linked_pr_field


@dataclass(frozen=True)
class StateMapping:
    """Maps each pull-request state onto a Jira workflow state name."""

    initial: str = "To Do"
    intermediate: str = "In Progress"
    final: str = "Code Review"

    @property
    def states(self) -> Tuple[str, str, str]:
        return (self.initial, self.intermediate, self.final)

    def target_for(self, pr_state: PullRequestState) -> str:
        if pr_state is PullRequestState.OPEN:
            return self.final
        if pr_state is PullRequestState.DRAFT:
            return self.intermediate
        return self.initial

    def empty_counts(self) -> Dict[str, int]:
        return {state: 0 for state in self.states}


@dataclass(frozen=True)
class Resolution:
    """Expected ticket state and the per-state tally it was derived from."""

    state: str
    counts: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class DriftRecord:
    ticket_key: str
    summary: str
    url: str
    assignee: Optional[Assignee]
    expected: str
    observed: str


@dataclass(frozen=True)
class SearchPage:
    """One page of a Jira search."""

    tickets: List[Ticket]
    total: int
