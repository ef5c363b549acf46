"""Collapse the states of a ticket's linked pull requests into one expected state."""
from __future__ import annotations

from typing import Any, Awaitable, Callable

from jirabot.errors import IllegalStateError, NoLinkedPullRequestsError
from jirabot.models import PullRequestState, Resolution, StateMapping, Ticket
from jirabot.utils.logger import log_debug

Classify = Callable[[Any], Awaitable[PullRequestState]]


def validate_legal_states(ticket: Ticket, mapping: StateMapping) -> None:
    """Fail unless every mapped state is a legal transition for the ticket."""
    for state in mapping.states:
        if state not in ticket.legal_transitions:
            raise IllegalStateError(f"state \"{state}\" is not a valid state for issue \"{ticket.key}\"", ticket.key)


def precedence(counts: dict, mapping: StateMapping) -> str:
    """One final signal beats any number of intermediate ones, which beat the initial default."""
    resolved = mapping.initial
    if counts.get(mapping.intermediate, 0) >= 1:
        resolved = mapping.intermediate
    if counts.get(mapping.final, 0) >= 1:
        resolved = mapping.final
    return resolved


async def resolve(ticket: Ticket, classify: Classify, mapping: StateMapping) -> Resolution:
    """Derive the state ``ticket`` should be in from its linked pull requests.

    Args:
        ticket: Ticket with ``legal_transitions`` already populated
        classify: Coroutine function classifying one reference
        mapping: Pull-request state to workflow state mapping

    Returns:
        The resolved state and the per-state counts

    Raises:
        IllegalStateError: a mapped state is not legal for the ticket
        NoLinkedPullRequestsError: the ticket links no pull requests
        ClassificationError: any linked pull request could not be classified
    """
    validate_legal_states(ticket, mapping)

    references = ticket.linked_pull_requests
    if references is None:
        raise NoLinkedPullRequestsError(f"no linked PRs found for: {ticket.key}", ticket.key)
    if not references:
        raise NoLinkedPullRequestsError(f"linked PR field is empty for: {ticket.key}", ticket.key)

    counts = mapping.empty_counts()
    for reference in references:
        pr_state = await classify(reference)
        wanted = mapping.target_for(pr_state)
        counts[wanted] += 1
        if wanted != ticket.status:
            log_debug(f"[DEBUG:PR] [{ticket.summary}] {reference} [{pr_state.value}]"
                      f"\n\t- [{ticket.status}] {ticket.url}\n\t+ [{wanted}] {ticket.url}")

    return Resolution(state=precedence(counts, mapping), counts=counts)
