"""Unit tests for state aggregation and precedence."""

import itertools

import pytest
from unittest.mock import AsyncMock

from conftest import ALL_STATES, make_ticket, pr_url
from jirabot.aggregator import precedence, resolve, validate_legal_states
from jirabot.errors import (
    IllegalStateError,
    InvalidReferenceError,
    NoLinkedPullRequestsError,
    UnknownPullRequestStateError,
)
from jirabot.models import PullRequestState

OPEN, DRAFT, CLOSED = PullRequestState.OPEN, PullRequestState.DRAFT, PullRequestState.CLOSED


def classifier_for(states):
    """AsyncMock classify returning ``states`` in order."""
    return AsyncMock(side_effect=list(states))


def ticket_with(n_prs, status="To Do"):
    return make_ticket(status=status, prs=[pr_url(number=i) for i in range(n_prs)], transitions=ALL_STATES)


class TestLegality:

    def test_all_states_present(self, mapping):
        validate_legal_states(make_ticket(transitions=ALL_STATES), mapping)

    @pytest.mark.parametrize("missing", ["To Do", "In Progress", "Code Review"])
    def test_missing_state_named_in_error(self, mapping, missing):
        ticket = make_ticket(key="MON-9", transitions=ALL_STATES - {missing})
        with pytest.raises(IllegalStateError) as excinfo:
            validate_legal_states(ticket, mapping)
        assert missing in str(excinfo.value)
        assert "MON-9" in str(excinfo.value)
        assert excinfo.value.ticket_key == "MON-9"

    @pytest.mark.asyncio
    async def test_fails_before_classifying(self, mapping):
        classify = classifier_for([OPEN])
        ticket = make_ticket(prs=[pr_url()], transitions=frozenset({"To Do"}))

        with pytest.raises(IllegalStateError):
            await resolve(ticket, classify, mapping)
        classify.assert_not_awaited()


class TestNoSignal:

    @pytest.mark.asyncio
    async def test_absent_field(self, mapping):
        ticket = make_ticket(absent=True, transitions=ALL_STATES)
        with pytest.raises(NoLinkedPullRequestsError, match="no linked PRs"):
            await resolve(ticket, classifier_for([]), mapping)

    @pytest.mark.asyncio
    async def test_empty_field(self, mapping):
        ticket = make_ticket(prs=[], transitions=ALL_STATES)
        with pytest.raises(NoLinkedPullRequestsError, match="empty"):
            await resolve(ticket, classifier_for([]), mapping)


class TestPrecedence:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("states", [
        combo for n in range(1, 4)
        for combo in itertools.product([OPEN, DRAFT, CLOSED], repeat=n)
    ])
    async def test_monotonic_precedence(self, mapping, states):
        resolution = await resolve(ticket_with(len(states)), classifier_for(states), mapping)

        if OPEN in states:
            expected = "Code Review"
        elif DRAFT in states:
            expected = "In Progress"
        else:
            expected = "To Do"
        assert resolution.state == expected

    @pytest.mark.asyncio
    async def test_counts_returned(self, mapping):
        states = [CLOSED, OPEN, DRAFT, CLOSED]
        resolution = await resolve(ticket_with(4), classifier_for(states), mapping)

        assert resolution.counts == {"To Do": 2, "In Progress": 1, "Code Review": 1}

    def test_precedence_defaults_to_initial(self, mapping):
        assert precedence(mapping.empty_counts(), mapping) == "To Do"

    @pytest.mark.asyncio
    async def test_classified_in_listed_order(self, mapping):
        classify = classifier_for([CLOSED, OPEN])
        ticket = ticket_with(2)

        await resolve(ticket, classify, mapping)

        assert [c.args[0] for c in classify.await_args_list] == [pr_url(number=0), pr_url(number=1)]


class TestClassificationFailure:

    @pytest.mark.asyncio
    async def test_first_error_aborts(self, mapping):
        classify = AsyncMock(side_effect=[OPEN, UnknownPullRequestStateError("unknown upstream PR state: x"), OPEN])

        with pytest.raises(UnknownPullRequestStateError):
            await resolve(ticket_with(3), classify, mapping)
        assert classify.await_count == 2

    @pytest.mark.asyncio
    async def test_invalid_reference_propagates(self, mapping):
        classify = AsyncMock(side_effect=InvalidReferenceError("invalid upstream PR URL: x"))

        with pytest.raises(InvalidReferenceError):
            await resolve(ticket_with(1), classify, mapping)
