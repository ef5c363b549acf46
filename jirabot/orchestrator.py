"""Reconciliation pass: fetch tickets, evaluate them concurrently, report drift.

A single ``Deadline`` bounds the pass. It is consulted before each ticket is
dispatched and again when an evaluation starts; requests already in flight
always run to completion.
"""
from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Optional

import httpx

from jirabot.aggregator import resolve
from jirabot.backends import PullRequestBackend, TicketBackend
from jirabot.classifier import PullRequestClassifier
from jirabot.errors import FetchError, JirabotError, TransitionLookupError
from jirabot.fetcher import fetch_all
from jirabot.models import DriftRecord, Ticket
from jirabot.reporter import DriftReporter
from jirabot.run_config import RunConfig
from jirabot.utils.deadline import Deadline
from jirabot.utils.logger import log_pass_progress, log_ticket_failure, log_warning


class Phase(Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    EVALUATING = "evaluating"
    DONE = "done"


@dataclass
class ReconcileSummary:
    fetched: int = 0
    dispatched: int = 0
    skipped: int = 0
    evaluated: int = 0
    drifted: int = 0
    failed: int = 0


class Reconciler:
    """Drives one reconciliation pass over the tickets matched by the configured query."""

    def __init__(
        self,
        ticket_backend: TicketBackend,
        pr_backend: PullRequestBackend,
        settings: RunConfig,
        reporter: DriftReporter,
        deadline: Deadline,
        output_writer: Optional[Callable[[str], None]] = None,
    ):
        self.ticket_backend = ticket_backend
        self.settings = settings
        self.reporter = reporter
        self.deadline = deadline
        self.output_writer = output_writer
        self.classifier = PullRequestClassifier(
            pr_backend,
            excluded_org=settings.excluded_org,
            web_url=settings.github_url,
            api_url=settings.github_api_url,
        )
        self.phase = Phase.IDLE
        self.summary = ReconcileSummary()
        self._semaphore = asyncio.Semaphore(settings.max_concurrency) if settings.max_concurrency > 0 else None

    def _slot(self):
        if self._semaphore is None:
            return contextlib.nullcontext()
        return self._semaphore

    async def run(self) -> ReconcileSummary:
        """Run the pass.

        Raises:
            FetchError: the ticket search failed; nothing was evaluated
            OutputWriteError: the CI payload could not be written
        """
        self.phase = Phase.FETCHING
        log_pass_progress("fetching tickets", deadline_seconds=self.deadline.seconds)
        try:
            tickets = await fetch_all(self.ticket_backend, self.settings.jql_filter, self.settings.page_size)
        except FetchError:
            self.phase = Phase.DONE
            raise
        self.summary.fetched = len(tickets)

        self.phase = Phase.EVALUATING
        dispatched: List[Ticket] = []
        tasks = []
        for ticket in tickets:
            if self.deadline.expired():
                log_warning("[timeout] Deadline exceeded, not dispatching remaining tickets",
                            remaining=len(tickets) - len(dispatched))
                break
            dispatched.append(ticket)
            tasks.append(asyncio.create_task(self._evaluate_logged(ticket)))
        self.summary.dispatched = len(tasks)

        results = await asyncio.gather(*tasks, return_exceptions=True)
        for ticket, result in zip(dispatched, results):
            if isinstance(result, Exception):
                log_ticket_failure(ticket.key, result)
                self.summary.failed += 1

        self.phase = Phase.DONE
        log_pass_progress("pass finished", **vars(self.summary))
        self._flush_output()
        return self.summary

    def _flush_output(self) -> None:
        if not self.reporter.structured or self.output_writer is None:
            return
        payload = self.reporter.payload()
        if payload:
            self.output_writer(payload)

    async def _evaluate_logged(self, ticket: Ticket) -> Optional[DriftRecord]:
        try:
            return await self.evaluate(ticket)
        except JirabotError as e:
            log_ticket_failure(ticket.key, e)
            self.summary.failed += 1
            return None

    async def evaluate(self, ticket: Ticket) -> Optional[DriftRecord]:
        """Evaluate one ticket and report it if its state has drifted.

        Returns:
            The drift record, or None when the ticket is consistent or was skipped
        """
        async with self._slot():
            if self.deadline.expired():
                log_warning(f"[timeout] Skipping {ticket.key}: deadline exceeded")
                self.summary.skipped += 1
                return None

            try:
                transitions = await self.ticket_backend.get_legal_transitions(ticket.id)
            except (httpx.HTTPError, ValueError) as e:
                raise TransitionLookupError(
                    f"failed to get possible states for issue \"{ticket.key}\": {e}", ticket.key
                ) from e
            ticket = replace(ticket, legal_transitions=frozenset(transitions))

            resolution = await resolve(ticket, self.classifier.classify, self.settings.mapping)
            self.summary.evaluated += 1
            if resolution.state == ticket.status:
                return None

            record = DriftRecord(
                ticket_key=ticket.key,
                summary=ticket.summary,
                url=ticket.url,
                assignee=ticket.assignee,
                expected=resolution.state,
                observed=ticket.status,
            )
            await self.reporter.report(record)
            self.summary.drifted += 1
            return record
