"""Drift reporting: log lines plus an optional markdown summary buffer."""
from __future__ import annotations

import asyncio
from typing import List

from jirabot.models import DriftRecord
from jirabot.utils.logger import log_warning

NO_ASSIGNEE = "NO ASSIGNEE"


def render_bullet(record: DriftRecord) -> str:
    """Render one markdown bullet for the CI summary."""
    assignee = NO_ASSIGNEE
    if record.assignee is not None:
        assignee = f"[{record.assignee.display_name}](mailto:{record.assignee.email})"
    return (f"* [{record.summary}]({record.url}), assigned to {assignee}: "
            f"Expected issue state to be '{record.expected}', but got '{record.observed}'.")


def render_log_line(record: DriftRecord) -> str:
    return (f"[DEBUG:ISSUE] [{record.summary}] {record.ticket_key} [{record.observed}]"
            f"\n\t- [{record.observed}] {record.url}\n\t+ [{record.expected}] {record.url}")


class DriftReporter:
    """Accumulates drift records; safe to call from concurrent evaluations."""

    def __init__(self, structured: bool = False):
        self.structured = structured
        self._records: List[DriftRecord] = []
        self._bullets: List[str] = []
        self._lock = asyncio.Lock()

    async def report(self, record: DriftRecord) -> None:
        log_warning(render_log_line(record))
        if not self.structured:
            return
        async with self._lock:
            self._records.append(record)
            self._bullets.append(render_bullet(record))

    @property
    def records(self) -> List[DriftRecord]:
        return list(self._records)

    def payload(self) -> str:
        """Markdown bullet list of every accumulated record, one per line."""
        return "".join(f"{bullet}\n" for bullet in self._bullets)
