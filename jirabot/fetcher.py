"""Paginated retrieval of candidate tickets."""
from __future__ import annotations

from typing import List

import httpx

from jirabot.backends import TicketBackend
from jirabot.config import JIRA_API_MAX_RESULTS_LIMIT
from jirabot.errors import FetchError
from jirabot.models import Ticket
from jirabot.utils.logger import log_debug, log_info


async def fetch_all(backend: TicketBackend, jql: str, page_size: int = JIRA_API_MAX_RESULTS_LIMIT) -> List[Ticket]:
    """Fetch every ticket matching ``jql``, working around the per-request result limit.

    Raises:
        FetchError: any page failed; nothing fetched so far is returned
    """
    page_size = max(1, min(page_size, JIRA_API_MAX_RESULTS_LIMIT))
    tickets: List[Ticket] = []

    while True:
        try:
            page = await backend.search(jql, start_at=len(tickets), max_results=page_size)
        except (httpx.HTTPError, ValueError) as e:
            raise FetchError(f"failed to fetch issues: {e}") from e

        log_debug("Fetched ticket page", start_at=len(tickets), count=len(page.tickets), total=page.total)
        tickets.extend(page.tickets)
        if len(tickets) >= page.total:
            break
        if not page.tickets:
            raise FetchError(f"search returned an empty page at offset {len(tickets)} of {page.total}")

    log_info("Fetched candidate tickets", count=len(tickets))
    return tickets
