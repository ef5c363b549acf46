"""Jira backend for jirabot."""
from .async_client import AsyncJiraClient
from .utils import ticket_from_issue, to_issue_url

__all__ = [
    "AsyncJiraClient",
    "ticket_from_issue",
    "to_issue_url",
]
