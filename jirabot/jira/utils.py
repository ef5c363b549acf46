"""Helpers turning Jira REST payloads into ``Ticket`` objects."""
from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from jirabot.models import Assignee, Ticket


def to_issue_url(jira_url: str, key: str) -> str:
    return f"{jira_url.rstrip('/')}/browse/{key}"


def _linked_pr_field(fields: Dict[str, Any], field_name: str) -> Optional[Tuple[Any, ...]]:
    # Missing key and explicit null both mean Jira has no value for the field.
    if field_name not in fields or fields[field_name] is None:
        return None
    value = fields[field_name]
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return (value,)


def _object(value: Any, what: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"malformed issue: {what} is {type(value).__name__}, expected object")
    return value


def ticket_from_issue(issue: Dict[str, Any], *, jira_url: str, linked_pr_field: str) -> Ticket:
    """Build a ``Ticket`` from one entry of a search response's ``issues``.

    Raises:
        ValueError: the issue or one of its object fields has the wrong shape
    """
    if not isinstance(issue, dict):
        raise ValueError(f"malformed issue: expected object, got {type(issue).__name__}")
    fields = _object(issue.get("fields"), "fields")
    status = _object(fields.get("status"), "status").get("name", "")

    assignee = None
    raw_assignee = _object(fields.get("assignee"), "assignee")
    if raw_assignee:
        assignee = Assignee(
            display_name=raw_assignee.get("displayName", ""),
            email=raw_assignee.get("emailAddress", ""),
        )

    key = issue.get("key", "")
    return Ticket(
        key=key,
        id=str(issue.get("id", "")),
        summary=fields.get("summary", ""),
        status=status,
        url=to_issue_url(jira_url, key),
        assignee=assignee,
        linked_pr_field=_linked_pr_field(fields, linked_pr_field),
    )
