"""Exception hierarchy for jirabot.

Setup, fetch and output-write errors are fatal for the process. Ticket and
classification errors are fatal only for the ticket being evaluated.
"""
from typing import Optional


class JirabotError(Exception):
    """Base exception for jirabot errors."""


class SetupError(JirabotError):
    """Invalid settings, bad timeout or unreachable backend at startup."""


class FetchError(JirabotError):
    """The paginated ticket search failed; no partial result is usable."""


class OutputWriteError(JirabotError):
    """The end-of-pass payload could not be written."""


class TicketError(JirabotError):
    """A ticket cannot be evaluated in this pass."""

    def __init__(self, message: str, ticket_key: Optional[str] = None):
        super().__init__(message)
        self.ticket_key = ticket_key


class IllegalStateError(TicketError):
    """A configured target state is not a legal transition for the ticket."""


class NoLinkedPullRequestsError(TicketError):
    """The ticket links no pull requests, so there is nothing to reconcile."""


class TransitionLookupError(TicketError):
    """The ticket's legal transitions could not be retrieved."""


class ClassificationError(JirabotError):
    """A linked pull request could not be classified."""

    def __init__(self, message: str, reference: Optional[str] = None):
        super().__init__(message)
        self.reference = reference


class InvalidReferenceError(ClassificationError):
    """The linked reference is not an acceptable upstream pull request URL."""


class MalformedPullRequestError(ClassificationError):
    """The pull request payload lacks the state or draft field."""


class UnknownPullRequestStateError(ClassificationError):
    """The pull request host reported a state jirabot does not understand."""
