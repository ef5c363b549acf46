"""Classify linked upstream pull requests into review-relevant states."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

import httpx

from jirabot.backends import PullRequestBackend
from jirabot.errors import (
    ClassificationError,
    InvalidReferenceError,
    MalformedPullRequestError,
    UnknownPullRequestStateError,
)
from jirabot.models import PullRequestState
from jirabot.utils.logger import log_debug


@dataclass(frozen=True)
class PullRequestRef:
    owner: str
    repo: str
    number: int

    def api_url(self, api_base: str) -> str:
        """Rewrite the human ``pull/<n>`` form into the API ``pulls/<n>`` form."""
        return f"{api_base.rstrip('/')}/repos/{self.owner}/{self.repo}/pulls/{self.number}"


def classify_detail(body: Any, reference: str = "") -> PullRequestState:
    """Decode a pull-request detail payload.

    * ``state == "closed"``: merged or closed.
    * ``state == "open"`` and ``draft`` false: up for review.
    * ``state == "open"`` and ``draft`` true: open but not up for review.

    Both fields are required regardless of state.
    """
    if not isinstance(body, dict):
        raise MalformedPullRequestError(f"unexpected GH API response for: {reference}", reference)
    state = body.get("state")
    if not isinstance(state, str):
        raise MalformedPullRequestError(f"\"state\" field not found in GH API response: {reference}", reference)
    draft = body.get("draft")
    if not isinstance(draft, bool):
        raise MalformedPullRequestError(f"\"draft\" field not found in GH API response: {reference}", reference)

    if state == "open":
        return PullRequestState.DRAFT if draft else PullRequestState.OPEN
    if state == "closed":
        return PullRequestState.CLOSED
    raise UnknownPullRequestStateError(f"unknown upstream PR state: {state}", reference)


class PullRequestClassifier:
    """Validates references and classifies them through a ``PullRequestBackend``."""

    def __init__(
        self,
        backend: PullRequestBackend,
        *,
        excluded_org: str = "openshift",
        web_url: str = "https://github.com",
        api_url: str = "https://api.github.com",
    ):
        self.backend = backend
        self.excluded_org = excluded_org
        self.api_url = api_url.rstrip("/")
        self._pattern = re.compile(
            rf"^{re.escape(web_url.rstrip('/'))}/(?P<owner>[^/]+)/(?P<repo>[^/]+)/pull/(?P<number>\d+)$"
        )

    def parse_reference(self, reference: Any) -> PullRequestRef:
        """Validate a linked reference and split it into owner, repo and number."""
        if not isinstance(reference, str):
            raise InvalidReferenceError(f"invalid linked PR type: {reference!r}", str(reference))
        match = self._pattern.match(reference)
        if not match:
            raise InvalidReferenceError(f"invalid upstream PR URL: {reference}", reference)
        owner = match.group("owner")
        # Links into the excluded org point at our own downstream mirror, not upstream.
        if self.excluded_org and owner.lower() == self.excluded_org.lower():
            raise InvalidReferenceError(f"invalid upstream PR URL (excluded org {owner}): {reference}", reference)
        return PullRequestRef(owner=owner, repo=match.group("repo"), number=int(match.group("number")))

    async def classify(self, reference: Any) -> PullRequestState:
        """Classify one linked pull request with a single detail request."""
        ref = self.parse_reference(reference)
        url = ref.api_url(self.api_url)
        try:
            body = await self.backend.get_detail(url)
        except httpx.HTTPError as e:
            raise ClassificationError(f"failed to fetch upstream PR state for {reference}: {e}", reference) from e
        except ValueError as e:
            raise ClassificationError(f"failed to decode upstream PR response for {reference}: {e}", reference) from e

        pr_state = classify_detail(body, reference)
        log_debug("Classified upstream PR", reference=reference, state=pr_state.value)
        return pr_state
