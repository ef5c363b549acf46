"""Immutable per-pass configuration.

``RunConfig`` captures every setting a reconciliation pass reads. It is
built once from the ``Config`` singleton before the pass starts and handed
to the orchestrator, so no component touches ``os.environ`` or the global
config while tickets are being evaluated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from jirabot.config import DEFAULT_JQL_FILTER, JIRA_API_MAX_RESULTS_LIMIT
from jirabot.models import StateMapping

if TYPE_CHECKING:
    from jirabot.config import Config


@dataclass(frozen=True)
class RunConfig:
    """Immutable, per-pass configuration."""

    jql_filter: str = DEFAULT_JQL_FILTER
    mapping: StateMapping = field(default_factory=StateMapping)
    page_size: int = JIRA_API_MAX_RESULTS_LIMIT
    excluded_org: str = "openshift"
    github_url: str = "https://github.com"
    github_api_url: str = "https://api.github.com"
    max_concurrency: int = 0
    structured_output: bool = False

    @classmethod
    def from_config(cls, config: Config) -> RunConfig:
        """Snapshot the run-scoped fields of the global ``Config``."""
        return cls(
            jql_filter=config.project_upstream_issues_jql_filter,
            mapping=StateMapping(
                initial=config.project_initial_state,
                intermediate=config.project_intermediate_state,
                final=config.project_final_state,
            ),
            page_size=config.jira_max_results,
            excluded_org=config.excluded_org,
            github_url=config.github_url,
            github_api_url=config.github_api_url,
            max_concurrency=config.max_concurrency,
            structured_output=config.ci,
        )
