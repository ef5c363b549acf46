"""Health check module for verifying backend connections.

Checks that both the GitHub and Jira credentials work before a
reconciliation pass is started.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from jirabot.config import Config, get_config
from jirabot.github.async_client import GITHUB_API_VERSION
from jirabot.utils.logger import log_error, log_info


@dataclass
class HealthCheckResult:
    """Result of a single health check."""
    service: str
    healthy: bool
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


def _short(error: Exception) -> str:
    error_msg = str(error)
    if len(error_msg) > 100:
        error_msg = error_msg[:100] + "..."
    return error_msg


def check_github(config: Optional[Config] = None, timeout: Optional[float] = None) -> HealthCheckResult:
    """Check GitHub API connectivity with the ``/zen`` endpoint."""
    config = config or get_config()
    if not config.gh_key:
        return HealthCheckResult(service="GitHub", healthy=False, message="GH_KEY not set")

    try:
        response = requests.get(
            f"{config.github_api_url}/zen",
            headers={
                "Authorization": f"Bearer {config.gh_key}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
            },
            timeout=timeout or config.http_timeout,
        )
    except requests.RequestException as e:
        return HealthCheckResult(service="GitHub", healthy=False,
                                 message=f"Encountered unexpected error for GitHub client: {_short(e)}")

    if response.status_code != 200:
        return HealthCheckResult(service="GitHub", healthy=False,
                                 message=f"Received unexpected status code for GitHub client: {response.status_code}")
    return HealthCheckResult(service="GitHub", healthy=True, message="Connected",
                             details={"api_url": config.github_api_url})


def check_jira(config: Optional[Config] = None, timeout: Optional[float] = None) -> HealthCheckResult:
    """Check Jira API connectivity by listing workflow statuses."""
    config = config or get_config()
    if not config.jira_key:
        return HealthCheckResult(service="Jira", healthy=False, message="JIRA_KEY not set")

    try:
        response = requests.get(
            f"{config.jira_url}/rest/api/2/status",
            headers={"Authorization": f"Bearer {config.jira_key}", "Accept": "application/json"},
            timeout=timeout or config.http_timeout,
        )
    except requests.RequestException as e:
        return HealthCheckResult(service="Jira", healthy=False,
                                 message=f"Encountered unexpected error for JIRA client: {_short(e)}")

    if response.status_code != 200:
        return HealthCheckResult(service="Jira", healthy=False,
                                 message=f"Received unexpected status code for JIRA client: {response.status_code}")
    return HealthCheckResult(service="Jira", healthy=True, message="Connected",
                             details={"jira_url": config.jira_url})


def run_health_checks(config: Optional[Config] = None, timeout: Optional[float] = None) -> List[HealthCheckResult]:
    """Run every backend check and log each result.

    Args:
        config: Settings to use (defaults to the global config)
        timeout: Per-request timeout in seconds; defaults to HTTP_TIMEOUT
    """
    results = [check_github(config, timeout), check_jira(config, timeout)]
    for result in results:
        if result.healthy:
            log_info(f"{result.service} health check passed", detail=result.message)
        else:
            log_error(f"{result.service} health check failed", detail=result.message)
    return results


def all_healthy(results: List[HealthCheckResult]) -> bool:
    return all(r.healthy for r in results)
