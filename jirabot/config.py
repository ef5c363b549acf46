"""Configuration management using Pydantic BaseSettings.

Every setting can be overridden through the environment (or a ``.env``
file). Field names match their environment variable names, so
``PROJECT_FINAL_STATE=Review`` overrides ``project_final_state``.
"""
import os
from typing import List

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings

DEFAULT_JQL_FILTER = (
    "project = MON AND"
    " resolution = Unresolved AND"
    " issuetype in (Bug, Task, Sub-task, Story, Epic, Spike) AND"
    " \"Git Pull Request\" !~ \"https://github.com/openshift\" AND"
    " \"Git Pull Request\" !~ \"https://gitlab.cee.redhat.com\""
    " ORDER BY priority DESC, updated DESC"
)

JIRA_API_MAX_RESULTS_LIMIT = 1000

# Settings whose override is announced at startup.
OVERRIDABLE_SETTINGS = (
    "PROJECT_UPSTREAM_ISSUES_JQL_FILTER",
    "PROJECT_INITIAL_STATE",
    "PROJECT_INTERMEDIATE_STATE",
    "PROJECT_FINAL_STATE",
)


class Config(BaseSettings):
    """Main configuration class combining all settings."""

    # Jira
    jira_url: str = Field("https://issues.redhat.com", description="Jira instance base URL")
    jira_key: str = Field("", description="Jira bearer token")
    jira_linked_pr_field: str = Field("customfield_12310220", description="Custom field listing linked PRs")
    jira_max_results: int = Field(JIRA_API_MAX_RESULTS_LIMIT, ge=1, le=JIRA_API_MAX_RESULTS_LIMIT,
                                  description="Max results per search page")

    # GitHub (GITHUB_ prefixes are not allowed for repository secrets)
    gh_key: str = Field("", description="GitHub bearer token")
    github_url: str = Field("https://github.com", description="GitHub web URL")
    github_api_url: str = Field("https://api.github.com", description="GitHub REST API URL")
    excluded_org: str = Field("openshift", description="Organisation whose PRs are never reconciled against")

    # Reconciliation
    project_upstream_issues_jql_filter: str = Field(DEFAULT_JQL_FILTER, description="Candidate ticket query")
    project_initial_state: str = Field("To Do", description="State when only closed/merged PRs are linked")
    project_intermediate_state: str = Field("In Progress", description="State when a draft PR is linked")
    project_final_state: str = Field("Code Review", description="State when a PR is up for review")
    max_concurrency: int = Field(0, ge=0, description="Concurrent ticket evaluations (0 = unbounded)")
    http_timeout: float = Field(30.0, gt=0, le=600, description="Per-request timeout in seconds")

    # Output
    ci: bool = Field(False, description="Automated mode; enables the payload file")
    output_file: str = Field("webhook-payload.json", description="Payload file written in CI mode")

    # Logging
    log_level: str = Field("INFO", description="Logging level")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }

    @field_validator('log_level')
    @classmethod
    def validate_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Invalid log level: {v}. Valid options: {valid_levels}')
        return v.upper()

    @field_validator('jira_url', 'github_url', 'github_api_url')
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip('/')

    @model_validator(mode='after')
    def validate_states(self):
        states = [self.project_initial_state, self.project_intermediate_state, self.project_final_state]
        if any(not s.strip() for s in states):
            raise ValueError('PROJECT_*_STATE values must not be empty')
        if len(set(states)) != len(states):
            raise ValueError(f'PROJECT_*_STATE values must be distinct, got {states}')
        return self

    def validate_configuration(self) -> List[str]:
        """Validate the complete configuration and return any issues."""
        issues = []

        if not self.jira_key:
            issues.append("JIRA_KEY is required")
        if not self.gh_key:
            issues.append("GH_KEY is required")
        if not self.project_upstream_issues_jql_filter.strip():
            issues.append("PROJECT_UPSTREAM_ISSUES_JQL_FILTER must not be empty")
        if not self.jira_url.startswith(("http://", "https://")):
            issues.append("JIRA_URL must be an http(s) URL")

        return issues

    def log_overrides(self) -> None:
        """Announce every overridable setting that was set in the environment."""
        from jirabot.utils.logger import log_info

        for name in OVERRIDABLE_SETTINGS:
            value = os.environ.get(name)
            if value is not None:
                log_info(f"Overriding {name} with: {value}")

    def log_configuration(self) -> None:
        """Log the current configuration (sanitized)."""
        from jirabot.utils.logger import log_info

        log_info("Configuration loaded",
                 jira_url=self.jira_url,
                 github_api_url=self.github_api_url,
                 excluded_org=self.excluded_org,
                 states=[self.project_initial_state,
                         self.project_intermediate_state,
                         self.project_final_state],
                 max_concurrency=self.max_concurrency,
                 ci=self.ci,
                 log_level=self.log_level)


# Global configuration instance (lazy loading)
_config = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Reload configuration from environment variables."""
    global _config
    _config = Config()
    return _config
