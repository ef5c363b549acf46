"""GitHub backend for jirabot."""
from .async_client import AsyncGitHubClient

__all__ = ["AsyncGitHubClient"]
