"""jirabot: report Jira tickets whose workflow state disagrees with their linked upstream PRs."""

__version__ = "0.1.0"
