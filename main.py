"""Main entry point for jirabot.

Loads environment variables, verifies both backends, and runs one
reconciliation pass that reports Jira tickets whose state disagrees with
their linked upstream pull requests.
"""
from dotenv import load_dotenv
import argparse
import asyncio
import os
import sys
from functools import partial

# Load environment variables first, before any other imports
load_dotenv()

from pydantic import ValidationError

from jirabot.config import reload_config
from jirabot.errors import JirabotError, SetupError
from jirabot.github import AsyncGitHubClient
from jirabot.healthcheck import all_healthy, run_health_checks
from jirabot.jira import AsyncJiraClient
from jirabot.orchestrator import Reconciler
from jirabot.output import write_payload
from jirabot.reporter import DriftReporter
from jirabot.run_config import RunConfig
from jirabot.utils.deadline import Deadline, parse_duration
from jirabot.utils.logger import configure_logging, log_error, log_info


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Report Jira tickets whose state disagrees with their linked PRs.")
    parser.add_argument('--timeout', type=str, default="5m",
                        help='Timeout duration for the whole pass (e.g., 300ms, 1.5h, 2h45m). Default is 5m.')
    parser.add_argument('--ci', action='store_true', help='Write the markdown summary payload file (same as CI=true).')
    parser.add_argument('--max-concurrency', type=int, help='Bound concurrent ticket evaluations (0 = unbounded).')
    parser.add_argument('--skip-healthcheck', action='store_true', help='Do not verify backend connectivity first.')
    return parser


async def reconcile(config, run_config: RunConfig, deadline: Deadline):
    reporter = DriftReporter(structured=run_config.structured_output)
    async with AsyncJiraClient(config) as jira_client, AsyncGitHubClient(config) as github_client:
        reconciler = Reconciler(
            jira_client,
            github_client,
            run_config,
            reporter,
            deadline,
            output_writer=partial(write_payload, config.output_file),
        )
        return await reconciler.run()


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # Apply parsed arguments to environment variables
    if args.ci:
        os.environ['CI'] = 'true'
    if args.max_concurrency is not None:
        os.environ['MAX_CONCURRENCY'] = str(args.max_concurrency)

    try:
        deadline = Deadline(parse_duration(args.timeout))
        try:
            config = reload_config()
        except ValidationError as e:
            raise SetupError(f"invalid configuration: {e}") from e
        configure_logging(config.log_level)
        config.log_overrides()
        config.log_configuration()

        issues = config.validate_configuration()
        if issues:
            raise SetupError("Configuration validation failed: " + "; ".join(issues))
        if not args.skip_healthcheck:
            if deadline.expired():
                raise SetupError("Deadline exceeded before backend health checks")
            timeout = min(config.http_timeout, deadline.remaining())
            if not all_healthy(run_health_checks(config, timeout=timeout)):
                raise SetupError("Backend health checks failed")
    except SetupError as e:
        log_error(f"Setup failed: {e}")
        return 1

    # Settings are frozen from here on.
    run_config = RunConfig.from_config(config)
    try:
        summary = asyncio.run(reconcile(config, run_config, deadline))
    except JirabotError as e:
        log_error(f"Reconciliation failed: {e}")
        return 1

    log_info("Reconciliation finished", **vars(summary))
    return 0


if __name__ == "__main__":
    sys.exit(main())
