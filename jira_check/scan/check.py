"""The PR check: find Jira keys in a pull request and report them.

Functions:
    find_issues(keys, source, search_title, search_commits)   -> list[str]
    run_check(config, endpoint, source, feed, client=None)     -> None
    check(source, feed, endpoint, *, key, ...)                 -> None
"""

import logging

from jira_check.client import JiraClient, JiraClientError
from jira_check.config import CheckConfig, ConfigError, TrackerEndpoint
from jira_check.scan.keys import find_issue_keys, should_skip
from jira_check.scan.links import ensure_trailing_slash, render_link

MISSING_MESSAGE = (
    "This PR does not contain any JIRA issue keys in the PR title "
    "or commit messages (e.g. KEY-123)"
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def find_issues(keys, source, search_title: bool = True, search_commits: bool = False) -> list[str]:
    """Collect issue keys from the title, then the commits, then the body.

    The body is only read when the title and commits gave nothing.
    """
    found: list[str] = []

    if search_title:
        found.extend(find_issue_keys(keys, source.title()))

    if search_commits:
        for message in source.commit_messages():
            found.extend(find_issue_keys(keys, message))

    if not found:
        logger.debug("No key in title/commits, falling back to the PR body")
        found.extend(find_issue_keys(keys, source.body()))

    return list(dict.fromkeys(found))


def run_check(
    config: CheckConfig,
    endpoint: TrackerEndpoint,
    source,
    feed,
    client: JiraClient | None = None,
) -> None:
    """Run the check for one pull request and post the outcome to *feed*.

    Raises:
        ConfigError: no project key configured, or no tracker URL
    """
    if not config.keys:
        raise ConfigError("'keys' missing - must supply at least one JIRA project key")
    if not endpoint or not endpoint.url:
        raise ConfigError(
            "The environment variable 'TRACKER_URL' is not set - must supply JIRA url"
        )

    if config.skippable and should_skip(source.title, source.body, search_title=config.search_title):
        logger.info("PR opted out with 'no-jira', skipping")
        return

    issues = find_issues(
        config.keys,
        source,
        search_title=config.search_title,
        search_commits=config.search_commits,
    )
    logger.info("Found %d issue(s): %s", len(issues), ", ".join(issues) or "-")

    if issues:
        if config.include_summary and client is None:
            client = JiraClient.from_endpoint(endpoint)
        href = ensure_trailing_slash(endpoint.url)
        try:
            links = [
                render_link(href, issue, include_summary=config.include_summary, client=client, feed=feed)
                for issue in issues
            ]
        except JiraClientError as exc:
            logger.error("Jira unreachable while fetching summaries: %s", exc)
            feed.fail(f"Could not reach Jira to fetch issue summaries: {exc}")
            return
        feed.message(f"{config.emoji} {', '.join(links)}")
    elif config.report_missing:
        if config.fail_on_warning:
            feed.fail(MISSING_MESSAGE)
        else:
            feed.warn(MISSING_MESSAGE)


def check(
    source,
    feed,
    endpoint: TrackerEndpoint,
    *,
    key=None,
    emoji: str = ":link:",
    search_title: bool = True,
    search_commits: bool = False,
    fail_on_warning: bool = False,
    report_missing: bool = True,
    skippable: bool = True,
    include_summary: bool = False,
    client: JiraClient | None = None,
) -> None:
    """Check a PR for JIRA keys and link them.

    *key* is one project key or a list of them (``"WEB"``, ``["WEB", "API"]``).
    The remaining options mirror :class:`jira_check.config.CheckConfig`.
    """
    config = CheckConfig(
        keys=key,
        emoji=emoji,
        search_title=search_title,
        search_commits=search_commits,
        fail_on_warning=fail_on_warning,
        report_missing=report_missing,
        skippable=skippable,
        include_summary=include_summary,
    )
    run_check(config, endpoint, source, feed, client=client)
