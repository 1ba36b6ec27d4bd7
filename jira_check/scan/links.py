"""HTML links to Jira issues, optionally with the issue summary."""

import logging

logger = logging.getLogger(__name__)


def ensure_trailing_slash(url: str) -> str:
    return url if url.endswith("/") else f"{url}/"


def render_link(href: str, issue: str, include_summary: bool = False, client=None, feed=None) -> str:
    """Return ``<a href='{href}browse/{issue}'>...</a>`` for *issue*.

    With *include_summary* the label becomes ``"{issue} - {summary}"``. When
    Jira does not answer 200 an informational entry naming the status code is
    posted to *feed* and the plain key label is used instead.

    Raises:
        ValueError:   *include_summary* is set but no *client* was given
        NetworkError: propagated from *client* when Jira is unreachable
    """
    if include_summary and client is None:
        raise ValueError("render_link needs a Jira client when include_summary is set")

    href = ensure_trailing_slash(href)
    url = f"{href}browse/{issue}"

    if include_summary:
        result = client.fetch_summary(issue)
        if result.ok:
            return f"<a href='{url}'>{issue} - {result.summary}</a>"
        logger.info("No summary for %s (HTTP %s)", issue, result.status_code)
        if feed is not None:
            feed.message(
                f"Could not retrieve the summary of the issue {issue}, check the "
                f"TRACKER_API_TOKEN and TRACKER_URL environment variables. "
                f"Error code: {result.status_code}."
            )

    return f"<a href='{url}'>{issue}</a>"
