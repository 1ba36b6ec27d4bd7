"""Jira REST API client.

Usage:
    client  = JiraClient(url="https://myjira.atlassian.net", token="dXNlcjpwYXNz")
    result  = client.fetch_summary("WEB-123")          # SummaryResult
    results = client.transition(["WEB-1", "WEB-2"], 31)  # list[TransitionResult]
"""

import json
import logging
from concurrent.futures import ThreadPoolExecutor

import requests

from jira_check.models import SummaryResult, TransitionResult
from jira_check.scan.links import ensure_trailing_slash

DEFAULT_TIMEOUT = 10.0
DEFAULT_MAX_WORKERS = 4

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class JiraClientError(Exception):
    """Base exception for all client errors."""


class NetworkError(JiraClientError):
    """Raised on connection timeout or unreachable server."""


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class JiraClient:
    """Thin wrapper around the two Jira endpoints the check needs."""

    def __init__(
        self,
        url: str,
        token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self.base_url = ensure_trailing_slash(url)
        self._timeout = timeout
        self._max_workers = max_workers
        self._session = requests.Session()
        self._session.headers.update({"Accept": "application/json"})
        # The token is sent as-is: deployments store it already encoded.
        if token:
            self._session.headers.update({"Authorization": f"Basic {token}"})

    @classmethod
    def from_endpoint(cls, endpoint, **kwargs) -> "JiraClient":
        """Build a client from a :class:`jira_check.config.TrackerEndpoint`."""
        return cls(url=endpoint.url, token=endpoint.token, timeout=endpoint.timeout, **kwargs)

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def fetch_summary(self, issue: str) -> SummaryResult:
        """Fetch the ``summary`` field of *issue*.

        A non-200 answer is not an error here: the caller decides what to do
        with ``ok=False`` and the status code.

        Raises:
            NetworkError:    Timeout or connection failure
            JiraClientError: Any other transport failure
        """
        url = f"{self.base_url}rest/api/2/issue/{issue}"
        response = self._send("GET", url, params={"fields": "summary"})

        if response.status_code != 200:
            logger.debug("Summary of %s unavailable: HTTP %s", issue, response.status_code)
            return SummaryResult(summary=None, ok=False, status_code=response.status_code)

        summary = (response.json().get("fields") or {}).get("summary")
        return SummaryResult(summary=summary, ok=True, status_code=200)

    def transition(self, issues: list[str], transition_id) -> list[TransitionResult]:
        """Move every issue in *issues* through workflow transition *transition_id*.

        Each issue gets its own POST. Calls run on a bounded thread pool and
        never affect each other: a failure is reported in that issue's
        result. Results are returned in the order of *issues*.
        """
        if not issues:
            return []

        body = json.dumps(
            {"transition": {"id": str(transition_id)}}, separators=(",", ":")
        )
        workers = min(self._max_workers, len(issues))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(lambda issue: self._transition_one(issue, body), issues))

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _transition_one(self, issue: str, body: str) -> TransitionResult:
        url = f"{self.base_url}rest/api/2/issue/{issue}/transitions"
        # Sessions are not shared across worker threads
        with requests.Session() as session:
            session.headers.update(self._session.headers)
            session.headers["Content-Type"] = "application/json"
            try:
                response = self._send("POST", url, session=session, data=body)
            except JiraClientError as exc:
                logger.warning("Transition of %s failed: %s", issue, exc)
                return TransitionResult(issue=issue, ok=False, status_code=None, error=str(exc))

        if not response.ok:
            logger.warning("Transition of %s rejected: HTTP %s", issue, response.status_code)
            return TransitionResult(
                issue=issue,
                ok=False,
                status_code=response.status_code,
                error=f"Unexpected response {response.status_code}: {response.text[:200]}",
            )

        logger.debug("Transitioned %s", issue)
        return TransitionResult(issue=issue, ok=True, status_code=response.status_code)

    def _send(
        self, method: str, url: str, session: requests.Session | None = None, **kwargs
    ) -> requests.Response:
        session = session or self._session
        try:
            return session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.exceptions.Timeout as exc:
            raise NetworkError(
                f"Request timed out after {self._timeout}s while contacting '{url}'"
            ) from exc
        except requests.exceptions.ConnectionError as exc:
            raise NetworkError(
                f"Unable to reach Jira server at '{self.base_url}'"
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise JiraClientError(f"Request to '{url}' failed: {exc}") from exc
