"""Pull request sources: where the title, body and commit messages come from.

Usage:
    source = create_source("github", repo="owner/repo", number=42)
    source.title(); source.body(); source.commit_messages()

Variants:
    GitHubPullRequest   GitHub REST v3 (GITHUB_TOKEN, GITHUB_API_URL)
    GitLabMergeRequest  GitLab REST v4 (GITLAB_TOKEN, GITLAB_URL)
    StaticPullRequest   text supplied directly (CLI options, tests)
"""

import logging
import os
import urllib.parse
from abc import ABC, abstractmethod
from typing import Any

import requests

from jira_check.client import DEFAULT_TIMEOUT, NetworkError

PAGE_SIZE = 100

logger = logging.getLogger(__name__)


class HostError(Exception):
    """Raised when the code host answers with an error status."""


# ---------------------------------------------------------------------------
# Interface
# ---------------------------------------------------------------------------

class PullRequestSource(ABC):
    """Read access to one pull request."""

    @abstractmethod
    def title(self) -> str: ...

    @abstractmethod
    def body(self) -> str: ...

    @abstractmethod
    def commit_messages(self) -> list[str]: ...


class StaticPullRequest(PullRequestSource):
    def __init__(self, title: str = "", body: str = "", commits: list[str] | None = None) -> None:
        self._title = title or ""
        self._body = body or ""
        self._commits = list(commits or [])

    def title(self) -> str:
        return self._title

    def body(self) -> str:
        return self._body

    def commit_messages(self) -> list[str]:
        return list(self._commits)


# ---------------------------------------------------------------------------
# HTTP-backed sources
# ---------------------------------------------------------------------------

class _RestPullRequest(PullRequestSource):
    """Shared plumbing: lazy, fetched-once PR payload and paginated commits."""

    title_field = "title"
    body_field = "body"

    def __init__(self, base_url: str, headers: dict[str, str], timeout: float = DEFAULT_TIMEOUT) -> None:
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers.update(headers)
        self._pr: dict | None = None
        self._commits: list[str] | None = None

    @property
    @abstractmethod
    def pr_path(self) -> str: ...

    @abstractmethod
    def _commit_message(self, raw: dict) -> str: ...

    def title(self) -> str:
        return self._payload().get(self.title_field) or ""

    def body(self) -> str:
        return self._payload().get(self.body_field) or ""

    def commit_messages(self) -> list[str]:
        if self._commits is None:
            raw = self._get_paginated(f"{self.pr_path}/commits")
            self._commits = [self._commit_message(c) for c in raw]
        return list(self._commits)

    def _payload(self) -> dict:
        if self._pr is None:
            self._pr = self._request(self.pr_path, {})
        return self._pr

    def _get_paginated(self, endpoint: str) -> list[dict]:
        all_results: list[dict] = []
        page = 1

        while True:
            results = self._request(endpoint, {"per_page": PAGE_SIZE, "page": page})
            all_results.extend(results)
            # Stop on a short page
            if len(results) < PAGE_SIZE:
                break
            page += 1

        return all_results

    def _request(self, endpoint: str, params: dict[str, Any]) -> Any:
        url = f"{self.base_url}{endpoint}"
        logger.debug("GET %s %s", url, params or "")
        try:
            response = self._session.get(url, params=params, timeout=self._timeout)
        except requests.exceptions.Timeout as exc:
            raise NetworkError(
                f"Request timed out after {self._timeout}s while contacting '{url}'"
            ) from exc
        except requests.exceptions.ConnectionError as exc:
            raise NetworkError(f"Unable to reach code host at '{self.base_url}'") from exc

        if not response.ok:
            raise HostError(
                f"Unexpected response {response.status_code} from {url}: {response.text[:200]}"
            )
        return response.json()


class GitHubPullRequest(_RestPullRequest):
    def __init__(
        self,
        repo: str,
        number: int,
        token: str | None = None,
        api_url: str = "https://api.github.com",
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        headers = {"Accept": "application/vnd.github.v3+json"}
        if token:
            headers["Authorization"] = f"token {token}"
        super().__init__(api_url, headers, timeout)
        self.repo = repo
        self.number = number

    @property
    def pr_path(self) -> str:
        return f"/repos/{self.repo}/pulls/{self.number}"

    def _commit_message(self, raw: dict) -> str:
        return (raw.get("commit") or {}).get("message") or ""


class GitLabMergeRequest(_RestPullRequest):
    body_field = "description"

    def __init__(
        self,
        project: str,
        iid: int,
        token: str | None = None,
        host: str = "https://gitlab.com",
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        headers = {"PRIVATE-TOKEN": token} if token else {}
        super().__init__(f"{host.rstrip('/')}/api/v4", headers, timeout)
        self.project = project
        self.iid = iid

    @property
    def pr_path(self) -> str:
        pid = urllib.parse.quote_plus(self.project)
        return f"/projects/{pid}/merge_requests/{self.iid}"

    def _commit_message(self, raw: dict) -> str:
        return raw.get("message") or ""


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

PROVIDERS = ("github", "gitlab")


def create_source(provider: str, repo: str, number: int, timeout: float = DEFAULT_TIMEOUT) -> PullRequestSource:
    """Return the PR source for *provider*, configured from the environment.

    Raises:
        ValueError: unknown provider
    """
    provider = provider.lower()
    if provider == "github":
        return GitHubPullRequest(
            repo,
            number,
            token=os.environ.get("GITHUB_TOKEN"),
            api_url=os.environ.get("GITHUB_API_URL") or "https://api.github.com",
            timeout=timeout,
        )
    if provider == "gitlab":
        return GitLabMergeRequest(
            repo,
            number,
            token=os.environ.get("GITLAB_TOKEN"),
            host=os.environ.get("GITLAB_URL") or "https://gitlab.com",
            timeout=timeout,
        )
    raise ValueError(f"Unknown provider '{provider}'. Expected one of: {', '.join(PROVIDERS)}")
