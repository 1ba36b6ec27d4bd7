import pytest

from jira_check.config import TOKEN_ENV, URL_ENV


@pytest.fixture(autouse=True)
def _clean_tracker_env(monkeypatch):
    """Keep the developer's own Jira settings out of the tests."""
    for name in URL_ENV + TOKEN_ENV:
        monkeypatch.delenv(name, raising=False)
