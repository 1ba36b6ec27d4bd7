"""Configuration loading and validation.

Usage:
    settings = load("jira-check.yaml")        # raises ConfigError on bad config
    settings.check.keys                        # ("API", "WEB")
    settings.endpoint.url                      # "https://myjira.atlassian.net"
    generate_template("jira-check.yaml")       # writes example file to disk
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path

import yaml

from jira_check.client import DEFAULT_TIMEOUT

URL_ENV = ("TRACKER_URL", "DANGER_JIRA_URL")
TOKEN_ENV = ("TRACKER_API_TOKEN", "DANGER_JIRA_API_TOKEN")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""


# ---------------------------------------------------------------------------
# Config dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CheckConfig:
    keys: tuple[str, ...] = ()
    emoji: str = ":link:"
    search_title: bool = True
    search_commits: bool = False
    fail_on_warning: bool = False
    report_missing: bool = True
    skippable: bool = True
    include_summary: bool = False

    def __post_init__(self) -> None:
        # A single project key may be given as a plain string
        keys = self.keys
        if keys is None:
            keys = ()
        elif isinstance(keys, str):
            keys = (keys,)
        elif not isinstance(keys, (list, tuple, set, frozenset)) or not all(
            isinstance(k, str) for k in keys
        ):
            raise ConfigError(
                f"'check.keys' must be a project key or a list of project keys, got {keys!r}"
            )
        object.__setattr__(self, "keys", tuple(str(k) for k in keys if k))


@dataclass(frozen=True)
class TrackerEndpoint:
    url: str
    token: str | None = None
    timeout: float = DEFAULT_TIMEOUT


@dataclass(frozen=True)
class Settings:
    check: CheckConfig
    endpoint: TrackerEndpoint


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load(config_path: str = "jira-check.yaml", require_keys: bool = True) -> Settings:
    """Load and validate configuration from a YAML file.

    Environment variables TRACKER_URL and TRACKER_API_TOKEN override file
    values (DANGER_JIRA_URL / DANGER_JIRA_API_TOKEN are accepted as well).

    Raises:
        ConfigError: if the file is missing, malformed, or required fields
                     are absent.
    """
    path = Path(config_path)

    if not path.exists():
        raise ConfigError(
            f"Config file not found: '{config_path}'\n"
            "Run `jira-check init` to generate a template."
        )

    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse '{config_path}': {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"'{config_path}' must be a YAML mapping at the top level.")

    tracker = raw.get("tracker") or {}
    if not isinstance(tracker, dict):
        raise ConfigError("'tracker' must be a YAML mapping.")
    check = _build_check(raw.get("check") or {})
    endpoint = _build_endpoint(tracker)

    settings = Settings(check=check, endpoint=endpoint)
    _validate(settings, require_keys)
    return settings


def endpoint_from_env(timeout: float = DEFAULT_TIMEOUT) -> TrackerEndpoint:
    """Build a TrackerEndpoint from the environment alone.

    Raises:
        ConfigError: if no tracker URL is set.
    """
    endpoint = _build_endpoint({"timeout": timeout})
    if not endpoint.url:
        raise ConfigError(_MISSING_URL)
    return endpoint


_MISSING_URL = (
    "  - 'tracker.url' is missing (or set the TRACKER_URL environment variable)"
)
_MISSING_KEYS = (
    "  - 'check.keys' is empty - add at least one Jira project key (e.g. WEB)"
)


def _env(names: tuple[str, ...]) -> str | None:
    for name in names:
        value = os.environ.get(name)
        if value:
            return value
    return None


def _build_endpoint(tracker: dict) -> TrackerEndpoint:
    url = _env(URL_ENV) or tracker.get("url") or ""
    token = _env(TOKEN_ENV) or tracker.get("token") or None
    try:
        timeout = float(tracker.get("timeout", DEFAULT_TIMEOUT))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"'tracker.timeout' must be a number: {exc}") from exc
    return TrackerEndpoint(
        url=str(url).strip(),
        token=str(token).strip() if token else None,
        timeout=timeout,
    )


_BOOL_OPTIONS = (
    "search_title",
    "search_commits",
    "fail_on_warning",
    "report_missing",
    "skippable",
    "include_summary",
)


def _build_check(section: dict) -> CheckConfig:
    if not isinstance(section, dict):
        raise ConfigError("'check' must be a YAML mapping.")
    known = {f.name for f in fields(CheckConfig)}
    unknown = sorted(str(k) for k in set(section) - known)
    if unknown:
        raise ConfigError(
            f"Unknown option(s) under 'check': {', '.join(unknown)}. "
            f"Valid options: {', '.join(sorted(known))}"
        )
    for name in _BOOL_OPTIONS:
        if name in section and not isinstance(section[name], bool):
            raise ConfigError(f"'check.{name}' must be true or false, got {section[name]!r}")
    if "emoji" in section and not isinstance(section["emoji"], str):
        raise ConfigError(f"'check.emoji' must be a string, got {section['emoji']!r}")
    return CheckConfig(**section)


def _validate(settings: Settings, require_keys: bool) -> None:
    """Raise ConfigError if required fields are missing."""
    errors: list[str] = []

    if not settings.endpoint.url:
        errors.append(_MISSING_URL)
    if require_keys and not settings.check.keys:
        errors.append(_MISSING_KEYS)

    if errors:
        raise ConfigError("Invalid configuration:\n" + "\n".join(errors))


# ---------------------------------------------------------------------------
# Template generator (used by `init` command)
# ---------------------------------------------------------------------------

TEMPLATE = """\
tracker:
  url: "https://myjira.atlassian.net"
  token: ""                       # Pre-encoded Basic credential, or set TRACKER_API_TOKEN
  timeout: 10

check:
  # Jira project keys to look for (KEY-123)
  keys: ["KEY"]
  emoji: ":link:"
  search_title: true
  search_commits: false
  fail_on_warning: false
  report_missing: true
  skippable: true                 # 'no-jira' in the title or body skips the check
  include_summary: false
"""


def generate_template(output_path: str = "jira-check.yaml") -> None:
    """Write a template jira-check.yaml to *output_path*.

    Raises:
        ConfigError: if the file already exists (to avoid overwriting secrets).
    """
    path = Path(output_path)
    if path.exists():
        raise ConfigError(
            f"'{output_path}' already exists. Remove it first or choose a different path."
        )
    path.write_text(TEMPLATE, encoding="utf-8")
