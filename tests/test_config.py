"""Tests for jira_check/config.py"""

import textwrap
from pathlib import Path

import pytest

from jira_check.config import (
    CheckConfig,
    ConfigError,
    endpoint_from_env,
    generate_template,
    load,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def write_config(tmp_path: Path, content: str) -> Path:
    p = tmp_path / "jira-check.yaml"
    p.write_text(textwrap.dedent(content), encoding="utf-8")
    return p


VALID_YAML = """\
    tracker:
      url: "https://myjira.atlassian.net"
      token: "dXNlcjpwYXNz"
    check:
      keys: ["WEB", "API"]
      search_commits: true
      include_summary: true
    """


# ---------------------------------------------------------------------------
# load() - happy path
# ---------------------------------------------------------------------------

def test_load_valid_config(tmp_path):
    p = write_config(tmp_path, VALID_YAML)
    settings = load(str(p))
    assert settings.endpoint.url == "https://myjira.atlassian.net"
    assert settings.endpoint.token == "dXNlcjpwYXNz"
    assert settings.endpoint.timeout == 10.0
    assert settings.check.keys == ("WEB", "API")
    assert settings.check.search_commits is True
    assert settings.check.include_summary is True


def test_load_defaults(tmp_path):
    p = write_config(tmp_path, """\
        tracker:
          url: "https://myjira.atlassian.net"
        check:
          keys: WEB
        """)
    settings = load(str(p))
    assert settings.endpoint.token is None
    assert settings.check == CheckConfig(keys=("WEB",))
    assert settings.check.emoji == ":link:"
    assert settings.check.search_title is True
    assert settings.check.search_commits is False
    assert settings.check.fail_on_warning is False
    assert settings.check.report_missing is True
    assert settings.check.skippable is True
    assert settings.check.include_summary is False


def test_load_custom_timeout(tmp_path):
    p = write_config(tmp_path, """\
        tracker:
          url: "https://myjira.atlassian.net"
          timeout: 2.5
        check:
          keys: [WEB]
        """)
    assert load(str(p)).endpoint.timeout == 2.5


# ---------------------------------------------------------------------------
# load() - errors
# ---------------------------------------------------------------------------

def test_load_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load(str(tmp_path / "no-such-file.yaml"))


def test_load_malformed_yaml(tmp_path):
    p = write_config(tmp_path, "check: [unclosed\n")
    with pytest.raises(ConfigError, match="Failed to parse"):
        load(str(p))


def test_load_missing_url(tmp_path):
    p = write_config(tmp_path, """\
        check:
          keys: [WEB]
        """)
    with pytest.raises(ConfigError, match="tracker.url"):
        load(str(p))


def test_load_empty_keys(tmp_path):
    p = write_config(tmp_path, """\
        tracker:
          url: "https://myjira.atlassian.net"
        check:
          keys: []
        """)
    with pytest.raises(ConfigError, match="check.keys"):
        load(str(p))


def test_load_keys_optional_for_transitions(tmp_path):
    p = write_config(tmp_path, """\
        tracker:
          url: "https://myjira.atlassian.net"
        """)
    settings = load(str(p), require_keys=False)
    assert settings.check.keys == ()


def test_load_unknown_option(tmp_path):
    p = write_config(tmp_path, """\
        tracker:
          url: "https://myjira.atlassian.net"
        check:
          keys: [WEB]
          search_branch: true
        """)
    with pytest.raises(ConfigError, match="search_branch"):
        load(str(p))


def test_load_bad_timeout(tmp_path):
    p = write_config(tmp_path, """\
        tracker:
          url: "https://myjira.atlassian.net"
          timeout: soon
        check:
          keys: [WEB]
        """)
    with pytest.raises(ConfigError, match="timeout"):
        load(str(p))


# ---------------------------------------------------------------------------
# load() - environment variable overrides
# ---------------------------------------------------------------------------

def test_env_url_overrides_config(tmp_path, monkeypatch):
    p = write_config(tmp_path, VALID_YAML)
    monkeypatch.setenv("TRACKER_URL", "https://override.example.com")
    assert load(str(p)).endpoint.url == "https://override.example.com"


def test_env_token_overrides_config(tmp_path, monkeypatch):
    p = write_config(tmp_path, VALID_YAML)
    monkeypatch.setenv("TRACKER_API_TOKEN", "from_env")
    assert load(str(p)).endpoint.token == "from_env"


def test_legacy_env_names(tmp_path, monkeypatch):
    p = write_config(tmp_path, """\
        check:
          keys: [WEB]
        """)
    monkeypatch.setenv("DANGER_JIRA_URL", "https://legacy.example.com")
    monkeypatch.setenv("DANGER_JIRA_API_TOKEN", "legacy")
    settings = load(str(p))
    assert settings.endpoint.url == "https://legacy.example.com"
    assert settings.endpoint.token == "legacy"


def test_env_read_on_every_load(tmp_path, monkeypatch):
    p = write_config(tmp_path, VALID_YAML)
    monkeypatch.setenv("TRACKER_URL", "https://first.example.com")
    assert load(str(p)).endpoint.url == "https://first.example.com"
    monkeypatch.setenv("TRACKER_URL", "https://second.example.com")
    assert load(str(p)).endpoint.url == "https://second.example.com"


def test_endpoint_from_env(monkeypatch):
    monkeypatch.setenv("TRACKER_URL", "https://env.example.com")
    endpoint = endpoint_from_env()
    assert endpoint.url == "https://env.example.com"
    assert endpoint.token is None


def test_endpoint_from_env_requires_url():
    with pytest.raises(ConfigError, match="TRACKER_URL"):
        endpoint_from_env()


# ---------------------------------------------------------------------------
# CheckConfig
# ---------------------------------------------------------------------------

def test_check_config_normalises_keys():
    assert CheckConfig(keys="WEB").keys == ("WEB",)
    assert CheckConfig(keys=["WEB", "API"]).keys == ("WEB", "API")
    assert CheckConfig(keys=None).keys == ()


# ---------------------------------------------------------------------------
# generate_template()
# ---------------------------------------------------------------------------

def test_generate_template_creates_file(tmp_path):
    out = tmp_path / "jira-check.yaml"
    generate_template(str(out))
    assert out.exists()
    content = out.read_text()
    assert "tracker:" in content
    assert "check:" in content


def test_generated_template_loads(tmp_path):
    out = tmp_path / "jira-check.yaml"
    generate_template(str(out))
    settings = load(str(out))
    assert settings.check.keys == ("KEY",)
    assert settings.endpoint.token is None


def test_generate_template_refuses_to_overwrite(tmp_path):
    out = tmp_path / "jira-check.yaml"
    out.write_text("existing content")
    with pytest.raises(ConfigError, match="already exists"):
        generate_template(str(out))


# ---------------------------------------------------------------------------
# load() — wrong value types
# ---------------------------------------------------------------------------

def test_load_keys_not_a_list(tmp_path):
    p = write_config(tmp_path, """\
        tracker:
          url: "https://myjira.atlassian.net"
        check:
          keys: 123
        """)
    with pytest.raises(ConfigError, match="check.keys"):
        load(str(p))


def test_load_keys_with_non_string_entry(tmp_path):
    p = write_config(tmp_path, """\
        tracker:
          url: "https://myjira.atlassian.net"
        check:
          keys: [WEB, 42]
        """)
    with pytest.raises(ConfigError, match="check.keys"):
        load(str(p))


def test_load_tracker_not_a_mapping(tmp_path):
    p = write_config(tmp_path, """\
        tracker:
          - "https://myjira.atlassian.net"
        check:
          keys: [WEB]
        """)
    with pytest.raises(ConfigError, match="'tracker' must be a YAML mapping"):
        load(str(p))


def test_load_check_not_a_mapping(tmp_path):
    p = write_config(tmp_path, """\
        tracker:
          url: "https://myjira.atlassian.net"
        check: [WEB]
        """)
    with pytest.raises(ConfigError, match="'check' must be a YAML mapping"):
        load(str(p))


def test_load_flag_not_a_bool(tmp_path):
    p = write_config(tmp_path, """\
        tracker:
          url: "https://myjira.atlassian.net"
        check:
          keys: [WEB]
          fail_on_warning: "sometimes"
        """)
    with pytest.raises(ConfigError, match="check.fail_on_warning"):
        load(str(p))


def test_load_emoji_not_a_string(tmp_path):
    p = write_config(tmp_path, """\
        tracker:
          url: "https://myjira.atlassian.net"
        check:
          keys: [WEB]
          emoji: 5
        """)
    with pytest.raises(ConfigError, match="check.emoji"):
        load(str(p))


def test_check_config_rejects_non_string_keys():
    with pytest.raises(ConfigError, match="check.keys"):
        CheckConfig(keys=123)
