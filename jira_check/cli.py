"""CLI entry point - command definitions using Click.

Commands:
    init          Generate a template config file
    check         Link the Jira issues referenced by a pull request
    transition    Move Jira issues through a workflow transition
"""

import functools
import json
import logging
import sys
from pathlib import Path
from typing import Any

import click

from jira_check import __version__


# ---------------------------------------------------------------------------
# Helpers shared by all data commands
# ---------------------------------------------------------------------------

def _load_settings(ctx: click.Context, require_keys: bool = True):
    """Load config and return it. Exits on error."""
    from jira_check.config import ConfigError, load

    obj = ctx.obj
    try:
        settings = load(obj["config_path"], require_keys=require_keys)
    except ConfigError as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(1)

    if obj["verbose"]:
        click.echo(f"[verbose] Using Jira at {settings.endpoint.url}", err=True)

    return settings


def _emit_json(data: Any, ctx: click.Context) -> None:
    """Write JSON to stdout or to the file specified by --output."""
    obj = ctx.obj
    indent = 2 if obj["pretty"] else None
    text = json.dumps(data, indent=indent, ensure_ascii=False)

    output_path: str | None = obj["output_path"]
    if output_path:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(text)
        click.echo(f"Report written to '{output_path}'", err=True)
    else:
        click.echo(text)


def _handle_errors(func):
    """Decorator that catches client and host exceptions and exits cleanly."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        from jira_check.client import JiraClientError, NetworkError
        from jira_check.config import ConfigError
        from jira_check.hosts import HostError

        try:
            return func(*args, **kwargs)
        except ConfigError as exc:
            click.echo(f"Configuration error: {exc}", err=True)
            sys.exit(1)
        except NetworkError as exc:
            click.echo(f"Network error: {exc}", err=True)
            sys.exit(1)
        except HostError as exc:
            click.echo(f"Code host error: {exc}", err=True)
            sys.exit(1)
        except JiraClientError as exc:
            click.echo(f"Jira error: {exc}", err=True)
            sys.exit(1)

    return wrapper


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--config", "config_path", default="jira-check.yaml", show_default=True,
              help="Path to the configuration file.")
@click.option("--output", "output_path", default=None,
              help="Write JSON output to a file instead of stdout.")
@click.option("--pretty", is_flag=True, default=False,
              help="Pretty-print the JSON output.")
@click.option("--verbose", is_flag=True, default=False,
              help="Enable verbose logging.")
@click.version_option(__version__, prog_name="jira-check")
@click.pass_context
def cli(ctx: click.Context, config_path: str, output_path: str | None,
        pretty: bool, verbose: bool) -> None:
    """Find Jira issue keys in pull requests and link them."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["output_path"] = output_path
    ctx.obj["pretty"] = pretty
    ctx.obj["verbose"] = verbose

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

@cli.command("init")
@click.option("--output", "output_path", default="jira-check.yaml", show_default=True,
              help="Path where the template config file will be written.")
def init_command(output_path: str) -> None:
    """Generate a template jira-check.yaml file."""
    from jira_check.config import ConfigError, generate_template
    try:
        generate_template(output_path)
        click.echo(f"Template written to '{output_path}'.")
        click.echo("Edit it with your Jira URL and project keys.")
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------

@cli.command("check")
@click.option("--provider", type=click.Choice(["github", "gitlab"]), default=None,
              help="Read the pull request from this code host.")
@click.option("--repo", default=None,
              help="Repository (owner/repo) or GitLab project path.")
@click.option("--pr", "pr_number", type=int, default=None,
              help="Pull request number (GitLab: merge request IID).")
@click.option("--title", default="", help="PR title, when not using --provider.")
@click.option("--body", default="", help="PR body, when not using --provider.")
@click.option("--commit", "commits", multiple=True,
              help="Commit message, when not using --provider. Repeatable.")
@click.pass_context
@_handle_errors
def check_command(ctx: click.Context, provider: str | None, repo: str | None,
                  pr_number: int | None, title: str, body: str,
                  commits: tuple[str, ...]) -> None:
    """Look for Jira keys in a pull request and report them."""
    from jira_check.feed import FeedReport
    from jira_check.hosts import StaticPullRequest, create_source
    from jira_check.scan.check import run_check

    settings = _load_settings(ctx)

    if provider:
        if not repo or pr_number is None:
            raise click.UsageError("--provider requires --repo and --pr.")
        source = create_source(provider, repo, pr_number, timeout=settings.endpoint.timeout)
        if ctx.obj["verbose"]:
            click.echo(f"[verbose] Reading {provider} PR {repo}#{pr_number}", err=True)
    else:
        source = StaticPullRequest(title=title, body=body, commits=list(commits))

    report = FeedReport()
    run_check(settings.check, settings.endpoint, source, report)
    _emit_json(report.to_dict(), ctx)

    if report.failed:
        sys.exit(1)


# ---------------------------------------------------------------------------
# transition
# ---------------------------------------------------------------------------

@cli.command("transition")
@click.argument("issues", nargs=-1, required=True)
@click.option("--id", "transition_id", required=True,
              help="Jira workflow transition ID.")
@click.pass_context
@_handle_errors
def transition_command(ctx: click.Context, issues: tuple[str, ...], transition_id: str) -> None:
    """Apply workflow transition ID to every ISSUES key.

    Without a config file, the Jira URL and token come from TRACKER_URL and
    TRACKER_API_TOKEN.
    """
    from jira_check.client import JiraClient
    from jira_check.config import endpoint_from_env

    if Path(ctx.obj["config_path"]).exists():
        endpoint = _load_settings(ctx, require_keys=False).endpoint
    else:
        endpoint = endpoint_from_env()
        if ctx.obj["verbose"]:
            click.echo(f"[verbose] No config file, using Jira at {endpoint.url}", err=True)
    client = JiraClient.from_endpoint(endpoint)

    if ctx.obj["verbose"]:
        click.echo(f"[verbose] Transitioning {', '.join(issues)} with id {transition_id}", err=True)

    results = client.transition(list(issues), transition_id)
    _emit_json([r.to_dict() for r in results], ctx)

    if not all(r.ok for r in results):
        sys.exit(1)
