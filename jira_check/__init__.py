"""Link Jira issues referenced by pull requests."""

__version__ = "0.1.0"
