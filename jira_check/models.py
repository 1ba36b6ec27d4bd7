"""Result types returned by the Jira client.

    - SummaryResult     outcome of a summary fetch
    - TransitionResult  outcome of one issue transition
"""

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class SummaryResult:
    summary: str | None
    ok: bool
    status_code: int


@dataclass(frozen=True)
class TransitionResult:
    issue: str
    ok: bool
    status_code: int | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)
