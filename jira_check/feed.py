"""Review feed: where the check reports its outcome.

A feed receives three kinds of entries, mirroring what a code-review bot can
post on a pull request:

    message(text)   informational, never blocks the PR
    warn(text)      visible warning, does not block
    fail(text)      blocking failure

``FeedReport`` records entries in memory so the CLI can print them as JSON.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


class Feed(ABC):
    """Sink for check outcomes."""

    @abstractmethod
    def message(self, text: str) -> None: ...

    @abstractmethod
    def warn(self, text: str) -> None: ...

    @abstractmethod
    def fail(self, text: str) -> None: ...


@dataclass
class FeedReport(Feed):
    messages: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)

    def message(self, text: str) -> None:
        self.messages.append(text)

    def warn(self, text: str) -> None:
        self.warnings.append(text)

    def fail(self, text: str) -> None:
        self.failures.append(text)

    @property
    def failed(self) -> bool:
        return bool(self.failures)

    def to_dict(self) -> dict:
        return {
            "messages": list(self.messages),
            "warnings": list(self.warnings),
            "failures": list(self.failures),
        }
