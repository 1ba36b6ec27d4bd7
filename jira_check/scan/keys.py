"""Issue-key extraction and the ``no-jira`` opt-out marker.

Functions:
    build_key_pattern(keys)                       -> re.Pattern
    find_issue_keys(keys, text)                   -> list[str]
    should_skip(title, body, search_title=True)   -> bool
"""

import re
from collections.abc import Callable, Iterable
from typing import Optional, Union

SKIP_MARKER = "no-jira"

_SKIP_RE = re.compile(re.escape(SKIP_MARKER), re.IGNORECASE)

TextOrGetter = Union[str, None, Callable[[], Optional[str]]]


def build_key_pattern(keys: Iterable[str]) -> re.Pattern:
    """Compile ``(?:KEY1|KEY2|...)-[0-9]+`` for the given project keys."""
    alternatives = "|".join(re.escape(k) for k in sorted(set(keys)))
    return re.compile(rf"(?:{alternatives})-[0-9]+")


def find_issue_keys(keys: Iterable[str], text: str | None) -> list[str]:
    """Return the issue keys found in *text*, deduplicated, in first-seen order.

    Prefixes are matched case-sensitively: ``web-1`` is not ``WEB-1``.
    """
    keys = [keys] if isinstance(keys, str) else list(keys)
    if not text or not keys:
        return []
    pattern = build_key_pattern(keys)
    return list(dict.fromkeys(pattern.findall(text)))


def should_skip(title: TextOrGetter, body: TextOrGetter, search_title: bool = True) -> bool:
    """True when the PR opted out with ``no-jira`` (any case) in its title or body.

    The title is only looked at when *search_title* is set. Either argument
    may be a zero-argument callable; the body is not fetched when the title
    already matched.
    """
    if search_title and _SKIP_RE.search(_resolve(title) or ""):
        return True
    return bool(_SKIP_RE.search(_resolve(body) or ""))


def _resolve(value: TextOrGetter) -> str | None:
    return value() if callable(value) else value
