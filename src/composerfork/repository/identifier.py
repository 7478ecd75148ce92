"""Parsing of GitHub repository, pull request and branch references.

Accepted shapes (each optionally prefixed with ``https://github.com/``,
``https://www.github.com/`` or ``git@github.com:``)::

    org/repo
    org/repo/pull/123      org/repo#123
    org/repo/tree/branch
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

from ..constants import Constants
from ..errors import InvalidReference

_PREFIX_RE = re.compile(r"^(?:https?://(?:www\.)?github\.com/|git@github\.com:)", re.IGNORECASE)
_IDENTIFIER_RE = re.compile(
    r"(?P<org>[A-Za-z0-9_.-]*)/(?P<repo>[A-Za-z0-9_.-]*?)(?:\.git)?"
    r"(?:(?:/pull/|#)(?P<pr>[0-9]+)(?:/[A-Za-z0-9_/-]*)?|/tree/(?P<branch>[^\s#]+))?"
)


@dataclass(frozen=True)
class Identifier:
    """A parsed reference to a GitHub repository.

    At most one of ``pr`` and ``branch`` is set. ``raw`` keeps the string the
    identifier was parsed from; it is the key remote manifests are cached by.
    """
    org: str
    repo: str
    pr: Optional[int] = None
    branch: Optional[str] = None
    raw: str = field(default="", compare=False)

    @property
    def slug(self) -> str:
        return f"{self.org}/{self.repo}"

    @property
    def clone_url(self) -> str:
        return f"{Constants.GITHUB_SSH_PREFIX}{self.org}/{self.repo}.git"

    @property
    def cache_key(self) -> str:
        return self.raw or self.slug

    @property
    def is_pull_request(self) -> bool:
        return self.pr is not None


def parse_identifier(raw: str) -> Identifier:
    """Parse a URL or shorthand reference into an Identifier.

    A ``/pull/N`` or ``#N`` suffix takes precedence over ``/tree/<branch>``.

    Raises:
        InvalidReference: If the reference doesn't have the expected shape, or
            the org or repo part is empty.
    """
    if not isinstance(raw, str):
        raise InvalidReference(str(raw))
    stripped = _PREFIX_RE.sub("", raw.strip()).rstrip("/")
    match = _IDENTIFIER_RE.fullmatch(stripped)
    if not match or not match.group("org") or not match.group("repo"):
        raise InvalidReference(raw)

    pr = match.group("pr")
    return Identifier(
        org=match.group("org"),
        repo=match.group("repo"),
        pr=int(pr) if pr else None,
        branch=match.group("branch"),
        raw=raw,
    )


def parse_pull_request(raw: str) -> Identifier:
    """Parse a reference that must point at a pull request."""
    identifier = parse_identifier(raw)
    if identifier.pr is None:
        raise InvalidReference(raw, "GitHub PR reference")
    return identifier
