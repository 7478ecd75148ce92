"""Pull request details and remote classification."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from ..constants import Constants, RemoteName
from ..errors import RemoteFetchError
from .github import GitHubClient
from .identifier import Identifier

logger = logging.getLogger(__name__)

DEFAULT_KNOWN_ORGS: Tuple[Tuple[str, RemoteName], ...] = (
    (Constants.CC_REMOTE_PREFIX, RemoteName.CC),
    (Constants.SECURITY_REMOTE_PREFIX, RemoteName.SECURITY),
)


@dataclass(frozen=True)
class PRDetails:
    """Where a pull request comes from and what it targets."""
    from_org: str
    remote_url: str
    remote_name: RemoteName
    pr_branch: str
    base_branch: str


def _url_forms(prefix: str) -> Iterable[str]:
    yield prefix
    if prefix.startswith(Constants.GITHUB_SSH_PREFIX):
        yield Constants.GITHUB_HTTPS_PREFIX + prefix[len(Constants.GITHUB_SSH_PREFIX):]


def classify_remote(
    url: str,
    known_orgs: Sequence[Tuple[str, RemoteName]] = DEFAULT_KNOWN_ORGS,
) -> RemoteName:
    """Pick the remote alias for a clone URL.

    Known organisation prefixes are checked in order; anything else is a plain
    ``pr`` remote.
    """
    for prefix, remote_name in known_orgs:
        if any(url.startswith(form) for form in _url_forms(prefix)):
            return remote_name
    return RemoteName.PR


def _field(data: Dict[str, Any], *path: str) -> Any:
    """Walk nested keys of an API response, raising if any are missing."""
    current: Any = data
    for key in path:
        if not isinstance(current, dict) or current.get(key) is None:
            raise RemoteFetchError(f"Pull request response is missing '{'.'.join(path)}'")
        current = current[key]
    return current


def resolve_pr(
    client: GitHubClient,
    identifier: Identifier,
    known_orgs: Optional[Sequence[Tuple[str, RemoteName]]] = None,
) -> PRDetails:
    """Fetch the head and base of a pull request.

    ``identifier.pr`` must be set; callers check that before calling.

    Raises:
        RemoteFetchError: The pull request can't be fetched, or the head repository
            has been deleted.
    """
    if identifier.pr is None:
        raise ValueError(f"{identifier.slug} does not reference a pull request")

    data = client.get_pull_request(identifier.org, identifier.repo, identifier.pr)
    remote_url = _field(data, "head", "repo", "ssh_url")
    details = PRDetails(
        from_org=_field(data, "head", "user", "login"),
        remote_url=remote_url,
        remote_name=classify_remote(remote_url, known_orgs or DEFAULT_KNOWN_ORGS),
        pr_branch=_field(data, "head", "ref"),
        base_branch=_field(data, "base", "ref"),
    )
    logger.debug(
        "PR %s#%s: %s from %s into %s",
        identifier.slug, identifier.pr, details.pr_branch, details.remote_url, details.base_branch,
    )
    return details
