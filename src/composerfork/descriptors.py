"""Fork descriptors: everything needed to add one fork to composer.json."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional, Sequence, Tuple

from .constants import RemoteName
from .errors import DuplicatePackageError
from .repository.identifier import Identifier, parse_identifier, parse_pull_request
from .repository.manifest_resolver import ManifestResolver
from .repository.pull_requests import DEFAULT_KNOWN_ORGS, classify_remote, resolve_pr

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForkDescriptor:
    """A resolved fork of a composer package on GitHub."""
    composer_name: str
    org: str
    repo: str
    remote_url: str
    remote_name: RemoteName
    pr: Optional[int] = None
    branch: Optional[str] = None
    from_org: Optional[str] = None
    pr_branch: Optional[str] = None
    base_branch: Optional[str] = None
    package_type: Optional[str] = None

    @property
    def target_branch(self) -> Optional[str]:
        """The branch the dependency should point at, if there is one."""
        return self.pr_branch or self.branch


class ForkSet(Mapping):
    """Fork descriptors keyed by composer name, in the order they were added."""

    def __init__(self, descriptors: Iterable[ForkDescriptor] = ()):
        self._forks: Dict[str, ForkDescriptor] = {}
        for descriptor in descriptors:
            self.add(descriptor)

    def add(self, descriptor: ForkDescriptor) -> None:
        """Add a descriptor.

        Raises:
            DuplicatePackageError: A fork for the same package is already present.
        """
        self.check_unique(descriptor.composer_name)
        self._forks[descriptor.composer_name] = descriptor

    def check_unique(self, composer_name: str) -> None:
        if composer_name in self._forks:
            raise DuplicatePackageError(composer_name)

    def __getitem__(self, composer_name: str) -> ForkDescriptor:
        return self._forks[composer_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._forks)

    def __len__(self) -> int:
        return len(self._forks)

    def __repr__(self) -> str:
        return f"ForkSet({list(self._forks)!r})"


def build_fork_descriptor(
    identifier: Identifier,
    resolver: ManifestResolver,
    known_orgs: Optional[Sequence[Tuple[str, RemoteName]]] = None,
    forks: Optional[ForkSet] = None,
) -> ForkDescriptor:
    """Resolve one parsed reference into a ForkDescriptor.

    If ``forks`` is given the composer name is checked against it before any
    pull request lookup is made.
    """
    manifest = resolver.resolve(identifier)
    if forks is not None:
        forks.check_unique(manifest.name)

    if identifier.pr is not None:
        details = resolve_pr(resolver.client, identifier, known_orgs)
        return ForkDescriptor(
            composer_name=manifest.name,
            org=identifier.org,
            repo=identifier.repo,
            pr=identifier.pr,
            from_org=details.from_org,
            remote_url=details.remote_url,
            remote_name=details.remote_name,
            pr_branch=details.pr_branch,
            base_branch=details.base_branch,
            package_type=manifest.type,
        )

    remote_url = identifier.clone_url
    return ForkDescriptor(
        composer_name=manifest.name,
        org=identifier.org,
        repo=identifier.repo,
        branch=identifier.branch,
        from_org=identifier.org,
        remote_url=remote_url,
        remote_name=classify_remote(remote_url, known_orgs or DEFAULT_KNOWN_ORGS),
        package_type=manifest.type,
    )


def build_fork_descriptors(
    raw_refs: Iterable[str],
    resolver: ManifestResolver,
    require_pr: bool = False,
    known_orgs: Optional[Sequence[Tuple[str, RemoteName]]] = None,
) -> ForkSet:
    """Resolve a batch of repository / PR / branch references.

    Any failure aborts the whole batch: the canonical composer name is needed
    for every entry.

    Raises:
        InvalidReference: A reference can't be parsed (or isn't a PR when
            ``require_pr`` is set).
        RemoteFetchError, ManifestParseError, MissingNameError: A remote lookup failed.
        DuplicatePackageError: Two references resolve to the same package.
    """
    parse = parse_pull_request if require_pr else parse_identifier
    forks = ForkSet()
    for raw in raw_refs:
        identifier = parse(raw)
        descriptor = build_fork_descriptor(identifier, resolver, known_orgs, forks)
        forks.add(descriptor)
        logger.info("Resolved %s to %s", raw, descriptor.composer_name)
    return forks
