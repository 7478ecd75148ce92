"""Writing fork repositories and branch-alias constraints into composer.json.

A fork is added in two parts: a ``vcs`` repository entry so Composer can find
the fork, and a dependency constraint of the form ``<branch> as <version>``
so the fork's branch still satisfies whatever the rest of the dependency tree
expects of the package.
"""
from __future__ import annotations

import logging
from typing import Mapping, Optional

from ..common.logging_utils import extra_context, is_debug_enabled
from ..constants import Constants, ManifestSection
from ..descriptors import ForkDescriptor
from ..versioning.constraint import ConstraintKind, InvalidConstraint, normalize_branch, parse_constraint
from .manifest import (
    ComposerJsonService,
    ManifestDocument,
    get_constraint,
    get_repositories,
    get_section,
    set_constraint,
)

logger = logging.getLogger(__name__)

# Kinds that name a single version (or branch) and so are usable after " as "
_POINT_KINDS = frozenset({
    ConstraintKind.EXACT,
    ConstraintKind.NUMERIC_BRANCH,
    ConstraintKind.BRANCH,
    ConstraintKind.ALIAS,
})


def add_forks(doc: ManifestDocument, descriptors: Mapping[str, ForkDescriptor]) -> ManifestDocument:
    """Add a vcs repository for every fork, replacing any existing entry."""
    repositories = get_repositories(doc)
    for composer_name, fork in descriptors.items():
        repositories[composer_name] = {
            "type": "vcs",
            "url": fork.remote_url,
        }
    return doc


def _range_to_version(alias: str) -> Optional[str]:
    """Collapse a ``^`` / ``!=`` range to one version; other forms pass through."""
    try:
        constraint = parse_constraint(alias)
    except InvalidConstraint:
        logger.warning("Couldn't parse constraint \"%s\"; using it as the alias as-is", alias)
        return alias
    if constraint.uses_range_operator:
        return constraint.alias_version()
    if constraint.kind not in _POINT_KINDS:
        logger.warning(
            "Constraint \"%s\" is a range, not a single version; Composer may reject it as an alias",
            alias,
        )
    return alias


def _existing_alias(
    doc: ManifestDocument,
    fork: ForkDescriptor,
    section: ManifestSection,
) -> Optional[str]:
    """The current constraint, unless it is just the fork's own branch from an earlier run."""
    existing = get_constraint(doc, fork.composer_name, section)
    if existing is None or not fork.target_branch:
        return existing
    if existing.strip() == normalize_branch(fork.target_branch):
        return None
    return existing


def resolve_alias(
    doc: ManifestDocument,
    fork: ForkDescriptor,
    section: ManifestSection,
) -> Optional[str]:
    """Work out which version the fork's branch should pretend to be.

    Prefers the constraint already in composer.json, then the PR's base branch.
    Returns None if neither gives a usable version.
    """
    if fork.composer_name == Constants.SUPPORTED_MODULES_PACKAGE:
        return Constants.SUPPORTED_MODULES_ALIAS

    base_alias = normalize_branch(fork.base_branch) if fork.base_branch else None
    alias = _existing_alias(doc, fork, section) or base_alias
    if alias is None:
        return None

    collapsed = _range_to_version(alias)
    if collapsed is None and alias != base_alias:
        # Range with no upper limit, e.g. "!=4.0"
        collapsed = base_alias
    return collapsed


def build_constraint(branch: str, alias: Optional[str]) -> str:
    """``dev-<branch> as <alias>``, or just the branch when there's no alias.

    An alias naming the branch itself is dropped.
    """
    constraint = normalize_branch(branch)
    if alias and alias != constraint:
        constraint += " as " + alias
    return constraint


def add_forked_deps(doc: ManifestDocument, descriptors: Mapping[str, ForkDescriptor]) -> ManifestDocument:
    """Point each fork's dependency at its branch, aliased to a compatible version.

    Forks with neither a PR branch nor a branch are skipped. The constraint goes
    into whichever of require-dev / require already has the package, or require
    for new packages.
    """
    for composer_name, fork in descriptors.items():
        branch = fork.target_branch
        if not branch:
            logger.info("Skipping %s: no branch to point at", composer_name)
            continue

        section = get_section(doc, composer_name) or ManifestSection.REQUIRE
        alias = resolve_alias(doc, fork, section)
        constraint = build_constraint(branch, alias)
        set_constraint(doc, section, composer_name, constraint)

        if is_debug_enabled(logger):
            logger.debug(
                "Set fork constraint",
                extra=extra_context(
                    event="decision",
                    component="forks",
                    action="add_forked_deps",
                    target=composer_name,
                    outcome=constraint,
                    section=section.value
                )
            )
        logger.info("Set %s to \"%s\" in %s", composer_name, constraint, section.value)
    return doc


def apply_forks(service: ComposerJsonService, descriptors: Mapping[str, ForkDescriptor]) -> ManifestDocument:
    """Add repositories and constraints for ``descriptors`` in one read-modify-write."""
    doc = service.load()
    add_forks(doc, descriptors)
    add_forked_deps(doc, descriptors)
    service.save(doc)
    return doc
