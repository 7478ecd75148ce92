"""Composer version constraint parsing."""

from .constraint import (
    InvalidConstraint,
    SemverConstraint,
    lowest_version,
    normalize_branch,
    parse_constraint,
)

__all__ = [
    "InvalidConstraint",
    "SemverConstraint",
    "lowest_version",
    "normalize_branch",
    "parse_constraint",
]
