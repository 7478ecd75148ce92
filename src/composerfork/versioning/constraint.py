"""Composer version constraint parsing.

Understands the subset of Composer's constraint grammar that shows up in
composer.json require sections: ``||`` alternatives, ``,``/space
conjunctions, hyphen ranges, ``^``, ``~``, wildcards, comparison operators,
``!=``, exact versions, numeric branches (``5.x-dev``), ``dev-`` branches
and ``<branch> as <version>`` aliases.

Bounds are exposed as semantic_version.Version objects. Composer's fourth
version component is carried in build metadata and therefore ignored when
comparing.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from semantic_version import Version


class InvalidConstraint(ValueError):
    """A version constraint string couldn't be parsed."""


class ConstraintKind(Enum):
    """Syntactic form of a constraint clause."""
    ANY = "any"
    EXACT = "exact"
    CARET = "caret"
    TILDE = "tilde"
    WILDCARD = "wildcard"
    COMPARISON = "comparison"
    NOT = "not"
    HYPHEN = "hyphen"
    NUMERIC_BRANCH = "numeric_branch"
    BRANCH = "branch"
    ALIAS = "alias"


# Kinds describing a range that has to be collapsed to a single version before
# it can be used as a branch alias.
RANGE_OPERATOR_KINDS = frozenset({ConstraintKind.CARET, ConstraintKind.NOT})

_STABILITY_FLAG_RE = re.compile(r"@(?:stable|RC|beta|alpha|dev)$", re.IGNORECASE)
_ALIAS_RE = re.compile(r"^(\S+)\s+as\s+(\S+)$")
_OR_SPLIT_RE = re.compile(r"\s*\|\|?\s*")
_AND_SPLIT_RE = re.compile(r"\s*,\s*|\s+")
_HYPHEN_RE = re.compile(r"^(\S+)\s+-\s+(\S+)$")
_OPERATOR_SPACE_RE = re.compile(r"(<>|!=|>=|<=|==|>|<|=|\^|~)\s+")
_ANY_RE = re.compile(r"^v?[xX*](?:\.[xX*])*$")
_NUMERIC_BRANCH_RE = re.compile(r"^v?(\d+(?:\.\d+)*)\.[xX*]-dev$")
_BRANCH_NAME_RE = re.compile(r"^v?(\d+)(?:\.(\d+|[xX*]))?(?:\.(\d+|[xX*]))?(?:\.(\d+|[xX*]))?$")
_WILDCARD_RE = re.compile(r"^v?(\d+(?:\.\d+){0,2})\.[xX*]$")
_COMPARISON_RE = re.compile(r"^(<>|!=|>=|<=|==|>|<|=)(.+)$")
_VERSION_RE = re.compile(
    r"^v?(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:\.(\d+))?"
    r"(?:[.-]?(stable|beta|b|rc|alpha|a|patch|pl|p|dev)[.-]?(\d+)?)?"
    r"(?:\+[0-9A-Za-z.-]+)?$",
    re.IGNORECASE,
)
_STABILITY_ALIASES = {"a": "alpha", "b": "beta", "pl": "patch", "p": "patch"}


@dataclass(frozen=True)
class Bound:
    """One end of a version interval.

    ``version`` of None means zero for a lower bound and "no limit" for an
    upper bound.
    """
    version: Optional[Version]
    inclusive: bool = True

    @property
    def is_unbounded(self) -> bool:
        return self.version is None


ZERO = Bound(None, True)
INFINITY = Bound(None, False)


@dataclass(frozen=True)
class Clause:
    """A single atomic constraint such as ``^5.2`` or ``<6``."""
    kind: ConstraintKind
    raw: str
    lower: Bound
    upper: Bound


@dataclass(frozen=True)
class SemverConstraint:
    """A parsed constraint: alternatives (OR) of conjunctions (AND) of clauses."""
    raw: str
    groups: Tuple[Tuple[Clause, ...], ...]
    kind: ConstraintKind
    branch: Optional[str] = None
    alias: Optional[str] = None

    @property
    def uses_range_operator(self) -> bool:
        """True when the constraint leads with ``^`` or a "not" operator."""
        return self.kind in RANGE_OPERATOR_KINDS

    @property
    def is_branch(self) -> bool:
        return self.kind in (ConstraintKind.BRANCH, ConstraintKind.NUMERIC_BRANCH)

    @property
    def lower_bound(self) -> Bound:
        return _min_lower([_group_bounds(group)[0] for group in self.groups])

    @property
    def upper_bound(self) -> Bound:
        return _max_upper([_group_bounds(group)[1] for group in self.groups])

    def alias_version(self) -> Optional[str]:
        """Highest concrete version the constraint allows, written Composer-style.

        Exclusive bounds step down to the branch just below them, so ``^5.2``
        (``<6.0.0``) gives ``5.x-dev`` and ``<5.3`` gives ``5.2.x-dev``. Returns
        None when there is no finite upper bound.
        """
        upper = self.upper_bound
        if upper.version is None:
            return None
        if upper.inclusive:
            return format_version(upper.version)
        major, minor, patch = upper.version.major, upper.version.minor, upper.version.patch
        if patch > 0:
            return f"{major}.{minor}.{patch - 1}"
        if minor > 0:
            return f"{major}.{minor - 1}.x-dev"
        if major > 0:
            return f"{major - 1}.x-dev"
        return None

    def __str__(self) -> str:
        return self.raw


def format_version(version: Version) -> str:
    """Render a version without build metadata."""
    text = f"{version.major}.{version.minor}.{version.patch}"
    if version.prerelease:
        text += "-" + ".".join(version.prerelease)
    return text


def parse_version(text: str) -> Version:
    """Parse a Composer version (``v`` prefix, 1 to 4 parts, stability suffix)."""
    match = _VERSION_RE.match(text.strip())
    if not match:
        raise InvalidConstraint(f"Invalid version string \"{text}\"")
    major, minor, patch, fourth, stability, stability_num = match.groups()
    version = f"{int(major)}.{int(minor or 0)}.{int(patch or 0)}"
    if stability and stability.lower() != "stable":
        label = _STABILITY_ALIASES.get(stability.lower(), stability.lower())
        version += f"-{label}" + (f".{int(stability_num)}" if stability_num else "")
    if fourth and int(fourth):
        version += f"+{int(fourth)}"
    return Version(version)


def _parts(text: str) -> List[int]:
    """Numeric components given explicitly in a (possibly partial) version."""
    match = _VERSION_RE.match(text.strip())
    if not match:
        raise InvalidConstraint(f"Invalid version string \"{text}\"")
    return [int(p) for p in match.groups()[:3] if p is not None]


def _bump(parts: Sequence[int], position: int) -> Version:
    """Increment the component at ``position`` (1-based) and zero the rest."""
    padded = list(parts) + [0] * (3 - len(parts))
    padded = padded[:3]
    index = position - 1
    padded[index] += 1
    for i in range(index + 1, 3):
        padded[i] = 0
    return Version(f"{padded[0]}.{padded[1]}.{padded[2]}")


def _floor(parts: Sequence[int]) -> Version:
    padded = (list(parts) + [0, 0, 0])[:3]
    return Version(f"{padded[0]}.{padded[1]}.{padded[2]}")


def _caret(raw: str, text: str) -> Clause:
    parts = _parts(text)
    if parts[0] != 0 or len(parts) < 2:
        position = 1
    elif parts[1] != 0 or len(parts) < 3:
        position = 2
    else:
        position = 3
    return Clause(ConstraintKind.CARET, raw, Bound(parse_version(text)), Bound(_bump(parts, position), False))


def _tilde(raw: str, text: str) -> Clause:
    parts = _parts(text)
    position = max(1, len(parts) - 1)
    return Clause(ConstraintKind.TILDE, raw, Bound(parse_version(text)), Bound(_bump(parts, position), False))


def _wildcard(raw: str, kind: ConstraintKind, numbers: str) -> Clause:
    parts = [int(p) for p in numbers.split(".")][:3]
    return Clause(kind, raw, Bound(_floor(parts)), Bound(_bump(parts, len(parts)), False))


def _comparison(raw: str, operator: str, text: str) -> Clause:
    if operator in ("!=", "<>"):
        parse_version(text)
        return Clause(ConstraintKind.NOT, raw, ZERO, INFINITY)
    version = parse_version(text)
    if operator in ("=", "=="):
        return Clause(ConstraintKind.EXACT, raw, Bound(version), Bound(version))
    if operator == ">=":
        return Clause(ConstraintKind.COMPARISON, raw, Bound(version), INFINITY)
    if operator == ">":
        return Clause(ConstraintKind.COMPARISON, raw, Bound(version, False), INFINITY)
    if operator == "<=":
        return Clause(ConstraintKind.COMPARISON, raw, ZERO, Bound(version))
    return Clause(ConstraintKind.COMPARISON, raw, ZERO, Bound(version, False))


def _hyphen(raw: str, left: str, right: str) -> Clause:
    lower = Bound(parse_version(left))
    right_parts = _parts(right)
    if len(right_parts) >= 3:
        upper = Bound(parse_version(right))
    else:
        upper = Bound(_bump(right_parts, len(right_parts)), False)
    return Clause(ConstraintKind.HYPHEN, raw, lower, upper)


def _parse_clause(raw: str) -> Clause:
    text = _STABILITY_FLAG_RE.sub("", raw.strip())
    if not text:
        raise InvalidConstraint("Empty constraint clause")
    if _ANY_RE.match(text):
        return Clause(ConstraintKind.ANY, raw, ZERO, INFINITY)
    if text.lower().startswith("dev-"):
        return Clause(ConstraintKind.BRANCH, raw, ZERO, INFINITY)

    match = _NUMERIC_BRANCH_RE.match(text)
    if match:
        return _wildcard(raw, ConstraintKind.NUMERIC_BRANCH, match.group(1))
    match = _WILDCARD_RE.match(text)
    if match:
        return _wildcard(raw, ConstraintKind.WILDCARD, match.group(1))
    if text.startswith("^"):
        return _caret(raw, text[1:])
    if text.startswith("~"):
        return _tilde(raw, text[1:])
    match = _COMPARISON_RE.match(text)
    if match:
        return _comparison(raw, match.group(1), match.group(2).strip())

    version = parse_version(text)
    return Clause(ConstraintKind.EXACT, raw, Bound(version), Bound(version))


def _lower_key(bound: Bound) -> Tuple[Version, int]:
    return (bound.version or Version("0.0.0"), 0 if bound.inclusive else 1)


def _max_lower(bounds: Sequence[Bound]) -> Bound:
    return max(bounds, key=_lower_key)


def _min_lower(bounds: Sequence[Bound]) -> Bound:
    return min(bounds, key=_lower_key)


def _min_upper(bounds: Sequence[Bound]) -> Bound:
    finite = [b for b in bounds if b.version is not None]
    if not finite:
        return INFINITY
    return min(finite, key=lambda b: (b.version, 1 if b.inclusive else 0))


def _max_upper(bounds: Sequence[Bound]) -> Bound:
    if any(b.version is None for b in bounds):
        return INFINITY
    return max(bounds, key=lambda b: (b.version, 1 if b.inclusive else 0))


def _group_bounds(group: Sequence[Clause]) -> Tuple[Bound, Bound]:
    return _max_lower([c.lower for c in group]), _min_upper([c.upper for c in group])


def _check_interval(raw: str, lower: Bound, upper: Bound) -> None:
    if lower.version is None or upper.version is None:
        return
    if lower.version > upper.version or (
        lower.version == upper.version and not (lower.inclusive and upper.inclusive)
    ):
        raise InvalidConstraint(f"Constraint \"{raw}\" can never be satisfied")


def _parse_group(text: str) -> Tuple[Clause, ...]:
    match = _HYPHEN_RE.match(text)
    if match:
        return (_hyphen(text, match.group(1), match.group(2)),)
    collapsed = _OPERATOR_SPACE_RE.sub(r"\1", text)
    return tuple(_parse_clause(part) for part in _AND_SPLIT_RE.split(collapsed) if part)


def parse_constraint(raw: str) -> SemverConstraint:
    """Parse a Composer constraint string.

    Raises:
        InvalidConstraint: The string isn't a constraint, or describes an empty range.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidConstraint("Constraint must be a non-empty string")
    text = raw.strip()

    alias_match = _ALIAS_RE.match(text)
    if alias_match:
        branch, alias = alias_match.groups()
        target = parse_constraint(alias)
        return SemverConstraint(
            raw=raw, groups=target.groups, kind=ConstraintKind.ALIAS, branch=branch, alias=alias
        )

    groups = []
    for part in _OR_SPLIT_RE.split(text):
        if not part:
            raise InvalidConstraint(f"Invalid constraint \"{raw}\"")
        group = _parse_group(part)
        if not group:
            raise InvalidConstraint(f"Invalid constraint \"{raw}\"")
        _check_interval(raw, *_group_bounds(group))
        groups.append(group)

    leading = groups[0][0]
    return SemverConstraint(
        raw=raw,
        groups=tuple(groups),
        kind=leading.kind,
        branch=leading.raw.strip() if leading.kind in (ConstraintKind.BRANCH, ConstraintKind.NUMERIC_BRANCH) else None,
    )


def normalize_branch(name: str) -> str:
    """Turn a git branch name into the form composer.json refers to it by.

    Numeric branches become ``X.x-dev`` / ``X.Y.x-dev``; anything else is
    prefixed with ``dev-``. Already-normalised names are returned unchanged.
    """
    if not isinstance(name, str) or not name.strip():
        raise InvalidConstraint("Branch name must be a non-empty string")
    name = name.strip()
    if name.startswith("dev-") or _NUMERIC_BRANCH_RE.match(name):
        return name
    match = _BRANCH_NAME_RE.match(name)
    if match:
        numbers = []
        for part in match.groups():
            if part is None or not part.isdigit():
                break
            numbers.append(part)
        return ".".join(numbers) + ".x-dev"
    return "dev-" + name


def lowest_version(raw: str) -> Optional[str]:
    """Lowest ``major.minor`` a constraint allows, or None if it has no lower limit."""
    lower = parse_constraint(raw).lower_bound
    if lower.version is None:
        return None
    return f"{lower.version.major}.{lower.version.minor}"
