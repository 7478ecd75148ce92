"""Reading and writing a project's composer.json.

The document is handled as a plain ordered dict: loaded once, mutated in
memory and written back whole. Nothing guards against the file changing on
disk in between.
"""
from __future__ import annotations

import json
import logging
import os
import re
from typing import Any, Dict, Optional

from ..constants import Constants, ManifestSection
from ..errors import ManifestParseError, NotFoundError

logger = logging.getLogger(__name__)

ManifestDocument = Dict[str, Any]

_ALIAS_PREFIX_RE = re.compile(r"^.*? as ")


def load_manifest(path: str) -> ManifestDocument:
    """Load a composer.json file.

    Raises:
        NotFoundError: The file doesn't exist.
        ManifestParseError: The file isn't a JSON object.
    """
    if not os.path.isfile(path):
        raise NotFoundError(path)
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except ValueError as exc:
        raise ManifestParseError(f"{path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestParseError(f"{path} does not contain a JSON object")
    return data


def dump_manifest(doc: ManifestDocument) -> str:
    """Serialize a manifest the way it is written to disk."""
    return json.dumps(doc, indent=4, ensure_ascii=False) + "\n"


def save_manifest(path: str, doc: ManifestDocument) -> None:
    """Write a manifest back to disk, replacing the whole file."""
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(dump_manifest(doc))
    logger.debug("Wrote %s", path)


def get_section(doc: ManifestDocument, name: str) -> Optional[ManifestSection]:
    """Which of require-dev / require declares ``name``, if either does."""
    for section in (ManifestSection.REQUIRE_DEV, ManifestSection.REQUIRE):
        deps = doc.get(section.value)
        if isinstance(deps, dict) and name in deps:
            return section
    return None


def get_platform_php(doc: ManifestDocument) -> Optional[str]:
    """The config.platform.php override, if one is set."""
    config = doc.get("config")
    if not isinstance(config, dict):
        return None
    platform = config.get("platform")
    if not isinstance(platform, dict):
        return None
    php = platform.get(Constants.PHP_PACKAGE)
    return php if isinstance(php, str) and php else None


def strip_alias(constraint: str) -> str:
    """Drop a leading ``<branch> as `` so only the aliased version remains."""
    return _ALIAS_PREFIX_RE.sub("", constraint, count=1)


def get_constraint(
    doc: ManifestDocument,
    name: str,
    section: Optional[ManifestSection] = None,
) -> Optional[str]:
    """The constraint currently declared for ``name``.

    Looks in ``section`` if given, otherwise wherever get_section() finds the
    package. For ``php`` a config.platform.php override always takes
    precedence. Branch aliases are reduced to the alias part.
    """
    if name == Constants.PHP_PACKAGE:
        platform = get_platform_php(doc)
        if platform is not None:
            return platform

    if section is None:
        section = get_section(doc, name)
        if section is None:
            return None
    deps = doc.get(section.value)
    if not isinstance(deps, dict):
        return None
    constraint = deps.get(name)
    if not isinstance(constraint, str) or not constraint:
        return None
    return strip_alias(constraint)


def set_constraint(doc: ManifestDocument, section: ManifestSection, name: str, constraint: str) -> None:
    """Set a dependency constraint, creating the section if needed."""
    deps = doc.get(section.value)
    if not isinstance(deps, dict):
        deps = {}
        doc[section.value] = deps
    deps[name] = constraint


def get_repositories(doc: ManifestDocument) -> Dict[str, Any]:
    """The repositories mapping, converting a list-form section in place.

    Composer allows repositories to be a list or an object; entries are keyed
    by package name here, so a list is rekeyed by position first.
    """
    repositories = doc.get("repositories")
    if isinstance(repositories, list):
        repositories = {str(index): repo for index, repo in enumerate(repositories)}
        doc["repositories"] = repositories
    elif not isinstance(repositories, dict):
        repositories = {}
        doc["repositories"] = repositories
    return repositories


class ComposerJsonService:
    """composer.json for one project directory."""

    def __init__(self, base_path: str):
        self.path = os.path.join(base_path, Constants.COMPOSER_JSON_FILE)

    def validate_exists(self) -> None:
        """Raise NotFoundError unless composer.json is there."""
        if not os.path.isfile(self.path):
            raise NotFoundError(self.path)

    def load(self) -> ManifestDocument:
        return load_manifest(self.path)

    def save(self, doc: ManifestDocument) -> None:
        save_manifest(self.path, doc)
