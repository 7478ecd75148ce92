"""Building argument lists for Composer invocations.

Only the arguments are built here; running Composer is the caller's job.
"""
from __future__ import annotations

import re
from typing import Dict, List, Mapping, Optional, Sequence

from ..constants import Constants
from ..errors import ComposerForkError
from ..versioning.constraint import InvalidConstraint, lowest_version

COMMAND_TYPES = ("create", "install", "require", "update")

RECIPE_SHORTCUTS: Dict[str, str] = {
    "core": "silverstripe/recipe-core",
    "cms": "silverstripe/recipe-cms",
    "installer": "silverstripe/installer",
    "sink": "silverstripe/recipe-kitchen-sink",
}

# see https://getcomposer.org/doc/04-schema.md#name
_PACKAGE_NAME_RE = re.compile(r"^[a-z0-9]([_.-]?[a-z0-9]+)*/[a-z0-9](([_.]?|-{0,2})[a-z0-9]+)*$")
_INVALID_PROJECT_NAME_CHARS = " !@#$%^&*()\"',._<>/?:;\\"
_INVALID_PROJECT_CHARS_RE = re.compile("[" + re.escape(_INVALID_PROJECT_NAME_CHARS) + "]")
_STABILITY_RE = re.compile(r"^(dev-|v(?=\d))|-dev|(#|@).*?$")


def normalize_recipe(recipe: str) -> str:
    """Expand a recipe shortcut such as ``sink`` to its composer name."""
    return RECIPE_SHORTCUTS.get(recipe, recipe)


def validate_package_name(name: str) -> bool:
    """Whether ``name`` is a valid composer package name."""
    return bool(_PACKAGE_NAME_RE.match(name))


def prepare_composer_args(options: Sequence[str], command_type: str) -> List[str]:
    """Common arguments for a composer command, plus any user-supplied options.

    ``composer install`` can't take --no-audit, and nothing but the install
    step should install, so the other commands get --no-install --no-audit.
    """
    args = ["--no-interaction", *options]
    if command_type != "install":
        args.extend(["--no-install", "--no-audit"])
    return list(dict.fromkeys(args))


def prepare_composer_command(
    options: Sequence[str],
    command_type: str,
    recipe: Optional[str] = None,
    constraint: Optional[str] = None,
) -> List[str]:
    """Full argument list for ``composer <command_type>``."""
    command = [command_type, *prepare_composer_args(options, command_type)]
    if command_type == "create":
        if not recipe:
            raise ComposerForkError("A recipe is required to create a project.")
        command.append("--no-scripts")
        command.append(f"{recipe}:{constraint}" if constraint else recipe)
    return command


def detect_php_version(require: Mapping[str, str]) -> str:
    """Lowest PHP ``major.minor`` allowed by a package's php requirement.

    The lowest is used because there's no guarantee the highest exists.
    """
    php = require.get(Constants.PHP_PACKAGE)
    if not php:
        raise ComposerForkError(
            "Unable to detect appropriate PHP version, as the chosen recipe has no direct constraint for PHP"
        )
    try:
        version = lowest_version(php)
    except InvalidConstraint as exc:
        raise ComposerForkError(f"Unable to detect PHP version from constraint \"{php}\": {exc}") from exc
    if version is None:
        raise ComposerForkError(f"PHP constraint \"{php}\" has no lower bound")
    return version


def default_project_name(recipe: str, constraint: str, with_prs: bool = False) -> str:
    """Project name derived from the recipe and constraint, e.g. ``sink--5-x``."""
    recipe_part = _INVALID_PROJECT_CHARS_RE.sub("-", recipe).split("-")[-1]
    version_part = _STABILITY_RE.sub("", constraint)
    version_part = _INVALID_PROJECT_CHARS_RE.sub("-", version_part.strip("~^"))
    name = f"{recipe_part}--{version_part}"
    if with_prs:
        name += "--with-prs"
    return name
