"""Reading, editing and writing composer.json, plus composer command arguments."""

from .commands import (
    COMMAND_TYPES,
    RECIPE_SHORTCUTS,
    default_project_name,
    detect_php_version,
    normalize_recipe,
    prepare_composer_args,
    prepare_composer_command,
    validate_package_name,
)
from .forks import add_forked_deps, add_forks, apply_forks
from .manifest import ComposerJsonService

__all__ = [
    "COMMAND_TYPES",
    "ComposerJsonService",
    "RECIPE_SHORTCUTS",
    "add_forked_deps",
    "add_forks",
    "apply_forks",
    "default_project_name",
    "detect_php_version",
    "normalize_recipe",
    "prepare_composer_args",
    "prepare_composer_command",
    "validate_package_name",
]
