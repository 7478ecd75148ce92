"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    INPUT_ERROR = 3


class RemoteName(Enum):
    """Local git remote aliases a fork can be registered under.

    Args:
        Enum (string): Remote alias names.
    """

    CC = "cc"
    SECURITY = "security"
    PR = "pr"


class ManifestSection(Enum):
    """Dependency sections of composer.json that forks can be written to."""

    REQUIRE = "require"
    REQUIRE_DEV = "require-dev"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    COMPOSER_JSON_FILE = "composer.json"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests

    # GitHub API constants
    GITHUB_API_BASE = "https://api.github.com"
    GITHUB_SSH_PREFIX = "git@github.com:"
    GITHUB_HTTPS_PREFIX = "https://github.com/"
    ENV_GITHUB_TOKEN = "GITHUB_TOKEN"

    # Known organisations, checked in order when classifying a PR remote
    CC_REMOTE_PREFIX = "git@github.com:creative-commoners/"
    SECURITY_REMOTE_PREFIX = "git@github.com:silverstripe-security/"

    # silverstripe/supported-modules has branches that don't line up with its
    # tags, so forks of it are always aliased to this version.
    SUPPORTED_MODULES_PACKAGE = "silverstripe/supported-modules"
    SUPPORTED_MODULES_ALIAS = "999.999.999"

    PHP_PACKAGE = "php"
    DEFAULT_PACKAGE_TYPE = "library"

    # Configuration
    ENV_CONFIG_PATH = "COMPOSERFORK_CONFIG"
    ENV_LOG_LEVEL = "COMPOSERFORK_LOG_LEVEL"
    DEFAULT_CONFIG_PATH = "~/.config/composerfork/config.yml"
