"""Exception types raised by composerfork."""

from __future__ import annotations


class ComposerForkError(Exception):
    """Base class for all errors reported to the user."""


class InvalidReference(ComposerForkError, ValueError):
    """A repository, pull request or branch reference could not be parsed."""

    def __init__(self, reference: str, what: str = "GitHub repository reference"):
        self.reference = reference
        super().__init__(f"'{reference}' is not a valid {what}.")


class RemoteFetchError(ComposerForkError):
    """Something could not be fetched from the hosting provider."""


class ManifestParseError(ComposerForkError):
    """A composer.json document is not valid JSON or not a JSON object."""


class MissingNameError(ComposerForkError):
    """A remote composer.json has no "name" key."""


class DuplicatePackageError(ComposerForkError):
    """Two references in one batch resolve to the same composer package."""

    def __init__(self, composer_name: str):
        self.composer_name = composer_name
        super().__init__(f"cannot add multiple forks for the same package: {composer_name}")


class NotFoundError(ComposerForkError):
    """composer.json does not exist where it was expected."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"File \"{path}\" could not be found.")


class ConfigError(ComposerForkError):
    """The configuration file exists but cannot be used."""
