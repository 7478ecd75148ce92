"""Resolution of canonical composer package names from remote repositories."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from ..common.logging_utils import extra_context, is_debug_enabled
from ..constants import Constants
from ..errors import ComposerForkError, ManifestParseError, MissingNameError
from .cache import ManifestCache
from .github import GitHubClient
from .identifier import Identifier

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RemoteManifest:
    """The parts of a remote composer.json the fork tooling cares about."""
    name: str
    type: str = Constants.DEFAULT_PACKAGE_TYPE


@dataclass(frozen=True)
class Resolution(Generic[T]):
    """Outcome of a lookup that callers may want to degrade gracefully on."""
    value: Optional[T] = None
    error: Optional[ComposerForkError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def value_or(self, default: T) -> T:
        return self.value if self.ok and self.value is not None else default


class ManifestResolver:
    """Fetches and parses composer.json for GitHub repositories.

    Successful lookups are cached by the raw reference string, so resolving the
    same reference twice within a command only hits the network once.
    """

    def __init__(self, client: GitHubClient, cache: Optional[ManifestCache[RemoteManifest]] = None):
        self.client = client
        self.cache: ManifestCache[RemoteManifest] = cache if cache is not None else ManifestCache()

    def resolve(self, identifier: Identifier, branch: Optional[str] = None) -> RemoteManifest:
        """Get the name and type declared in the repository's composer.json.

        Args:
            identifier: Parsed repository reference
            branch: Ref to read composer.json from; defaults to the identifier's
                own branch, then the repository's default branch

        Raises:
            RemoteFetchError: composer.json couldn't be fetched
            ManifestParseError: composer.json isn't a JSON object
            MissingNameError: composer.json has no "name"
        """
        cached = self.cache.get(identifier.cache_key, branch)
        if cached is not None:
            if is_debug_enabled(logger):
                logger.debug(
                    "Manifest cache hit",
                    extra=extra_context(
                        event="cache_hit",
                        component="manifest_resolver",
                        action="resolve",
                        target=identifier.cache_key
                    )
                )
            return cached

        ref = branch or identifier.branch
        content = self.client.get_file_contents(
            identifier.org, identifier.repo, Constants.COMPOSER_JSON_FILE, ref=ref
        )
        manifest = self._parse(identifier, content)
        self.cache.set(identifier.cache_key, branch, manifest)
        logger.debug("Resolved %s to %s (%s)", identifier.slug, manifest.name, manifest.type)
        return manifest

    def try_resolve(self, identifier: Identifier, branch: Optional[str] = None) -> Resolution[RemoteManifest]:
        """Like resolve(), but report failure as a value instead of raising."""
        try:
            return Resolution(value=self.resolve(identifier, branch))
        except ComposerForkError as exc:
            return Resolution(error=exc)

    def display_name(self, identifier: Identifier) -> str:
        """Composer name for output, falling back to org/repo if it can't be found."""
        resolution = self.try_resolve(identifier)
        if not resolution.ok:
            logger.debug("Using %s as display name: %s", identifier.slug, resolution.error)
            return identifier.slug
        return resolution.value.name  # type: ignore[union-attr]

    @staticmethod
    def _parse(identifier: Identifier, content: bytes) -> RemoteManifest:
        where = identifier.slug
        try:
            data = json.loads(content)
        except (ValueError, UnicodeDecodeError) as exc:
            raise ManifestParseError(
                f"Couldn't find composer name for {where}: composer.json is not valid JSON ({exc})"
            ) from exc
        if not isinstance(data, dict):
            raise ManifestParseError(
                f"Couldn't find composer name for {where}: composer.json is not a JSON object"
            )
        name = data.get("name")
        if not name or not isinstance(name, str):
            raise MissingNameError(
                f"Couldn't find composer name for {where}: No 'name' key in composer.json file"
            )
        package_type = data.get("type") or Constants.DEFAULT_PACKAGE_TYPE
        return RemoteManifest(name=name, type=str(package_type))
