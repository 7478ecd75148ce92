"""GitHub repository references and remote lookups.

This package parses user-supplied repository references, fetches remote
composer.json files and pull request metadata, and works out which git remote
a fork belongs under.
"""

from .identifier import Identifier, parse_identifier, parse_pull_request
from .github import GitHubClient
from .cache import ManifestCache
from .manifest_resolver import ManifestResolver, RemoteManifest, Resolution
from .pull_requests import PRDetails, classify_remote, resolve_pr

__all__ = [
    "Identifier",
    "parse_identifier",
    "parse_pull_request",
    "GitHubClient",
    "ManifestCache",
    "ManifestResolver",
    "RemoteManifest",
    "Resolution",
    "PRDetails",
    "classify_remote",
    "resolve_pr",
]
