"""Runtime configuration.

Settings come from, highest precedence first: CLI arguments, environment
variables, the YAML config file, then the defaults in Constants.

Example config file::

    github_token: ghp_xxx
    request_timeout: 20
    known_orgs:
      cc: git@github.com:creative-commoners/
      security: git@github.com:silverstripe-security/
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

import yaml

from .constants import Constants, RemoteName
from .errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """Resolved settings for one command run."""
    github_token: Optional[str] = None
    github_api_base: str = Constants.GITHUB_API_BASE
    request_timeout: float = Constants.REQUEST_TIMEOUT
    cc_prefix: str = Constants.CC_REMOTE_PREFIX
    security_prefix: str = Constants.SECURITY_REMOTE_PREFIX

    @property
    def known_orgs(self) -> Sequence[Tuple[str, RemoteName]]:
        return (
            (self.cc_prefix, RemoteName.CC),
            (self.security_prefix, RemoteName.SECURITY),
        )


def default_config_path() -> str:
    return os.path.expanduser(os.environ.get(Constants.ENV_CONFIG_PATH) or Constants.DEFAULT_CONFIG_PATH)


def load_config_file(config_path: Optional[str]) -> Dict[str, Any]:
    """Load the YAML config file.

    A missing file is not an error: it just means defaults. An explicitly
    requested path that doesn't exist is reported as a warning.

    Raises:
        ConfigError: The file can't be read, isn't YAML, or isn't a mapping.
    """
    explicit = config_path is not None
    path = os.path.expanduser(config_path) if explicit else default_config_path()
    if not os.path.isfile(path):
        if explicit:
            logger.warning("Config file not found: %s", path)
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"Couldn't read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config file {path} is not valid YAML: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    logger.debug("Loaded config from %s", path)
    return data


def _as_float(value: Any, key: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be a number, got {value!r}") from exc


def load_settings(
    config_path: Optional[str] = None,
    token: Optional[str] = None,
    timeout: Optional[float] = None,
) -> Settings:
    """Merge CLI values, environment and config file into Settings."""
    data = load_config_file(config_path)
    settings = Settings()

    settings.github_token = token or os.environ.get(Constants.ENV_GITHUB_TOKEN) or data.get("github_token") or None
    if data.get("github_api_base"):
        settings.github_api_base = str(data["github_api_base"])
    if timeout is not None:
        settings.request_timeout = _as_float(timeout, "timeout")
    elif data.get("request_timeout") is not None:
        settings.request_timeout = _as_float(data["request_timeout"], "request_timeout")

    known_orgs = data.get("known_orgs") or {}
    if not isinstance(known_orgs, dict):
        raise ConfigError("known_orgs must be a mapping of cc/security to clone URL prefixes")
    if known_orgs.get("cc"):
        settings.cc_prefix = str(known_orgs["cc"])
    if known_orgs.get("security"):
        settings.security_prefix = str(known_orgs["security"])
    return settings
