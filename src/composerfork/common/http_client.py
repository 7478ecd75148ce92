"""Shared HTTP helpers used by the hosting-provider client.

Encapsulates common request/timeout error handling so callers avoid
duplicating try/except blocks. Failures are raised as RemoteFetchError
rather than retried; the caller decides whether to degrade or abort.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from ..constants import Constants
from ..errors import RemoteFetchError
from .logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


def safe_get(
    url: str,
    *,
    context: str,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
    **kwargs: Any,
) -> requests.Response:
    """Perform a GET request with consistent error handling and DEBUG traces.

    Args:
        url: Target URL.
        context: Human-readable source tag for logs (e.g., "github").
        session: Optional session to send the request through.
        timeout: Seconds before giving up (defaults to Constants.REQUEST_TIMEOUT).
        **kwargs: Passed through to requests.get.

    Returns:
        requests.Response: The HTTP response object, whatever its status.

    Raises:
        RemoteFetchError: On timeouts and connection failures.
    """
    safe_target = safe_url(url)
    getter = session.get if session is not None else requests.get
    effective_timeout = timeout if timeout is not None else Constants.REQUEST_TIMEOUT
    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="GET",
                    target=safe_target,
                    context=context
                )
            )
        try:
            res = getter(url, timeout=effective_timeout, **kwargs)
        except requests.Timeout as exc:
            logger.error(
                "%s request timed out after %s seconds",
                context,
                effective_timeout,
            )
            raise RemoteFetchError(
                f"{context} request to {safe_target} timed out after {effective_timeout} seconds"
            ) from exc
        except requests.RequestException as exc:  # includes ConnectionError
            logger.error("%s connection error: %s", context, exc)
            raise RemoteFetchError(f"{context} connection error for {safe_target}: {exc}") from exc

        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response ok",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="GET",
                    outcome="success",
                    status_code=res.status_code,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                    context=context
                )
            )
        return res


def get_ok(
    url: str,
    *,
    context: str,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any,
) -> requests.Response:
    """GET ``url`` and require a 200 response.

    Raises:
        RemoteFetchError: On transport failures and any non-200 status.
    """
    res = safe_get(url, context=context, headers=headers, **kwargs)
    if res.status_code != 200:
        message = _error_message(res)
        raise RemoteFetchError(
            f"{context} returned HTTP {res.status_code} for {safe_url(url)}"
            + (f": {message}" if message else "")
        )
    return res


def _error_message(res: requests.Response) -> str:
    """Pull the "message" field out of an API error body, if there is one."""
    try:
        body = res.json()
    except ValueError:
        return ""
    if isinstance(body, dict):
        return str(body.get("message") or "")
    return ""
