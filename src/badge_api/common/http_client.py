"""Blocking JSON GET with retries for the version sources.

Every failure surfaces as an ``UpstreamError`` (``PackageNotFoundError`` for a
404) so the sources only deal with decoded documents.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from ..constants import Constants
from ..errors import PackageNotFoundError, UpstreamError
from .logging_utils import Timer, safe_url

logger = logging.getLogger(__name__)


def robust_get(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any
) -> requests.Response:
    """GET ``url``, retrying transport failures and 5xx responses.

    The last 5xx response is returned once the retries are used up.

    Raises:
        UpstreamError: the final attempt failed at the transport level.
    """
    target = safe_url(url)
    last_error = None
    response: Optional[requests.Response] = None

    for attempt in range(1, Constants.HTTP_RETRY_MAX + 1):
        with Timer() as t:
            try:
                response = requests.get(
                    url, timeout=Constants.REQUEST_TIMEOUT, headers=headers, **kwargs
                )
            except requests.Timeout:
                response, last_error = None, "timeout"
            except requests.RequestException as exc:
                response, last_error = None, str(exc)

        if response is None:
            logger.debug("GET %s attempt %d failed: %s", target, attempt, last_error)
            continue
        logger.debug(
            "GET %s -> %d in %d ms (attempt %d)",
            target, response.status_code, t.duration_ms(), attempt,
        )
        if response.status_code < 500:
            return response

    if response is not None:
        return response
    raise UpstreamError(
        f"Request to {target} failed after {Constants.HTTP_RETRY_MAX} attempts: {last_error}"
    )


def get_json(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any
) -> Any:
    """GET ``url`` and decode a 200 JSON body.

    Args:
        url: Target URL
        headers: Optional request headers
        **kwargs: Additional requests.get parameters

    Raises:
        PackageNotFoundError: the server answered 404.
        UpstreamError: transport failure, any other non-200 status, or a body
            that is not JSON. ``status_code`` carries the HTTP status when
            there was one.
    """
    response = robust_get(url, headers=headers, **kwargs)
    target = safe_url(url)
    status = response.status_code

    if status == 404:
        raise PackageNotFoundError(f"{target} not found", status_code=404)
    if status != 200:
        raise UpstreamError(f"{target} returned HTTP {status}", status_code=status)
    try:
        return response.json()
    except ValueError as exc:
        raise UpstreamError(f"{target} returned an invalid JSON body", status_code=status) from exc
