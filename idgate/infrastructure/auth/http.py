"""Shared request helper for OAuth provider adapters."""

import logging
from typing import Any

import httpx

from idgate.domain.shared.error import ExternalServiceError

logger = logging.getLogger(__name__)


async def request_json(
    http: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    error: type[ExternalServiceError],
    action: str,
    **kwargs: Any,
) -> Any:
    """Send a request and decode a JSON body.

    Every failure (timeout, connection error, non-2xx status, non-JSON body)
    is raised as ``error`` with a message naming ``action``.
    """
    try:
        response = await http.request(method, url, **kwargs)
    except httpx.TimeoutException as e:
        logger.warning("%s timed out: %s %s", action, method, url)
        raise error(f"{action} timed out", code="provider_timeout") from e
    except httpx.RequestError as e:
        logger.warning("%s request failed: %s", action, e)
        raise error(
            f"{action} failed: could not reach provider", code="provider_unavailable"
        ) from e

    if not response.is_success:
        logger.warning(
            "%s failed: status=%d, body=%s", action, response.status_code, response.text[:500]
        )
        raise error(f"{action} failed: {response.status_code}", code="provider_error")

    try:
        return response.json()
    except ValueError as e:
        raise error(f"{action} returned invalid JSON", code="provider_error") from e
