"""Maps non-2xx httpx responses onto the ApiError taxonomy."""

import logging
from typing import Optional, Tuple

import httpx

from seaplanecli.domain.errors import api_error_for

logger = logging.getLogger(__name__)


def map_api_error(response: httpx.Response) -> httpx.Response:
    """Returns ``response`` unchanged if it succeeded, otherwise raises.

    Error bodies follow ``{"status": u16, "title": str, "detail": str?}``.
    When the body is missing or not JSON the reason phrase is used as title.

    Raises:
        ApiError: The subclass matching the response status.
    """
    if response.is_success:
        return response
    title, detail = _parse_error_body(response)
    logger.debug(f"{response.request.method} {response.request.url} -> {response.status_code} {title}")
    raise api_error_for(response.status_code, title, detail)


def _parse_error_body(response: httpx.Response) -> Tuple[str, Optional[str]]:
    fallback = response.reason_phrase or f"HTTP {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        return fallback, text or None
    if not isinstance(body, dict):
        return fallback, None
    title = body.get("title") or fallback
    detail = body.get("detail")
    return str(title), str(detail) if detail is not None else None
