"""httpx based transport for Seaplane services.

Centralizes the transport safety floor (HTTPS only, verified certificates)
and the creation of ``httpx.Client`` instances so every request of the
process behaves the same, and so tests can swap in an
``httpx.MockTransport``.
"""

import logging
import os
from typing import Any, Dict, Mapping, Optional

import httpx

from seaplanecli import __version__
from seaplanecli.domain.errors import InsecureUrlRejected, TransportFailure
from seaplanecli.domain.interfaces.request_family import RequestSender
from seaplanecli.domain.models.request import BoundRequest, DangerZoneFeatures, TransportOptions
from seaplanecli.infrastructure.http.errors import map_api_error

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
USER_AGENT = f"seaplanecli/{__version__}"


def _features_from_environment() -> DangerZoneFeatures:
    if os.environ.get("SEAPLANE_DISABLE_DANGER_ZONE", "").lower() in ("1", "true", "yes"):
        return DangerZoneFeatures(allow_insecure_urls=False, allow_invalid_certs=False)
    return DangerZoneFeatures()


# Fixed for the lifetime of the process.
BUILD_FEATURES: DangerZoneFeatures = _features_from_environment()


def join_url(base_url: str, path: str) -> str:
    """Joins ``path`` under ``base_url``, treating the base as a directory."""
    if not base_url.endswith("/"):
        base_url += "/"
    return base_url + path.lstrip("/")


def require_secure(url: str, options: TransportOptions) -> None:
    """Rejects plaintext URLs unless the (already clamped) options allow them.

    Raises:
        InsecureUrlRejected: If ``url`` is not HTTPS and insecure transport is off.
    """
    scheme = httpx.URL(url).scheme
    if scheme != "https" and not options.allow_insecure_transport:
        raise InsecureUrlRejected(url)


def build_http_client(
    options: TransportOptions,
    *,
    transport: Optional[httpx.BaseTransport] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
) -> httpx.Client:
    """Creates an ``httpx.Client`` honoring ``options``.

    Args:
        options: Clamped transport options. Certificates are only left
            unverified when ``allow_invalid_certificates`` is set.
        transport: Optional transport override (tests use MockTransport).
        timeout: Per request timeout in seconds, None for no timeout.
    """
    kwargs: Dict[str, Any] = {
        "timeout": httpx.Timeout(timeout),
        "headers": {"User-Agent": USER_AGENT},
        "verify": not options.allow_invalid_certificates,
    }
    if transport is not None:
        kwargs["transport"] = transport
    if options.allow_invalid_certificates:
        logger.warning("TLS certificate verification is disabled")
    return httpx.Client(**kwargs)


def decode_body(response: httpx.Response) -> Any:
    """Decodes a successful response body: JSON when possible, else text, None when empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class HttpRequestSender(RequestSender):
    """Sends bound requests, keeping one client per distinct set of transport options."""

    def __init__(
        self,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
    ):
        self._transport = transport
        self._timeout = timeout
        self._clients: Dict[TransportOptions, httpx.Client] = {}

    def client_for(self, options: TransportOptions) -> httpx.Client:
        client = self._clients.get(options)
        if client is None:
            client = build_http_client(options, transport=self._transport, timeout=self._timeout)
            self._clients[options] = client
        return client

    def send(
        self,
        bound: BoundRequest,
        method: str,
        *,
        params: Optional[Mapping[str, str]] = None,
        content: Optional[bytes] = None,
        json: Any = None,
        content_type: Optional[str] = None,
    ) -> Any:
        require_secure(bound.url, bound.transport)
        query = bound.params
        if params:
            query.update(params)
        headers = bound.headers()
        if content_type:
            headers["Content-Type"] = content_type

        logger.debug(f"{method} {bound.url} params={query}")
        try:
            response = self.client_for(bound.transport).request(
                method,
                bound.url,
                params=query or None,
                headers=headers,
                content=content,
                json=json,
            )
        except httpx.TransportError as e:
            raise TransportFailure(f"{method} {bound.url} failed: {e}", e) from e
        map_api_error(response)
        return decode_body(response)

    def close(self) -> None:
        for client in self._clients.values():
            client.close()
        self._clients.clear()
