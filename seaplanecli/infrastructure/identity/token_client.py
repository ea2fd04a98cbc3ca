"""Client for the identity service's ``/v1/token`` endpoint.

Exchanges a long lived API key for a short lived bearer token. Performs a
single round trip per call; retries are the executor's concern.
"""

import logging
from typing import Optional

import httpx

from seaplanecli.domain.errors import MissingCredentialInput, TransportFailure, UnexpectedResponse
from seaplanecli.domain.models.common import ApiKey
from seaplanecli.domain.models.identity import Credential
from seaplanecli.domain.models.request import DangerZoneFeatures, TransportOptions
from seaplanecli.infrastructure.http.errors import map_api_error
from seaplanecli.infrastructure.http.transport import (
    BUILD_FEATURES,
    DEFAULT_TIMEOUT_SECONDS,
    build_http_client,
    join_url,
    require_secure,
)

logger = logging.getLogger(__name__)

IDENTITY_API_URL = "https://flightdeck.cplane.cloud/"
TOKEN_API_PATH = "v1/token"


class TokenRequest:
    """For making requests against the ``/v1/token`` API."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: Optional[str] = None,
        transport_options: TransportOptions = TransportOptions(),
        *,
        features: DangerZoneFeatures = BUILD_FEATURES,
        http_transport: Optional[httpx.BaseTransport] = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
    ):
        """Builds a token request.

        Args:
            api_key: The API key used for Bearer authorization. Required.
            base_url: Identity service base URL, defaults to IDENTITY_API_URL.
            transport_options: Requested transport toggles, clamped by ``features``.
            features: Build level gates for the insecure toggles.
            http_transport: Optional httpx transport override.
            timeout: Request timeout in seconds.

        Raises:
            MissingCredentialInput: If ``api_key`` is empty or None.
            InsecureUrlRejected: If the endpoint is not HTTPS and insecure URLs are not allowed.
        """
        if not api_key:
            raise MissingCredentialInput()
        self.api_key = ApiKey(api_key)
        self.transport_options = transport_options.clamp(features)
        self.endpoint_url = join_url(base_url or IDENTITY_API_URL, TOKEN_API_PATH)
        require_secure(self.endpoint_url, self.transport_options)
        self._http_transport = http_transport
        self._timeout = timeout

    def _post(self, accept: str) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Accept": accept,
            "Content-Length": "0",
        }
        with build_http_client(self.transport_options, transport=self._http_transport, timeout=self._timeout) as client:
            try:
                response = client.post(self.endpoint_url, headers=headers, content=b"")
            except httpx.TransportError as e:
                raise TransportFailure(f"POST {self.endpoint_url} failed: {e}", e) from e
            return map_api_error(response)

    def access_token(self) -> str:
        """Returns a short lived JWT that can be used to authenticate to other API endpoints."""
        logger.debug(f"Requesting access token from {self.endpoint_url}")
        return self._post("*/*").text.strip()

    def access_token_json(self) -> Credential:
        """Returns the short lived JWT along with the tenant ID and subdomain."""
        logger.debug(f"Requesting access token (JSON) from {self.endpoint_url}")
        response = self._post("application/json")
        try:
            return Credential.from_json(response.json())
        except (ValueError, KeyError, TypeError) as e:
            raise UnexpectedResponse(f"unexpected token response from {self.endpoint_url}: {e}") from e


def obtain_credential(
    api_key: Optional[str],
    endpoint: Optional[str] = None,
    transport_options: TransportOptions = TransportOptions(),
    *,
    features: DangerZoneFeatures = BUILD_FEATURES,
    http_transport: Optional[httpx.BaseTransport] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
) -> Credential:
    """Exchanges ``api_key`` for a fresh Credential.

    Raises:
        MissingCredentialInput: If no API key was given.
        ApiError: If the identity service rejected the request.
        TransportFailure: If the identity service could not be reached.
    """
    request = TokenRequest(
        api_key,
        endpoint,
        transport_options,
        features=features,
        http_transport=http_transport,
        timeout=timeout,
    )
    credential = request.access_token_json()
    logger.info(f"Obtained access token for tenant '{credential.tenant_id or 'unknown'}'")
    return credential


class CredentialProvider:
    """Binds the identity endpoint and transport settings so facades can
    simply call ``obtain(api_key)``. Holds no credential state."""

    def __init__(
        self,
        endpoint: Optional[str] = None,
        transport_options: TransportOptions = TransportOptions(),
        *,
        features: DangerZoneFeatures = BUILD_FEATURES,
        http_transport: Optional[httpx.BaseTransport] = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.endpoint = endpoint
        self.transport_options = transport_options
        self.features = features
        self._http_transport = http_transport
        self._timeout = timeout

    def token_request(self, api_key: Optional[str]) -> TokenRequest:
        return TokenRequest(
            api_key,
            self.endpoint,
            self.transport_options,
            features=self.features,
            http_transport=self._http_transport,
            timeout=self._timeout,
        )

    def obtain(self, api_key: Optional[str]) -> Credential:
        return obtain_credential(
            api_key,
            self.endpoint,
            self.transport_options,
            features=self.features,
            http_transport=self._http_transport,
            timeout=self._timeout,
        )
