"""Builds immutable bound requests from targeting parameters."""

import logging
from typing import Generic, Optional

from seaplanecli.domain.interfaces.request_family import RequestFamily, T, TargetingParameters
from seaplanecli.domain.models.common import BearerToken
from seaplanecli.domain.models.identity import Credential
from seaplanecli.domain.models.request import (
    BoundRequest,
    DangerZoneFeatures,
    TransportOptions,
    freeze_query,
)
from seaplanecli.infrastructure.http.transport import BUILD_FEATURES, join_url, require_secure

logger = logging.getLogger(__name__)


class RequestBuilder(Generic[T]):
    """Turns targeting parameters plus a credential into a ``BoundRequest``."""

    def __init__(self, family: RequestFamily[T], features: DangerZoneFeatures = BUILD_FEATURES):
        self.family = family
        self.features = features

    def build(
        self,
        params: TargetingParameters,
        credential: Credential,
        base_url: Optional[str] = None,
        transport: TransportOptions = TransportOptions(),
    ) -> BoundRequest:
        """Binds ``params`` to ``credential``.

        The Authorization token is taken from ``credential`` on every call,
        so a rebuilt request always carries the most recent token.

        Args:
            params: The family's targeting parameters; None means unset.
            credential: The credential whose token is bound.
            base_url: Overrides the family's default base URL.
            transport: Requested transport options, clamped by the build features.

        Returns:
            A new BoundRequest.

        Raises:
            InvalidTargetShape: If ``params`` match none of the family's shapes.
            InsecureUrlRejected: If the URL is plaintext and insecure transport is not allowed.
        """
        shape = self.family.resolve_shape(params)
        options = transport.clamp(self.features)
        path, query = self.family.endpoint(shape, params)
        url = join_url(base_url or self.family.default_base_url, path)
        require_secure(url, options)

        bound = BoundRequest(
            family=self.family.name,
            shape=shape,
            url=url,
            token=BearerToken(credential.token),
            transport=options,
            query=freeze_query(query),
            targeting=freeze_query({name: params.get(name) for name in self.family.parameter_names}),
        )
        logger.debug(f"Built {bound!r}")
        return bound
