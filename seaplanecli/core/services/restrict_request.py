"""Facade over the API-key restriction service."""

from typing import Any, Optional

from seaplanecli.core.services.resource_request import ResourceRequest
from seaplanecli.domain.models.common import ensure_encoded
from seaplanecli.domain.models.restrict import Restriction, RestrictionDetails
from seaplanecli.infrastructure.api.restrict import RestrictFamily


class RestrictRequest(ResourceRequest[Restriction]):
    """Restrictions addressed by API name and (encoded) directory."""

    def __init__(self, api_key: Optional[str], credential_provider, sender, **kwargs: Any):
        super().__init__(api_key, RestrictFamily(), credential_provider, sender, **kwargs)

    def set_api(self, api: str) -> None:
        self.set_param("api", api)

    def set_directory(self, directory: str, already_encoded: bool = False) -> None:
        self.set_param("directory", ensure_encoded(directory, already_encoded))

    def set_from_api(self, api: str) -> None:
        self.set_param("from_api", api)

    def set_from_dir(self, directory: str, already_encoded: bool = False) -> None:
        self.set_param("from_dir", ensure_encoded(directory, already_encoded))

    def get_restriction(self) -> Restriction:
        return self.get_one()

    def set_restriction(self, details: RestrictionDetails) -> None:
        self.put_one(details)

    def delete_restriction(self) -> None:
        self.delete_one()
