"""Facade over the metadata key-value store."""

from typing import Any, Optional

from seaplanecli.core.services.resource_request import ResourceRequest
from seaplanecli.domain.models.common import ensure_encoded
from seaplanecli.domain.models.metadata import KeyValue
from seaplanecli.infrastructure.api.metadata import MetadataFamily


class MetadataRequest(ResourceRequest[KeyValue]):
    """Get, set, delete and list key-value pairs.

    Keys, directories and cursors are given as text and encoded here, unless
    ``already_encoded`` says they are URL-safe base64 already.
    """

    def __init__(self, api_key: Optional[str], credential_provider, sender, **kwargs: Any):
        super().__init__(api_key, MetadataFamily(), credential_provider, sender, **kwargs)

    def set_key(self, key: str, already_encoded: bool = False) -> None:
        self.set_param("key", ensure_encoded(key, already_encoded))

    def set_directory(self, directory: str, already_encoded: bool = False) -> None:
        self.set_param("directory", ensure_encoded(directory, already_encoded))

    def set_from(self, from_key: str, already_encoded: bool = False) -> None:
        self.set_param("from", ensure_encoded(from_key, already_encoded))

    def get_value(self) -> KeyValue:
        return self.get_one()

    def put_value(self, value: bytes) -> None:
        self.put_one(value)

    def delete_value(self) -> None:
        self.delete_one()
