"""Request shapes and wire format of the metadata key-value store."""

import logging
from typing import Any, Dict, Optional, Tuple

from seaplanecli.domain.errors import InvalidTargetShape
from seaplanecli.domain.interfaces.request_family import RequestSender, TargetingParameters
from seaplanecli.domain.models.metadata import KeyValue
from seaplanecli.domain.models.request import BoundRequest, Page, RequestShape
from seaplanecli.infrastructure.api.base import BaseFamily, encoded_query, encoded_segment, strip_prefix

logger = logging.getLogger(__name__)

METADATA_API_URL = "https://metadata.cplane.cloud/"
CONFIG_API_PATH = "v1/config/"


class MetadataFamily(BaseFamily[KeyValue]):
    """Key-value pairs addressed by key, by directory or globally."""

    name = "metadata"
    default_base_url = METADATA_API_URL
    parameter_names = ("key", "directory", "from")
    cursor_parameters = ("from",)

    def resolve_shape(self, params: TargetingParameters) -> RequestShape:
        present = self.present(params)
        if present["key"]:
            if present["directory"] or present["from"]:
                raise InvalidTargetShape(self.name, present, reason="a key cannot be combined with a directory or cursor")
            return RequestShape.SINGLE
        if present["directory"]:
            return RequestShape.COLLECTION
        return RequestShape.GLOBAL_RANGE

    def endpoint(self, shape: RequestShape, params: TargetingParameters) -> Tuple[str, Dict[str, Optional[str]]]:
        if shape is RequestShape.SINGLE:
            return CONFIG_API_PATH + encoded_segment(params["key"]), {}
        query = {"from": encoded_query(params.get("from"))}
        if shape is RequestShape.COLLECTION:
            return CONFIG_API_PATH + encoded_segment(params["directory"]) + "/", query
        return CONFIG_API_PATH, query

    def get_one(self, sender: RequestSender, bound: BoundRequest) -> KeyValue:
        self.require_single(bound, "get")
        body = self.expect_object(sender.send(bound, "GET"), "get")
        return self.decode(KeyValue.from_json, body, "get")

    def put_one(self, sender: RequestSender, bound: BoundRequest, *args: Any) -> None:
        (value,) = args
        if not isinstance(value, (bytes, bytearray)):
            raise TypeError(f"expected bytes, got {type(value).__name__}")
        self.require_single(bound, "put")
        sender.send(bound, "PUT", content=bytes(value), content_type="application/octet-stream")

    def delete_one(self, sender: RequestSender, bound: BoundRequest, *args: Any) -> None:
        self.require_single(bound, "delete")
        sender.send(bound, "DELETE")

    def get_page(self, sender: RequestSender, bound: BoundRequest) -> Page[KeyValue]:
        self.require_range(bound, "list")
        body = self.expect_object(sender.send(bound, "GET"), "list")
        items = [self.decode(KeyValue.from_json, kv, "list") for kv in body.get("kvs") or []]
        logger.debug(f"Received {len(items)} key-value pairs")
        return Page(items=items, next_cursor=self.cursor_from({"from": strip_prefix(body.get("next_key"))}))
