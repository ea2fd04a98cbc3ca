"""Request shapes and wire format of the distributed lock service."""

import logging
from typing import Any, Dict, Optional, Tuple

from seaplanecli.domain.errors import InvalidTargetShape
from seaplanecli.domain.interfaces.request_family import RequestSender, TargetingParameters
from seaplanecli.domain.models.locks import HeldLock, LockInfo
from seaplanecli.domain.models.request import BoundRequest, Page, RequestShape
from seaplanecli.infrastructure.api.base import BaseFamily, encoded_query, encoded_segment, strip_prefix
from seaplanecli.infrastructure.api.metadata import METADATA_API_URL

logger = logging.getLogger(__name__)

LOCKS_API_PATH = "v1/locks/"


class LocksFamily(BaseFamily[LockInfo]):
    """Locks addressed by name, by directory or globally."""

    name = "locks"
    default_base_url = METADATA_API_URL
    parameter_names = ("name", "directory", "from")
    cursor_parameters = ("from",)

    def resolve_shape(self, params: TargetingParameters) -> RequestShape:
        present = self.present(params)
        if present["name"]:
            if present["directory"] or present["from"]:
                raise InvalidTargetShape(self.name, present, reason="a lock name cannot be combined with a directory or cursor")
            return RequestShape.SINGLE
        if present["directory"]:
            return RequestShape.COLLECTION
        return RequestShape.GLOBAL_RANGE

    def endpoint(self, shape: RequestShape, params: TargetingParameters) -> Tuple[str, Dict[str, Optional[str]]]:
        if shape is RequestShape.SINGLE:
            return LOCKS_API_PATH + encoded_segment(params["name"]), {}
        query = {"from": encoded_query(params.get("from"))}
        if shape is RequestShape.COLLECTION:
            return LOCKS_API_PATH + encoded_segment(params["directory"]) + "/", query
        return LOCKS_API_PATH, query

    def get_one(self, sender: RequestSender, bound: BoundRequest) -> LockInfo:
        self.require_single(bound, "status")
        return self.decode(LockInfo.from_json, self.expect_object(sender.send(bound, "GET"), "status"), "status")

    def put_one(self, sender: RequestSender, bound: BoundRequest, *args: Any) -> HeldLock:
        """Acquires the lock. A lock held by someone else surfaces as ResourceConflict."""
        ttl, client_id = args
        self.require_single(bound, "acquire")
        body = self.expect_object(
            sender.send(bound, "POST", params={"ttl": str(ttl), "client-id": client_id}),
            "acquire",
        )
        name = bound.target("name")
        return self.decode(lambda data: HeldLock.from_json(data, name), body, "acquire")

    def delete_one(self, sender: RequestSender, bound: BoundRequest, *args: Any) -> None:
        (lock_id,) = args
        self.require_single(bound, "release")
        sender.send(bound, "DELETE", params={"id": lock_id})

    def renew(self, sender: RequestSender, bound: BoundRequest, lock_id: str, ttl: int) -> None:
        self.require_single(bound, "renew")
        sender.send(bound, "PATCH", params={"id": lock_id, "ttl": str(ttl)})

    def get_page(self, sender: RequestSender, bound: BoundRequest) -> Page[LockInfo]:
        self.require_range(bound, "list")
        body = self.expect_object(sender.send(bound, "GET"), "list")
        items = [self.decode(LockInfo.from_json, info, "list") for info in body.get("infos") or []]
        logger.debug(f"Received {len(items)} lock infos")
        return Page(items=items, next_cursor=self.cursor_from({"from": strip_prefix(body.get("next"))}))
