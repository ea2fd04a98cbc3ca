"""Request shapes and wire format of the API-key restriction service.

Restrictions are addressed by the name of the restricted API (plain text,
e.g. ``config`` or ``locks``) and a directory within it (base64 encoded).
"""

import logging
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

from seaplanecli.domain.errors import InvalidTargetShape
from seaplanecli.domain.interfaces.request_family import RequestSender, TargetingParameters
from seaplanecli.domain.models.request import BoundRequest, Page, RequestShape
from seaplanecli.domain.models.restrict import Restriction, RestrictionDetails
from seaplanecli.infrastructure.api.base import BaseFamily, encoded_query, encoded_segment, strip_prefix
from seaplanecli.infrastructure.api.metadata import METADATA_API_URL

logger = logging.getLogger(__name__)

RESTRICT_API_PATH = "v1/restrict/"


class RestrictFamily(BaseFamily[Restriction]):
    name = "restrict"
    default_base_url = METADATA_API_URL
    parameter_names = ("api", "directory", "from_api", "from_dir")
    cursor_parameters = ("from_api", "from_dir")

    def resolve_shape(self, params: TargetingParameters) -> RequestShape:
        """Matches the api/directory pair against the three supported shapes.

        ``[api, directory]`` addresses one restriction, ``[api, -]`` lists the
        restrictions of one API from ``from_dir`` on, and ``[-, -]`` lists every
        restriction from ``(from_api, from_dir)`` on.
        """
        present = self.present(params)
        if present["api"] and present["directory"]:
            if present["from_api"] or present["from_dir"]:
                raise InvalidTargetShape(self.name, present, reason="a single restriction takes no cursor")
            return RequestShape.SINGLE
        if present["api"]:
            if present["from_api"]:
                raise InvalidTargetShape(self.name, present, reason="from_api only applies when no api is given")
            return RequestShape.COLLECTION
        if present["directory"]:
            raise InvalidTargetShape(self.name, present, reason="a directory requires an api")
        return RequestShape.GLOBAL_RANGE

    def endpoint(self, shape: RequestShape, params: TargetingParameters) -> Tuple[str, Dict[str, Optional[str]]]:
        if shape is RequestShape.GLOBAL_RANGE:
            return RESTRICT_API_PATH, {
                "from_api": params.get("from_api"),
                "from": encoded_query(params.get("from_dir")),
            }
        api_path = RESTRICT_API_PATH + quote(params["api"], safe="") + "/"
        if shape is RequestShape.SINGLE:
            return api_path + encoded_segment(params["directory"]) + "/", {}
        return api_path, {"from": encoded_query(params.get("from_dir"))}

    def get_one(self, sender: RequestSender, bound: BoundRequest) -> Restriction:
        self.require_single(bound, "get")
        return self.decode(Restriction.from_json, self.expect_object(sender.send(bound, "GET"), "get"), "get")

    def put_one(self, sender: RequestSender, bound: BoundRequest, *args: Any) -> None:
        (details,) = args
        if not isinstance(details, RestrictionDetails):
            raise TypeError(f"expected RestrictionDetails, got {type(details).__name__}")
        self.require_single(bound, "set")
        sender.send(bound, "PUT", json=details.to_json())

    def delete_one(self, sender: RequestSender, bound: BoundRequest, *args: Any) -> None:
        self.require_single(bound, "delete")
        sender.send(bound, "DELETE")

    def get_page(self, sender: RequestSender, bound: BoundRequest) -> Page[Restriction]:
        self.require_range(bound, "list")
        body = self.expect_object(sender.send(bound, "GET"), "list")
        items = [self.decode(Restriction.from_json, r, "list") for r in body.get("restrictions") or []]
        next_dir = strip_prefix(body.get("next_key"))
        if bound.shape is RequestShape.COLLECTION:
            cursor = self.cursor_from({"from_dir": next_dir})
        else:
            cursor = self.cursor_from({"from_api": body.get("next_api"), "from_dir": next_dir})
        logger.debug(f"Received {len(items)} restrictions")
        return Page(items=items, next_cursor=cursor)
