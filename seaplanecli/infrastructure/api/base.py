"""Helpers shared by the resource family implementations."""

from typing import Any, Callable, Iterable, Optional
from urllib.parse import quote

from seaplanecli.domain.errors import InvalidTargetShape, UnexpectedResponse
from seaplanecli.domain.interfaces.request_family import RequestFamily, T
from seaplanecli.domain.models.common import BASE64_PATH_PREFIX
from seaplanecli.domain.models.request import BoundRequest, RequestShape


def encoded_segment(encoded: str) -> str:
    """Path segment for an already base64 encoded identifier."""
    return BASE64_PATH_PREFIX + quote(encoded, safe="")


def encoded_query(encoded: Optional[str]) -> Optional[str]:
    """Query value for an optional base64 encoded cursor."""
    if encoded is None:
        return None
    return BASE64_PATH_PREFIX + encoded


def strip_prefix(value: Optional[str]) -> Optional[str]:
    """Inverse of ``encoded_query`` for values echoed back by a service."""
    if value is None:
        return None
    if value.startswith(BASE64_PATH_PREFIX):
        return value[len(BASE64_PATH_PREFIX):]
    return value


class BaseFamily(RequestFamily[T]):
    """Shape checks shared by every family."""

    def require_shape(self, bound: BoundRequest, operation: str, shapes: Iterable[RequestShape]) -> None:
        """Fails closed when ``operation`` is invoked on a request of the wrong shape.

        Raises:
            InvalidTargetShape: If ``bound.shape`` is not one of ``shapes``.
        """
        allowed = tuple(shapes)
        if bound.shape not in allowed:
            raise InvalidTargetShape(
                self.name,
                self.present(dict(bound.targeting)),
                reason=f"'{operation}' requires a {' or '.join(s.value for s in allowed)} request, not {bound.shape.value}",
            )

    def require_single(self, bound: BoundRequest, operation: str) -> None:
        self.require_shape(bound, operation, (RequestShape.SINGLE,))

    def require_range(self, bound: BoundRequest, operation: str) -> None:
        self.require_shape(bound, operation, (RequestShape.COLLECTION, RequestShape.GLOBAL_RANGE))

    def expect_object(self, body: Any, operation: str) -> dict:
        if not isinstance(body, dict):
            raise UnexpectedResponse(f"unexpected {self.name} '{operation}' response: {body!r}")
        return body

    def decode(self, parser: Callable[[Any], Any], data: Any, operation: str) -> Any:
        """Runs a model's ``from_json`` over ``data``, reporting malformed bodies uniformly."""
        try:
            return parser(data)
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise UnexpectedResponse(f"unexpected {self.name} '{operation}' response: {data!r}") from e
