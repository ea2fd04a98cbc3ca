"""Interfaces for resource families and the component that sends their requests.

A resource family (restrict, metadata, locks) knows which combinations of
targeting parameters are valid, where each shape lives on the service and
how to translate responses into domain models. It never owns credentials
or retries; those belong to the facade and the executor.
"""

import abc
from typing import Any, Dict, Generic, Mapping, Optional, Tuple, TypeVar

from seaplanecli.domain.models.request import BoundRequest, Cursor, Page, RequestShape

T = TypeVar("T")

TargetingParameters = Mapping[str, Optional[str]]


class RequestSender(abc.ABC):
    """Sends a bound request over the wire."""

    @abc.abstractmethod
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
        """Sends ``bound`` with the given HTTP method.

        Args:
            bound: The bound request (URL, token, transport options).
            method: HTTP verb.
            params: Extra query parameters merged over the bound query.
            content: Raw request body.
            json: JSON request body.
            content_type: Content-Type header for ``content``.

        Returns:
            The decoded JSON body, the text body when it is not JSON, or None
            when the body is empty.

        Raises:
            ApiError: On a non-2xx response.
            TransportFailure: When no response was received.
        """
        pass


class RequestFamily(abc.ABC, Generic[T]):
    """Abstract Base Class describing one API family."""

    name: str = ""
    default_base_url: str = ""
    # Every targeting parameter the family accepts, in display order.
    parameter_names: Tuple[str, ...] = ()
    # The subset of parameter_names that make up a range cursor.
    cursor_parameters: Tuple[str, ...] = ()

    @abc.abstractmethod
    def resolve_shape(self, params: TargetingParameters) -> RequestShape:
        """Matches ``params`` against the family's shape table.

        Raises:
            InvalidTargetShape: If the combination is not supported.
        """
        pass

    @abc.abstractmethod
    def endpoint(self, shape: RequestShape, params: TargetingParameters) -> Tuple[str, Dict[str, Optional[str]]]:
        """Returns the path (relative to the base URL) and query for ``shape``."""
        pass

    @abc.abstractmethod
    def get_one(self, sender: RequestSender, bound: BoundRequest) -> T:
        pass

    @abc.abstractmethod
    def put_one(self, sender: RequestSender, bound: BoundRequest, *args: Any) -> Any:
        pass

    @abc.abstractmethod
    def delete_one(self, sender: RequestSender, bound: BoundRequest, *args: Any) -> Any:
        pass

    @abc.abstractmethod
    def get_page(self, sender: RequestSender, bound: BoundRequest) -> Page[T]:
        pass

    def present(self, params: TargetingParameters) -> Dict[str, bool]:
        """Which targeting parameters are set, used when reporting a bad shape."""
        return {name: params.get(name) is not None for name in self.parameter_names}

    def cursor_from(self, values: Mapping[str, Optional[str]]) -> Optional[Cursor]:
        """Builds a cursor from response fields, or None when nothing follows."""
        cursor = {name: value for name, value in values.items() if value is not None}
        return cursor or None


class AuthenticatedTarget(abc.ABC):
    """Something the retrying executor can run operations against.

    Implemented by the resource request facades: they hand out the current
    bound request and can replace their credential when it is rejected.
    """

    family: RequestFamily

    @abc.abstractmethod
    def bound_request(self) -> BoundRequest:
        """Returns the current bound request, building it first if needed."""
        pass

    @abc.abstractmethod
    def reauthenticate(self) -> Any:
        """Obtains a fresh credential and drops the bound request built from the old one."""
        pass
