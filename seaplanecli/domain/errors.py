"""Error taxonomy shared by every layer of seaplanecli.

All errors raised by the SDK derive from ``SeaplaneError`` so that the
command layer can present them uniformly. HTTP errors returned by the
remote services are ``ApiError`` subclasses, one per classified status.
"""

from enum import Enum
from typing import Dict, Optional, Type


class SeaplaneError(Exception):
    """Base class for all errors raised by seaplanecli."""


class MissingCredentialInput(SeaplaneError):
    """Raised when no API key is available to request an access token."""

    def __init__(self, message: str = "no API key was provided"):
        super().__init__(message)


class RequestBuildError(SeaplaneError):
    """Raised when a bound request cannot be constructed."""


class InvalidTargetShape(RequestBuildError):
    """The supplied targeting parameters match no supported request shape."""

    def __init__(self, family: str, present: Dict[str, bool], reason: Optional[str] = None):
        self.family = family
        self.present = dict(present)
        supplied = ", ".join(name for name, is_set in self.present.items() if is_set) or "nothing"
        message = f"invalid {family} request: unsupported combination of targeting parameters ({supplied})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class InsecureUrlRejected(RequestBuildError):
    """A plaintext URL was used while insecure transport is not allowed."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"refusing to use non-HTTPS URL '{url}' (insecure URLs are not allowed)")


class ConfigurationError(SeaplaneError):
    """The configuration file could not be read or written."""


class TransportFailure(SeaplaneError):
    """A network or TLS failure occurred before any HTTP status was received."""

    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        self.original_exception = original_exception
        super().__init__(message)


class UnexpectedResponse(SeaplaneError):
    """A 2xx response whose body could not be understood."""


class ApiErrorKind(Enum):
    """Classification of a non-2xx response from a Seaplane service."""

    INVALID_REQUEST = "invalid_request"
    AUTHENTICATION_REJECTED = "authentication_rejected"
    RESOURCE_NOT_FOUND = "resource_not_found"
    RESOURCE_CONFLICT = "resource_conflict"
    INTERNAL_SERVICE_ERROR = "internal_service_error"
    SERVICE_UNAVAILABLE = "service_unavailable"
    UNCLASSIFIED_HTTP_STATUS = "unclassified_http_status"

    @classmethod
    def from_status(cls, status: int) -> "ApiErrorKind":
        return _STATUS_KINDS.get(status, cls.UNCLASSIFIED_HTTP_STATUS)


_STATUS_KINDS: Dict[int, ApiErrorKind] = {
    400: ApiErrorKind.INVALID_REQUEST,
    401: ApiErrorKind.AUTHENTICATION_REJECTED,
    404: ApiErrorKind.RESOURCE_NOT_FOUND,
    409: ApiErrorKind.RESOURCE_CONFLICT,
    500: ApiErrorKind.INTERNAL_SERVICE_ERROR,
    503: ApiErrorKind.SERVICE_UNAVAILABLE,
}


class ApiError(SeaplaneError):
    """A classified error response from a Seaplane API.

    Attributes:
        status: The HTTP status code of the response.
        title: Short summary from the error body.
        detail: Optional longer explanation from the error body.
    """

    kind: ApiErrorKind = ApiErrorKind.UNCLASSIFIED_HTTP_STATUS

    def __init__(self, status: int, title: str, detail: Optional[str] = None):
        self.status = status
        self.title = title
        self.detail = detail
        super().__init__(f"{title} - {detail}" if detail else title)


class InvalidRequest(ApiError):
    kind = ApiErrorKind.INVALID_REQUEST


class AuthenticationRejected(ApiError):
    """HTTP 401. ``after_refresh`` is set when a freshly issued token was also rejected."""

    kind = ApiErrorKind.AUTHENTICATION_REJECTED

    def __init__(self, status: int, title: str, detail: Optional[str] = None, after_refresh: bool = False):
        super().__init__(status, title, detail)
        self.after_refresh = after_refresh


class ResourceNotFound(ApiError):
    kind = ApiErrorKind.RESOURCE_NOT_FOUND


class ResourceConflict(ApiError):
    kind = ApiErrorKind.RESOURCE_CONFLICT


class InternalServiceError(ApiError):
    kind = ApiErrorKind.INTERNAL_SERVICE_ERROR


class ServiceUnavailable(ApiError):
    kind = ApiErrorKind.SERVICE_UNAVAILABLE


class UnclassifiedHttpStatus(ApiError):
    kind = ApiErrorKind.UNCLASSIFIED_HTTP_STATUS


API_ERROR_TYPES: Dict[ApiErrorKind, Type[ApiError]] = {
    ApiErrorKind.INVALID_REQUEST: InvalidRequest,
    ApiErrorKind.AUTHENTICATION_REJECTED: AuthenticationRejected,
    ApiErrorKind.RESOURCE_NOT_FOUND: ResourceNotFound,
    ApiErrorKind.RESOURCE_CONFLICT: ResourceConflict,
    ApiErrorKind.INTERNAL_SERVICE_ERROR: InternalServiceError,
    ApiErrorKind.SERVICE_UNAVAILABLE: ServiceUnavailable,
    ApiErrorKind.UNCLASSIFIED_HTTP_STATUS: UnclassifiedHttpStatus,
}


def api_error_for(status: int, title: str, detail: Optional[str] = None) -> ApiError:
    """Builds the ``ApiError`` subclass matching ``status``."""
    error_type = API_ERROR_TYPES[ApiErrorKind.from_status(status)]
    return error_type(status, title, detail)
