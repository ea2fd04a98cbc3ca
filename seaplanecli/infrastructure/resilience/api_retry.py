"""Service for executing API calls with one-shot re-authentication.

An operation is executed once. If the service rejects the bearer token
(HTTP 401), a fresh credential is obtained, the bound request is rebuilt
and the operation runs exactly once more with an untouched copy of its
arguments. Every other error propagates immediately.
"""

import copy
import logging
import time
from typing import Any, Callable, Optional

from seaplanecli.domain.errors import ApiError, AuthenticationRejected, SeaplaneError
from seaplanecli.domain.events.api_events import (
    AccessTokenRefreshed,
    ApiCallFailed,
    ApiCallInitiated,
    ApiCallSucceeded,
    DomainEvent,
)
from seaplanecli.domain.interfaces.request_family import AuthenticatedTarget
from seaplanecli.domain.models.request import BoundRequest

logger = logging.getLogger(__name__)

# The original attempt plus the one made after re-authenticating.
MAX_ATTEMPTS = 2

EventSink = Callable[[DomainEvent], None]


def log_event(event: DomainEvent) -> None:
    logger.debug(f"EVENT: {event}")


class AuthRetryExecutor:
    """Runs remote operations, re-authenticating at most once per invocation."""

    def __init__(self, event_sink: Optional[EventSink] = None):
        """Initializes the AuthRetryExecutor.

        Args:
            event_sink: Receives the API domain events. Defaults to logging them at DEBUG.
        """
        self.event_sink = event_sink or log_event

    def execute(
        self,
        target: AuthenticatedTarget,
        operation_name: str,
        func: Callable[..., Any],
        *args: Any,
    ) -> Any:
        """Executes ``func(bound_request, *args)`` against ``target``.

        Args:
            target: Provides the bound request and can replace its credential.
            operation_name: Name of the operation, for logging and events.
            func: The operation. Receives the current bound request first.
            *args: Arguments for the operation. Copied before the first
                attempt so a retry sees exactly what the caller passed.

        Returns:
            The result of the operation.

        Raises:
            AuthenticationRejected: With ``after_refresh`` set if the fresh
                token was rejected as well.
            SeaplaneError: Any other error, unmodified and without retry.
        """
        family = target.family.name
        retry_args = copy.deepcopy(args)
        call_args = args

        for attempt in range(1, MAX_ATTEMPTS + 1):
            bound: BoundRequest = target.bound_request()
            self.event_sink(ApiCallInitiated(family=family, operation=operation_name, attempt=attempt))
            start_time = time.perf_counter()
            try:
                result = func(bound, *call_args)
            except AuthenticationRejected as e:
                self._failed(family, operation_name, attempt, e)
                if attempt == MAX_ATTEMPTS:
                    logger.error(f"Fresh access token was rejected for {family}.{operation_name}")
                    raise AuthenticationRejected(e.status, e.title, e.detail, after_refresh=True) from e
                logger.info(f"Access token rejected for {family}.{operation_name}, requesting a new one")
                credential = target.reauthenticate()
                self.event_sink(AccessTokenRefreshed(
                    family=family,
                    operation=operation_name,
                    tenant_id=getattr(credential, "tenant_id", ""),
                ))
                call_args = retry_args
                continue
            except SeaplaneError as e:
                self._failed(family, operation_name, attempt, e)
                raise

            latency_ms = (time.perf_counter() - start_time) * 1000
            self.event_sink(ApiCallSucceeded(family=family, operation=operation_name, latency_ms=latency_ms, attempt=attempt))
            return result

        # Unreachable: the last attempt either returns or raises.
        raise RuntimeError(f"{family}.{operation_name} exhausted {MAX_ATTEMPTS} attempts without a result")

    def _failed(self, family: str, operation: str, attempt: int, error: SeaplaneError) -> None:
        self.event_sink(ApiCallFailed(
            family=family,
            operation=operation,
            error_type=type(error).__name__,
            error_message=str(error),
            status=error.status if isinstance(error, ApiError) else None,
            attempt=attempt,
        ))
