"""Generic Resource Operation Facade.

Owns the targeting parameters, the credential and the cached bound request
of one API family, and routes every remote operation through the retrying
executor. Targeting changes invalidate the bound request; rebuilding (and
requesting an access token, if none is held yet) is deferred until the
next operation.
"""

import functools
import logging
from typing import Any, Callable, Dict, Generic, List, Optional

from seaplanecli.domain.errors import MissingCredentialInput
from seaplanecli.domain.interfaces.request_family import AuthenticatedTarget, RequestFamily, RequestSender, T
from seaplanecli.domain.models.common import ApiKey
from seaplanecli.domain.models.identity import Credential
from seaplanecli.domain.models.request import BoundRequest, Cursor, Page, TransportOptions
from seaplanecli.infrastructure.api.request_builder import RequestBuilder
from seaplanecli.infrastructure.identity.token_client import CredentialProvider
from seaplanecli.infrastructure.resilience.api_retry import AuthRetryExecutor

logger = logging.getLogger(__name__)


class ResourceRequest(AuthenticatedTarget, Generic[T]):
    """Typed operations on one API family, with lazy building and token refresh."""

    def __init__(
        self,
        api_key: Optional[str],
        family: RequestFamily[T],
        credential_provider: CredentialProvider,
        sender: RequestSender,
        executor: Optional[AuthRetryExecutor] = None,
        base_url: Optional[str] = None,
        transport: TransportOptions = TransportOptions(),
        builder: Optional[RequestBuilder[T]] = None,
    ):
        """Initializes the facade. No network calls are made here.

        Raises:
            MissingCredentialInput: If ``api_key`` is empty or None.
        """
        if not api_key:
            raise MissingCredentialInput()
        self.api_key = ApiKey(api_key)
        self.family = family
        self.credential_provider = credential_provider
        self.sender = sender
        self.executor = executor or AuthRetryExecutor()
        self.base_url = base_url
        self.transport = transport
        self.builder = builder or RequestBuilder(family, features=credential_provider.features)
        self.credential: Optional[Credential] = None
        self._params: Dict[str, Optional[str]] = {name: None for name in family.parameter_names}
        self._bound: Optional[BoundRequest] = None

    # --- Targeting ---

    @property
    def params(self) -> Dict[str, Optional[str]]:
        return dict(self._params)

    def set_param(self, name: str, value: Optional[str]) -> None:
        """Sets (or with None, clears) a targeting parameter and drops the bound request."""
        if name not in self._params:
            raise KeyError(f"'{name}' is not a {self.family.name} targeting parameter")
        self._params[name] = value
        self._bound = None

    def set_cursor(self, cursor: Optional[Cursor]) -> None:
        """Replaces every cursor parameter with the values from ``cursor``."""
        for name in self.family.cursor_parameters:
            self.set_param(name, (cursor or {}).get(name))

    # --- Credential and bound request ---

    def token_or_refresh(self) -> Credential:
        """Returns the held credential, requesting one first if none is held."""
        if self.credential is None:
            self.credential = self.credential_provider.obtain(self.api_key)
        return self.credential

    def reauthenticate(self) -> Credential:
        self.credential = self.credential_provider.obtain(self.api_key)
        self._bound = None
        return self.credential

    def bound_request(self) -> BoundRequest:
        if self._bound is None:
            self._bound = self.builder.build(
                self._params,
                self.token_or_refresh(),
                base_url=self.base_url,
                transport=self.transport,
            )
        return self._bound

    # --- Operations ---

    def run(self, operation_name: str, func: Callable[..., Any], *args: Any) -> Any:
        """Runs ``func(sender, bound, *args)`` through the executor."""
        return self.executor.execute(self, operation_name, functools.partial(func, self.sender), *args)

    def get_one(self) -> T:
        return self.run("get", self.family.get_one)

    def put_one(self, *args: Any) -> Any:
        return self.run("put", self.family.put_one, *args)

    def delete_one(self, *args: Any) -> Any:
        return self.run("delete", self.family.delete_one, *args)

    def get_page(self) -> Page[T]:
        return self.run("get_page", self.family.get_page)

    def get_all_pages(self) -> List[T]:
        """Follows cursors from the current position until the last page.

        Each page gets its own re-authentication attempt. If any page fails
        the error propagates and the pages fetched so far are discarded.
        """
        items: List[T] = []
        while True:
            page = self.get_page()
            items.extend(page.items)
            if not page.has_more:
                break
            self.set_cursor(page.next_cursor)
        logger.debug(f"Fetched {len(items)} {self.family.name} entries")
        return items
