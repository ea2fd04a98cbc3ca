"""Models describing how a request is targeted, bound and paged."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Generic, List, Mapping, Optional, Tuple, TypeVar

from seaplanecli.domain.models.common import BearerToken

T = TypeVar("T")

# Continuation returned by a paged endpoint. Keys are targeting parameter
# names of the family that produced it, values are opaque to callers.
Cursor = Dict[str, str]


@dataclass(frozen=True)
class DangerZoneFeatures:
    """Build level gates for the insecure transport toggles.

    A toggle that is gated off here can never be enabled by user input.
    """

    allow_insecure_urls: bool = True
    allow_invalid_certs: bool = True


@dataclass(frozen=True)
class TransportOptions:
    """Per request transport toggles. Both default to the safe value."""

    allow_insecure_transport: bool = False
    allow_invalid_certificates: bool = False

    def clamp(self, features: DangerZoneFeatures) -> "TransportOptions":
        """Returns the options with every toggle ANDed against its feature gate."""
        return TransportOptions(
            allow_insecure_transport=self.allow_insecure_transport and features.allow_insecure_urls,
            allow_invalid_certificates=self.allow_invalid_certificates and features.allow_invalid_certs,
        )


class RequestShape(Enum):
    """The supported ways of addressing resources within a family."""

    SINGLE = "single"              # one fully qualified resource
    COLLECTION = "collection"      # every resource under a container, optionally from a cursor
    GLOBAL_RANGE = "global_range"  # every resource of the family, optionally from a cursor


@dataclass(frozen=True)
class BoundRequest:
    """An immutable, ready to send request descriptor.

    Rebuilt whenever the targeting parameters or the credential change.
    """

    family: str
    shape: RequestShape
    url: str
    token: BearerToken
    transport: TransportOptions
    query: Tuple[Tuple[str, str], ...] = ()
    # Snapshot of the targeting parameters the request was built from.
    targeting: Tuple[Tuple[str, str], ...] = ()

    @property
    def params(self) -> Dict[str, str]:
        return dict(self.query)

    def target(self, name: str) -> Optional[str]:
        return dict(self.targeting).get(name)

    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    def __repr__(self) -> str:
        return (
            f"BoundRequest(family={self.family!r}, shape={self.shape.value}, url={self.url!r}, "
            f"query={self.query!r}, transport={self.transport!r})"
        )


@dataclass
class Page(Generic[T]):
    """A single page of a range query."""

    items: List[T] = field(default_factory=list)
    next_cursor: Optional[Cursor] = None

    @property
    def has_more(self) -> bool:
        return self.next_cursor is not None


def freeze_query(params: Mapping[str, Optional[str]]) -> Tuple[Tuple[str, str], ...]:
    """Drops unset values and returns a hashable, ordered query tuple."""
    return tuple((key, value) for key, value in params.items() if value is not None)
