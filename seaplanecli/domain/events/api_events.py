"""Domain Events related to API calls and re-authentication.

Emitted by the retrying executor so callers can observe attempts without
the core printing anything itself.
"""

from dataclasses import dataclass, field
import time
from typing import Optional


@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass


@dataclass
class ApiCallInitiated(DomainEvent):
    """Event triggered when an API call is about to be made."""
    family: str  # e.g., 'metadata', 'restrict', 'locks'
    operation: str
    attempt: int = 1
    timestamp: float = field(default_factory=time.time)


@dataclass
class ApiCallSucceeded(DomainEvent):
    """Event triggered when an API call succeeds."""
    family: str
    operation: str
    latency_ms: float
    attempt: int = 1
    timestamp: float = field(default_factory=time.time)


@dataclass
class ApiCallFailed(DomainEvent):
    """Event triggered when an API call fails definitively."""
    family: str
    operation: str
    error_type: str
    error_message: str
    status: Optional[int] = None
    attempt: int = 1
    timestamp: float = field(default_factory=time.time)


@dataclass
class AccessTokenRefreshed(DomainEvent):
    """Event triggered when a rejected bearer token was replaced with a fresh one."""
    family: str
    operation: str
    tenant_id: str = ""
    timestamp: float = field(default_factory=time.time)
