"""Facade over the distributed lock service."""

from typing import Any, Optional

from seaplanecli.core.services.resource_request import ResourceRequest
from seaplanecli.domain.models.common import ensure_encoded
from seaplanecli.domain.models.locks import HeldLock, LockInfo
from seaplanecli.infrastructure.api.locks import LocksFamily


class LocksRequest(ResourceRequest[LockInfo]):
    """Acquire, release, renew and inspect locks.

    A lock that is held by another client makes ``acquire`` raise
    ``ResourceConflict``; whether to try again is up to the caller.
    """

    family: LocksFamily

    def __init__(self, api_key: Optional[str], credential_provider, sender, **kwargs: Any):
        super().__init__(api_key, LocksFamily(), credential_provider, sender, **kwargs)

    def set_name(self, name: str, already_encoded: bool = False) -> None:
        self.set_param("name", ensure_encoded(name, already_encoded))

    def set_directory(self, directory: str, already_encoded: bool = False) -> None:
        self.set_param("directory", ensure_encoded(directory, already_encoded))

    def set_from(self, name: str, already_encoded: bool = False) -> None:
        self.set_param("from", ensure_encoded(name, already_encoded))

    def get_lock_info(self) -> LockInfo:
        return self.get_one()

    def acquire(self, ttl: int, client_id: str) -> HeldLock:
        return self.put_one(ttl, client_id)

    def release(self, lock_id: str) -> None:
        self.delete_one(lock_id)

    def renew(self, lock_id: str, ttl: int) -> None:
        self.run("renew", self.family.renew, lock_id, ttl)
