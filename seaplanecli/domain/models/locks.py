"""Distributed lock models."""

from dataclasses import dataclass
from typing import Any, Dict, Mapping

from seaplanecli.domain.models.common import EncodedString, display_decoded


@dataclass(frozen=True)
class HeldLock:
    """A lock that at some point was held by this client. It may have lapsed since."""

    name: EncodedString
    id: EncodedString
    sequencer: int

    @classmethod
    def from_json(cls, data: Mapping[str, Any], name: str) -> "HeldLock":
        """Builds the lock from an acquire response, which does not echo the name."""
        return cls(
            name=EncodedString(name),
            id=EncodedString(str(data["id"])),
            sequencer=int(data["sequencer"]),
        )

    def to_json(self, decode: bool = False) -> Dict[str, Any]:
        return {
            "name": display_decoded(self.name) if decode else self.name,
            "id": self.id,
            "sequencer": self.sequencer,
        }


@dataclass(frozen=True)
class LockInfo:
    """Information about a currently held lock."""

    name: EncodedString
    id: EncodedString
    ttl: int
    client_id: str
    ip: str

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "LockInfo":
        info = data.get("info") or {}
        return cls(
            name=EncodedString(str(data["name"])),
            id=EncodedString(str(data["id"])),
            ttl=int(info.get("ttl", 0)),
            client_id=str(info.get("client-id", "")),
            ip=str(info.get("ip", "")),
        )

    def to_json(self, decode: bool = False) -> Dict[str, Any]:
        return {
            "name": display_decoded(self.name) if decode else self.name,
            "id": self.id,
            "info": {"ttl": self.ttl, "client-id": self.client_id, "ip": self.ip},
        }
