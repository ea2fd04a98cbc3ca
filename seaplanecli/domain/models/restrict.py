"""API-key restriction models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping

from seaplanecli.domain.models.common import EncodedString, display_decoded


class RestrictionState(Enum):
    PENDING = "pending"
    ENFORCED = "enforced"


@dataclass(frozen=True)
class RestrictionDetails:
    """Where a restricted directory may be served from."""

    regions_allowed: List[str] = field(default_factory=list)
    regions_denied: List[str] = field(default_factory=list)
    providers_allowed: List[str] = field(default_factory=list)
    providers_denied: List[str] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "RestrictionDetails":
        return cls(
            regions_allowed=list(data.get("regions_allowed") or []),
            regions_denied=list(data.get("regions_denied") or []),
            providers_allowed=list(data.get("providers_allowed") or []),
            providers_denied=list(data.get("providers_denied") or []),
        )

    def to_json(self) -> Dict[str, List[str]]:
        return {
            "regions_allowed": list(self.regions_allowed),
            "regions_denied": list(self.regions_denied),
            "providers_allowed": list(self.providers_allowed),
            "providers_denied": list(self.providers_denied),
        }


@dataclass(frozen=True)
class Restriction:
    api: str
    directory: EncodedString
    details: RestrictionDetails
    state: RestrictionState = RestrictionState.PENDING

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Restriction":
        return cls(
            api=str(data["api"]),
            directory=EncodedString(str(data["directory"])),
            details=RestrictionDetails.from_json(data.get("details") or {}),
            state=RestrictionState(data.get("state", RestrictionState.PENDING.value)),
        )

    def to_json(self, decode: bool = False) -> Dict[str, Any]:
        return {
            "api": self.api,
            "directory": display_decoded(self.directory) if decode else self.directory,
            "details": self.details.to_json(),
            "state": self.state.value,
        }
