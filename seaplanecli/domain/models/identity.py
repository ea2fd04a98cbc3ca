"""Identity models: the Credential issued by the token endpoint."""

from dataclasses import dataclass
from typing import Any, Dict, Mapping

from seaplanecli.domain.models.common import BearerToken


@dataclass(frozen=True)
class Credential:
    """A short lived bearer token along with the tenant it was issued for.

    A Credential is never mutated. Re-authentication replaces it wholesale.
    """

    token: BearerToken
    tenant_id: str = ""
    subdomain: str = ""

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Credential":
        return cls(
            token=BearerToken(str(data["token"])),
            tenant_id=str(data.get("tenant", "")),
            subdomain=str(data.get("subdomain", "")),
        )

    def to_json(self) -> Dict[str, str]:
        return {"token": self.token, "tenant": self.tenant_id, "subdomain": self.subdomain}

    def __repr__(self) -> str:
        # Tokens are never rendered.
        return f"Credential(token=<redacted>, tenant_id={self.tenant_id!r}, subdomain={self.subdomain!r})"
