"""Metadata key-value store models."""

from dataclasses import dataclass
from typing import Any, Dict, Mapping

from seaplanecli.domain.models.common import EncodedString, decode_b64, display_decoded


@dataclass(frozen=True)
class KeyValue:
    """A single key-value pair, both sides URL-safe base64 encoded."""

    key: EncodedString
    value: EncodedString

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "KeyValue":
        return cls(key=EncodedString(str(data["key"])), value=EncodedString(str(data["value"])))

    def to_json(self, decode: bool = False) -> Dict[str, str]:
        if decode:
            return {"key": display_decoded(self.key), "value": display_decoded(self.value)}
        return {"key": self.key, "value": self.value}

    def raw_value(self) -> bytes:
        return decode_b64(self.value)
