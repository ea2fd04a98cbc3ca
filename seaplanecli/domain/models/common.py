"""Defines common Value Objects used across the resource families.

These objects represent simple values such as API keys, encoded keys and
bearer tokens, ensuring consistency between the CLI and the SDK layers.
"""

import base64
import binascii
from typing import NewType

# === Core Value Objects ===

# Using NewType for semantic clarity, although they are strings at runtime.
ApiKey = NewType("ApiKey", str)                # Long-lived Seaplane API key
BearerToken = NewType("BearerToken", str)      # Short-lived JWT issued by the identity service
EncodedString = NewType("EncodedString", str)  # URL-safe base64 (no padding) of arbitrary bytes

BASE64_PATH_PREFIX = "base64:"


def encode_b64(raw: bytes) -> EncodedString:
    """Encodes bytes as URL-safe base64 without padding."""
    return EncodedString(base64.urlsafe_b64encode(raw).decode("ascii").rstrip("="))


def decode_b64(encoded: str) -> bytes:
    """Decodes URL-safe base64, tolerating missing padding.

    Raises:
        ValueError: If ``encoded`` is not valid URL-safe base64.
    """
    padded = encoded + "=" * (-len(encoded) % 4)
    try:
        return base64.b64decode(padded, altchars=b"-_", validate=True)
    except binascii.Error as e:
        raise ValueError(f"'{encoded}' is not valid URL-safe base64: {e}") from e


def ensure_encoded(value: str, already_encoded: bool = False) -> EncodedString:
    """Returns ``value`` as an EncodedString.

    When ``already_encoded`` is set the value is validated instead of encoded.
    """
    if already_encoded:
        decode_b64(value)
        return EncodedString(value)
    return encode_b64(value.encode("utf-8"))


def display_decoded(encoded: str) -> str:
    """Best-effort human readable rendering of an encoded value."""
    try:
        return decode_b64(encoded).decode("utf-8")
    except (ValueError, UnicodeDecodeError):
        return encoded
