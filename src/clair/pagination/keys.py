from __future__ import annotations

import base64
import binascii
import logging
import re
from typing import Any, Mapping, Optional, Protocol

from cryptography.fernet import Fernet

from clair.errors import KeyValidationError

logger = logging.getLogger(__name__)

PAGINATION_KEY_OPTION = "paginationkey"

_URLSAFE_B64_RE = re.compile(r"^[A-Za-z0-9_-]+={0,2}$")


class KeyCodec(Protocol):
    """Generates and (de)serializes the symmetric key used to sign pagination tokens."""

    key_size: int

    def generate(self) -> bytes:
        ...

    def encode(self, key: bytes) -> str:
        ...

    def decode(self, text: str) -> bytes:
        """Return the raw key bytes. Raises ValueError when ``text`` is not a valid key."""


class FernetKeyCodec:
    """Fernet keys: 32 random bytes rendered as URL-safe base64."""

    key_size = 32

    def generate(self) -> bytes:
        return base64.urlsafe_b64decode(Fernet.generate_key())

    def encode(self, key: bytes) -> str:
        if len(key) != self.key_size:
            raise ValueError(f"key must be {self.key_size} bytes, got {len(key)}")
        return base64.urlsafe_b64encode(key).decode("ascii")

    def decode(self, text: str) -> bytes:
        if not _URLSAFE_B64_RE.match(text):
            raise ValueError("key contains characters outside the URL-safe base64 alphabet")
        try:
            raw = base64.urlsafe_b64decode(text)
        except binascii.Error as e:
            raise ValueError(f"key is not valid base64: {e}") from e
        if len(raw) != self.key_size:
            raise ValueError(f"key must decode to {self.key_size} bytes, got {len(raw)}")
        # Let Fernet confirm it accepts the key as well.
        Fernet(text.encode("ascii"))
        return raw


def ensure_pagination_key(options: Mapping[str, Any], codec: Optional[KeyCodec] = None) -> dict[str, Any]:
    """
    Return a copy of the database options carrying a valid pagination key.

    An absent key is generated. A configured key that fails to decode raises
    KeyValidationError; it is never replaced silently.
    """
    codec = codec or FernetKeyCodec()
    result = dict(options)
    configured = result.get(PAGINATION_KEY_OPTION)

    if configured is None:
        logger.warning(
            "Pagination key is empty, generating one. Tokens issued with it will not "
            "survive a restart unless the key is configured."
        )
        result[PAGINATION_KEY_OPTION] = codec.encode(codec.generate())
        return result

    if not isinstance(configured, str):
        raise KeyValidationError(_invalid_key_message(codec))
    try:
        codec.decode(configured)
    except ValueError as e:
        raise KeyValidationError(_invalid_key_message(codec)) from e
    return result


def _invalid_key_message(codec: KeyCodec) -> str:
    return f"invalid pagination key: must be a {codec.key_size}-byte URL-safe base64 string"
