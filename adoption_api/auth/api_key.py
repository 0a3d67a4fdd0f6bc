"""API key generation and display utilities."""

import base64
import hashlib
import time
import uuid

KEY_VALUE_LENGTH = 64
# Upper bound for any presented key, bootstrap keys included
MAX_KEY_VALUE_LENGTH = 256


def generate_key_value() -> str:
    """
    Generate a new opaque API key value.

    The key is the SHA-256 digest of ``"<uuid4>-<epoch millis>"``, base64
    encoded and cut to 64 characters.

    Returns:
        64-character API key
    """
    raw_key = f"{uuid.uuid4()}-{int(time.time() * 1000)}"
    digest = hashlib.sha256(raw_key.encode("utf-8")).digest()
    # One digest encodes to 44 chars; a second round brings it past 64.
    digest += hashlib.sha256(digest).digest()
    return base64.b64encode(digest).decode("ascii")[:KEY_VALUE_LENGTH]


def mask_key_value(key_value: str | None) -> str | None:
    """
    Return a log-safe prefix of an API key.

    Args:
        key_value: Plain API key value

    Returns:
        First 6 characters followed by an ellipsis, or None
    """
    if not key_value:
        return None
    return f"{key_value[:6]}..."
