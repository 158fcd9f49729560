"""Read claims out of Kavita's JWT bearer tokens.

The signature is never verified: the server validates its own tokens and the
adapter only needs ``exp`` to know when to refresh.
"""

import base64
import binascii
import json
from typing import Any

from kavita_source.exceptions import ParseError


def _b64url_decode(segment: str) -> bytes:
    # Accept both alphabets and any amount of (missing) padding.
    normalized = segment.strip().rstrip("=").replace("-", "+").replace("_", "/")
    if len(normalized) % 4 == 1:
        raise ParseError("Failed to decode token: invalid base64 length")
    normalized += "=" * (-len(normalized) % 4)
    try:
        return base64.b64decode(normalized, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ParseError(f"Failed to decode token: {e}") from e


def decode_token_payload(token: str) -> dict[str, Any]:
    """Return the JSON claims held in the middle segment of a JWT."""
    parts = token.split(".") if isinstance(token, str) else []
    if len(parts) < 3:
        raise ParseError("Failed to decode token: expected three '.'-separated segments")

    raw = _b64url_decode(parts[1])
    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ParseError(f"Failed to decode token payload: {e}") from e

    if not isinstance(payload, dict):
        raise ParseError("Failed to decode token payload: not a JSON object")
    return payload


def decode_expiry(token: str) -> int:
    """Return the ``exp`` claim (seconds since the epoch)."""
    exp = decode_token_payload(token).get("exp")
    # bool is an int subclass; a boolean exp is still malformed.
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        raise ParseError("Failed to decode token: missing 'exp' claim")
    return int(exp)
