"""Data URI helpers."""

import base64
import binascii
import re

_DATA_URI_RE = re.compile(r"^data:(.+?);base64,(.+)$", re.DOTALL)


def is_data_uri(value: str) -> bool:
    return bool(_DATA_URI_RE.match(value.strip()))


def decode_data_uri(data_uri: str) -> tuple[bytes, str]:
    """Split 'data:<mime>;base64,<payload>' into (bytes, mime). Raises ValueError."""
    match = _DATA_URI_RE.match(data_uri.strip())
    if not match:
        raise ValueError("Invalid data URI")
    content_type, payload = match.group(1), match.group(2)
    try:
        return base64.b64decode(payload, validate=False), content_type
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Invalid data URI") from exc
