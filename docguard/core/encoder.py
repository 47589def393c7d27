import json
from typing import Union

from .errors import EncodingError

Blob = Union[str, bytes]


def to_text(blob: Blob) -> str:
    """
    Normalizes a blob to text. Bytes must be valid UTF-8; nothing is replaced or dropped.
    """
    if isinstance(blob, str):
        return blob
    if isinstance(blob, (bytes, bytearray)):
        try:
            return bytes(blob).decode("utf-8")
        except UnicodeDecodeError as e:
            raise EncodingError(f"Not valid UTF-8 at byte {e.start}: {e.reason}")
    raise EncodingError(f"Cannot encode value of type {type(blob).__name__}")


def encode(blob: Blob) -> str:
    """
    Returns the blob as a JSON string literal.
    Quotes, backslashes, newlines and control characters are escaped by the serializer,
    so callers never escape anything by hand.
    """
    text = to_text(blob)
    try:
        return json.dumps(text)
    except (TypeError, ValueError) as e:
        raise EncodingError(f"JSON serializer rejected blob: {e}")


def decode(encoded: str) -> str:
    """Inverse of encode()."""
    try:
        value = json.loads(encoded)
    except json.JSONDecodeError as e:
        raise EncodingError(f"Not a JSON string literal: {e}")
    if not isinstance(value, str):
        raise EncodingError(f"Expected a JSON string, got {type(value).__name__}")
    return value
