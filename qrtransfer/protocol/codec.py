"""
Payload Codec

Serialize -> gzip -> base64 and back. Turns any JSON-representable value into
one text-safe string that can be split across QR codes.
"""

import base64
import binascii
import gzip
import json
import zlib
from typing import Any

from .errors import DecodeFailure


def _json_key(key: Any) -> str:
    """Render a non-string mapping key the way json.dumps would."""
    if key is None or isinstance(key, (bool, int, float)):
        return json.dumps(key, allow_nan=False)
    raise TypeError(f"keys must be str, int, float, bool or None, not {type(key).__name__}")


def _stringify_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            (k if isinstance(k, str) else _json_key(k)): _stringify_keys(v)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_stringify_keys(v) for v in value]
    return value


def serialize(data: Any) -> bytes:
    """
    Serialize a value to canonical UTF-8 JSON.

    Non-string keys are converted to strings before sorting, so mappings
    with mixed int and str keys serialize like json.dumps would render them.

    Raises:
        TypeError / ValueError: value is not JSON-representable. This is a
        caller bug and is not converted to a transfer failure.
    """
    text = json.dumps(
        _stringify_keys(data),
        separators=(',', ':'),
        sort_keys=True,
        ensure_ascii=False,
        allow_nan=False
    )
    return text.encode('utf-8')


def encode_payload(data: Any) -> str:
    """
    Serialize, compress and base64-encode a value.

    Args:
        data: JSON-representable value (dict, list, str, number, bool, None)

    Returns:
        str: Base64 text of the gzip-compressed JSON
    """
    compressed = gzip.compress(serialize(data), compresslevel=9, mtime=0)
    return base64.b64encode(compressed).decode('ascii')


def decode_payload(transcoded: str) -> Any:
    """
    Reverse encode_payload.

    Args:
        transcoded: Base64 text produced by encode_payload

    Returns:
        The decoded value

    Raises:
        DecodeFailure: base64, gzip, UTF-8 or JSON decoding failed, including
            JSON nested deeper than the parser can handle
    """
    try:
        compressed = base64.b64decode(transcoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeFailure(f"invalid base64: {e}") from e

    try:
        raw = gzip.decompress(compressed)
    except (OSError, EOFError, zlib.error, MemoryError) as e:
        raise DecodeFailure(f"invalid gzip stream: {e}") from e

    try:
        return json.loads(raw.decode('utf-8'))
    except (UnicodeDecodeError, ValueError, RecursionError, MemoryError) as e:
        raise DecodeFailure(f"invalid JSON: {e}") from e
