"""Value codec: JSON text on the wire, Python values in memory."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable

from .errors import CodecError


def encode(value: Any) -> str:
    """Serialize a value to compact JSON text.

    Raises:
        CodecError: If the value is not JSON-serializable.
    """
    try:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise CodecError(f"Value is not JSON-serializable: {e}") from e


def decode(text: str) -> Any:
    """Deserialize stored text, falling back to the raw string."""
    try:
        return json.loads(text)
    except ValueError:
        return text


@dataclass(frozen=True)
class Codec:
    """An encode/decode pair used by a ``Client`` for stored values."""

    encode: Callable[[Any], str] = encode
    decode: Callable[[str], Any] = decode


JSON = Codec()
