"""Record serialization.

A codec turns a JSON-like record into bytes and back. The default codec is
JSON text in the configured encoding; any object with compatible ``encode``
and ``decode`` methods can replace it.
"""

import json
from typing import Any, Protocol, runtime_checkable

from localstore.constants import DEFAULT_ENCODING
from localstore.core.exceptions import ConfigurationError


@runtime_checkable
class Codec(Protocol):
    """Byte-level encode/decode pair used for record files."""

    def encode(self, value: Any) -> bytes:
        ...

    def decode(self, data: bytes) -> Any:
        ...


class JsonCodec:
    """JSON text codec.

    Args:
        encoding: Text encoding applied to the JSON document
    """

    def __init__(self, encoding: str = DEFAULT_ENCODING):
        self.encoding = encoding

    def encode(self, value: Any) -> bytes:
        return json.dumps(value, ensure_ascii=False).encode(self.encoding)

    def decode(self, data: bytes) -> Any:
        return json.loads(data.decode(self.encoding))

    def __repr__(self) -> str:
        return f"JsonCodec(encoding={self.encoding!r})"


def clone(codec: Codec, value: Any) -> Any:
    """Return an independent copy of ``value`` by round-tripping it through ``codec``.

    Primitives are immutable and returned as-is.
    """
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return codec.decode(codec.encode(value))


def ensure_codec(codec: Any) -> Codec:
    """Validate that ``codec`` offers callable ``encode`` and ``decode``."""
    if not callable(getattr(codec, "encode", None)) or not callable(getattr(codec, "decode", None)):
        raise ConfigurationError(f"codec {codec!r} must provide callable encode() and decode()")
    return codec
