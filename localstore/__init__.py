"""localstore - file-backed key-value storage with per-item TTL.

One file per key, named by the hash of the key, with lazy expiry on read
and a background sweeper for eager eviction.
"""

from localstore.core.codec import Codec, JsonCodec
from localstore.core.config import StorageSettings
from localstore.core.exceptions import (
    ConfigurationError,
    CorruptRecordError,
    InvalidKeyError,
    StorageError,
    StorageIOError,
)
from localstore.models.record import Record, RemovalResult, WriteResult
from localstore.services.storage import LocalStorage

__all__ = [
    "LocalStorage",
    "StorageSettings",
    "Codec",
    "JsonCodec",
    "Record",
    "WriteResult",
    "RemovalResult",
    "StorageError",
    "StorageIOError",
    "CorruptRecordError",
    "InvalidKeyError",
    "ConfigurationError",
]
