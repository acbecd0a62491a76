"""File-backed key-value storage engine with per-item TTL.

Each key lives in its own file under the configured directory, named by the
hash of the key. Expired records read as missing and are removed lazily on
read, or eagerly by the background ExpirySweeper.

Usage:
    async with LocalStorage(directory="cache", ttl_default=60_000) as storage:
        await storage.set_item("user:1", {"name": "Ada"})
        user = await storage.get_item("user:1")
"""

import inspect
import re
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional, Pattern, Union

from pydantic import ValidationError

from localstore.core.codec import Codec, JsonCodec, clone, ensure_codec
from localstore.core.config import StorageSettings
from localstore.core.exceptions import ConfigurationError, CorruptRecordError, InvalidKeyError
from localstore.core.hashing import locate
from localstore.core.logging import (
    LogMode,
    get_logger,
    log_storage_operation,
    resolve_log_sink,
)
from localstore.models.record import Record, ReadStatus, RemovalResult, WriteResult
from localstore.services.record_store import RecordStore
from localstore.services.sweeper import ExpirySweeper
from localstore.services.ttl import UNSET, calc_ttl, is_expired

logger = get_logger(__name__)

RecordFilter = Callable[[Record], bool]


def _check_key(key: Any) -> None:
    if not isinstance(key, str) or not key:
        raise InvalidKeyError(key)


class LocalStorage:
    """Async key-value store persisting one file per key.

    Operations are sequential read/decode/encode/write steps that suspend at
    every filesystem call. There is no per-key locking: concurrent writes to
    the same key resolve to whichever file replacement lands last.
    """

    def __init__(self, settings: Optional[StorageSettings] = None,
                 codec: Optional[Codec] = None, **overrides):
        self.settings: Optional[StorageSettings] = None
        self._custom_codec: Optional[Codec] = None
        self.codec: Codec = JsonCodec()
        self.store: Optional[RecordStore] = None
        self._log_mode = LogMode.DISABLED
        self._log_sink = None
        self._sweeper: Optional[ExpirySweeper] = None
        self.set_options(settings, codec=codec, **overrides)

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def set_options(self, settings: Optional[StorageSettings] = None,
                    codec: Optional[Codec] = None, **overrides) -> StorageSettings:
        """Replace the configuration without touching the sweeper.

        ``settings`` replaces the whole configuration; ``overrides`` are merged
        onto it (or onto the current configuration when ``settings`` is None).
        """
        base = settings if settings is not None else self.settings
        try:
            if base is None:
                resolved = StorageSettings(**overrides)
            elif overrides:
                resolved = StorageSettings(**{**base.model_dump(), **overrides})
            else:
                resolved = base
        except ValidationError as e:
            raise ConfigurationError(f"invalid storage settings: {e}") from e

        if resolved.directory.exists() and not resolved.directory.is_dir():
            raise ConfigurationError(f"storage directory {resolved.directory} is not a directory")

        if codec is not None:
            self._custom_codec = ensure_codec(codec)

        self.settings = resolved
        self.codec = self._custom_codec or JsonCodec(resolved.encoding)
        self.store = RecordStore(resolved.directory, self.codec)
        self._log_mode, self._log_sink = resolve_log_sink(resolved.logging)
        return resolved

    async def init(self, settings: Optional[StorageSettings] = None,
                   codec: Optional[Codec] = None, **overrides) -> StorageSettings:
        """Apply configuration overrides and (re)start the sweeper if configured.

        Returns:
            The resolved settings
        """
        if settings is not None or codec is not None or overrides:
            self.set_options(settings, codec=codec, **overrides)

        if self.settings.sweep_interval:
            await self.start_sweeper()
        else:
            await self.stop_sweeper()
        return self.settings

    async def start_sweeper(self) -> None:
        """Start (or restart) the expiry sweeper with the configured interval."""
        await self.stop_sweeper()
        if not self.settings.sweep_interval:
            return
        self._sweeper = ExpirySweeper(self.remove_expired_items, self.settings.sweep_interval)
        self._sweeper.start()

    async def stop_sweeper(self) -> None:
        """Stop the expiry sweeper if it is running."""
        sweeper, self._sweeper = self._sweeper, None
        if sweeper is not None:
            await sweeper.stop()

    @property
    def sweeper_running(self) -> bool:
        return self._sweeper is not None and self._sweeper.running

    async def close(self) -> None:
        """Release background resources."""
        await self.stop_sweeper()

    async def __aenter__(self) -> "LocalStorage":
        await self.init()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # =========================================================================
    # SINGLE-KEY OPERATIONS
    # =========================================================================

    def get_datum_path(self, key: str) -> str:
        """Absolute file location for ``key``."""
        return str(locate(self.settings.directory, key))

    async def set_item(self, key: str, value: Any, ttl: Any = UNSET) -> WriteResult:
        """Store ``value`` under ``key``, overwriting any existing record.

        Args:
            key: Logical key
            value: Codec-serializable value; copied before storage
            ttl: Duration in ms, timedelta, datetime, or None for no expiry.
                Omitted uses the configured default.

        Raises:
            InvalidKeyError: ``key`` is not a non-empty string
        """
        _check_key(key)
        record = Record(key=key, value=clone(self.codec, value),
                        ttl=calc_ttl(ttl, self.settings.ttl_default))
        self._log("set", key=key, ttl=record.ttl)
        return await self._write(record)

    async def update_item(self, key: str, value: Any, ttl: Any = UNSET) -> WriteResult:
        """Replace the value of an unexpired record, keeping its TTL.

        A truthy ``ttl`` replaces the existing expiry. Missing or expired
        records are written exactly as set_item() would.
        """
        _check_key(key)
        previous = await self.get_datum(key)
        if previous is None or is_expired(previous):
            return await self.set_item(key, value, ttl=ttl)

        expires_at = calc_ttl(ttl, self.settings.ttl_default) if ttl else previous.ttl
        record = Record(key=key, value=clone(self.codec, value), ttl=expires_at)
        self._log("update", key=key, ttl=record.ttl)
        return await self._write(record)

    async def get_item(self, key: str) -> Any:
        """Return the value for ``key``, or None when missing or expired.

        Expired records are deleted as a side effect.
        """
        datum = await self.get_datum(key)
        if datum is None:
            return None
        if is_expired(datum):
            self._log("expired", key=key, ttl=datum.ttl)
            await self.remove_item(key)
            return None
        return datum.value

    async def get_datum(self, key: str) -> Optional[Record]:
        """Return the full stored record without expiry side effects."""
        return await self._read(self.get_datum_path(key))

    async def get_raw_datum(self, key: str) -> Optional[bytes]:
        """Return the undecoded record file, or None when there is no file."""
        path = self.get_datum_path(key)
        raw = await self.store.read_raw(path)
        if raw is None:
            self._log("missing", path=path)
        return raw

    async def get_datum_value(self, key: str) -> Any:
        """Return the stored value regardless of expiry."""
        datum = await self.get_datum(key)
        return datum.value if datum is not None else None

    async def remove_item(self, key: str) -> RemovalResult:
        """Delete the record for ``key``; deleting a missing key is not an error."""
        path = self.get_datum_path(key)
        self._log("remove", key=key, path=path)
        result = await self.store.delete(path)
        if not result.existed:
            self._log("remove_missing", key=key, path=path)
        return result

    # =========================================================================
    # ENUMERATION
    # =========================================================================

    async def data(self) -> List[Record]:
        """Decode every record in the storage directory.

        Hidden entries are skipped; corrupt files follow the same policy as
        single reads.
        """
        records = []
        for path in await self.store.list_paths():
            record = await self._read(path)
            if record is not None:
                records.append(record)
        return records

    async def keys(self, filter: Optional[RecordFilter] = None) -> List[str]:
        return [datum.key for datum in await self._filtered(filter)]

    async def values(self, filter: Optional[RecordFilter] = None) -> List[Any]:
        return [datum.value for datum in await self._filtered(filter)]

    async def length(self, filter: Optional[RecordFilter] = None) -> int:
        return len(await self._filtered(filter))

    async def values_with_key_match(self, match: Union[str, Pattern, None] = None) -> List[Any]:
        """Values whose key contains ``match`` (str) or matches it (regex)."""
        if match is None:
            return await self.values()
        if isinstance(match, re.Pattern):
            return await self.values(lambda datum: match.search(datum.key) is not None)
        return await self.values(lambda datum: match in datum.key)

    async def for_each(self, callback: Callable[[Record], Union[None, Awaitable[None]]]) -> None:
        """Invoke ``callback`` on every record in turn, awaiting async callbacks."""
        for datum in await self.data():
            result = callback(datum)
            if inspect.isawaitable(result):
                await result

    async def remove_expired_items(self) -> int:
        """Remove every record whose TTL has passed. Returns the count removed."""
        removed = 0
        for key in await self.keys(is_expired):
            result = await self.remove_item(key)
            if result.existed:
                removed += 1
        return removed

    async def clear(self) -> int:
        """Remove every record. Returns the count removed."""
        removed = 0
        for datum in await self.data():
            result = await self.remove_item(datum.key)
            if result.existed:
                removed += 1
        return removed

    # =========================================================================
    # INTERNALS
    # =========================================================================

    async def _filtered(self, filter: Optional[RecordFilter]) -> List[Record]:
        records = await self.data()
        if filter is not None:
            records = [datum for datum in records if filter(datum)]
        return records

    async def _read(self, path: Union[str, Path]) -> Optional[Record]:
        result = await self.store.read(path)
        if result.status == ReadStatus.OK:
            return result.record
        if result.status == ReadStatus.ABSENT:
            self._log("missing", path=result.path)
            return None

        self._log("parse_error", path=result.path, reason=result.reason)
        if self.settings.forgive_parse_errors:
            return None
        raise CorruptRecordError(result.path, result.reason or "unknown")

    async def _write(self, record: Record) -> WriteResult:
        result = await self.store.write(self.get_datum_path(record.key), record)
        self._log("wrote", key=record.key, path=result.path)
        return result

    def _log(self, operation: str, path: Optional[str] = None, **context: Any) -> None:
        """Emit a diagnostic event through the configured log mode."""
        if self._log_mode == LogMode.DISABLED:
            return
        if path is None and "key" in context:
            path = self.get_datum_path(context["key"])
        if self._log_mode == LogMode.CUSTOM:
            self._log_sink(operation, path=path, **context)
            return
        key = context.pop("key", None)
        log_storage_operation(logger, operation, path or "", key=key, **context)
