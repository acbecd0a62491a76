"""Single-file record I/O against a storage directory.

Translates filesystem results into outcomes the engine can reason about:
a missing file is ABSENT, an undecodable or invalid file is CORRUPT, and
every other OS error propagates as StorageIOError.
"""

import asyncio
import contextlib
import os
import uuid
from pathlib import Path
from typing import List, Optional, Union

from pydantic import ValidationError

from localstore.constants import HIDDEN_FILE_PREFIX, TEMP_FILE_SUFFIX
from localstore.core.codec import Codec
from localstore.core.exceptions import StorageIOError
from localstore.models.record import Record, ReadResult, ReadStatus, RemovalResult, WriteResult

PathLike = Union[str, Path]


class RecordStore:
    """Read, write and delete whole record files.

    Blocking filesystem calls run in the default executor so the event loop
    is only suspended, never blocked, at I/O boundaries.
    """

    def __init__(self, directory: PathLike, codec: Codec):
        self.directory = Path(directory)
        self.codec = codec

    # =========================================================================
    # READ
    # =========================================================================

    async def read_raw(self, path: PathLike) -> Optional[bytes]:
        """Return the undecoded file contents, or None when the file is missing."""
        path = Path(path)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageIOError(str(path), "read", e) from e

    async def read(self, path: PathLike) -> ReadResult:
        """Read and validate the record stored at ``path``."""
        path = Path(path)
        raw = await self.read_raw(path)
        if raw is None:
            return ReadResult(status=ReadStatus.ABSENT, path=str(path))

        try:
            decoded = self.codec.decode(raw)
        except Exception as e:
            # Codecs are pluggable and raise their own decode error types
            return ReadResult(status=ReadStatus.CORRUPT, path=str(path),
                              reason=f"decode failed: {type(e).__name__}: {e}")

        if not isinstance(decoded, dict):
            return ReadResult(status=ReadStatus.CORRUPT, path=str(path),
                              reason=f"expected an object, got {type(decoded).__name__}")

        try:
            record = Record.model_validate(decoded)
        except ValidationError as e:
            return ReadResult(status=ReadStatus.CORRUPT, path=str(path),
                              reason=f"invalid record: {e.error_count()} validation error(s)")

        return ReadResult(status=ReadStatus.OK, path=str(path), record=record)

    # =========================================================================
    # WRITE / DELETE
    # =========================================================================

    async def write(self, path: PathLike, record: Record) -> WriteResult:
        """Serialize ``record`` and replace the file at ``path`` with it."""
        path = Path(path)
        data = self.codec.encode(record.to_payload())
        try:
            await asyncio.to_thread(self._write_atomic, path, data)
        except OSError as e:
            raise StorageIOError(str(path), "write", e) from e
        return WriteResult(path=str(path), record=record)

    async def delete(self, path: PathLike) -> RemovalResult:
        """Remove the file at ``path``; a missing file is a normal outcome."""
        path = Path(path)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            return RemovalResult(path=str(path), removed=False, existed=False)
        except OSError as e:
            raise StorageIOError(str(path), "delete", e) from e
        return RemovalResult(path=str(path), removed=True, existed=True)

    # =========================================================================
    # ENUMERATION
    # =========================================================================

    async def list_paths(self) -> List[Path]:
        """List record files in the directory, skipping hidden entries.

        A directory that does not exist yet holds no records.
        """
        try:
            names = await asyncio.to_thread(os.listdir, self.directory)
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageIOError(str(self.directory), "list", e) from e
        return [self.directory / name for name in sorted(names)
                if not name.startswith(HIDDEN_FILE_PREFIX)]

    @staticmethod
    def _write_atomic(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        # Hidden temp name keeps in-flight writes out of enumeration
        tmp_path = path.parent / f"{HIDDEN_FILE_PREFIX}{path.name}.{uuid.uuid4().hex[:8]}{TEMP_FILE_SUFFIX}"
        try:
            tmp_path.write_bytes(data)
            os.replace(tmp_path, path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                tmp_path.unlink()
            raise
