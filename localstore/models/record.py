"""Record model and storage operation results.

A record file is valid only when it decodes to a mapping with a non-empty
string ``key``. Validation happens once, right after decode, in RecordStore.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator


class Record(BaseModel):
    """Stored unit: key, opaque value, optional absolute expiry (epoch ms)."""
    key: str = Field(min_length=1)
    value: Any = None
    ttl: Optional[int] = None

    model_config = {"extra": "ignore"}

    @field_validator("ttl", mode="before")
    @classmethod
    def floor_fractional_ttl(cls, v):
        """Older stores may hold fractional millisecond timestamps."""
        if isinstance(v, float) and math.isfinite(v):
            return math.floor(v)
        return v

    def to_payload(self) -> Dict[str, Any]:
        """Convert to the dict written to disk; ``ttl`` is omitted when unset."""
        payload = {"key": self.key, "value": self.value}
        if self.ttl is not None:
            payload["ttl"] = self.ttl
        return payload


class ReadStatus(str, Enum):
    """Outcome of reading a single record file."""
    OK = "ok"
    ABSENT = "absent"      # No file at the location
    CORRUPT = "corrupt"    # File present but not a valid record


@dataclass
class ReadResult:
    """Result of RecordStore.read()."""
    status: ReadStatus
    path: str
    record: Optional[Record] = None
    reason: Optional[str] = None


@dataclass
class WriteResult:
    """Descriptor of a written record."""
    path: str
    record: Record

    def to_dict(self) -> Dict[str, Any]:
        return {"file": self.path, "content": self.record.to_payload()}


@dataclass
class RemovalResult:
    """Descriptor of a delete; ``existed`` is False when there was no file."""
    path: str
    removed: bool
    existed: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"file": self.path, "removed": self.removed, "existed": self.existed}
