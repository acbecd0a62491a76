"""TTL computation and expiry checks.

TTLs are stored as absolute expiry timestamps in epoch milliseconds, computed
once at write time.
"""

import math
import time
from datetime import datetime, timedelta
from typing import Any, Optional

from localstore.constants import DEFAULT_TTL_MS
from localstore.models.record import Record


class _Unset:
    """Marker for a TTL argument that was not passed at all."""

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def calc_ttl(ttl: Any = UNSET, ttl_default: Optional[float] = None) -> Optional[int]:
    """Compute the absolute expiry for a write.

    Args:
        ttl: Per-call TTL. UNSET falls back to ``ttl_default``; other falsy
            values (None, False, 0) mean "never expires". A datetime is a point
            in time, a number or timedelta is a duration in milliseconds.
        ttl_default: Configured default duration in milliseconds, or None

    Returns:
        Absolute expiry in epoch milliseconds, or None when it never expires
    """
    if ttl is UNSET:
        ttl = ttl_default
    if not ttl:
        return None

    now = now_ms()

    if isinstance(ttl, datetime):
        expires_at = int(ttl.timestamp() * 1000)
        # A point in time that already passed gets the default duration
        return expires_at if expires_at > now else now + DEFAULT_TTL_MS

    if isinstance(ttl, timedelta):
        duration = ttl.total_seconds() * 1000
    elif isinstance(ttl, bool):
        duration = None
    else:
        try:
            duration = float(ttl)
        except (TypeError, ValueError):
            duration = None

    if duration is None or not math.isfinite(duration) or duration <= 0:
        return now + DEFAULT_TTL_MS
    return now + int(duration)


def is_expired(record: Optional[Record]) -> bool:
    """True when ``record`` carries a TTL that is in the past."""
    return bool(record is not None and record.ttl and record.ttl < now_ms())
