"""Storage engine services.

- RecordStore: single-file read/write/delete
- ExpirySweeper: background eviction of expired records
- LocalStorage: public key-value API
"""

from .record_store import RecordStore
from .sweeper import ExpirySweeper
from .storage import LocalStorage

__all__ = ["RecordStore", "ExpirySweeper", "LocalStorage"]
