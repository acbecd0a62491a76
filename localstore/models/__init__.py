"""Record model and operation results."""

from localstore.models.record import Record, ReadResult, ReadStatus, RemovalResult, WriteResult

__all__ = ["Record", "ReadResult", "ReadStatus", "RemovalResult", "WriteResult"]
