"""Storage engine exception hierarchy."""


class StorageError(Exception):
    """Base exception for all storage errors."""


class StorageIOError(StorageError):
    """Filesystem failure other than a missing file."""

    def __init__(self, path: str, operation: str, cause: BaseException):
        self.path = path
        self.operation = operation
        self.cause = cause
        super().__init__(f"[{operation}] {path}: {cause}")


class CorruptRecordError(StorageError):
    """A record file does not decode to a valid record."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path} does not look like a valid storage file: {reason}")


class ConfigurationError(StorageError):
    """Invalid storage settings or unusable codec."""


class InvalidKeyError(StorageError, ValueError):
    """Keys must be non-empty strings."""

    def __init__(self, key):
        self.key = key
        super().__init__(f"storage keys must be non-empty strings, got {key!r}")
