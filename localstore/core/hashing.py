"""Key to filename mapping.

Each key is stored in its own file named by the MD5 hex digest of the key,
so every operation derives its location without a central index.
"""

import hashlib
from pathlib import Path
from typing import Union


def hash_key(key: str) -> str:
    """Return the 32-character lowercase hex digest for ``key``."""
    return hashlib.md5(key.encode("utf-8")).hexdigest()


def locate(directory: Union[str, Path], key: str) -> Path:
    """Return the record file location for ``key`` inside ``directory``."""
    return Path(directory) / hash_key(key)
