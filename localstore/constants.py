"""Centralized defaults for the storage engine.

Durations are in milliseconds, matching the TTL values written to disk.
"""

from typing import FrozenSet

# =============================================================================
# STORAGE LAYOUT
# =============================================================================

DEFAULT_DIRECTORY = ".localstore/storage"
DEFAULT_ENCODING = "utf-8"

# Entries starting with this marker are skipped by directory enumeration
HIDDEN_FILE_PREFIX = "."
TEMP_FILE_SUFFIX = ".tmp"

# =============================================================================
# TIME-TO-LIVE
# =============================================================================

# Substituted whenever a TTL is requested but is not a usable value
DEFAULT_TTL_MS = 24 * 60 * 60 * 1000

DEFAULT_SWEEP_INTERVAL_MS = 2 * 60 * 1000

# String spellings treated as "no value" when settings come from the environment
FALSY_SETTING_STRINGS: FrozenSet[str] = frozenset([
    '',
    '0',
    'false',
    'no',
    'off',
    'none',
])
