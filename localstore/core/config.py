"""Storage configuration with Pydantic v2 settings.

Every field can come from the environment with the ``LOCALSTORE_`` prefix,
e.g. ``LOCALSTORE_DIRECTORY`` or ``LOCALSTORE_TTL_DEFAULT``. Explicit keyword
arguments take precedence over the environment.
"""

import codecs
import math
import os
from pathlib import Path
from typing import Any, Callable, Literal, Optional, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from localstore.constants import (
    DEFAULT_DIRECTORY,
    DEFAULT_ENCODING,
    DEFAULT_SWEEP_INTERVAL_MS,
    DEFAULT_TTL_MS,
    FALSY_SETTING_STRINGS,
)


def _is_unset(v: Any) -> bool:
    if isinstance(v, str):
        return v.strip().lower() in FALSY_SETTING_STRINGS
    return not v


def _as_number(v: Any) -> Optional[float]:
    """Return ``v`` as a finite float, or None when it is not numeric."""
    if isinstance(v, bool):
        return None
    try:
        number = float(v)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


class StorageSettings(BaseSettings):
    """Settings for a single storage engine instance."""

    # Storage Layout
    directory: Path = Field(default=Path(DEFAULT_DIRECTORY))
    encoding: str = Field(default=DEFAULT_ENCODING)

    # Expiry (milliseconds)
    ttl_default: Optional[float] = Field(default=None)
    sweep_interval: Optional[float] = Field(default=DEFAULT_SWEEP_INTERVAL_MS)

    # Corrupt files read as missing when enabled
    forgive_parse_errors: bool = Field(default=False)

    # Diagnostics: False, True, or a callable sink(message, **context)
    logging: Union[bool, Callable[..., Any]] = Field(default=False)

    # Process logging (see core.logging.configure_logging)
    log_level: str = Field(default="INFO")
    log_format: Literal["console", "json"] = Field(default="console")

    @field_validator("directory", mode="before")
    @classmethod
    def resolve_directory(cls, v):
        """Resolve relative directories against the cwd at configuration time."""
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("directory must not be empty")
        path = Path(os.path.normpath(os.path.expanduser(str(v))))
        if not path.is_absolute():
            path = Path(os.getcwd()) / path
        return path

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v):
        """Ensure the encoding names a registered text codec."""
        try:
            return codecs.lookup(v).name
        except LookupError:
            raise ValueError(f"unknown encoding: {v!r}")

    @field_validator("ttl_default", mode="before")
    @classmethod
    def normalize_ttl_default(cls, v):
        """Falsy disables expiry; truthy but unusable falls back to 24 hours."""
        if _is_unset(v):
            return None
        number = _as_number(v)
        if number is None or number <= 0:
            return float(DEFAULT_TTL_MS)
        return number

    @field_validator("sweep_interval", mode="before")
    @classmethod
    def normalize_sweep_interval(cls, v):
        """Falsy disables the sweeper."""
        if _is_unset(v):
            return None
        number = _as_number(v)
        if number is None or number < 0:
            raise ValueError(f"sweep_interval must be a positive number of milliseconds, got {v!r}")
        return number

    model_config = {
        "env_prefix": "LOCALSTORE_",
        "case_sensitive": False,
        "extra": "forbid",
        "arbitrary_types_allowed": True,
    }
