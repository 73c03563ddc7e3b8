"""
Default return-value tables and runtime settings
"""

import collections.abc as cabc
import os
from typing import Optional

from pydantic import BaseModel, Field

# Scalar return types -> factory for the default value
SCALAR_DEFAULTS = {
    bool: lambda: False,
    int: lambda: 0,
    float: lambda: 0.0,
    complex: lambda: 0j,
    str: lambda: "",
    bytes: lambda: b"",
    bytearray: bytearray,
}

# Container return types (bare or parametrized origin) -> empty instance
CONTAINER_DEFAULTS = {
    list: list,
    tuple: tuple,
    set: set,
    frozenset: frozenset,
    dict: dict,
    cabc.Sequence: list,
    cabc.MutableSequence: list,
    cabc.Iterable: list,
    cabc.Collection: list,
    cabc.Set: set,
    cabc.MutableSet: set,
    cabc.Mapping: dict,
    cabc.MutableMapping: dict,
    cabc.Iterator: lambda: iter(()),
    cabc.Generator: lambda: iter(()),
}

ENV_PREFIX = "STUNT_"


class Settings(BaseModel):
    """Runtime switches for verification and the pytest plugin"""
    verify_stub_expectations: bool = False
    max_mismatch_samples: int = Field(default=3, ge=0)
    auto_verify: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from STUNT_* environment variables.

        Unset variables keep their defaults.
        """
        values = {}
        for name in cls.model_fields:
            raw = os.environ.get(ENV_PREFIX + name.upper())
            if raw is not None:
                values[name] = raw
        return cls(**values)


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def configure_settings(**overrides) -> Settings:
    """Replace process-wide settings, starting from the current ones"""
    global _settings
    current = get_settings().model_dump()
    current.update(overrides)
    _settings = Settings(**current)
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None
