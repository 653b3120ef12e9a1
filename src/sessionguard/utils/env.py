"""Environment helper utilities."""

from __future__ import annotations

import os
import shlex
from typing import Dict, Optional, Sequence


_FALSE_VALUES = {"0", "false", "no", "off"}


def get_bool_env(name: str, *, default: Optional[bool] = False) -> Optional[bool]:
    """Return True/False for an environment flag, ``default`` when unset or blank."""
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if not value:
        return default
    return value not in _FALSE_VALUES


def get_list_env(name: str, *, default: Sequence[str] | None = None) -> list[str]:
    """
    Read a whitespace-delimited list from the environment.

    Values can be quoted, e.g. `x-client=web "x-note=two words"`.
    """
    raw = os.getenv(name)
    if raw is None:
        return list(default or [])
    value = raw.strip()
    if not value:
        return list(default or [])
    try:
        parsed = shlex.split(value)
    except ValueError:
        parsed = value.split()
    return [item for item in parsed if item]


def get_mapping_env(name: str) -> Dict[str, str]:
    """Parse ``name=value`` pairs from a whitespace-delimited environment list."""
    mapping: Dict[str, str] = {}
    for item in get_list_env(name):
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid entry {item!r} in {name}; expected name=value")
        mapping[key.strip()] = value
    return mapping
