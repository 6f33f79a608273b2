from __future__ import annotations

import os
from typing import Mapping, Optional

EnvMapping = Mapping[str, str]

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _lookup(name: str, env: EnvMapping | None) -> Optional[str]:
    mapping = env if env is not None else os.environ
    return mapping.get(name) or None


def get_str(name: str, default: str | None = None, *, env: EnvMapping | None = None) -> str | None:
    value = _lookup(name, env)
    if value is None:
        return default
    return value


def get_bool(name: str, default: bool, *, env: EnvMapping | None = None) -> bool:
    value = _lookup(name, env)
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return default


__all__ = ["EnvMapping", "get_bool", "get_str"]
