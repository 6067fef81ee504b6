# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Shared helpers for evconfigurator modules."""

from __future__ import annotations

from typing import Any, Optional

import yaml


def normalize_name(value: Optional[str], default: str = "") -> str:
    """Normalize identifiers (classes, usages, choices) to lowercase strings with a fallback."""
    if value:
        return str(value).strip().lower()
    return default


_TRUE_STRINGS = {"true", "1", "yes", "y", "ja", "j"}
_FALSE_STRINGS = {"false", "0", "no", "n", "nein", ""}


def coerce_bool(value: Optional[Any], strict: bool = False) -> Optional[bool]:
    """
    Best-effort conversion of user input into booleans.

    With ``strict`` set, values that are not a recognized boolean spelling
    yield None instead of their truthiness.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str) or (strict and isinstance(value, int)):
        lowered = str(value).strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    if strict:
        return None
    return bool(value)


def coerce_int(value: Optional[Any]) -> Optional[int]:
    """Convert values to ints while swallowing Type/Value errors."""
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def coerce_float(value: Optional[Any]) -> Optional[float]:
    """Convert values to floats while swallowing Type/Value errors."""
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def cast_literal(s: str) -> Any:
    """
    Lightweight casting via YAML loader to get bool/int/float.

    Args:
        s: String value to cast

    Returns:
        Casted value (bool, int, float, or original string)
    """
    try:
        return yaml.safe_load(s)
    except yaml.YAMLError:
        return s


def load_yaml_payload(path: str) -> Any:
    with open(path, encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}
