# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Template catalog.

Definitions live in ``definitions/<class>/<template>.yaml``. The directory name
is the device class the template is filed under.
"""

from __future__ import annotations

import logging
import os
from functools import cache
from pathlib import Path
from typing import Optional

import yaml

from evconfigurator.templates.model import Template
from evconfigurator.utils import normalize_name

logger = logging.getLogger(__name__)

_BASE_DIR = Path(__file__).resolve().parent
DEFAULT_CATALOG_DIR = str((_BASE_DIR / "definitions").resolve())

TEMPLATE_CLASSES = ("meter", "charger", "vehicle")


def _load_template_file(path: str, device_class: str) -> Template:
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    try:
        return Template.from_dict(data, device_class=device_class)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid template definition {path}: {exc}") from exc


@cache
def load_catalog(catalog_dir: str = DEFAULT_CATALOG_DIR) -> dict[str, list[Template]]:
    """
    Load all template definitions below ``catalog_dir``.

    Args:
        catalog_dir: Directory with one sub directory per device class

    Returns:
        Mapping of device class to templates, in file name order
    """
    if not os.path.isdir(catalog_dir):
        raise FileNotFoundError(f"Template catalog directory not found: {catalog_dir}")

    catalog: dict[str, list[Template]] = {}
    for device_class in TEMPLATE_CLASSES:
        class_dir = os.path.join(catalog_dir, device_class)
        if not os.path.isdir(class_dir):
            catalog[device_class] = []
            continue
        names = sorted(n for n in os.listdir(class_dir) if n.endswith((".yaml", ".yml")))
        catalog[device_class] = [_load_template_file(os.path.join(class_dir, n), device_class) for n in names]
        logger.debug("Loaded %d %s templates from %s", len(names), device_class, class_dir)
    return catalog


def by_class(device_class: str, catalog_dir: Optional[str] = None) -> list[Template]:
    """Templates of a device class; unknown classes raise ValueError."""
    key = normalize_name(device_class)
    if key not in TEMPLATE_CLASSES:
        raise ValueError(f"Unknown device class '{device_class}'. Supported: {', '.join(TEMPLATE_CLASSES)}")
    templates = load_catalog(catalog_dir or DEFAULT_CATALOG_DIR)[key]
    for t in templates:
        t.resolve_param_base()
    return templates


def by_name(device_class: str, name: str, catalog_dir: Optional[str] = None) -> Template:
    for t in by_class(device_class, catalog_dir):
        if t.template == name:
            return t
    raise ValueError(f"Template '{name}' not found for class '{device_class}'")


def filter_by_usage(templates: list[Template], usage: str) -> list[Template]:
    """Templates offering ``usage`` among their `usage` param choices; no filter when usage is empty."""
    if not usage:
        return list(templates)
    return [t for t in templates if t.has_usage(usage)]


def sort_for_selection(templates: list[Template]) -> list[Template]:
    """Specific devices sorted case-insensitively by description, generic ones after all specific ones."""
    return sorted(templates, key=lambda t: (t.generic, t.description.lower()))
