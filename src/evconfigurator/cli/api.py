# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Settings layer of the command line interface.

Wizard settings are collected from, lowest to highest priority: built-in
defaults, a YAML settings file, inline dotted ``KEY=VALUE`` overrides and
explicit command line flags.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass
from typing import Any, Optional

import yaml

from evconfigurator.utils import cast_literal, coerce_bool

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = ("de", "en")


@dataclass
class WizardSettings:
    """
    Settings of one wizard run.

    Attributes:
        lang (str): language of help texts, `de` or `en`
        advanced (bool): ask advanced params as well
        expanded (bool): write fully rendered device configuration instead of template references
        catalog_path (str | None): template catalog directory, the built-in catalog if unset
        output (str): file the configuration is written to, stdout if empty
        site_title (str): default title of the site
    """

    lang: str = "de"
    advanced: bool = False
    expanded: bool = False
    catalog_path: Optional[str] = None
    output: str = ""
    site_title: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WizardSettings":
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(unknown)}. Supported: {', '.join(sorted(known))}")

        settings = cls(**data)
        settings.lang = str(settings.lang or "de").lower()
        if settings.lang not in SUPPORTED_LANGUAGES:
            raise ValueError(f"Unsupported language '{settings.lang}'. Supported: {', '.join(SUPPORTED_LANGUAGES)}")
        settings.advanced = bool(coerce_bool(settings.advanced))
        settings.expanded = bool(coerce_bool(settings.expanded))
        settings.output = str(settings.output or "")
        settings.site_title = str(settings.site_title or "")
        if settings.catalog_path:
            settings.catalog_path = os.path.abspath(str(settings.catalog_path))
        return settings


def parse_cli_params(argv: list[str]) -> dict[str, Any]:
    """
    Parse command-line parameters in key=value format.

    Args:
        argv: List of command-line arguments

    Returns:
        Dictionary of parsed parameters
    """
    cli_params: dict[str, Any] = {}
    for item in argv:
        if "=" not in item:
            continue
        key, val = item.split("=", 1)
        _assign_path(cli_params, key.strip(), cast_literal(val))
    return cli_params


def load_settings(
    config_path: Optional[str] = None,
    inline_overrides: Optional[list[str]] = None,
    flags: Optional[dict[str, Any]] = None,
) -> WizardSettings:
    """
    Load wizard settings from a YAML file, inline overrides and explicit flags.

    Args:
        config_path: Optional path to a YAML mapping of settings.
        inline_overrides: Optional list of dotted KEY=VALUE strings.
        flags: Explicitly given command line flags; None values are ignored.
    """
    payload: dict[str, Any] = {}
    if config_path:
        expanded = os.path.abspath(config_path)
        if not os.path.isfile(expanded):
            raise FileNotFoundError(f"Settings file not found: {expanded}")
        with open(expanded, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError("--config must point to a YAML mapping.")
        payload = loaded

    inline_payload = parse_cli_params(inline_overrides or [])
    if inline_payload:
        payload = _deep_merge_dicts(payload, inline_payload)

    explicit = {key: value for key, value in (flags or {}).items() if value is not None}
    if explicit:
        payload = _deep_merge_dicts(payload, explicit)

    settings = WizardSettings.from_dict(payload)
    logger.debug("Wizard settings: %s", settings)
    return settings


def _assign_path(target: dict[str, Any], dotted_key: str, value: Any) -> None:
    parts = [p for p in dotted_key.split(".") if p]
    if not parts:
        return
    node = target
    for segment in parts[:-1]:
        next_node = node.setdefault(segment, {})
        if not isinstance(next_node, dict):
            next_node = {}
            node[segment] = next_node
        node = next_node
    node[parts[-1]] = value


def _deep_merge_dicts(base: dict[str, Any], incoming: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in incoming.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged
