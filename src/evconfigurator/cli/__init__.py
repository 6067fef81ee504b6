# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
CLI module for evconfigurator.

Python API usage:
    from evconfigurator.cli import load_settings

    settings = load_settings("settings.yaml", ["lang=en"], {"expanded": True})
"""

from evconfigurator.cli.api import WizardSettings, load_settings, parse_cli_params

__all__ = [
    "WizardSettings",
    "load_settings",
    "parse_cli_params",
]
