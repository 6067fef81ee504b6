# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Rendering package for device templates and the configuration document.

This module exposes a single import surface so callers do not need to know
where the Jinja2 environment, quoting rules or the function library live.
"""

from .engine import (
    get_environment,
    render_configuration,
    render_proxy,
    render_result,
    yaml_quote,
)
from .functions import FUNCTIONS

__all__ = [
    "FUNCTIONS",
    "get_environment",
    "render_configuration",
    "render_proxy",
    "render_result",
    "yaml_quote",
]
