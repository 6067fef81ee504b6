# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Template package: device template model, modbus sub-schema and catalog.
"""

from .catalog import by_class, by_name, filter_by_usage, load_catalog, sort_for_selection
from .modbus import ModbusInterface, interface_options, modbus_values
from .model import (
    DefaultsContext,
    GuidedSetup,
    LinkedTemplate,
    Param,
    ParamValue,
    ParamValueType,
    Requirements,
    Template,
    TextLanguage,
)

__all__ = [
    "by_class",
    "by_name",
    "filter_by_usage",
    "load_catalog",
    "sort_for_selection",
    "ModbusInterface",
    "interface_options",
    "modbus_values",
    "DefaultsContext",
    "GuidedSetup",
    "LinkedTemplate",
    "Param",
    "ParamValue",
    "ParamValueType",
    "Requirements",
    "Template",
    "TextLanguage",
]
