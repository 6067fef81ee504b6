# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
evconfigurator:

Device template resolution and configuration rendering for the setup wizard.
- Template model, base params and the modbus sub-schema (templates/*).
- Proxy and result rendering on top of Jinja2 (rendering/*).
- Device acquisition, session aggregate and wizard loops (configure/*).
"""

__version__ = "0.1.0"
