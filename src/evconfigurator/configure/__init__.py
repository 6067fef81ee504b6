# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from .answers import AnswersEebusIntegration, AnswersProvider
from .categories import DeviceCategory, DeviceClass, category_for_usage
from .collaborators import (
    DeviceTester,
    DeviceTestResult,
    EebusIntegration,
    FixedResultTester,
    Question,
    ValueProvider,
)
from .controller import AcquisitionState, DeviceAcquisitionController
from .session import Device, Loadpoint, Session, Site
from .wizard import Wizard

__all__ = [
    "AcquisitionState",
    "AnswersEebusIntegration",
    "AnswersProvider",
    "Device",
    "DeviceAcquisitionController",
    "DeviceCategory",
    "DeviceClass",
    "DeviceTestResult",
    "DeviceTester",
    "EebusIntegration",
    "FixedResultTester",
    "Loadpoint",
    "Question",
    "Session",
    "Site",
    "ValueProvider",
    "Wizard",
    "category_for_usage",
]
