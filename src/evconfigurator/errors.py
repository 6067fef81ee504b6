# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Error kinds raised while acquiring devices and rendering configuration.

``recoverable`` errors end the current device addition only; the wizard may
retry or move on to the next category. All others abort the whole session.
"""


class ConfigureError(Exception):
    """Base class for configuration wizard errors."""

    recoverable = False


class NotPresentError(ConfigureError):
    """The operator selected "no device"."""

    recoverable = True


class DeviceInvalidError(ConfigureError):
    """The device test failed and the operator declined to add it anyway."""

    recoverable = True


class RequirementUnmetError(ConfigureError):
    """A sponsorship, HEMS or EEBUS requirement was declined or failed."""


class RenderError(ConfigureError):
    """A template could not be parsed or executed."""


class CollectionAbortedError(ConfigureError):
    """The value provider aborted the session."""
