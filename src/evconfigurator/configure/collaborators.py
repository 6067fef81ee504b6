# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Interfaces of the collaborators the device acquisition relies on.

Prompting, device testing and EEBUS certificate handling are provided by the
caller. All calls are blocking; the controller only observes the returned
value or the raised exception.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from evconfigurator.configure.categories import DeviceCategory
from evconfigurator.templates.model import ParamValueType, Template


@dataclass(frozen=True)
class Question:
    """
    A single value requested from the operator.

    Attributes:
        label (str): short label, usually the param name
        key (str): name the answer is stored under
        help (str): help text
        default (Any): value used when the operator gives no input
        example (str): example shown to the operator
        required (bool): an empty answer is not accepted
        mask (bool): the answer is secret
        value_type (ParamValueType): declared type of the answer
    """

    label: str
    key: str = ""
    help: str = ""
    default: Any = ""
    example: str = ""
    required: bool = False
    mask: bool = False
    value_type: ParamValueType = ParamValueType.string


class ValueProvider(ABC):
    """Answers questions; raises CollectionAbortedError to abort the session."""

    @abstractmethod
    def ask_value(self, question: Question) -> str:
        ...

    @abstractmethod
    def ask_yes_no(self, label: str, key: str = "") -> bool:
        ...

    @abstractmethod
    def ask_choice(self, label: str, choices: list[str], keys: Optional[list[str]] = None) -> int:
        """Return the index of the selected choice; ``keys`` are machine readable aliases of ``choices``."""


class DeviceTestResult(Enum):
    valid = "valid"
    valid_with_meter = "valid-with-meter"  # charger also reports a meter
    invalid = "invalid"


class DeviceTester(ABC):
    """Probes a device with the collected values; may raise on transport errors."""

    @abstractmethod
    def test(self, category: DeviceCategory, template: Template, values: dict[str, Any]) -> DeviceTestResult:
        ...


class FixedResultTester(DeviceTester):
    """Tester that reports the same result for every device, used when live tests are skipped."""

    def __init__(self, result: DeviceTestResult = DeviceTestResult.valid):
        self.result = result

    def test(self, category: DeviceCategory, template: Template, values: dict[str, Any]) -> DeviceTestResult:
        return self.result


class EebusIntegration(ABC):
    """Certificate issuance and pairing for EEBUS devices."""

    @abstractmethod
    def issue_certificate(self) -> dict[str, Any]:
        """Create the certificate structure stored in the `eebus` configuration stanza."""

    @abstractmethod
    def configure(self, certificate: dict[str, Any]) -> None:
        """Activate the certificate for the pairing that follows."""

    @abstractmethod
    def pair(self, template: Template) -> None:
        """Wait until the operator confirmed pairing of the device."""
