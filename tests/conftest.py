# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Global pytest configuration and fixtures.

This file contains global fixtures and configurations shared across all test modules.
"""

from __future__ import annotations

import argparse
from typing import Any

import pytest

from evconfigurator.cli.main import configure_parser as configure_cli_parser
from evconfigurator.configure import (
    AnswersEebusIntegration,
    AnswersProvider,
    DeviceAcquisitionController,
    DeviceTestResult,
    FixedResultTester,
    Session,
)
from evconfigurator.templates import Template


@pytest.fixture
def cli_parser() -> argparse.ArgumentParser:
    """Pre-configured CLI parser for testing."""
    parser = argparse.ArgumentParser()
    configure_cli_parser(parser)
    return parser


@pytest.fixture
def session() -> Session:
    return Session()


@pytest.fixture
def template_factory():
    """Factory building templates from plain dicts, resolved like catalog templates."""

    def _factory(device_class: str = "meter", **data: Any) -> Template:
        data.setdefault("template", "test-device")
        data.setdefault("description", "Test device")
        template = Template.from_dict(data, device_class=device_class)
        template.resolve_param_base()
        return template

    return _factory


@pytest.fixture
def controller_factory():
    """Factory to build a controller with scripted answers and a fixed or custom tester."""

    def _factory(
        answers: list[Any],
        *,
        tester=None,
        result: DeviceTestResult = DeviceTestResult.valid,
        eebus=None,
        expanded: bool = False,
        advanced: bool = False,
        session: Session | None = None,
    ) -> DeviceAcquisitionController:
        if session is None:
            session = Session(expanded=expanded, advanced=advanced)
        return DeviceAcquisitionController(
            session,
            AnswersProvider(answers),
            tester or FixedResultTester(result),
            eebus=eebus,
        )

    return _factory


@pytest.fixture
def eebus_integration() -> AnswersEebusIntegration:
    return AnswersEebusIntegration({"public": "-----BEGIN CERTIFICATE-----", "private": "-----BEGIN EC KEY-----"})
