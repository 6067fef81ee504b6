# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the settings layer of the CLI.
"""

import os

import pytest

from evconfigurator.cli.api import (
    WizardSettings,
    _deep_merge_dicts,
    load_settings,
    parse_cli_params,
)

pytestmark = pytest.mark.unit


def test_parse_cli_params_casts_and_nests():
    params = parse_cli_params(["lang=en", "advanced=true", "nested.key=3", "ignored"])
    assert params == {"lang": "en", "advanced": True, "nested": {"key": 3}}


def test_deep_merge_dicts():
    merged = _deep_merge_dicts({"a": {"b": 1, "c": 2}, "d": 1}, {"a": {"b": 3}, "d": {"e": 1}})
    assert merged == {"a": {"b": 3, "c": 2}, "d": {"e": 1}}


class TestLoadSettings:
    def test_defaults(self):
        assert load_settings() == WizardSettings()

    def test_precedence(self, tmp_path):
        config = tmp_path / "settings.yaml"
        config.write_text("lang: en\nadvanced: true\noutput: file.yaml\nsite_title: Home\n", encoding="utf-8")

        settings = load_settings(
            str(config),
            ["output=inline.yaml", "site_title=Farm"],
            {"output": "flag.yaml", "expanded": None, "advanced": None},
        )

        assert settings.lang == "en"
        assert settings.advanced is True
        assert settings.expanded is False
        assert settings.site_title == "Farm"
        assert settings.output == "flag.yaml"

    def test_catalog_path_is_absolute(self):
        settings = load_settings(inline_overrides=["catalog_path=catalog"])
        assert os.path.isabs(settings.catalog_path)

    def test_unknown_setting(self):
        with pytest.raises(ValueError, match="Unknown settings"):
            load_settings(inline_overrides=["colour=blue"])

    def test_unsupported_language(self):
        with pytest.raises(ValueError, match="Unsupported language"):
            load_settings(inline_overrides=["lang=fr"])

    def test_settings_file_must_be_a_mapping(self, tmp_path):
        config = tmp_path / "settings.yaml"
        config.write_text("- lang\n", encoding="utf-8")
        with pytest.raises(ValueError, match="YAML mapping"):
            load_settings(str(config))

    def test_missing_settings_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_settings(str(tmp_path / "missing.yaml"))
