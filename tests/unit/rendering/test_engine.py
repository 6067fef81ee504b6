# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for proxy and result rendering.
"""

import pytest
import yaml

from evconfigurator.errors import RenderError
from evconfigurator.rendering import render_proxy, render_result, yaml_quote
from evconfigurator.templates import catalog
from evconfigurator.templates.model import DefaultsContext, ParamValue, ParamValueType

pytestmark = pytest.mark.unit


class TestYamlQuote:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("abc", "abc"),
            ("192.0.2.2", "192.0.2.2"),
            ("1000", "1000"),
            ("true", "true"),
            (True, "true"),
            ("0815", "'0815'"),
            ("0", "0"),
            ("null", "'null'"),
            ("a: b", "'a: b'"),
            ("#tag", "'#tag'"),
            (" padded", "' padded'"),
            ("'q", "'''q'"),
            ("", ""),
            (ParamValue(ParamValueType.number, 502), "502"),
        ],
    )
    def test_quoting(self, value, expected):
        assert yaml_quote(value) == expected

    @pytest.mark.parametrize("text", ["line1\nline2", "a: b\n  'c'\n", "crlf\r\nend"])
    def test_multi_line_text_keeps_line_breaks(self, text):
        quoted = yaml_quote(text)
        assert quoted.startswith('"')
        assert yaml.safe_load(f"key: {quoted}") == {"key": text}


class TestRenderProxy:
    def test_grid_meter_without_values_shows_only_host_example(self):
        template = catalog.by_name("meter", "sma-home-manager")
        text = render_proxy(template, {})
        assert text == "type: template\ntemplate: sma-home-manager\nhost: 192.0.2.2"
        assert "usage" not in text

    def test_name_and_description(self):
        template = catalog.by_name("meter", "sma-home-manager")
        text = render_proxy(template, {"usage": "grid"}, include_description=True, name="grid1")
        assert text.splitlines() == [
            "# SMA Sunny Home Manager 2.0",
            "name: grid1",
            "type: template",
            "template: sma-home-manager",
            "usage: grid",
            "host: 192.0.2.2",
        ]

    def test_value_then_default_then_example(self, template_factory):
        template = template_factory(
            params=[
                {"name": "a", "default": "D", "example": "E"},
                {"name": "b", "example": "E"},
                {"name": "c", "default": "D", "example": "E"},
            ]
        )
        text = render_proxy(template, {"c": "V"})
        assert text.splitlines()[2:] == ["a: D", "b: E", "c: V"]

    def test_empty_params_are_omitted_unless_required(self, template_factory):
        template = template_factory(params=[{"name": "optional"}, {"name": "needed", "required": True}])
        lines = [line.strip() for line in render_proxy(template).splitlines()]
        assert "needed:" in lines
        assert not any(line.startswith("optional") for line in lines)

    def test_values_are_quoted(self, template_factory):
        template = template_factory(params=[{"name": "pin"}])
        assert render_proxy(template, {"pin": "0815"}).splitlines()[-1] == "pin: '0815'"

    def test_multi_line_value_survives_reload(self, template_factory):
        template = template_factory(params=[{"name": "note"}])
        document = yaml.safe_load(render_proxy(template, {"note": "line1\nline2"}))
        assert document["note"] == "line1\nline2"

    def test_template_is_not_mutated(self, template_factory):
        template = template_factory(params=[{"name": "host", "example": "192.0.2.2"}])
        render_proxy(template, {"host": "192.0.2.9"})
        assert template.params[0].value == ""

    def test_modbus_keys_follow_modbus_param(self):
        template = catalog.by_name("meter", "eastron-sdm")
        values = {
            "usage": ParamValue.from_raw("grid"),
            "modbus": ParamValue.from_raw("tcpip"),
            "id": ParamValue(ParamValueType.number, 2),
            "host": ParamValue.from_raw("192.0.2.5"),
            "port": ParamValue(ParamValueType.number, 502),
        }
        text = render_proxy(template, values, name="grid1")
        assert text.splitlines() == [
            "name: grid1",
            "type: template",
            "template: eastron-sdm",
            "usage: grid",
            "modbus: tcpip",
            "id: 2",
            "host: 192.0.2.5",
            "port: 502",
        ]

    def test_bridged_serial_proxy_drops_serial_keys(self):
        template = catalog.by_name("meter", "eastron-sdm")
        text = render_proxy(template, {"modbus": "rs485tcpip", "device": "/dev/ttyUSB1", "host": "192.0.2.5"})
        keys = [line.split(":")[0] for line in text.splitlines()]
        assert keys[2:] == ["modbus", "id", "host", "port", "rtu"]


class TestRenderResult:
    def test_config_defaults(self):
        text, resolved = render_result(catalog.by_name("meter", "demo-meter"))
        assert text == "type: custom\npower:\n  source: const\n  value: 0"
        assert resolved["power"] == "0"

    def test_docs_context_uses_examples(self):
        text, _ = render_result(catalog.by_name("meter", "demo-meter"), DefaultsContext.DOCS)
        assert text.endswith("value: 1000")

    def test_caller_values_win(self):
        text, resolved = render_result(catalog.by_name("meter", "demo-meter"), DefaultsContext.DOCS, {"power": 500})
        assert text.endswith("value: 500")
        assert resolved["power"] == "500"

    def test_unspecified_keys_fall_back_to_defaults(self):
        _, resolved = render_result(catalog.by_name("vehicle", "fiat"), DefaultsContext.CONFIG, {"user": "me"})
        assert resolved["user"] == "me"
        assert resolved["capacity"] == "42"

    def test_name_is_rendered_first(self):
        text, _ = render_result(catalog.by_name("meter", "demo-meter"), name="pv2")
        assert text.splitlines()[0] == "name: pv2"

    @pytest.mark.parametrize(
        "interface,expected",
        [
            ("rs485serial", ["id: 1", "device: /dev/ttyUSB0", "baudrate: 9600", "comset: 8N1"]),
            ("rs485tcpip", ["id: 1", "uri: 192.0.2.2:502", "rtu: true"]),
            ("tcpip", ["id: 1", "uri: 192.0.2.2:502"]),
        ],
    )
    def test_modbus_include(self, interface, expected):
        text, resolved = render_result(
            catalog.by_name("meter", "eastron-sdm"), DefaultsContext.DOCS, {"modbus": interface}
        )
        assert text.splitlines() == ["type: mbmd", "model: sdm", *expected, "power: Power", "energy: Sum"]
        assert resolved["modbus"] == interface

    def test_device_specific_serial_defaults(self):
        text, _ = render_result(catalog.by_name("meter", "abb-b23"), DefaultsContext.DOCS, {"modbus": "rs485serial"})
        assert "comset: 8E1" in text.splitlines()
        assert "baudrate: 9600" in text.splitlines()

    def test_nested_include_is_indented(self):
        text, _ = render_result(
            catalog.by_name("meter", "sungrow-hybrid"),
            DefaultsContext.CONFIG,
            {"usage": "battery", "modbus": "tcpip", "capacity": "9.6"},
        )
        lines = text.splitlines()
        assert lines[:5] == ["type: custom", "power:", "  source: modbus", "  id: 1", "  uri: 192.0.2.2:502"]
        assert "capacity: 9.6" in lines
        assert "soc:" in lines

    def test_undefined_variable(self, template_factory):
        template = template_factory(params=[{"name": "host"}], render="uri: {{ hots }}")
        with pytest.raises(RenderError, match="test-device"):
            render_result(template)

    def test_syntax_error(self, template_factory):
        template = template_factory(params=[], render="{% if %}")
        with pytest.raises(RenderError):
            render_result(template)

    def test_non_integer_modbus_id(self):
        with pytest.raises(ValueError, match="not an integer"):
            render_result(
                catalog.by_name("meter", "eastron-sdm"), DefaultsContext.CONFIG, {"modbus": "tcpip", "id": "abc"}
            )
