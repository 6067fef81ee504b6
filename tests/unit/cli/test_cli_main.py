# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import pytest
import yaml

from evconfigurator.cli.main import cli

pytestmark = pytest.mark.unit

ANSWERS = ["none", "demo-meter", "150", "none", "none", "none", "none", "Home"]


@pytest.fixture
def answers_file(tmp_path):
    path = tmp_path / "answers.yaml"
    path.write_text(yaml.safe_dump({"answers": ANSWERS}), encoding="utf-8")
    return path


class TestParser:
    def test_configure_flags_default_to_unset(self, cli_parser):
        args = cli_parser.parse_args(["configure", "--answers", "answers.yaml"])
        assert args.expanded is None
        assert args.advanced is None
        assert args.output is None
        assert args.tester == "valid"

    def test_class_is_validated(self, cli_parser):
        with pytest.raises(SystemExit):
            cli_parser.parse_args(["render-proxy", "--class", "inverter", "--template", "x"])

    def test_repeatable_values(self, cli_parser):
        args = cli_parser.parse_args(
            ["render-result", "--class", "meter", "--template", "t", "--set", "a=1", "--set", "b=2"]
        )
        assert args.values == ["a=1", "b=2"]


class TestCommands:
    def test_list(self, capsys):
        cli(["list", "--class", "meter", "--usage", "grid"])
        out = capsys.readouterr().out
        assert "sma-home-manager" in out
        assert "hems:sma" in out
        assert "demo-charger" not in out

    def test_render_proxy(self, capsys):
        cli(["render-proxy", "--class", "meter", "--template", "sma-home-manager", "--set", "host=192.0.2.9"])
        assert capsys.readouterr().out == "type: template\ntemplate: sma-home-manager\nhost: 192.0.2.9\n"

    def test_render_result(self, capsys):
        cli(["render-result", "--class", "meter", "--template", "eastron-sdm", "--docs", "--set", "modbus=tcpip"])
        assert "uri: 192.0.2.2:502" in capsys.readouterr().out.splitlines()

    def test_non_integer_modbus_id(self):
        with pytest.raises(SystemExit) as exc:
            cli(
                [
                    "render-result",
                    "--class",
                    "meter",
                    "--template",
                    "eastron-sdm",
                    "--set",
                    "modbus=tcpip",
                    "--set",
                    "id=abc",
                ]
            )
        assert exc.value.code == 2

    def test_unknown_template(self):
        with pytest.raises(SystemExit) as exc:
            cli(["render-proxy", "--class", "meter", "--template", "does-not-exist"])
        assert exc.value.code == 2

    def test_configure_writes_output(self, answers_file, tmp_path):
        output = tmp_path / "out" / "evcc.yaml"
        cli(["configure", "--answers", str(answers_file), "--output", str(output)])

        document = yaml.safe_load(output.read_text(encoding="utf-8"))
        assert document["site"] == {"title": "Home", "meters": {"grid": "grid1"}}
        assert document["meters"][0]["template"] == "demo-meter"

    def test_configure_expanded_to_stdout(self, answers_file, capsys):
        cli(["configure", "--answers", str(answers_file), "--expand"])
        document = yaml.safe_load(capsys.readouterr().out)
        assert document["meters"] == [{"name": "grid1", "type": "custom", "power": {"source": "const", "value": 150}}]

    def test_configure_settings_file(self, answers_file, tmp_path, capsys):
        config = tmp_path / "settings.yaml"
        config.write_text("expanded: true\n", encoding="utf-8")
        cli(["configure", "--answers", str(answers_file), "--config", str(config)])
        assert yaml.safe_load(capsys.readouterr().out)["meters"][0]["type"] == "custom"

    def test_configure_aborts_without_answers(self, tmp_path):
        path = tmp_path / "answers.yaml"
        path.write_text("answers: [none]\n", encoding="utf-8")
        with pytest.raises(SystemExit) as exc:
            cli(["configure", "--answers", str(path)])
        assert exc.value.code == 1
