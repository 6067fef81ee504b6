# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import argparse
import logging
import os
import sys
from typing import Optional

from prettytable import PrettyTable

from evconfigurator import __version__
from evconfigurator.cli.api import load_settings
from evconfigurator.configure import (
    AnswersEebusIntegration,
    AnswersProvider,
    DeviceAcquisitionController,
    DeviceTestResult,
    FixedResultTester,
    Session,
    Wizard,
)
from evconfigurator.errors import ConfigureError
from evconfigurator.rendering import render_proxy, render_result
from evconfigurator.templates import DefaultsContext, catalog
from evconfigurator.utils import load_yaml_payload

logger = logging.getLogger(__name__)

_USAGE_EXAMPLES = """
Examples:
# List all meter templates usable as grid meter
evconfigurator list --class meter --usage grid

# Template reference of a device
evconfigurator render-proxy --class meter --template sma-home-manager --set host=192.0.2.10

# Fully expanded device configuration with example values
evconfigurator render-result --class meter --template eastron-sdm --docs --set modbus=rs485serial

# Non-interactive wizard run
evconfigurator configure --answers answers.yaml --output evcc.yaml
"""


def _build_common_cli_parser() -> argparse.ArgumentParser:
    common_parser = argparse.ArgumentParser(add_help=False)
    common_parser.add_argument("--debug", action="store_true", help="Enable debug mode.")
    common_parser.add_argument(
        "--catalog",
        type=str,
        default=None,
        help="Template catalog directory with one sub directory per device class. Default: built-in catalog.",
    )
    return common_parser


def _add_template_arguments(parser):
    parser.add_argument(
        "--class",
        dest="device_class",
        choices=list(catalog.TEMPLATE_CLASSES),
        required=True,
        help="Device class of the template.",
    )
    parser.add_argument("--template", type=str, required=True, help="Template identifier.")
    parser.add_argument(
        "--set",
        dest="values",
        action="append",
        default=None,
        metavar="KEY=VALUE",
        help="Param value (repeatable).",
    )


def _add_configure_arguments(parser):
    parser.add_argument("--answers", type=str, required=True, help="YAML answers document replayed by the wizard.")
    parser.add_argument("--config", type=str, default=None, help="YAML file with wizard settings.")
    parser.add_argument(
        "--set",
        dest="settings",
        action="append",
        default=None,
        metavar="KEY=VALUE",
        help="Inline settings overrides (repeatable), e.g. lang=en.",
    )
    parser.add_argument(
        "--expand",
        dest="expanded",
        action="store_true",
        default=None,
        help="Write fully rendered device configuration instead of template references.",
    )
    parser.add_argument("--advanced", action="store_true", default=None, help="Ask advanced params as well.")
    parser.add_argument("--output", type=str, default=None, help="Output file. Default: stdout.")
    parser.add_argument(
        "--tester",
        choices=[r.value for r in DeviceTestResult],
        default=DeviceTestResult.valid.value,
        help="Result reported for every device test. Default: valid.",
    )


def configure_parser(parser):
    common_cli_parser = _build_common_cli_parser()
    subparsers = parser.add_subparsers(dest="mode", required=True)

    list_parser = subparsers.add_parser(
        "list",
        parents=[common_cli_parser],
        help="List device templates.",
        description="List device templates in selection order.",
    )
    list_parser.add_argument(
        "--class", dest="device_class", choices=list(catalog.TEMPLATE_CLASSES), default=None, help="Device class."
    )
    list_parser.add_argument("--usage", type=str, default=None, help="Only templates offering this usage.")

    proxy_parser = subparsers.add_parser(
        "render-proxy",
        parents=[common_cli_parser],
        help="Render the template reference of a device.",
        description="Render the short `type: template` reference of a device.",
    )
    _add_template_arguments(proxy_parser)
    proxy_parser.add_argument(
        "--description", action="store_true", help="Prefix the output with the template description."
    )

    result_parser = subparsers.add_parser(
        "render-result",
        parents=[common_cli_parser],
        help="Render the fully expanded device configuration.",
        description="Render the fully expanded device configuration from the template body.",
    )
    _add_template_arguments(result_parser)
    result_parser.add_argument(
        "--docs", action="store_true", help="Use example values for params without value (documentation mode)."
    )

    configure_subparser = subparsers.add_parser(
        "configure",
        parents=[common_cli_parser],
        help="Build a complete configuration from an answers document.",
        description="Run the configuration wizard non-interactively from a scripted answers document.",
    )
    _add_configure_arguments(configure_subparser)


def _parse_values(items: Optional[list[str]]) -> dict[str, str]:
    values: dict[str, str] = {}
    for item in items or []:
        if "=" not in item:
            raise ValueError(f"Invalid value '{item}', expected KEY=VALUE")
        key, val = item.split("=", 1)
        values[key.strip()] = val
    return values


def _write_output(path: str, text: str) -> None:
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
    logger.info("Configuration written to %s", path)


def _run_list_mode(args):
    classes = [args.device_class] if args.device_class else list(catalog.TEMPLATE_CLASSES)
    table = PrettyTable()
    table.field_names = ["Class", "Template", "Description", "Usage", "Requirements", "Generic"]
    table.align = "l"
    for device_class in classes:
        templates = catalog.by_class(device_class, args.catalog)
        if args.usage:
            templates = catalog.filter_by_usage(templates, args.usage.lower())
        for t in catalog.sort_for_selection(templates):
            requirements = []
            if t.requirements.sponsorship:
                requirements.append("sponsorship")
            if t.requirements.hems:
                requirements.append(f"hems:{t.requirements.hems}")
            if t.requirements.eebus:
                requirements.append("eebus")
            table.add_row(
                [
                    device_class,
                    t.template,
                    t.description,
                    ",".join(t.usages()),
                    ",".join(requirements),
                    "yes" if t.generic else "",
                ]
            )
    print(table)


def _run_render_proxy_mode(args):
    template = catalog.by_name(args.device_class, args.template, args.catalog)
    print(render_proxy(template, _parse_values(args.values), include_description=args.description))


def _run_render_result_mode(args):
    template = catalog.by_name(args.device_class, args.template, args.catalog)
    context = DefaultsContext.DOCS if args.docs else DefaultsContext.CONFIG
    text, _ = render_result(template, context, _parse_values(args.values))
    print(text)


def _run_configure_mode(args):
    settings = load_settings(
        args.config,
        args.settings,
        {
            "expanded": args.expanded,
            "advanced": args.advanced,
            "output": args.output,
            "catalog_path": args.catalog,
        },
    )
    document = load_yaml_payload(args.answers)
    session = Session(
        expanded=settings.expanded,
        advanced=settings.advanced,
        lang=settings.lang,
        site_title=settings.site_title,
    )
    controller = DeviceAcquisitionController(
        session,
        AnswersProvider.from_document(document),
        FixedResultTester(DeviceTestResult(args.tester)),
        eebus=AnswersEebusIntegration.from_document(document),
        catalog_dir=settings.catalog_path,
    )
    text = Wizard(controller).run() + "\n"
    if settings.output:
        _write_output(settings.output, text)
    else:
        print(text, end="")


def main(args):
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(levelname)s %(asctime)s %(filename)s:%(lineno)d] %(message)s",
    )
    logger.debug(f"evconfigurator version: {__version__}")

    handlers = {
        "list": _run_list_mode,
        "render-proxy": _run_render_proxy_mode,
        "render-result": _run_render_result_mode,
        "configure": _run_configure_mode,
    }
    handler = handlers.get(args.mode)
    if handler is None:
        raise SystemExit(f"Unsupported mode: {args.mode}")

    try:
        handler(args)
    except ConfigureError as exc:
        logger.error("%s", exc)
        raise SystemExit(1) from exc
    except (FileNotFoundError, ValueError, TypeError) as exc:
        logger.error("%s", exc)
        raise SystemExit(2) from exc


def cli(argv: Optional[list[str]] = None):
    parser = argparse.ArgumentParser(
        prog="evconfigurator",
        description="Device template rendering and configuration wizard",
        epilog=_USAGE_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    configure_parser(parser)
    args = parser.parse_args(argv)
    main(args)


if __name__ == "__main__":
    cli(sys.argv[1:])
