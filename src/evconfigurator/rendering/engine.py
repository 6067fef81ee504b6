# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import dataclasses
import logging
from collections.abc import Mapping
from functools import cache
from pathlib import Path
from typing import Any, Optional

import yaml
from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from evconfigurator.errors import RenderError
from evconfigurator.rendering.functions import FUNCTIONS
from evconfigurator.templates.modbus import ALL_MODBUS_KEYS, interface_options, modbus_values
from evconfigurator.templates.model import PARAM_MODBUS, DefaultsContext, Template, format_value

logger = logging.getLogger(__name__)

_BASE_DIR = Path(__file__).resolve().parent
_INCLUDES_DIR = (_BASE_DIR / "includes").resolve()
_PROXY_TEMPLATE = "proxy.yaml.j2"
_CONFIGURE_TEMPLATE = "configure.yaml.j2"

_NULL_TAG = "tag:yaml.org,2002:null"


def _build_environment(search_paths: list[str]) -> Environment:
    env = Environment(
        loader=FileSystemLoader(search_paths),
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
    )
    env.globals.update(FUNCTIONS)

    # helm style include: render a named fragment against data and splice the text inline
    def include(name: str, data: Any = None) -> str:
        tmpl = env.select_template([name, f"{name}.yaml.j2"])
        if isinstance(data, Mapping):
            ctx = dict(data)
            ctx.setdefault("values", data)
        else:
            ctx = {"values": data}
        return tmpl.render(ctx)

    env.globals["include"] = include
    return env


@cache
def get_environment() -> Environment:
    """Jinja2 environment for render bodies, searching the built-in fragments."""
    return _build_environment([str(_INCLUDES_DIR), str(_BASE_DIR)])


def yaml_quote(value: Any) -> str:
    """
    Quote a value for use as a YAML scalar.

    The value is kept plain if YAML reads it back as the same text, otherwise it
    is single quoted. Multi-digit values with a leading zero are always quoted
    so that e.g. `0815` stays a string.
    Multi-line text is double quoted with escaped line breaks.
    """
    text = format_value(value)
    if "\n" in text or "\r" in text:
        return yaml.safe_dump(text, default_style='"', width=float("inf")).rstrip("\n")
    try:
        node = yaml.compose(f"key: {text}")
    except yaml.YAMLError:
        node = None

    plain = False
    if isinstance(node, yaml.MappingNode) and len(node.value) == 1:
        scalar = node.value[0][1]
        if isinstance(scalar, yaml.ScalarNode) and scalar.value == text:
            plain = not (scalar.tag == _NULL_TAG and text)

    if plain and not (len(text) > 1 and text.startswith("0")):
        return text
    return "'{}'".format(text.replace("'", "''"))


def _render_source(source: str, data: dict[str, Any], label: str) -> str:
    env = get_environment()
    try:
        tmpl = env.from_string(source)
        return tmpl.render(data).strip()
    except (TemplateError, TypeError, ValueError) as exc:
        raise RenderError(f"Failed to render {label}: {exc}") from exc


def _render_file(name: str, data: dict[str, Any]) -> str:
    env = get_environment()
    try:
        return env.get_template(name).render(data).strip()
    except (TemplateError, TypeError, ValueError) as exc:
        raise RenderError(f"Failed to render {name}: {exc}") from exc


def render_proxy(
    template: Template,
    values: Optional[Mapping[str, Any]] = None,
    include_description: bool = False,
    name: Optional[str] = None,
) -> str:
    """
    Render the short `type: template` reference of a device.

    Params without value, default and example are dropped unless required. Each
    kept param shows its value, else its default, else its example. Modbus
    interface keys are emitted after the `modbus` param when a variant was chosen.

    Args:
        template: Template to reference
        values: Operator provided values keyed by param name
        include_description: Prefix the output with the template description as comment
        name: Optional device name rendered as first key

    Returns:
        Stripped YAML text
    """
    values = dict(values or {})
    params = [dataclasses.replace(p) for p in template.params]
    for p in params:
        if p.name in values:
            p.value = format_value(values[p.name])

    modbus_entries: list[dict[str, str]] = []
    if interface_options(template.modbus_choices()) and values.get(PARAM_MODBUS):
        expanded = {k: format_value(v) for k, v in values.items()}
        interface = modbus_values(template, expanded)
        modbus_entries = [{"name": key, "value": yaml_quote(expanded[key])} for key in interface.keys]

    entries: list[dict[str, str]] = []
    for p in params:
        if p.name in ALL_MODBUS_KEYS and modbus_entries:
            continue
        if not (p.value or p.default or p.example or p.required):
            continue
        entries.append({"name": p.name, "value": yaml_quote(p.value or p.default or p.example)})
        if p.name == PARAM_MODBUS:
            entries.extend(modbus_entries)

    data = {
        "template": template.template,
        "params": entries,
        "name": name or "",
        "description": template.description if include_description else "",
    }
    return _render_file(_PROXY_TEMPLATE, data)


def render_result(
    template: Template,
    context: DefaultsContext = DefaultsContext.CONFIG,
    other: Optional[Mapping[str, Any]] = None,
    name: Optional[str] = None,
) -> tuple[str, dict[str, str]]:
    """
    Render the fully expanded device configuration from the template body.

    Values start from the template defaults for ``context``, caller values win
    on key collision, the modbus sub-schema is expanded and every value is
    YAML quoted before the body is executed.

    Returns:
        Tuple of the stripped YAML text and the resolved values
    """
    values: dict[str, Any] = dict(template.defaults(context))
    for key, value in (other or {}).items():
        values[key] = format_value(value)

    modbus_values(template, values)

    resolved = {key: yaml_quote(value) for key, value in values.items()}

    body = template.render
    if name:
        resolved["name"] = yaml_quote(name)
        body = "name: {{ name }}\n" + body

    ctx: dict[str, Any] = dict(resolved)
    ctx.setdefault("values", resolved)

    logger.debug("Rendering result of template %s with %d values", template.template, len(resolved))
    text = _render_source(body, ctx, f"template {template.template}")
    return text, resolved


def render_configuration(data: dict[str, Any]) -> str:
    """Render the complete configuration document from the session aggregate."""
    return _render_file(_CONFIGURE_TEMPLATE, data)
