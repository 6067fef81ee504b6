# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Template model for device definitions.

A template describes one device type (meter, charger or vehicle) through an
ordered list of params and a Jinja2 render body. Templates are loaded once
from the catalog and only mutated by ``resolve_param_base``.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from evconfigurator.utils import coerce_bool, coerce_float, coerce_int

logger = logging.getLogger(__name__)

PARAM_USAGE = "usage"
PARAM_MODBUS = "modbus"
PARAM_TITLE = "title"

HEMS_TYPE_SMA = "sma"


class ParamValueType(Enum):
    """
    Declared value type of a template param.
    """

    string = "string"
    number = "number"
    float = "float"
    bool = "bool"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ParamValueType":
        if not value:
            return cls.string
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise ValueError(
                f"Unsupported value type '{value}'. Supported: {', '.join(t.value for t in cls)}"
            ) from exc


class DefaultsContext(Enum):
    """
    Context a template is rendered for; docs and tests fall back to example values.
    """

    CONFIG = "config"
    DOCS = "docs"
    TESTS = "tests"

    @property
    def uses_examples(self) -> bool:
        return self in (DefaultsContext.DOCS, DefaultsContext.TESTS)


@dataclass(frozen=True)
class ParamValue:
    """
    A collected param value, typed once at collection time.

    Attributes:
        value_type (ParamValueType): declared type of the param
        value (str | int | float | bool): resolved value
    """

    value_type: ParamValueType
    value: Any

    @classmethod
    def from_raw(cls, raw: Any, value_type: ParamValueType = ParamValueType.string) -> "ParamValue":
        """Coerce raw operator input into the declared type; empty input stays an empty string."""
        if isinstance(raw, ParamValue):
            return raw
        if raw is None or raw == "":
            return cls(value_type, "")
        if value_type is ParamValueType.number:
            converted = coerce_int(raw)
            if converted is None:
                raise ValueError(f"'{raw}' is not a valid number")
            return cls(value_type, converted)
        if value_type is ParamValueType.float:
            converted = coerce_float(raw)
            if converted is None:
                raise ValueError(f"'{raw}' is not a valid float")
            return cls(value_type, converted)
        if value_type is ParamValueType.bool:
            converted = coerce_bool(raw, strict=True)
            if converted is None:
                raise ValueError(f"'{raw}' is not a valid boolean")
            return cls(value_type, converted)
        return cls(value_type, str(raw))

    def __str__(self) -> str:
        return format_value(self.value)


def format_value(value: Any) -> str:
    """String form of a value as it is written into YAML."""
    if isinstance(value, ParamValue):
        return str(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass
class TextLanguage:
    """Language specific texts; german is the fallback."""

    de: str = ""
    en: str = ""

    @classmethod
    def from_value(cls, value: Any) -> "TextLanguage":
        if isinstance(value, TextLanguage):
            return value
        if isinstance(value, dict):
            return cls(de=str(value.get("de", "") or ""), en=str(value.get("en", "") or ""))
        if value:
            return cls(de=str(value), en=str(value))
        return cls()

    def string(self, lang: str) -> str:
        if lang == "en":
            return self.en
        return self.de


@dataclass
class Requirements:
    hems: str = ""  # HEMS type
    eebus: bool = False  # EEBUS setup is required
    sponsorship: bool = False  # sponsor token is required
    description: TextLanguage = field(default_factory=TextLanguage)  # how the device needs to be prepared
    uri: str = ""  # page with more details about the preparation

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "Requirements":
        data = data or {}
        return cls(
            hems=str(data.get("hems", "") or "").lower(),
            eebus=bool(coerce_bool(data.get("eebus", False))),
            sponsorship=bool(coerce_bool(data.get("sponsorship", False))),
            description=TextLanguage.from_value(data.get("description")),
            uri=str(data.get("uri", "") or ""),
        )


@dataclass
class LinkedTemplate:
    template: str
    usage: str = ""  # grid, pv, battery


@dataclass
class GuidedSetup:
    enable: bool = False
    linked: list[LinkedTemplate] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "GuidedSetup":
        data = data or {}
        linked = [
            LinkedTemplate(template=str(item["template"]), usage=str(item.get("usage", "") or ""))
            for item in data.get("linked", []) or []
        ]
        return cls(enable=bool(coerce_bool(data.get("enable", False))), linked=linked)


@dataclass
class Param:
    """
    A single template parameter.

    Attributes:
        name (str): unique name within the resolved template
        required (bool): operator has to provide a non empty value
        mask (bool): value is secret and masked on input
        advanced (bool): only asked in advanced mode, requires a default
        default (str): value used when nothing else is provided
        example (str): example value, used for docs and tests
        test (str): value used for automated tests
        value (str): operator provided value
        help (TextLanguage): help text shown with the question
        valuetype (ParamValueType): declared value type
        choice (list[str]): usage or interface choices supported by the device
        baudrate (int): device specific default for the serial baudrate
        comset (str): device specific default for the serial framing
    """

    name: str
    required: bool = False
    mask: bool = False
    advanced: bool = False
    default: str = ""
    example: str = ""
    test: str = ""
    value: str = ""
    help: TextLanguage = field(default_factory=TextLanguage)
    valuetype: ParamValueType = ParamValueType.string
    choice: list[str] = field(default_factory=list)
    baudrate: int = 0
    comset: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Param":
        if not data.get("name"):
            raise ValueError(f"Template param without name: {data!r}")

        def _text(key: str) -> str:
            value = data.get(key)
            if value is None:
                return ""
            if isinstance(value, bool):
                return format_value(value)
            return str(value)

        return cls(
            name=str(data["name"]),
            required=bool(coerce_bool(data.get("required", False))),
            mask=bool(coerce_bool(data.get("mask", False))),
            advanced=bool(coerce_bool(data.get("advanced", False))),
            default=_text("default"),
            example=_text("example"),
            test=_text("test"),
            value=_text("value"),
            help=TextLanguage.from_value(data.get("help")),
            valuetype=ParamValueType.parse(data.get("valuetype")),
            choice=[str(c).lower() for c in data.get("choice", []) or []],
            baudrate=coerce_int(data.get("baudrate")) or 0,
            comset=_text("comset"),
        )


# base param sets a template can inherit from via `paramsbase`
PARAM_BASES: dict[str, list[Param]] = {
    "vehicle": [
        Param(name="title"),
        Param(name="user", required=True),
        Param(name="password", required=True, mask=True),
        Param(name="vin", example="W..."),
        Param(name="capacity", default="50", valuetype=ParamValueType.float),
    ],
}


@dataclass
class Template:
    """
    Template describes a device type for use with the configuration wizard and automated tests.
    """

    template: str
    description: str = ""  # user friendly description of the device
    loglevel: str = ""  # implementation type of the device, equal to the `type` in the render body
    requirements: Requirements = field(default_factory=Requirements)
    guidedsetup: GuidedSetup = field(default_factory=GuidedSetup)
    generic: bool = False  # generic device type rather than a product
    paramsbase: str = ""  # base param set to inherit from
    params: list[Param] = field(default_factory=list)
    render: str = ""  # Jinja2 render body
    device_class: str = ""  # class the catalog filed this template under

    @classmethod
    def from_dict(cls, data: dict[str, Any], device_class: str = "") -> "Template":
        if not isinstance(data, dict):
            raise TypeError(f"Template definition must be a YAML mapping, got {type(data).__name__}")
        if not data.get("template"):
            raise ValueError("Template definition is missing the 'template' identifier.")
        return cls(
            template=str(data["template"]),
            description=str(data.get("description", "") or ""),
            loglevel=str(data.get("loglevel", "") or ""),
            requirements=Requirements.from_dict(data.get("requirements")),
            guidedsetup=GuidedSetup.from_dict(data.get("guidedsetup")),
            generic=bool(coerce_bool(data.get("generic", False))),
            paramsbase=str(data.get("paramsbase", "") or ""),
            params=[Param.from_dict(p) for p in data.get("params", []) or []],
            render=str(data.get("render", "") or ""),
            device_class=device_class,
        )

    def resolve_param_base(self) -> None:
        """Add the referenced base params; the template may only override their default and example."""
        if not self.paramsbase:
            return

        base = PARAM_BASES.get(self.paramsbase)
        if base is None:
            logger.warning("Template %s references unknown params base '%s'", self.template, self.paramsbase)
            return

        current = self.params
        self.params = copy.deepcopy(base)
        for p in current:
            index = self._param_index(p.name)
            if index is None:
                self.params.append(p)
                continue
            if p.default:
                self.params[index].default = p.default
            if p.example:
                self.params[index].example = p.example

    def defaults(self, context: DefaultsContext = DefaultsContext.CONFIG) -> dict[str, str]:
        """Default value per param: test value, else example for docs/tests, else default (may be empty)."""
        values: dict[str, str] = {}
        for p in self.params:
            if p.test:
                values[p.name] = p.test
            elif p.example and context.uses_examples:
                values[p.name] = p.example
            else:
                values[p.name] = p.default
        return values

    def _param_index(self, name: str) -> Optional[int]:
        for i, p in enumerate(self.params):
            if p.name == name:
                return i
        return None

    def param_by_name(self, name: str) -> Optional[Param]:
        index = self._param_index(name)
        return self.params[index] if index is not None else None

    def usages(self) -> list[str]:
        p = self.param_by_name(PARAM_USAGE)
        return list(p.choice) if p else []

    def has_usage(self, usage: str) -> bool:
        return usage in self.usages()

    def modbus_choices(self) -> list[str]:
        p = self.param_by_name(PARAM_MODBUS)
        return list(p.choice) if p else []
