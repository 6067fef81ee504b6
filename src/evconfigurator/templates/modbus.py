# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Modbus interface sub-schema.

Templates declaring a `modbus` param with `rs485` and/or `tcpip` choices are
expanded into exactly one concrete interface variant. Each variant owns a
fixed key set; keys of the other variants never reach the resolved values.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from evconfigurator.templates.model import PARAM_MODBUS, Param, ParamValueType, Template
from evconfigurator.utils import coerce_int

logger = logging.getLogger(__name__)

MODBUS_CHOICE_RS485 = "rs485"
MODBUS_CHOICE_TCPIP = "tcpip"

MODBUS_PARAM_NAME_ID = "id"
MODBUS_PARAM_VALUE_ID = 1
MODBUS_PARAM_NAME_DEVICE = "device"
MODBUS_PARAM_VALUE_DEVICE = "/dev/ttyUSB0"
MODBUS_PARAM_NAME_BAUDRATE = "baudrate"
MODBUS_PARAM_VALUE_BAUDRATE = 9600
MODBUS_PARAM_NAME_COMSET = "comset"
MODBUS_PARAM_VALUE_COMSET = "8N1"
MODBUS_PARAM_NAME_HOST = "host"
MODBUS_PARAM_VALUE_HOST = "192.0.2.2"
MODBUS_PARAM_NAME_PORT = "port"
MODBUS_PARAM_VALUE_PORT = 502
MODBUS_PARAM_NAME_RTU = "rtu"


class ModbusInterface(Enum):
    """
    Concrete modbus interface variant, value is the key stored under the `modbus` param.
    """

    rs485serial = "rs485serial"  # USB-RS485 adapter
    rs485tcpip = "rs485tcpip"  # Ethernet-RS485 adapter, RTU framing over TCP
    tcpip = "tcpip"  # Modbus TCP

    @property
    def label(self) -> str:
        return _INTERFACE_LABELS[self]

    @property
    def keys(self) -> tuple[str, ...]:
        return _INTERFACE_KEYS[self]


_INTERFACE_LABELS = {
    ModbusInterface.rs485serial: "Serial (USB-RS485 Adapter)",
    ModbusInterface.rs485tcpip: "Serial (Ethernet-RS485 Adapter)",
    ModbusInterface.tcpip: "TCP/IP",
}

_INTERFACE_KEYS = {
    ModbusInterface.rs485serial: (
        MODBUS_PARAM_NAME_ID,
        MODBUS_PARAM_NAME_DEVICE,
        MODBUS_PARAM_NAME_BAUDRATE,
        MODBUS_PARAM_NAME_COMSET,
    ),
    ModbusInterface.rs485tcpip: (
        MODBUS_PARAM_NAME_ID,
        MODBUS_PARAM_NAME_HOST,
        MODBUS_PARAM_NAME_PORT,
        MODBUS_PARAM_NAME_RTU,
    ),
    ModbusInterface.tcpip: (
        MODBUS_PARAM_NAME_ID,
        MODBUS_PARAM_NAME_HOST,
        MODBUS_PARAM_NAME_PORT,
    ),
}

ALL_MODBUS_KEYS = frozenset(key for keys in _INTERFACE_KEYS.values() for key in keys)


def interface_options(choices: list[str]) -> list[ModbusInterface]:
    """Interface variants offered for the given `modbus` param choices, in choice order."""
    options: list[ModbusInterface] = []
    for choice in choices:
        if choice == MODBUS_CHOICE_RS485:
            options.extend([ModbusInterface.rs485serial, ModbusInterface.rs485tcpip])
        elif choice == MODBUS_CHOICE_TCPIP:
            options.append(ModbusInterface.tcpip)
    return options


def serial_defaults(param: Optional[Param]) -> tuple[int, str]:
    """Baudrate and comset defaults; each may be overridden independently by the device template."""
    baudrate = MODBUS_PARAM_VALUE_BAUDRATE
    comset = MODBUS_PARAM_VALUE_COMSET
    if param is not None:
        if param.baudrate:
            baudrate = param.baudrate
        if param.comset:
            comset = param.comset
    return baudrate, comset


def resolve_interface(value: Any, options: list[ModbusInterface]) -> ModbusInterface:
    """Pick the interface named by ``value`` or fall back to the first available one."""
    if not options:
        raise ValueError("Template offers no modbus interface")
    if value:
        try:
            selected = ModbusInterface(str(value).strip().lower())
        except ValueError as exc:
            raise ValueError(
                f"Unknown modbus interface '{value}'. Supported: {', '.join(o.value for o in options)}"
            ) from exc
        if selected not in options:
            raise ValueError(
                f"Modbus interface '{selected.value}' not supported by device. "
                f"Supported: {', '.join(o.value for o in options)}"
            )
        return selected
    return options[0]


def interface_defaults(interface: ModbusInterface, param: Optional[Param]) -> dict[str, Any]:
    baudrate, comset = serial_defaults(param)
    defaults: dict[str, Any] = {
        MODBUS_PARAM_NAME_ID: MODBUS_PARAM_VALUE_ID,
        MODBUS_PARAM_NAME_DEVICE: MODBUS_PARAM_VALUE_DEVICE,
        MODBUS_PARAM_NAME_BAUDRATE: baudrate,
        MODBUS_PARAM_NAME_COMSET: comset,
        MODBUS_PARAM_NAME_HOST: MODBUS_PARAM_VALUE_HOST,
        MODBUS_PARAM_NAME_PORT: MODBUS_PARAM_VALUE_PORT,
        MODBUS_PARAM_NAME_RTU: "true",
    }
    return {key: defaults[key] for key in interface.keys}


def modbus_values(template: Template, values: dict[str, Any]) -> Optional[ModbusInterface]:
    """
    Expand the modbus sub-schema in place.

    The variant is read from ``values["modbus"]`` (first available if unset).
    Missing keys of that variant are filled with defaults, keys owned only by
    other variants are removed and ``values["modbus"]`` holds the variant key.

    Returns:
        The applied interface, or None if the template has no modbus interface.

    Raises:
        ValueError: If the interface is not offered or the id is not an integer.
    """
    options = interface_options(template.modbus_choices())
    if not options:
        return None

    interface = resolve_interface(values.get(PARAM_MODBUS), options)
    param = template.param_by_name(PARAM_MODBUS)

    for key in ALL_MODBUS_KEYS - set(interface.keys):
        values.pop(key, None)

    for key, default in interface_defaults(interface, param).items():
        if values.get(key) in (None, ""):
            values[key] = default
    device_id = values[MODBUS_PARAM_NAME_ID]
    if coerce_int(device_id) is None:
        raise ValueError(f"Modbus id '{device_id}' of template {template.template} is not an integer")
    if interface is ModbusInterface.rs485tcpip:
        values[MODBUS_PARAM_NAME_RTU] = "true"

    values[PARAM_MODBUS] = interface.value
    logger.debug("Template %s uses modbus interface %s", template.template, interface.value)
    return interface


@dataclass(frozen=True)
class ModbusQuestion:
    """A single field the operator is asked for once an interface is chosen."""

    key: str
    label: str
    help: str = ""
    default: Any = ""
    example: str = ""
    value_type: ParamValueType = ParamValueType.string


def id_question() -> ModbusQuestion:
    return ModbusQuestion(
        key=MODBUS_PARAM_NAME_ID,
        label="ID",
        help="Modbus ID",
        default=MODBUS_PARAM_VALUE_ID,
        value_type=ParamValueType.number,
    )


def interface_questions(interface: ModbusInterface, param: Optional[Param]) -> list[ModbusQuestion]:
    """Fields to ask for the chosen interface, the id excluded."""
    if interface is ModbusInterface.rs485serial:
        baudrate, comset = serial_defaults(param)
        return [
            ModbusQuestion(
                key=MODBUS_PARAM_NAME_DEVICE,
                label="Device",
                help="USB-RS485 Adapter Adresse",
                example=MODBUS_PARAM_VALUE_DEVICE,
            ),
            ModbusQuestion(
                key=MODBUS_PARAM_NAME_BAUDRATE,
                label="Baudrate",
                default=baudrate,
                value_type=ParamValueType.number,
            ),
            ModbusQuestion(key=MODBUS_PARAM_NAME_COMSET, label="ComSet", default=comset),
        ]
    return [
        ModbusQuestion(key=MODBUS_PARAM_NAME_HOST, label="Host", example=MODBUS_PARAM_VALUE_HOST),
        ModbusQuestion(
            key=MODBUS_PARAM_NAME_PORT,
            label="Port",
            default=MODBUS_PARAM_VALUE_PORT,
            value_type=ParamValueType.number,
        ),
    ]
