# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from dataclasses import dataclass
from enum import Enum


class DeviceClass(Enum):
    """
    Structural kind of a device, governs naming and bucket placement.
    """

    charger = "charger"
    meter = "meter"
    vehicle = "vehicle"


class DeviceCategory(Enum):
    """
    Usage scoped role a device is added for.
    """

    grid_meter = "grid"
    pv_meter = "pv"
    battery_meter = "battery"
    charge_meter = "charge"
    charger = "charger"
    vehicle = "vehicle"
    guided_setup = "guidedsetup"

    @property
    def info(self) -> "CategoryInfo":
        return DEVICE_CATEGORIES[self]

    @property
    def device_class(self) -> DeviceClass:
        return DEVICE_CATEGORIES[self].device_class

    @property
    def usage_filter(self) -> str:
        return DEVICE_CATEGORIES[self].usage_filter

    @property
    def has_usage(self) -> bool:
        return self in (DeviceCategory.grid_meter, DeviceCategory.pv_meter, DeviceCategory.battery_meter)


@dataclass(frozen=True)
class CategoryInfo:
    device_class: DeviceClass
    default_name: str  # prefix of generated device names
    usage_filter: str  # value of the `usage` param, empty if the category is not usage scoped
    title: str


DEVICE_CATEGORIES: dict[DeviceCategory, CategoryInfo] = {
    DeviceCategory.grid_meter: CategoryInfo(DeviceClass.meter, "grid", "grid", "Grid meter"),
    DeviceCategory.pv_meter: CategoryInfo(DeviceClass.meter, "pv", "pv", "PV meter"),
    DeviceCategory.battery_meter: CategoryInfo(DeviceClass.meter, "battery", "battery", "Battery meter"),
    DeviceCategory.charge_meter: CategoryInfo(DeviceClass.meter, "charge", "charge", "Charge meter"),
    DeviceCategory.charger: CategoryInfo(DeviceClass.charger, "charger", "", "Charger"),
    DeviceCategory.vehicle: CategoryInfo(DeviceClass.vehicle, "vehicle", "", "Vehicle"),
    DeviceCategory.guided_setup: CategoryInfo(DeviceClass.meter, "", "", "Guided setup"),
}


def category_for_usage(usage: str) -> DeviceCategory:
    """Meter category of a `usage` param value, e.g. `pv` for linked templates of a guided setup."""
    for category, info in DEVICE_CATEGORIES.items():
        if info.device_class is DeviceClass.meter and info.usage_filter and info.usage_filter == usage:
            return category
    raise ValueError(f"No meter category for usage '{usage}'")
