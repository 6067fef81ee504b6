# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Session aggregate of one configuration build.

Collects accepted devices into class buckets, keeps the site cross references
and the session-wide one-time values (sponsor token, HEMS and EEBUS stanzas)
and renders the final configuration document.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any

from evconfigurator.configure.categories import DeviceCategory, DeviceClass
from evconfigurator.rendering import render_configuration, yaml_quote

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Device:
    name: str
    title: str
    loglevel: str
    yaml: str
    charger_has_meter: bool = False  # only used with chargers to decide if a charge meter is needed


@dataclass
class Loadpoint:
    title: str
    charger: str
    chargemeter: str = ""
    vehicles: list[str] = field(default_factory=list)
    mode: str = "pv"
    mincurrent: int = 6
    maxcurrent: int = 16
    phases: int = 3


@dataclass
class Site:
    title: str = ""
    grid: str = ""
    pvs: list[str] = field(default_factory=list)
    batteries: list[str] = field(default_factory=list)


class Session:
    """
    The configuration being built by one operator.

    Args:
        expanded: store fully rendered device configuration instead of template references
        advanced: ask advanced params as well
        lang: language of help texts
        site_title: title of the site
    """

    def __init__(self, expanded: bool = False, advanced: bool = False, lang: str = "de", site_title: str = ""):
        self.expanded = expanded
        self.advanced = advanced
        self.lang = lang
        self.site = Site(title=site_title)
        self.meters: list[Device] = []
        self.chargers: list[Device] = []
        self.vehicles: list[Device] = []
        self.loadpoints: list[Loadpoint] = []
        self._log_levels: list[str] = []
        self._sponsor_token = ""
        self._hems = ""
        self._eebus = ""
        self._ordinals = {device_class: 0 for device_class in DeviceClass}

    @property
    def log_levels(self) -> list[str]:
        return list(self._log_levels)

    @property
    def sponsor_token(self) -> str:
        return self._sponsor_token

    @property
    def hems(self) -> str:
        return self._hems

    @property
    def eebus(self) -> str:
        return self._eebus

    @property
    def sponsorship_satisfied(self) -> bool:
        return bool(self._sponsor_token)

    @property
    def hems_satisfied(self) -> bool:
        return bool(self._hems)

    @property
    def eebus_satisfied(self) -> bool:
        return bool(self._eebus)

    def set_sponsor_token(self, token: str) -> bool:
        """Store the sponsor token once; later calls are ignored. Returns True if the token was stored."""
        if self._sponsor_token:
            logger.debug("Sponsor token already set, ignoring new token")
            return False
        if not token:
            raise ValueError("Sponsor token must not be empty")
        self._sponsor_token = token
        return True

    def set_hems(self, stanza: str) -> bool:
        if self._hems:
            logger.debug("HEMS already configured, keeping existing stanza")
            return False
        self._hems = stanza
        return True

    def set_eebus(self, stanza: str) -> bool:
        if self._eebus:
            logger.debug("EEBUS already configured, keeping existing stanza")
            return False
        self._eebus = stanza
        return True

    def add_log_level(self, name: str) -> None:
        """Add a log level name; empty names and duplicates are ignored, first-seen order is kept."""
        if not name or name in self._log_levels:
            return
        self._log_levels.append(name)

    def next_device_name(self, category: DeviceCategory) -> str:
        """Name the next committed device of the category's class gets, without reserving it."""
        info = category.info
        return f"{info.default_name}{self._ordinals[info.device_class] + 1}"

    def commit_device(self, device: Device, category: DeviceCategory) -> None:
        """
        Add an accepted device; the ordinal of its class advances only here.

        Meters are cross referenced from the site according to the category.
        """
        if category is DeviceCategory.guided_setup:
            raise ValueError("Devices are committed under the category of their linked usage")
        expected = self.next_device_name(category)
        if device.name != expected:
            raise ValueError(f"Device name '{device.name}' does not match next ordinal name '{expected}'")

        device_class = category.device_class
        self._ordinals[device_class] += 1
        self.add_log_level(device.loglevel)

        if device_class is DeviceClass.charger:
            if self._eebus:
                self.add_log_level("eebus")
            self.chargers.append(device)
        elif device_class is DeviceClass.meter:
            self.meters.append(device)
            if category is DeviceCategory.grid_meter:
                self.site.grid = device.name
            elif category is DeviceCategory.pv_meter:
                self.site.pvs.append(device.name)
            elif category is DeviceCategory.battery_meter:
                self.site.batteries.append(device.name)
        else:
            self.vehicles.append(device)
        logger.info("Added %s %s (%s)", category.value, device.name, device.title)

    def devices_of_class(self, device_class: DeviceClass) -> list[Device]:
        if device_class is DeviceClass.charger:
            return list(self.chargers)
        if device_class is DeviceClass.meter:
            return list(self.meters)
        return list(self.vehicles)

    def meters_of_category(self, category: DeviceCategory) -> int:
        if category is DeviceCategory.grid_meter:
            return 1 if self.site.grid else 0
        if category is DeviceCategory.pv_meter:
            return len(self.site.pvs)
        if category is DeviceCategory.battery_meter:
            return len(self.site.batteries)
        return 0

    def add_loadpoint(self, loadpoint: Loadpoint) -> None:
        self.loadpoints.append(loadpoint)
        self.add_log_level(f"lp-{len(self.loadpoints)}")

    def to_template_context(self) -> dict[str, Any]:
        site = asdict(self.site)
        site["title"] = yaml_quote(self.site.title)
        loadpoints = []
        for lp in self.loadpoints:
            item = asdict(lp)
            item["title"] = yaml_quote(lp.title)
            loadpoints.append(item)
        return {
            "meters": [asdict(d) for d in self.meters],
            "chargers": [asdict(d) for d in self.chargers],
            "vehicles": [asdict(d) for d in self.vehicles],
            "loadpoints": loadpoints,
            "site": site,
            "loglevels": list(self._log_levels),
            "hems": self._hems,
            "eebus": self._eebus,
            "sponsortoken": yaml_quote(self._sponsor_token) if self._sponsor_token else "",
        }

    def render(self) -> str:
        """Render the complete configuration document in a single pass."""
        return render_configuration(self.to_template_context())
