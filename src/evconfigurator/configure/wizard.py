# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from typing import Optional

from evconfigurator.configure.categories import DeviceCategory, category_for_usage
from evconfigurator.configure.collaborators import Question
from evconfigurator.configure.controller import DeviceAcquisitionController
from evconfigurator.configure.session import Device
from evconfigurator.errors import ConfigureError, DeviceInvalidError, NotPresentError
from evconfigurator.templates import catalog

logger = logging.getLogger(__name__)

DEFAULT_SITE_TITLE = "My home"


class Wizard:
    """
    Walks through all device categories and returns the rendered configuration.

    Order: guided setup, grid meter, PV meters, battery meters, vehicles,
    chargers with one loadpoint each, site title. Recoverable errors end the
    current device only; all other ConfigureErrors propagate.
    """

    def __init__(self, controller: DeviceAcquisitionController):
        self.controller = controller
        self.session = controller.session
        self.provider = controller.provider

    def _try_add(self, category: DeviceCategory) -> Optional[Device]:
        try:
            return self.controller.add_device(category)
        except ConfigureError as exc:
            if not exc.recoverable:
                raise
            logger.warning("%s not added: %s", category.info.title, exc)
            return None

    def _add_another(self, category: DeviceCategory) -> bool:
        return self.provider.ask_yes_no(f"Add another {category.info.title.lower()}?", key=f"another.{category.value}")

    def configure_guided_setup(self) -> None:
        if not self.controller.available_templates(DeviceCategory.guided_setup):
            return
        try:
            template = self.controller.select(DeviceCategory.guided_setup)
        except ConfigureError as exc:
            if not exc.recoverable:
                raise
            logger.info("Guided setup skipped")
            return

        for linked in template.guidedsetup.linked:
            linked_template = catalog.by_name(template.device_class, linked.template, self.controller.catalog_dir)
            category = category_for_usage(linked.usage)
            try:
                self.controller.add_device_from_template(linked_template, category)
            except ConfigureError as exc:
                if not exc.recoverable:
                    raise
                logger.warning("%s of %s not added: %s", category.info.title, template.description, exc)

    def configure_grid_meter(self) -> None:
        if self.session.meters_of_category(DeviceCategory.grid_meter):
            logger.debug("Grid meter already configured")
            return
        self._try_add(DeviceCategory.grid_meter)

    def configure_repeatable(self, category: DeviceCategory) -> None:
        """Add devices until "no device" is selected or no further device is wanted."""
        while True:
            try:
                self.controller.add_device(category)
            except NotPresentError:
                return
            except DeviceInvalidError as exc:
                logger.warning("%s not added: %s", category.info.title, exc)
            if not self._add_another(category):
                return

    def configure_chargers(self) -> None:
        """Each accepted charger gets a loadpoint; a charge meter is asked for chargers without meter."""
        while True:
            try:
                charger = self.controller.add_device(DeviceCategory.charger)
            except NotPresentError:
                return
            except DeviceInvalidError as exc:
                logger.warning("Charger not added: %s", exc)
            else:
                chargemeter = ""
                if not charger.charger_has_meter:
                    meter = self._try_add(DeviceCategory.charge_meter)
                    chargemeter = meter.name if meter else ""
                vehicles = [v.name for v in self.session.vehicles]
                self.controller.configure_loadpoint(charger, chargemeter, vehicles)
            if not self._add_another(DeviceCategory.charger):
                return

    def configure_site(self) -> None:
        title = self.provider.ask_value(
            Question(label="Site title", key="site.title", default=self.session.site.title or DEFAULT_SITE_TITLE)
        )
        self.session.site.title = title or DEFAULT_SITE_TITLE

    def run(self) -> str:
        self.configure_guided_setup()
        self.configure_grid_meter()
        self.configure_repeatable(DeviceCategory.pv_meter)
        self.configure_repeatable(DeviceCategory.battery_meter)
        self.configure_repeatable(DeviceCategory.vehicle)
        self.configure_chargers()
        self.configure_site()
        logger.info(
            "Configured %d meters, %d chargers, %d vehicles and %d loadpoints",
            len(self.session.meters),
            len(self.session.chargers),
            len(self.session.vehicles),
            len(self.session.loadpoints),
        )
        return self.session.render()
