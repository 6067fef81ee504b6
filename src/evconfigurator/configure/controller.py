# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Device acquisition controller.

Drives one device from catalog selection to acceptance or rejection:

    SELECT -> REQUIREMENTS_CHECK -> VALUE_COLLECTION -> LIVE_TEST -> ACCEPT | REJECT

Only ACCEPT changes the session's device buckets and ordinals. The sponsor
token and EEBUS certificate are session-wide one-time side effects guarded by
the session's satisfied flags.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Optional

import yaml

from evconfigurator.configure.categories import DeviceCategory
from evconfigurator.configure.collaborators import (
    DeviceTester,
    DeviceTestResult,
    EebusIntegration,
    Question,
    ValueProvider,
)
from evconfigurator.configure.session import Device, Loadpoint, Session
from evconfigurator.errors import (
    CollectionAbortedError,
    ConfigureError,
    DeviceInvalidError,
    NotPresentError,
    RequirementUnmetError,
)
from evconfigurator.rendering import render_proxy, render_result
from evconfigurator.templates import catalog
from evconfigurator.templates.modbus import (
    MODBUS_PARAM_NAME_RTU,
    ModbusInterface,
    ModbusQuestion,
    id_question,
    interface_options,
    interface_questions,
)
from evconfigurator.templates.model import (
    HEMS_TYPE_SMA,
    PARAM_MODBUS,
    PARAM_TITLE,
    PARAM_USAGE,
    DefaultsContext,
    Param,
    ParamValue,
    ParamValueType,
    Template,
)

logger = logging.getLogger(__name__)

NOT_PRESENT_LABEL = "No device"
NOT_PRESENT_KEY = "none"

HEMS_STANZAS = {
    HEMS_TYPE_SMA: "type: sma\nAllowControl: false\n",
}

LOADPOINT_MODES = ["off", "now", "minpv", "pv"]


class AcquisitionState(Enum):
    SELECT = "select"
    REQUIREMENTS_CHECK = "requirements_check"
    VALUE_COLLECTION = "value_collection"
    LIVE_TEST = "live_test"
    ACCEPT = "accept"
    REJECT = "reject"


class DeviceAcquisitionController:
    """
    Adds devices to a session using the caller provided collaborators.

    Args:
        session: session the accepted devices are committed to
        provider: answers questions of the operator
        tester: probes devices with the collected values
        eebus: certificate and pairing integration, required for EEBUS devices only
        catalog_dir: optional template catalog directory
    """

    def __init__(
        self,
        session: Session,
        provider: ValueProvider,
        tester: DeviceTester,
        eebus: Optional[EebusIntegration] = None,
        catalog_dir: Optional[str] = None,
    ):
        self.session = session
        self.provider = provider
        self.tester = tester
        self.eebus = eebus
        self.catalog_dir = catalog_dir
        self.state = AcquisitionState.SELECT

    def _transition(self, state: AcquisitionState) -> None:
        logger.debug("Device acquisition: %s -> %s", self.state.value, state.value)
        self.state = state

    def available_templates(self, category: DeviceCategory) -> list[Template]:
        """Selectable templates of a category in presentation order."""
        templates = [
            t
            for t in catalog.by_class(category.device_class.value, self.catalog_dir)
            if t.params and t.description
        ]
        if category is DeviceCategory.guided_setup:
            templates = [t for t in templates if t.guidedsetup.enable]
        else:
            templates = catalog.filter_by_usage(templates, category.usage_filter)
        return catalog.sort_for_selection(templates)

    def select(self, category: DeviceCategory) -> Template:
        self._transition(AcquisitionState.SELECT)
        templates = self.available_templates(category)
        choices = [t.description for t in templates] + [NOT_PRESENT_LABEL]
        keys = [t.template for t in templates] + [NOT_PRESENT_KEY]

        index = self.provider.ask_choice(f"Select the {category.info.title.lower()}", choices, keys)
        if not 0 <= index < len(choices):
            raise CollectionAbortedError(f"Invalid selection {index} for {category.value}")
        if index == len(templates):
            raise NotPresentError(f"No {category.info.title.lower()} selected")
        return templates[index]

    def check_requirements(self, template: Template) -> None:
        """Evaluate the sponsorship, HEMS and EEBUS gates of a template in this order."""
        self._transition(AcquisitionState.REQUIREMENTS_CHECK)
        requirements = template.requirements

        description = requirements.description.string(self.session.lang)
        if description:
            logger.info("Requirements for %s: %s", template.description, description)
            if requirements.uri:
                logger.info("More information: %s", requirements.uri)

        if requirements.sponsorship and not self.session.sponsorship_satisfied:
            if not self.provider.ask_yes_no(f"{template.description} requires a sponsor token. Do you have one?", key="sponsorship"):
                raise RequirementUnmetError(f"{template.description} requires sponsorship")
            token = self.provider.ask_value(Question(label="Sponsor token", key="sponsortoken", required=True, mask=True))
            if not token:
                raise RequirementUnmetError(f"{template.description} requires a sponsor token")
            self.session.set_sponsor_token(token)

        if requirements.hems:
            stanza = HEMS_STANZAS.get(requirements.hems)
            if stanza is None:
                logger.warning("Template %s requires unsupported HEMS type '%s'", template.template, requirements.hems)
            elif not self.session.hems_satisfied:
                self.session.set_hems(stanza)

        if requirements.eebus:
            self._check_eebus(template)

    def _check_eebus(self, template: Template) -> None:
        if self.eebus is None:
            raise RequirementUnmetError(f"{template.description} requires EEBUS, but no EEBUS integration is available")

        if not self.session.eebus_satisfied:
            try:
                certificate = self.eebus.issue_certificate()
                self.eebus.configure(certificate)
            except ConfigureError:
                raise
            except Exception as exc:
                raise RequirementUnmetError(f"EEBUS certificate could not be created: {exc}") from exc
            self.session.set_eebus(yaml.safe_dump(certificate, sort_keys=False, default_flow_style=False))

        try:
            self.eebus.pair(template)
        except ConfigureError:
            raise
        except Exception as exc:
            raise RequirementUnmetError(f"EEBUS pairing with {template.description} failed: {exc}") from exc

    def _ask(self, question: Question) -> ParamValue:
        answer = self.provider.ask_value(question)
        if question.required and (answer is None or str(answer) == ""):
            raise CollectionAbortedError(f"No value provided for required '{question.label}'")
        try:
            return ParamValue.from_raw(answer, question.value_type)
        except ValueError as exc:
            raise CollectionAbortedError(f"Invalid value for '{question.label}': {exc}") from exc

    def _param_question(self, param: Param) -> Question:
        return Question(
            label=param.name,
            key=param.name,
            help=param.help.string(self.session.lang),
            default=param.default,
            example=param.example,
            required=param.required,
            mask=param.mask,
            value_type=param.valuetype,
        )

    @staticmethod
    def _modbus_question(mq: ModbusQuestion) -> Question:
        return Question(
            label=mq.label,
            key=mq.key,
            help=mq.help,
            default=mq.default,
            example=mq.example,
            required=True,
            value_type=mq.value_type,
        )

    def _collect_modbus(self, param: Param) -> dict[str, ParamValue]:
        options = interface_options(param.choice)
        if not options:
            return {}

        values: dict[str, ParamValue] = {}
        id_q = id_question()
        values[id_q.key] = self._ask(self._modbus_question(id_q))

        index = 0
        if len(options) > 1:
            index = self.provider.ask_choice("Modbus interface", [o.label for o in options], [o.value for o in options])
            if not 0 <= index < len(options):
                raise CollectionAbortedError(f"Invalid modbus interface selection {index}")
        interface = options[index]
        values[PARAM_MODBUS] = ParamValue.from_raw(interface.value)

        for mq in interface_questions(interface, param):
            values[mq.key] = self._ask(self._modbus_question(mq))
        if interface is ModbusInterface.rs485tcpip:
            values[MODBUS_PARAM_NAME_RTU] = ParamValue(ParamValueType.bool, True)
        return values

    def collect_values(self, template: Template, category: DeviceCategory) -> dict[str, ParamValue]:
        """One value per param; advanced params only in advanced mode, usage from the category."""
        self._transition(AcquisitionState.VALUE_COLLECTION)
        values: dict[str, ParamValue] = {}
        for param in template.params:
            if param.name == PARAM_MODBUS:
                values.update(self._collect_modbus(param))
            elif param.name == PARAM_USAGE:
                if category.usage_filter:
                    values[PARAM_USAGE] = ParamValue.from_raw(category.usage_filter)
            else:
                if param.advanced and not self.session.advanced:
                    continue
                values[param.name] = self._ask(self._param_question(param))
        return values

    def test_device(
        self, category: DeviceCategory, template: Template, values: dict[str, ParamValue]
    ) -> DeviceTestResult:
        """Run the live test; a failed test needs a forced accept, otherwise DeviceInvalidError is raised."""
        self._transition(AcquisitionState.LIVE_TEST)
        plain: dict[str, Any] = {key: value.value for key, value in values.items()}
        try:
            result = self.tester.test(category, template, plain)
        except ConfigureError:
            raise
        except Exception as exc:
            logger.warning("Testing %s failed: %s", template.description, exc)
            result = DeviceTestResult.invalid

        if result is DeviceTestResult.invalid:
            question = f"{template.description} could not be verified. Add it anyway?"
            if category.has_usage:
                question = f"{template.description} could not be verified as {category.value} meter. Add it anyway?"
            if not self.provider.ask_yes_no(question, key="forceaccept"):
                self._transition(AcquisitionState.REJECT)
                raise DeviceInvalidError(f"{template.description} is not a valid device")
        return result

    def accept(
        self,
        category: DeviceCategory,
        template: Template,
        values: dict[str, ParamValue],
        charger_has_meter: bool = False,
    ) -> Device:
        """Render the device configuration and commit it under the next ordinal name of its class."""
        self._transition(AcquisitionState.ACCEPT)
        name = self.session.next_device_name(category)

        title = template.description
        title_value = values.get(PARAM_TITLE)
        if title_value is not None and str(title_value):
            title = str(title_value)

        if self.session.expanded:
            text, _ = render_result(template, DefaultsContext.CONFIG, values, name=name)
        else:
            text = render_proxy(template, values, name=name)

        device = Device(
            name=name,
            title=title,
            loglevel=template.loglevel,
            yaml=text,
            charger_has_meter=charger_has_meter,
        )
        self.session.commit_device(device, category)
        return device

    def add_device_from_template(self, template: Template, category: DeviceCategory) -> Device:
        self.check_requirements(template)
        values = self.collect_values(template, category)
        result = self.test_device(category, template, values)
        charger_has_meter = category is DeviceCategory.charger and result is DeviceTestResult.valid_with_meter
        return self.accept(category, template, values, charger_has_meter=charger_has_meter)

    def add_device(self, category: DeviceCategory) -> Device:
        """
        Run the whole acquisition for one device of ``category``.

        Raises:
            NotPresentError: "no device" was selected
            DeviceInvalidError: the test failed and no forced accept was given
            RequirementUnmetError: a requirement gate was declined or failed
            RenderError: the device configuration could not be rendered
            CollectionAbortedError: the value provider aborted
        """
        template = self.select(category)
        return self.add_device_from_template(template, category)

    def configure_loadpoint(
        self, charger: Device, chargemeter: str = "", vehicles: Optional[list[str]] = None
    ) -> Loadpoint:
        """Ask the loadpoint settings for a charger and add the loadpoint to the session."""
        number = len(self.session.loadpoints) + 1
        title = self._ask(Question(label="Title", key="loadpoint.title", default=f"Loadpoint {number}"))
        mode_index = self.provider.ask_choice("Charge mode", LOADPOINT_MODES, LOADPOINT_MODES)
        if not 0 <= mode_index < len(LOADPOINT_MODES):
            raise CollectionAbortedError(f"Invalid charge mode selection {mode_index}")
        mincurrent = self._ask(
            Question(label="Min current", key="loadpoint.mincurrent", default=6, value_type=ParamValueType.number)
        )
        maxcurrent = self._ask(
            Question(label="Max current", key="loadpoint.maxcurrent", default=16, value_type=ParamValueType.number)
        )
        phases = self._ask(
            Question(label="Phases", key="loadpoint.phases", default=3, value_type=ParamValueType.number)
        )

        loadpoint = Loadpoint(
            title=str(title) or f"Loadpoint {number}",
            charger=charger.name,
            chargemeter=chargemeter,
            vehicles=list(vehicles or []),
            mode=LOADPOINT_MODES[mode_index],
            mincurrent=mincurrent.value if mincurrent.value != "" else 6,
            maxcurrent=maxcurrent.value if maxcurrent.value != "" else 16,
            phases=phases.value if phases.value != "" else 3,
        )
        self.session.add_loadpoint(loadpoint)
        logger.info("Added loadpoint %s for charger %s", loadpoint.title, charger.name)
        return loadpoint
