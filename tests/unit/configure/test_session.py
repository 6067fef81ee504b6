# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import pytest
import yaml

from evconfigurator.configure import Device, DeviceCategory, DeviceClass, Loadpoint, Session
from evconfigurator.rendering import render_proxy
from evconfigurator.templates import catalog

pytestmark = pytest.mark.unit


def _device(session, category, loglevel="demo", yaml_text=None, **kwargs):
    name = session.next_device_name(category)
    return Device(name=name, title=name, loglevel=loglevel, yaml=yaml_text or f"name: {name}\ntype: demo", **kwargs)


def _commit(session, category, **kwargs):
    device = _device(session, category, **kwargs)
    session.commit_device(device, category)
    return device


class TestLogLevels:
    def test_duplicates_and_empty_names_are_ignored(self, session):
        for name in ["sma", "", "demo", "sma", "demo"]:
            session.add_log_level(name)
        assert session.log_levels == ["sma", "demo"]

    def test_devices_sharing_a_log_level(self, session):
        _commit(session, DeviceCategory.grid_meter, loglevel="mbmd")
        _commit(session, DeviceCategory.pv_meter, loglevel="mbmd")
        assert session.log_levels == ["mbmd"]

    def test_loadpoint_log_levels(self, session):
        charger = _commit(session, DeviceCategory.charger, loglevel="keba")
        session.add_loadpoint(Loadpoint(title="Garage", charger=charger.name))
        session.add_loadpoint(Loadpoint(title="Carport", charger=charger.name))
        assert session.log_levels == ["keba", "lp-1", "lp-2"]

    def test_charger_adds_eebus_level_once_configured(self, session):
        session.set_eebus("certificate:\n  public: x\n")
        _commit(session, DeviceCategory.charger, loglevel="eebus")
        _commit(session, DeviceCategory.charger, loglevel="keba")
        assert session.log_levels == ["eebus", "keba"]


class TestOrdinals:
    def test_names_are_numbered_per_class(self, session):
        names = [
            _commit(session, category).name
            for category in [
                DeviceCategory.grid_meter,
                DeviceCategory.charger,
                DeviceCategory.pv_meter,
                DeviceCategory.charge_meter,
                DeviceCategory.vehicle,
            ]
        ]
        assert names == ["grid1", "charger1", "pv2", "charge3", "vehicle1"]

    def test_peeking_does_not_reserve(self, session):
        assert session.next_device_name(DeviceCategory.charger) == "charger1"
        assert session.next_device_name(DeviceCategory.charger) == "charger1"
        _commit(session, DeviceCategory.charger)
        assert session.next_device_name(DeviceCategory.charger) == "charger2"

    def test_commit_requires_next_name(self, session):
        device = Device(name="charger7", title="x", loglevel="", yaml="")
        with pytest.raises(ValueError, match="does not match"):
            session.commit_device(device, DeviceCategory.charger)

    def test_guided_setup_is_not_a_commit_category(self, session):
        device = Device(name="1", title="x", loglevel="", yaml="")
        with pytest.raises(ValueError):
            session.commit_device(device, DeviceCategory.guided_setup)


class TestSite:
    def test_meters_are_cross_referenced(self, session):
        _commit(session, DeviceCategory.grid_meter)
        _commit(session, DeviceCategory.pv_meter)
        _commit(session, DeviceCategory.pv_meter)
        _commit(session, DeviceCategory.battery_meter)
        _commit(session, DeviceCategory.charge_meter)

        assert session.site.grid == "grid1"
        assert session.site.pvs == ["pv2", "pv3"]
        assert session.site.batteries == ["battery4"]
        assert session.meters_of_category(DeviceCategory.pv_meter) == 2
        assert session.meters_of_category(DeviceCategory.grid_meter) == 1
        assert session.meters_of_category(DeviceCategory.charge_meter) == 0
        assert len(session.devices_of_class(DeviceClass.meter)) == 5
        assert session.devices_of_class(DeviceClass.charger) == []


class TestSetOnce:
    def test_sponsor_token(self, session):
        assert not session.sponsorship_satisfied
        assert session.set_sponsor_token("abc") is True
        assert session.set_sponsor_token("other") is False
        assert session.sponsor_token == "abc"
        assert session.sponsorship_satisfied

    def test_empty_sponsor_token(self, session):
        with pytest.raises(ValueError):
            session.set_sponsor_token("")

    def test_hems_and_eebus(self, session):
        assert session.set_hems("type: sma\n")
        assert not session.set_hems("type: other\n")
        assert session.hems == "type: sma\n"
        assert session.set_eebus("a: b\n")
        assert not session.set_eebus("c: d\n")
        assert session.eebus == "a: b\n"


class TestRender:
    def test_complete_document(self):
        session = Session(site_title="My home")
        grid_template = catalog.by_name("meter", "sma-home-manager")
        grid_name = session.next_device_name(DeviceCategory.grid_meter)
        session.commit_device(
            Device(
                name=grid_name,
                title="SMA",
                loglevel=grid_template.loglevel,
                yaml=render_proxy(grid_template, {"usage": "grid"}, name=grid_name),
            ),
            DeviceCategory.grid_meter,
        )
        session.set_hems("type: sma\nAllowControl: false\n")
        session.set_sponsor_token("0123")
        charger = _commit(session, DeviceCategory.charger, loglevel="keba")
        vehicle = _commit(session, DeviceCategory.vehicle, loglevel="")
        session.add_loadpoint(Loadpoint(title="Garage", charger=charger.name, vehicles=[vehicle.name]))

        document = yaml.safe_load(session.render())

        assert document["sponsortoken"] == "0123"
        assert document["site"] == {"title": "My home", "meters": {"grid": "grid1"}}
        assert document["meters"] == [
            {"name": "grid1", "type": "template", "template": "sma-home-manager", "usage": "grid", "host": "192.0.2.2"}
        ]
        assert document["chargers"] == [{"name": "charger1", "type": "demo"}]
        assert document["vehicles"] == [{"name": "vehicle1", "type": "demo"}]
        assert document["loadpoints"] == [
            {
                "title": "Garage",
                "charger": "charger1",
                "vehicles": ["vehicle1"],
                "mode": "pv",
                "phases": 3,
                "mincurrent": 6,
                "maxcurrent": 16,
            }
        ]
        assert document["levels"] == {"cache": "error", "sma": "info", "keba": "info", "lp-1": "info"}
        assert document["hems"] == {"type": "sma", "AllowControl": False}
        assert "eebus" not in document

    def test_empty_session(self, session):
        document = yaml.safe_load(session.render())
        assert document["site"]["meters"] is None
        assert "meters" not in document
        assert "loadpoints" not in document
