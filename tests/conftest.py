from __future__ import annotations

import asyncio

import pytest

from nm_bus import NM_DEVICE_INTERFACE, NM_INTERFACE, NM_OBJECT_PATH


class FakeInterface:
    """Stands in for a dbus-next proxy interface"""

    def __init__(self, devices=None, device_type=None, activation=None, error=None):
        self.devices = devices or []
        self.device_type = device_type
        self.activation = activation or ["/org/freedesktop/NetworkManager/Settings/1",
                                         "/org/freedesktop/NetworkManager/ActiveConnection/1"]
        self.error = error
        self.activations = []

    async def call_get_all_devices(self):
        if self.error:
            raise self.error
        return list(self.devices)

    async def get_device_type(self):
        if self.error:
            raise self.error
        return self.device_type

    async def call_add_and_activate_connection(self, settings, device, specific_object):
        self.activations.append((settings, device, specific_object))
        if self.error:
            raise self.error
        return list(self.activation)


class FakeProxy:
    def __init__(self, interfaces):
        self.interfaces = interfaces

    def get_interface(self, name):
        return self.interfaces[name]


class FakeBus:
    """Minimal dbus-next MessageBus double keyed by object path"""

    def __init__(self, device_types, manager=None, device_errors=None):
        self.connected = True
        self.unique_name = ":1.42"
        self.introspected = []
        self.manager = manager or FakeInterface(devices=list(device_types))
        self.objects = {NM_OBJECT_PATH: {NM_INTERFACE: self.manager}}
        device_errors = device_errors or {}
        for path, code in device_types.items():
            iface = FakeInterface(device_type=code, error=device_errors.get(path))
            self.objects[path] = {NM_DEVICE_INTERFACE: iface}

    async def introspect(self, name, path):
        self.introspected.append(path)
        await asyncio.sleep(0)
        return object()

    def get_proxy_object(self, name, path, introspection):
        return FakeProxy(self.objects[path])

    def disconnect(self):
        self.connected = False


@pytest.fixture
def fake_bus_class():
    return FakeBus


@pytest.fixture
def fake_interface_class():
    return FakeInterface


@pytest.fixture
def base_config():
    return {
        "bus": {"bus_type": "system", "request_timeout": 1},
        "discovery": {"device_type": "wifi"},
        "access_point": {
            "ssid": "my-ap",
            "mode": "ap",
            "band": None,
            "hidden": None,
            "psk": None,
            "key_mgmt": "wpa-psk",
            "connection_id": None,
            "autoconnect": False,
            "interface_name": None,
            "ipv4_method": "manual",
            "address": "192.168.2.1",
            "prefix": 24,
        },
        "logging": {"level": "INFO", "file": None, "console_output": True, "timezone": "UTC"},
    }
