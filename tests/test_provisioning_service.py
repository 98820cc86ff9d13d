from __future__ import annotations

import asyncio

import pytest

import main as entry
from errors import BusConnectionError, ConfigurationError, NoMatchingEntriesError
from services.provisioning_service import ProvisioningService


WIFI0 = "/org/freedesktop/NetworkManager/Devices/3"
WIFI1 = "/org/freedesktop/NetworkManager/Devices/4"
ETH = "/org/freedesktop/NetworkManager/Devices/2"


def _factory(bus):
    async def connect(bus_type):
        return bus
    return connect


def test_run_configures_first_wifi_adapter(fake_bus_class, base_config) -> None:
    bus = fake_bus_class({ETH: 1, WIFI0: 2, WIFI1: 2})
    service = ProvisioningService(config=base_config, bus_factory=_factory(bus))

    async def scenario():
        try:
            return await service.run()
        finally:
            await service.stop()

    result = asyncio.run(scenario())

    assert result.adapter == WIFI0
    assert result.ssid == "my-ap"
    assert service.context.adapter == WIFI0
    assert service.context.access_point is result
    assert service.context.closed
    assert bus.connected is False
    assert [device for _, device, _ in bus.manager.activations] == [WIFI0]


def test_start_without_wifi_adapter_fails(fake_bus_class, base_config) -> None:
    bus = fake_bus_class({ETH: 1})
    service = ProvisioningService(config=base_config, bus_factory=_factory(bus))

    with pytest.raises(NoMatchingEntriesError):
        asyncio.run(service.start())
    assert bus.manager.activations == []


def test_create_access_point_requires_start(base_config) -> None:
    service = ProvisioningService(config=base_config)
    with pytest.raises(BusConnectionError):
        asyncio.run(service.create_access_point())


def test_stop_is_idempotent(fake_bus_class, base_config) -> None:
    bus = fake_bus_class({WIFI0: 2})
    service = ProvisioningService(config=base_config, bus_factory=_factory(bus))

    async def scenario():
        await service.start()
        await service.stop()
        await service.stop()

    asyncio.run(scenario())
    assert service.context.closed


class _StubService:
    error = None
    instances = []

    def __init__(self, config_path):
        self.config_path = config_path
        self.stopped = False
        _StubService.instances.append(self)

    async def run(self):
        if self.error:
            raise self.error

    async def stop(self):
        self.stopped = True


@pytest.fixture
def stub_service():
    _StubService.error = None
    _StubService.instances = []
    return _StubService


def test_main_returns_zero_on_success(stub_service, monkeypatch) -> None:
    monkeypatch.setenv("CONFIG_FILE", "/etc/ap/config.yaml")
    assert asyncio.run(entry.main(service_factory=stub_service)) == entry.EXIT_OK
    assert stub_service.instances[0].config_path == "/etc/ap/config.yaml"
    assert stub_service.instances[0].stopped


@pytest.mark.parametrize(
    "error",
    [
        BusConnectionError("no bus"),
        ConfigurationError(RuntimeError("device busy")),
        FileNotFoundError("config/config.yaml"),
    ],
)
def test_main_returns_non_zero_on_failure(stub_service, error) -> None:
    stub_service.error = error
    assert asyncio.run(entry.main(service_factory=stub_service)) == entry.EXIT_FAILURE
    assert stub_service.instances[0].stopped


def test_main_reports_failed_config_load(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("CONFIG_FILE", str(tmp_path / "missing.yaml"))
    assert asyncio.run(entry.main()) == entry.EXIT_FAILURE
