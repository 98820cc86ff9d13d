# D-Bus helper for NetworkManager
# Opens the message bus connection and wraps the few NetworkManager calls we use

import logging
from typing import Dict, List, Tuple

from dbus_next import BusType, DBusError, Variant
from dbus_next.aio import MessageBus

from errors import BusConnectionError

logger = logging.getLogger(__name__)

NM_BUS_NAME = 'org.freedesktop.NetworkManager'
NM_OBJECT_PATH = '/org/freedesktop/NetworkManager'
NM_INTERFACE = 'org.freedesktop.NetworkManager'
NM_DEVICE_INTERFACE = 'org.freedesktop.NetworkManager.Device'

BUS_TYPES = {
    'system': BusType.SYSTEM,
    'session': BusType.SESSION,
}

async def connect_bus(bus_type: str = 'system') -> MessageBus:
    """
    Open a connection to the requested message bus
    Raises BusConnectionError when the bus cannot be reached
    """
    try:
        bus = await MessageBus(bus_type=BUS_TYPES[bus_type]).connect()
    except KeyError:
        raise BusConnectionError(f"Unknown bus type: {bus_type}")
    except Exception as e:
        logger.error(f"Failed to access {bus_type} bus: {e}")
        raise BusConnectionError(f"Failed to access {bus_type} bus: {e}", e) from e

    logger.info(f"Connected to {bus_type} bus as {bus.unique_name}")
    return bus


class NetworkManagerClient:
    """Thin async client for the NetworkManager D-Bus API"""

    def __init__(self, bus: MessageBus):
        self.bus = bus

    async def _get_interface(self, path: str, interface: str):
        if self.bus is None or not self.bus.connected:
            raise BusConnectionError("System bus not available")
        introspection = await self.bus.introspect(NM_BUS_NAME, path)
        proxy = self.bus.get_proxy_object(NM_BUS_NAME, path, introspection)
        return proxy.get_interface(interface)

    async def get_devices(self) -> List[str]:
        """Get the object paths of all network adapters"""
        manager = await self._get_interface(NM_OBJECT_PATH, NM_INTERFACE)
        devices = await manager.call_get_all_devices()
        logger.debug(f"NetworkManager reported {len(devices)} devices")
        return list(devices)

    async def get_device_type(self, device_path: str) -> int:
        """Get the NetworkManager device type code for one adapter"""
        device = await self._get_interface(device_path, NM_DEVICE_INTERFACE)
        return int(await device.get_device_type())

    # Enumeration interface used by discovery
    list_entries = get_devices
    classify_entry = get_device_type

    async def add_and_activate_connection(self, settings: Dict[str, Dict[str, Variant]],
                                          device_path: str, specific_object: str = '/') -> Tuple[str, str]:
        """
        Create a connection profile and activate it on a device
        Returns (connection path, active connection path)
        """
        manager = await self._get_interface(NM_OBJECT_PATH, NM_INTERFACE)
        connection_path, active_path = await manager.call_add_and_activate_connection(
            settings, device_path, specific_object
        )
        return connection_path, active_path

    def close(self):
        if self.bus is not None and self.bus.connected:
            self.bus.disconnect()
            logger.info("Disconnected from message bus")
        self.bus = None


def describe_dbus_error(error: Exception) -> str:
    """Render a DBusError with its error name, anything else as-is"""
    if isinstance(error, DBusError):
        return f"{error.type}: {error.text}"
    return str(error)
