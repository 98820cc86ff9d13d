"""
Provisioning Service - orchestrates first time setup
Connects to the message bus, selects the Wi-Fi adapter and brings up the access point
"""

import logging
import time
from dataclasses import dataclass
from typing import Dict, Optional

from config_loader import load_config, setup_logging
from nm_bus import connect_bus, NetworkManagerClient
from discovery.manager import AdapterDiscovery
from apply_access_point import AccessPointConfigurator, AccessPointResult
from errors import BusConnectionError

logger = logging.getLogger(__name__)

@dataclass
class ProvisioningContext:
    """Everything one provisioning attempt owns; created on connect, torn down by close()"""
    client: NetworkManagerClient
    adapter: Optional[str] = None
    access_point: Optional[AccessPointResult] = None

    @property
    def closed(self) -> bool:
        return self.client.bus is None

    def close(self):
        if not self.closed:
            self.client.close()


class ProvisioningService:
    """Runs one access point provisioning attempt"""

    def __init__(self, config_path: str = "config/config.yaml", config: Optional[Dict] = None,
                 bus_factory=connect_bus):
        if config is None:
            config = load_config(config_path)
            setup_logging(config)
        self.config = config
        self.bus_factory = bus_factory
        self.request_timeout = config['bus'].get('request_timeout')
        self.context: Optional[ProvisioningContext] = None

    async def start(self) -> ProvisioningContext:
        """Open the bus connection and find the primary Wi-Fi adapter"""
        logger.info("Starting network manager...")
        bus_type = self.config['bus'].get('bus_type', 'system')

        bus = await self.bus_factory(bus_type)
        self.context = ProvisioningContext(client=NetworkManagerClient(bus))

        try:
            discovery = AdapterDiscovery(self.context.client, self.config['discovery'], self.request_timeout)
            self.context.adapter = await discovery.select_adapter()
        except Exception as e:
            logger.error(f"Unable to find a Wi-Fi adapter: {e}")
            raise

        return self.context

    async def create_access_point(self, ssid: Optional[str] = None) -> AccessPointResult:
        """Create the Wi-Fi access point clients connect to for first time setup"""
        if self.context is None or self.context.adapter is None:
            raise BusConnectionError("Provisioning context not started")

        configurator = AccessPointConfigurator(self.context.client, self.config['access_point'], self.request_timeout)
        self.context.access_point = await configurator.configure_access_point(self.context.adapter, ssid)
        return self.context.access_point

    async def run(self) -> AccessPointResult:
        """Start and create the access point in one go"""
        start_time = time.time()
        await self.start()
        result = await self.create_access_point()
        logger.info(f"[SUCCESS] First time setup access point ready in {time.time() - start_time:.1f}s")
        return result

    async def stop(self):
        """Release the bus connection"""
        if self.context is not None:
            self.context.close()
        logger.info("Provisioning service stopped")
