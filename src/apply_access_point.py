"""
Access Point Configurator
Builds NetworkManager connection settings for a Wi-Fi access point and
activates them on the selected adapter with a single remote call
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from dbus_next import Variant

from errors import ConfigurationError
from nm_bus import describe_dbus_error

logger = logging.getLogger(__name__)

MAX_SSID_BYTES = 32

@dataclass
class AccessPointResult:
    """Outcome of a successful activation"""
    adapter: str
    ssid: str
    connection_path: str
    active_connection_path: str

def encode_ssid(network_name: str) -> bytes:
    """Convert a network name to the raw byte sequence NetworkManager expects"""
    if not isinstance(network_name, str):
        raise ValueError(f"SSID must be a string, got {type(network_name).__name__}")
    ssid = network_name.encode('utf-8')
    if not 0 < len(ssid) <= MAX_SSID_BYTES:
        raise ValueError(f"SSID must be 1-{MAX_SSID_BYTES} bytes, got {len(ssid)}")
    return ssid

def build_connection_settings(network_name: str, ap_config: Dict) -> Dict[str, Dict[str, Variant]]:
    """
    Build the a{sa{sv}} settings dict for AddAndActivateConnection
    Security is only added when a psk is configured
    """
    wireless = {
        'ssid': Variant('ay', encode_ssid(network_name)),
        'mode': Variant('s', ap_config.get('mode', 'ap')),
    }
    if ap_config.get('band'):
        wireless['band'] = Variant('s', ap_config['band'])
    if ap_config.get('hidden') is not None:
        wireless['hidden'] = Variant('b', bool(ap_config['hidden']))

    connection = {
        'id': Variant('s', ap_config.get('connection_id') or network_name),
        'type': Variant('s', '802-11-wireless'),
        'autoconnect': Variant('b', bool(ap_config.get('autoconnect', False))),
    }
    if ap_config.get('interface_name'):
        connection['interface-name'] = Variant('s', ap_config['interface_name'])

    ipv4 = {
        'method': Variant('s', ap_config.get('ipv4_method', 'manual')),
        'address-data': Variant('aa{sv}', [{
            'address': Variant('s', ap_config.get('address', '192.168.2.1')),
            'prefix': Variant('u', int(ap_config.get('prefix', 24))),
        }]),
    }

    settings = {
        '802-11-wireless': wireless,
        'connection': connection,
        'ipv4': ipv4,
    }

    psk = ap_config.get('psk')
    if psk:
        settings['802-11-wireless-security'] = {
            'key-mgmt': Variant('s', ap_config.get('key_mgmt', 'wpa-psk')),
            'psk': Variant('s', str(psk)),
        }
    else:
        logger.warning(f"[SECURITY] Access point '{network_name}' will be open: no psk configured")

    return settings


class AccessPointConfigurator:
    """Turns a Wi-Fi adapter into an access point for first time setup"""

    def __init__(self, client, ap_config: Dict, request_timeout: Optional[float] = None):
        self.client = client
        self.ap_config = ap_config
        self.request_timeout = request_timeout

    async def configure_access_point(self, adapter_ref: str, network_name: Optional[str] = None) -> AccessPointResult:
        """
        Create and activate the access point connection on adapter_ref
        Raises ConfigurationError on invalid settings or a failed call, no retry
        """
        ssid = network_name or self.ap_config['ssid']

        try:
            settings = build_connection_settings(ssid, self.ap_config)
        except ValueError as e:
            raise ConfigurationError(e) from e

        logger.info(f"[AP] Creating access point '{ssid}' on {adapter_ref}...")
        try:
            call = self.client.add_and_activate_connection(settings, adapter_ref, '/')
            if self.request_timeout is None:
                connection_path, active_path = await call
            else:
                connection_path, active_path = await asyncio.wait_for(call, self.request_timeout)
        except Exception as e:
            logger.error(f"AddAndActivateConnection failed on {adapter_ref}: {describe_dbus_error(e)}")
            raise ConfigurationError(e) from e

        logger.info(f"[OK] Access point '{ssid}' active: connection={connection_path}, active={active_path}")
        return AccessPointResult(
            adapter=adapter_ref,
            ssid=ssid,
            connection_path=connection_path,
            active_connection_path=active_path
        )
