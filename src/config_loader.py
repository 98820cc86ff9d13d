"""
Configuration loader for the Wi-Fi access point bootstrap
Loads and validates configuration from YAML files
"""

import yaml
import logging
from typing import Dict, Any
from pathlib import Path
from datetime import datetime
import pytz

from discovery.models import DeviceType

logger = logging.getLogger(__name__)

VALID_BUS_TYPES = ('system', 'session')
VALID_BANDS = ('a', 'bg')
VALID_IPV4_METHODS = ('manual', 'shared')

def load_config(config_path: str = "config/config.yaml") -> Dict[str, Any]:
    """
    Load configuration from YAML file with validation
    """
    try:
        config_file = Path(config_path)
        if not config_file.exists():
            logger.error(f"Configuration file not found: {config_path}")
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_file, 'r') as f:
            config = yaml.safe_load(f) or {}

        # Validate required sections
        _validate_config(config)

        # Apply defaults
        config = _apply_defaults(config)

        logger.info(f"Configuration loaded from {config_path}")
        return config

    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        raise

def _validate_config(config: Dict) -> None:
    """Validate that required configuration sections exist"""
    if not isinstance(config, dict):
        raise ValueError("Configuration root must be a mapping")

    required_sections = ['access_point']

    for section in required_sections:
        if section not in config:
            raise ValueError(f"Missing required configuration section: {section}")

    # Every present section must be a mapping (an empty YAML section loads as None)
    for section in ('access_point', 'bus', 'discovery', 'logging'):
        if section in config and not isinstance(config[section], dict):
            raise ValueError(f"Configuration section {section} must be a mapping")

    # Validate access point section
    ap = config['access_point']
    ssid = ap.get('ssid')
    if not isinstance(ssid, str) or not ssid:
        raise ValueError("access_point.ssid is required and must be a non-empty string (quote numeric names)")
    if len(ssid.encode('utf-8')) > 32:
        raise ValueError("access_point.ssid must be at most 32 bytes")

    if ap.get('band') is not None and ap['band'] not in VALID_BANDS:
        raise ValueError(f"access_point.band must be one of {VALID_BANDS}")

    if ap.get('ipv4_method') is not None and ap['ipv4_method'] not in VALID_IPV4_METHODS:
        raise ValueError(f"access_point.ipv4_method must be one of {VALID_IPV4_METHODS}")

    prefix = ap.get('prefix')
    if prefix is not None and not (isinstance(prefix, int) and 0 < prefix <= 32):
        raise ValueError("access_point.prefix must be an integer between 1 and 32")

    # Validate security settings if present
    if ap.get('psk') is not None:
        _validate_access_point_security(ap)

    # Validate bus section
    bus = config.get('bus', {})
    if bus.get('bus_type') is not None and bus['bus_type'] not in VALID_BUS_TYPES:
        raise ValueError(f"bus.bus_type must be one of {VALID_BUS_TYPES}")
    timeout = bus.get('request_timeout')
    if timeout is not None and (not isinstance(timeout, (int, float)) or timeout <= 0):
        raise ValueError("bus.request_timeout must be a positive number of seconds")

    # Validate discovery section
    discovery = config.get('discovery', {})
    if discovery.get('device_type') is not None:
        try:
            DeviceType.resolve(discovery['device_type'])
        except (TypeError, ValueError):
            raise ValueError(f"discovery.device_type is not a known device type name or code: {discovery['device_type']!r}")

def _validate_access_point_security(ap_config: Dict) -> None:
    """Validate access point WPA-PSK configuration"""
    psk = str(ap_config['psk'])
    key_mgmt = ap_config.get('key_mgmt', 'wpa-psk')

    if key_mgmt != 'wpa-psk':
        raise ValueError(f"Unsupported access_point.key_mgmt: {key_mgmt}")

    # WPA passphrases are 8..63 printable characters
    if not 8 <= len(psk) <= 63:
        raise ValueError("access_point.psk must be between 8 and 63 characters")

def _apply_defaults(config: Dict) -> Dict:
    """Apply default values to configuration"""

    # Bus defaults
    if 'bus' not in config:
        config['bus'] = {}
    bus_defaults = {
        'bus_type': 'system',
        'request_timeout': 5
    }
    for key, default_value in bus_defaults.items():
        if key not in config['bus']:
            config['bus'][key] = default_value

    # Discovery defaults
    if 'discovery' not in config:
        config['discovery'] = {}
    discovery_defaults = {
        'device_type': 'wifi'
    }
    for key, default_value in discovery_defaults.items():
        if key not in config['discovery']:
            config['discovery'][key] = default_value

    # Access point defaults (no security unless a psk is configured)
    ap_defaults = {
        'mode': 'ap',
        'band': None,
        'hidden': None,
        'psk': None,
        'key_mgmt': 'wpa-psk',
        'connection_id': None,
        'autoconnect': False,
        'interface_name': None,
        'ipv4_method': 'manual',
        'address': '192.168.2.1',
        'prefix': 24
    }
    for key, default_value in ap_defaults.items():
        if key not in config['access_point']:
            config['access_point'][key] = default_value

    # Logging defaults
    if 'logging' not in config:
        config['logging'] = {}
    logging_defaults = {
        'level': 'INFO',
        'file': None,
        'console_output': True,
        'timezone': 'UTC'
    }
    for key, default_value in logging_defaults.items():
        if key not in config['logging']:
            config['logging'][key] = default_value

    return config


class TimezoneFormatter(logging.Formatter):
    """Formatter that renders timestamps in a configured timezone"""

    def __init__(self, fmt=None, timezone_name: str = 'UTC'):
        super().__init__(fmt)
        self.tz = pytz.timezone(timezone_name)

    def formatTime(self, record, datefmt=None):
        dt = datetime.fromtimestamp(record.created, tz=self.tz)
        if datefmt:
            return dt.strftime(datefmt)
        else:
            # Default format: YYYY-MM-DD HH:MM:SS TZ
            return dt.strftime('%Y-%m-%d %H:%M:%S %Z')

def setup_logging(config: Dict) -> None:
    """Setup logging based on configuration"""
    log_config = config.get('logging', {})
    level = log_config.get('level', 'INFO')
    timezone_name = log_config.get('timezone', 'UTC')

    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    formatter = TimezoneFormatter(log_format, timezone_name)

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper()))
    for handler in list(root.handlers):
        root.removeHandler(handler)

    # Console handler
    if log_config.get('console_output', True):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    # File handler
    log_file = log_config.get('file')
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    logger.info(f"Logging configured: level={level}, timezone={timezone_name}, console={log_config.get('console_output', True)}, file={log_file}")

def get_sample_config() -> Dict:
    """Return a sample configuration for reference"""
    return {
        "bus": {
            "bus_type": "system",
            "request_timeout": 5
        },
        "discovery": {
            "device_type": "wifi"
        },
        "access_point": {
            "ssid": "my-ap",
            "band": "bg",
            "hidden": False,
            "psk": "change-me-please",   # Omit for an open access point
            "key_mgmt": "wpa-psk",
            "autoconnect": False,
            "interface_name": None,      # e.g. "wlan0"
            "ipv4_method": "manual",
            "address": "192.168.2.1",
            "prefix": 24
        },
        "logging": {
            "level": "INFO",
            "file": None,
            "console_output": True,
            "timezone": "UTC"
        }
    }
