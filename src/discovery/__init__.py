"""
Discovery module for network adapter discovery
"""

from .manager import AdapterDiscovery, discover, discover_entries, classify_entries, list_entries
from .models import DeviceType, DiscoveryResult

__all__ = ['AdapterDiscovery', 'discover', 'discover_entries', 'classify_entries', 'list_entries',
           'DeviceType', 'DiscoveryResult']
