"""
Discovery data structures and models
"""

from enum import IntEnum
from typing import Dict, List, Union
from dataclasses import dataclass, field

class DeviceType(IntEnum):
    """NetworkManager device type codes (NMDeviceType)"""
    UNKNOWN = 0
    ETHERNET = 1
    WIFI = 2
    BT = 5
    OLPC_MESH = 6
    WIMAX = 7
    MODEM = 8
    INFINIBAND = 9
    BOND = 10
    VLAN = 11
    ADSL = 12
    BRIDGE = 13
    GENERIC = 14
    TEAM = 15
    TUN = 16
    IP_TUNNEL = 17
    MACVLAN = 18
    VXLAN = 19
    VETH = 20
    MACSEC = 21
    DUMMY = 22
    PPP = 23
    OVS_INTERFACE = 24
    OVS_PORT = 25
    OVS_BRIDGE = 26
    WPAN = 27
    LOWPAN = 28
    WIREGUARD = 29
    WIFI_P2P = 30
    VRF = 31

    @classmethod
    def resolve(cls, value: Union[str, int]) -> int:
        """Accept a name ("wifi", "ETHERNET") or a raw integer code"""
        if isinstance(value, str):
            name = value.strip().upper().replace('-', '_')
            try:
                return cls[name]
            except KeyError:
                raise ValueError(f"Unknown device type name: {value}")
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValueError(f"Device type must be a name or a non-negative integer code: {value!r}")
        # Codes unknown to this enum are still valid daemon values
        return int(value)

@dataclass
class DiscoveryResult:
    """Results from one discovery pass"""
    entries: List[str]
    target: int
    duration_seconds: float
    entries_tested: int
    match_count: int
    classifications: Dict[str, int] = field(default_factory=dict)
