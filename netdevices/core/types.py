"""
Shared types for the connection engine.

Dataclasses passed between the caller, the dispatcher and the drivers.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional

from ..config.constants import POOL_KEY_FORMAT


class AuthMethod(str, Enum):
    """How a hop authenticates."""
    PASSWORD = 'password'
    PRIVATE_KEY = 'privateKey'


class DeviceType(str, Enum):
    """Device type tags, each resolved to exactly one driver."""
    CISCO_IOS = 'cisco_ios'
    CISCO_IOS_XE = 'cisco_ios_xe'
    CISCO_IOS_XR = 'cisco_ios_xr'
    CISCO_NXOS = 'cisco_nxos'
    CISCO_ASA = 'cisco_asa'
    CISCO_SG300 = 'cisco_sg300'
    JUNIPER_JUNOS = 'juniper_junos'
    JUNIPER_SRX = 'juniper_srx'
    PALOALTO_PANOS = 'paloalto_panos'
    FORTINET_FORTIOS = 'fortinet_fortios'
    CIENA_SAOS = 'ciena_saos'
    ERICSSON_IPOS = 'ericsson_ipos'
    ERICSSON_MLTN = 'ericsson_mltn'
    VYOS = 'vyos'
    LINUX = 'linux'
    GENERIC = 'generic'


DEVICE_TYPE_DISPLAY_NAMES = {
    DeviceType.CISCO_IOS: 'Cisco IOS',
    DeviceType.CISCO_IOS_XE: 'Cisco IOS-XE',
    DeviceType.CISCO_IOS_XR: 'Cisco IOS-XR',
    DeviceType.CISCO_NXOS: 'Cisco NX-OS',
    DeviceType.CISCO_ASA: 'Cisco ASA',
    DeviceType.CISCO_SG300: 'Cisco SG300 Series',
    DeviceType.JUNIPER_JUNOS: 'Juniper JunOS',
    DeviceType.JUNIPER_SRX: 'Juniper SRX',
    DeviceType.PALOALTO_PANOS: 'Palo Alto PAN-OS',
    DeviceType.FORTINET_FORTIOS: 'Fortinet FortiOS',
    DeviceType.CIENA_SAOS: 'Ciena SAOS',
    DeviceType.ERICSSON_IPOS: 'Ericsson IPOS',
    DeviceType.ERICSSON_MLTN: 'Ericsson MINI-LINK',
    DeviceType.VYOS: 'VyOS',
    DeviceType.LINUX: 'Linux Server',
    DeviceType.GENERIC: 'Generic SSH',
}


@dataclass(frozen=True)
class JumpHostCredentials:
    """Credentials for the bastion hop."""
    host: str
    username: str
    port: int = 22
    auth_method: AuthMethod = AuthMethod.PASSWORD
    password: Optional[str] = field(default=None, repr=False)
    private_key: Optional[str] = field(default=None, repr=False)
    passphrase: Optional[str] = field(default=None, repr=False)


@dataclass(frozen=True)
class Credentials:
    """
    Everything needed to reach and drive one device.

    Immutable once a connection is constructed. Timeouts are seconds;
    None means use the configured default.
    """
    host: str
    username: str
    device_type: str = DeviceType.GENERIC.value
    port: int = 22
    auth_method: AuthMethod = AuthMethod.PASSWORD
    password: Optional[str] = field(default=None, repr=False)
    private_key: Optional[str] = field(default=None, repr=False)
    passphrase: Optional[str] = field(default=None, repr=False)
    enable_password: Optional[str] = field(default=None, repr=False)
    timeout: Optional[float] = None
    command_timeout: Optional[float] = None
    keep_alive: bool = True
    fast_mode: bool = False
    connection_pooling: bool = False
    jump_host: Optional[JumpHostCredentials] = None

    @property
    def pool_key(self) -> str:
        return POOL_KEY_FORMAT.format(host=self.host, port=self.port, username=self.username)

    def with_device_type(self, device_type: str) -> 'Credentials':
        """Copy with a different device type tag."""
        return replace(self, device_type=device_type)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one execution operation."""
    command: str
    output: str = ''
    success: bool = True
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'command': self.command,
            'output': self.output,
            'success': self.success,
            'error': self.error,
        }
