"""
Vendor drivers.

Importing this package registers every driver with DriverRegistry.
"""

from .registry import DriverRegistry, register_driver
from .generic import GenericConnection
from .cisco import CiscoIosConnection, CiscoNxosConnection, CiscoAsaConnection
from .cisco_xr import CiscoXrConnection
from .cisco_sg300 import CiscoSG300Connection
from .juniper import JuniperConnection
from .paloalto import PaloAltoConnection
from .fortinet import FortinetConnection
from .ciena import CienaSaosConnection
from .ericsson import EricssonIposConnection, EricssonMinilinkConnection
from .vyos import VyosConnection
from .linux import LinuxConnection

__all__ = [
    'DriverRegistry',
    'register_driver',
    'GenericConnection',
    'CiscoIosConnection',
    'CiscoNxosConnection',
    'CiscoAsaConnection',
    'CiscoXrConnection',
    'CiscoSG300Connection',
    'JuniperConnection',
    'PaloAltoConnection',
    'FortinetConnection',
    'CienaSaosConnection',
    'EricssonIposConnection',
    'EricssonMinilinkConnection',
    'VyosConnection',
    'LinuxConnection',
]
