"""
Connection dispatcher.

Resolves a device type tag to its driver, optionally shares live
connections through a ConnectionPool, and offers best-effort device type
auto-detection.
"""

import logging
import re
from typing import Dict, List, Optional

from .config.settings import Settings, Timing
from .connections.base import BaseConnection
from .core.types import Credentials, DEVICE_TYPE_DISPLAY_NAMES, DeviceType
from .drivers import DriverRegistry, GenericConnection
from .pool import ConnectionPool
from .utils.errors import AppError, DetectionFailed

logger = logging.getLogger(__name__)

DEVICE_TYPE_DESCRIPTIONS = {
    DeviceType.CISCO_IOS: 'Cisco IOS routers and switches',
    DeviceType.CISCO_IOS_XE: 'Cisco IOS-XE devices',
    DeviceType.CISCO_IOS_XR: 'Cisco IOS-XR routers (service provider)',
    DeviceType.CISCO_NXOS: 'Cisco Nexus switches',
    DeviceType.CISCO_ASA: 'Cisco ASA firewalls',
    DeviceType.CISCO_SG300: 'Cisco SG300 series switches',
    DeviceType.JUNIPER_JUNOS: 'Juniper routers and switches',
    DeviceType.JUNIPER_SRX: 'Juniper SRX firewalls',
    DeviceType.PALOALTO_PANOS: 'Palo Alto Networks firewalls',
    DeviceType.FORTINET_FORTIOS: 'Fortinet FortiOS firewalls and security appliances',
    DeviceType.CIENA_SAOS: 'Ciena SAOS switches and platforms',
    DeviceType.ERICSSON_IPOS: 'Ericsson IPOS routers',
    DeviceType.ERICSSON_MLTN: 'Ericsson MINI-LINK microwave nodes',
    DeviceType.VYOS: 'VyOS routers',
    DeviceType.LINUX: 'Linux servers and appliances',
    DeviceType.GENERIC: 'Generic SSH connection',
}


def classify_device_output(text: str) -> Optional[str]:
    """
    Guess a device type from banner or prompt text.

    Returns:
        Device type tag, or None when nothing matches
    """
    output = text.lower()

    if 'cisco' in output or re.search(r'\bios\b', output) or 'nx-os' in output:
        if 'nx-os' in output or 'nexus' in output:
            return DeviceType.CISCO_NXOS.value
        if 'adaptive security appliance' in output or ' asa' in output:
            return DeviceType.CISCO_ASA.value
        if 'ios-xr' in output or 'iosxr' in output or 'ios xr' in output:
            return DeviceType.CISCO_IOS_XR.value
        if 'ios-xe' in output or 'ios xe' in output:
            return DeviceType.CISCO_IOS_XE.value
        if 'sg300' in output or 'small business' in output:
            return DeviceType.CISCO_SG300.value
        return DeviceType.CISCO_IOS.value

    if 'junos' in output or 'juniper' in output:
        if 'srx' in output:
            return DeviceType.JUNIPER_SRX.value
        return DeviceType.JUNIPER_JUNOS.value

    if 'ciena' in output or 'saos' in output:
        return DeviceType.CIENA_SAOS.value

    if 'fortinet' in output or 'fortios' in output or 'fortigate' in output:
        return DeviceType.FORTINET_FORTIOS.value

    if 'palo alto' in output or 'pan-os' in output or 'panos' in output or 'paloalto' in output:
        return DeviceType.PALOALTO_PANOS.value

    if 'vyos' in output:
        return DeviceType.VYOS.value

    if 'ericsson' in output:
        if 'mini-link' in output or 'minilink' in output:
            return DeviceType.ERICSSON_MLTN.value
        return DeviceType.ERICSSON_IPOS.value

    if any(word in output for word in ('linux', 'ubuntu', 'centos', 'red hat', 'redhat', 'debian', 'bash')):
        return DeviceType.LINUX.value
    if output.rstrip().endswith('$') or ':~' in output:
        return DeviceType.LINUX.value

    return None


class ConnectionDispatcher:
    """
    Builds driver instances for credentials.

    Usage:
        dispatcher = ConnectionDispatcher(pool=ConnectionPool())
        connection = dispatcher.connect(credentials)
        result = connection.send_command('show version')
        connection.disconnect()
    """

    def __init__(
        self,
        pool: Optional[ConnectionPool] = None,
        timing: Optional[Timing] = None,
        settings: Optional[Settings] = None,
    ):
        self.pool = pool
        self.timing = timing
        self.settings = settings

    def create_connection(self, credentials: Credentials) -> BaseConnection:
        """
        Instantiate the driver for credentials.device_type (not connected).

        Raises:
            UnsupportedDeviceType: Unknown tag
        """
        driver_class = DriverRegistry.get_or_raise(credentials.device_type)
        return driver_class(credentials, timing=self.timing, settings=self.settings, pool=self.pool)

    def connect(self, credentials: Credentials) -> BaseConnection:
        """Create and connect a driver, reusing a pooled session when allowed."""
        connection = self.create_connection(credentials)
        connection.connect()
        return connection

    def auto_detect(self, credentials: Credentials) -> Optional[str]:
        """
        Probe the device with a generic session and guess its type.

        Returns:
            Device type tag, or None when detection failed or nothing matched
        """
        probe = GenericConnection(
            credentials.with_device_type(DeviceType.GENERIC.value),
            timing=self.timing,
            settings=self.settings,
        )
        try:
            probe.connect()
            response = probe.send_command('')
            detected = classify_device_output(f'{probe.banner}\n{response.output}')
        except AppError as e:
            logger.warning(f"Auto-detection of {credentials.host} failed: {e.message}")
            return None
        finally:
            probe.close()

        logger.info(f"Auto-detected {credentials.host} as {detected or 'unknown'}")
        return detected

    def connect_auto(self, credentials: Credentials) -> BaseConnection:
        """
        Detect the device type, then connect with the matching driver.

        Raises:
            DetectionFailed: Detection found nothing
        """
        detected = self.auto_detect(credentials)
        if detected is None:
            raise DetectionFailed(credentials.host)
        return self.connect(credentials.with_device_type(detected))

    @staticmethod
    def supported_device_types() -> List[str]:
        return DriverRegistry.list_types()

    @staticmethod
    def is_supported(device_type: str) -> bool:
        return DriverRegistry.is_registered(device_type)

    @staticmethod
    def display_name(device_type: str) -> str:
        try:
            return DEVICE_TYPE_DISPLAY_NAMES[DeviceType(device_type.lower())]
        except ValueError:
            return device_type

    @staticmethod
    def device_type_options() -> List[Dict[str, str]]:
        return [
            {
                'name': DEVICE_TYPE_DISPLAY_NAMES[device_type],
                'value': device_type.value,
                'description': DEVICE_TYPE_DESCRIPTIONS[device_type],
            }
            for device_type in DeviceType
        ]


def connect_handler(credentials: Credentials, pool: Optional[ConnectionPool] = None) -> BaseConnection:
    """Create an unconnected driver for credentials."""
    return ConnectionDispatcher(pool=pool).create_connection(credentials)


def connect_handler_with_auto_detect(
    credentials: Credentials,
    pool: Optional[ConnectionPool] = None,
) -> BaseConnection:
    """
    Detect the device type and return an unconnected driver for it.

    Raises:
        DetectionFailed: Nothing matched the probe output
    """
    dispatcher = ConnectionDispatcher(pool=pool)
    detected = dispatcher.auto_detect(credentials)
    if detected is None:
        raise DetectionFailed(credentials.host)
    return dispatcher.create_connection(credentials.with_device_type(detected))
