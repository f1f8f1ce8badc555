"""
Driver registry mapping device type tags to driver classes.

The registry provides a centralized way to:
- Register drivers by device type
- Resolve a tag (case-insensitive) to exactly one driver
- List supported device types
"""

from typing import Dict, List, Optional, Type

from ..connections.base import BaseConnection
from ..core.types import DEVICE_TYPE_DISPLAY_NAMES, DeviceType
from ..utils.errors import UnsupportedDeviceType


class DriverRegistry:
    """
    Registry of connection drivers.

    Usage:
        @register_driver
        class JuniperConnection(BaseConnection):
            device_types = ('juniper_junos', 'juniper_srx')

        driver_class = DriverRegistry.get_or_raise('Juniper_JunOS')
    """

    _drivers: Dict[str, Type[BaseConnection]] = {}

    @classmethod
    def register(cls, driver_class: Type[BaseConnection]) -> None:
        """
        Register a driver class for each tag in its device_types.

        Raises:
            ValueError: If the class is not a driver or a tag is taken
        """
        if not issubclass(driver_class, BaseConnection):
            raise ValueError(f'{driver_class} must inherit from BaseConnection')

        tags = getattr(driver_class, 'device_types', None) or (driver_class.device_type,)
        for tag in tags:
            key = DeviceType(tag).value
            if key in cls._drivers and cls._drivers[key] is not driver_class:
                raise ValueError(f'Device type "{key}" is already registered')
            cls._drivers[key] = driver_class

    @classmethod
    def get(cls, device_type: Optional[str]) -> Optional[Type[BaseConnection]]:
        if not device_type:
            return None
        return cls._drivers.get(device_type.strip().lower())

    @classmethod
    def get_or_raise(cls, device_type: Optional[str]) -> Type[BaseConnection]:
        """
        Resolve a device type tag.

        Raises:
            UnsupportedDeviceType: Tag unknown
        """
        driver_class = cls.get(device_type)
        if driver_class is None:
            raise UnsupportedDeviceType(device_type, cls.list_types())
        return driver_class

    @classmethod
    def list_types(cls) -> List[str]:
        return sorted(cls._drivers.keys())

    @classmethod
    def list_drivers(cls) -> List[Dict]:
        return [
            {
                'type': device_type,
                'name': DEVICE_TYPE_DISPLAY_NAMES[DeviceType(device_type)],
                'class': driver_class.__name__,
            }
            for device_type, driver_class in sorted(cls._drivers.items())
        ]

    @classmethod
    def is_registered(cls, device_type: str) -> bool:
        return cls.get(device_type) is not None


def register_driver(driver_class: Type[BaseConnection]) -> Type[BaseConnection]:
    """
    Decorator to register a driver class.

    Usage:
        @register_driver
        class CiscoConnection(BaseConnection):
            ...
    """
    DriverRegistry.register(driver_class)
    return driver_class
