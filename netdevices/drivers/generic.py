"""
Generic SSH driver for devices without a dedicated driver.
"""

from ..connections.base import BaseConnection
from ..core.types import DeviceType
from .registry import register_driver


@register_driver
class GenericConnection(BaseConnection):
    """Plain prompt-driven CLI using the base behaviour unchanged."""

    device_type = DeviceType.GENERIC.value
