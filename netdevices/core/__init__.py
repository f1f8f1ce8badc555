"""Core types shared by the engine."""

from .types import (
    AuthMethod,
    DeviceType,
    DEVICE_TYPE_DISPLAY_NAMES,
    Credentials,
    JumpHostCredentials,
    CommandResult,
)

__all__ = [
    'AuthMethod',
    'DeviceType',
    'DEVICE_TYPE_DISPLAY_NAMES',
    'Credentials',
    'JumpHostCredentials',
    'CommandResult',
]
