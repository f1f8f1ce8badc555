"""
NetDevices: SSH CLI automation for network devices.

This package contains:
- config/: Settings, timing, logging and pattern constants
- core/: Credentials and result types
- connections/: Channel I/O, prompt detection, SSH transport, jump hosts
- drivers/: Vendor drivers with registry
- pool.py: Connection pool with idle eviction
- dispatcher.py: Device type resolution and auto-detection
- executors/: Dict-in, dict-out operation runner
- utils/: Error taxonomy
"""

__version__ = '0.1.0'

from .core.types import AuthMethod, CommandResult, Credentials, DeviceType, JumpHostCredentials
from .connections.base import BaseConnection, ConnectionState, SaveMode
from .drivers import DriverRegistry, register_driver
from .pool import ConnectionPool, force_cleanup
from .dispatcher import (
    ConnectionDispatcher,
    classify_device_output,
    connect_handler,
    connect_handler_with_auto_detect,
)
from .executors import DeviceExecutor, OperationRequest, CredentialsPayload
from .utils.errors import AppError

__all__ = [
    'AuthMethod',
    'CommandResult',
    'Credentials',
    'DeviceType',
    'JumpHostCredentials',
    'BaseConnection',
    'ConnectionState',
    'SaveMode',
    'DriverRegistry',
    'register_driver',
    'ConnectionPool',
    'force_cleanup',
    'ConnectionDispatcher',
    'classify_device_output',
    'connect_handler',
    'connect_handler_with_auto_detect',
    'DeviceExecutor',
    'OperationRequest',
    'CredentialsPayload',
    'AppError',
]
