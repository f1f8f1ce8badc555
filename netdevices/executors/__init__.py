"""
Invocation boundary for callers that speak plain dicts.
"""

from .schemas import CredentialsPayload, OperationRequest
from .device_executor import DeviceExecutor

__all__ = [
    'CredentialsPayload',
    'OperationRequest',
    'DeviceExecutor',
]
