"""Shared utilities."""

from .errors import (
    AppError,
    ValidationError,
    AuthenticationFailed,
    InvalidPrivateKey,
    ConnectionTimeout,
    HostUnreachable,
    HandshakeFailed,
    ChannelUnavailable,
    PromptTimeout,
    ModeChangeError,
    ConfigurationError,
    CommitFailed,
    UnsupportedDeviceType,
    DetectionFailed,
)

__all__ = [
    'AppError',
    'ValidationError',
    'AuthenticationFailed',
    'InvalidPrivateKey',
    'ConnectionTimeout',
    'HostUnreachable',
    'HandshakeFailed',
    'ChannelUnavailable',
    'PromptTimeout',
    'ModeChangeError',
    'ConfigurationError',
    'CommitFailed',
    'UnsupportedDeviceType',
    'DetectionFailed',
]
