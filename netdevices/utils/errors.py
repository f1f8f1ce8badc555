"""
Custom exception classes for standardized error handling.

All exceptions inherit from AppError and include:
- code: Machine-readable error code (e.g., 'PROMPT_TIMEOUT')
- message: Human-readable error message
- details: Extra context (host, failing line, partial output)

Every error is recoverable from the caller's point of view; the caller
decides whether to retry.
"""

from typing import List, Optional


class AppError(Exception):
    """Base application error class."""

    def __init__(self, code: str, message: str, details: dict = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert error to dictionary for a result payload."""
        result = {
            'code': self.code,
            'message': self.message,
        }
        if self.details:
            result['details'] = self.details
        return result


class ValidationError(AppError):
    """Input validation error."""

    def __init__(self, message: str, field: str = None, details: dict = None):
        super().__init__(
            code='VALIDATION_ERROR',
            message=message,
            details=details or {}
        )
        if field:
            self.details['field'] = field


class AuthenticationFailed(AppError):
    """Credentials or key rejected by the server."""

    def __init__(self, host: str, message: str = None, code: str = 'AUTHENTICATION_FAILED'):
        super().__init__(
            code=code,
            message=message or f'Authentication failed for {host}',
            details={'host': host}
        )


class InvalidPrivateKey(AuthenticationFailed):
    """Private key could not be parsed; raised before any network attempt."""

    def __init__(self, message: str, host: str = None):
        super().__init__(host=host, message=message, code='KEY_MALFORMED')


class ConnectionTimeout(AppError):
    """No SSH handshake within the connect timeout."""

    def __init__(self, host: str, timeout_seconds: float, message: str = None):
        super().__init__(
            code='CONNECTION_TIMEOUT',
            message=message or f'Connection to {host} timed out after {timeout_seconds}s',
            details={'host': host, 'timeout_seconds': timeout_seconds}
        )


class HostUnreachable(AppError):
    """DNS failure, refused connection or network error."""

    def __init__(self, host: str, port: int = None, message: str = None):
        super().__init__(
            code='HOST_UNREACHABLE',
            message=message or f'Host {host} is unreachable',
            details={'host': host, 'port': port}
        )


class HandshakeFailed(AppError):
    """Every algorithm set was rejected during key exchange."""

    def __init__(self, host: str, attempts: List[str], message: str = None):
        super().__init__(
            code='HANDSHAKE_FAILED',
            message=message or f'SSH negotiation with {host} failed for all algorithm sets',
            details={'host': host, 'attempts': attempts}
        )


class ChannelUnavailable(AppError):
    """Write or read attempted without a live channel."""

    def __init__(self, message: str = 'No active channel'):
        super().__init__(code='CHANNEL_UNAVAILABLE', message=message)


class PromptTimeout(AppError):
    """Completion was not detected within the read timeout."""

    def __init__(self, timeout_seconds: float, partial_output: str = '', message: str = None):
        super().__init__(
            code='PROMPT_TIMEOUT',
            message=message or f'Prompt not detected within {timeout_seconds}s',
            details={'timeout_seconds': timeout_seconds}
        )
        self.partial_output = partial_output


class ModeChangeError(AppError):
    """Privileged or configuration mode transition did not reach its prompt."""

    def __init__(self, mode: str, output: str = '', message: str = None):
        super().__init__(
            code='MODE_CHANGE_FAILED',
            message=message or f'Failed to change to {mode} mode',
            details={'mode': mode}
        )
        self.output = output


class ConfigurationError(AppError):
    """A configuration line matched a known error pattern."""

    def __init__(self, line: str, output: str = ''):
        super().__init__(
            code='CONFIGURATION_ERROR',
            message=f'Configuration error on command "{line}": {output.strip()}',
            details={'line': line}
        )
        self.line = line
        self.output = output


class CommitFailed(AppError):
    """Commit or save step did not report its success marker."""

    def __init__(self, output: str = '', message: str = None):
        super().__init__(
            code='COMMIT_FAILED',
            message=message or f'Commit failed: {output.strip()}',
        )
        self.output = output


class UnsupportedDeviceType(AppError):
    """Dispatcher lookup miss."""

    def __init__(self, device_type: Optional[str], supported: List[str]):
        super().__init__(
            code='UNSUPPORTED_DEVICE_TYPE',
            message=(
                f'Unsupported device type: {device_type}. '
                f'Supported types: {", ".join(supported)}'
            ),
            details={'device_type': device_type, 'supported': supported}
        )
        self.supported = supported


class DetectionFailed(AppError):
    """Auto-detection could not determine a device type."""

    def __init__(self, host: str):
        super().__init__(
            code='DETECTION_FAILED',
            message='Could not auto-detect device type',
            details={'host': host}
        )
