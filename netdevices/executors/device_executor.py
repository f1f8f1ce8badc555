"""
Device operation executor.

Runs one operation against one device and returns a flat result dict.
"""

import logging
import time
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError as RequestValidationError

from ..connections.base import BaseConnection
from ..core.types import CommandResult
from ..dispatcher import ConnectionDispatcher
from ..utils.errors import AppError
from .schemas import OperationRequest

logger = logging.getLogger(__name__)


class DeviceExecutor:
    """
    Executor for network device CLI operations.

    The connection is always released before returning. Retries are left
    to the caller.
    """

    def __init__(self, dispatcher: Optional[ConnectionDispatcher] = None):
        self.dispatcher = dispatcher or ConnectionDispatcher()

    @property
    def executor_type(self) -> str:
        return 'netdevices'

    def execute(self, request: Union[OperationRequest, Dict[str, Any]]) -> Dict:
        """
        Execute an operation on a device.

        Args:
            request: OperationRequest or a dict in its camelCase shape

        Returns:
            Dict with success, output, error, command, device_type, host, duration
        """
        start_time = time.time()

        if not isinstance(request, OperationRequest):
            try:
                request = OperationRequest.model_validate(request)
            except RequestValidationError as e:
                return self._failure(start_time, f'Invalid request: {e}', code='VALIDATION_ERROR')

        credentials = request.credentials.to_credentials()
        connection = None
        try:
            connection = self.dispatcher.connect(credentials)
            result = self.run_operation(connection, request)
        except AppError as e:
            logger.warning(f"{request.operation} on {credentials.host} failed: {e.message}")
            return self._failure(
                start_time,
                e.message,
                code=e.code,
                device_type=credentials.device_type,
                host=credentials.host,
            )
        finally:
            if connection is not None:
                connection.disconnect()

        return {
            'success': result.success,
            'output': result.output,
            'error': result.error,
            'command': result.command,
            'device_type': connection.device_type,
            'host': credentials.host,
            'duration': time.time() - start_time,
        }

    def run_operation(self, connection: BaseConnection, request: OperationRequest) -> CommandResult:
        operation = request.operation
        if operation == 'send-command':
            return connection.send_command(request.command)
        if operation == 'send-config':
            return connection.send_config(request.config_lines, commit=request.commit)
        if operation == 'get-running-config':
            return connection.get_current_config()
        if operation == 'save-config':
            return connection.save_config()
        return connection.reboot_device()

    @staticmethod
    def _failure(start_time: float, error: str, code: str = None, device_type: str = None, host: str = None) -> Dict:
        return {
            'success': False,
            'output': '',
            'error': error,
            'error_code': code,
            'command': None,
            'device_type': device_type,
            'host': host,
            'duration': time.time() - start_time,
        }
