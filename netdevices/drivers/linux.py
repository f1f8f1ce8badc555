"""
Linux host driver.

The interactive shell is only used to characterise the session; commands
run over exec channels with separate stdout/stderr and an exit status.
"""

import logging
import socket
from typing import Optional, Sequence, Union

import paramiko

from ..connections.base import BaseConnection, SaveMode
from ..connections.detector import Expected, normalize_newlines, strip_ansi
from ..core.types import CommandResult, DeviceType
from .registry import register_driver

logger = logging.getLogger(__name__)


@register_driver
class LinuxConnection(BaseConnection):
    """Linux servers reached over SSH."""

    device_type = DeviceType.LINUX.value
    prompt_terminators = '$#%>'

    has_config_mode = False

    paging_commands = ()
    terminal_commands = ()
    running_config_command = 'cat /etc/os-release && echo "---" && uname -a'
    save_mode = SaveMode.COMMAND
    save_command = 'sync && echo "Configuration synchronized"'
    reboot_command = 'reboot'

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.root_user = self.credentials.username == 'root'

    def session_preparation(self) -> None:
        self.open_shell()
        self.set_base_prompt()
        if not self.credentials.fast_mode:
            result = self.send_command('whoami')
            self.root_user = result.success and result.output.strip() == 'root'

    def derive_prompts(self) -> None:
        self.privileged_prompt = ''
        self.config_prompt = ''
        self._refresh_prompt_patterns()

    def send_command(
        self,
        command: str,
        timeout: Optional[float] = None,
        expected: Optional[Expected] = None,
    ) -> CommandResult:
        """
        Run a command on an exec channel.

        Success follows the exit status; stderr becomes the error message.
        """
        if not self.connected or self.client is None:
            return CommandResult(command, '', False, 'Not connected to device')

        timeout = timeout or self.command_timeout
        try:
            stdin, stdout, stderr = self.client.exec_command(command, timeout=timeout)
            stdin.close()
            out = stdout.read().decode('utf-8', errors='replace')
            err = stderr.read().decode('utf-8', errors='replace')
            exit_code = stdout.channel.recv_exit_status()
        except socket.timeout:
            return CommandResult(command, '', False, f'Command "{command}" timed out after {timeout}s')
        except (paramiko.SSHException, socket.error, EOFError) as e:
            return CommandResult(command, '', False, f'Failed to run "{command}": {e}')
        finally:
            self.touch()

        output = self.clean_exec_output(out)
        errors = self.clean_exec_output(err)
        if exit_code == 0:
            if errors:
                logger.debug(f"'{command}' on {self.credentials.host} wrote to stderr: {errors}")
            return CommandResult(command, output, True)
        return CommandResult(
            command,
            output,
            False,
            errors or f'Command "{command}" exited with status {exit_code}',
        )

    @staticmethod
    def clean_exec_output(text: str) -> str:
        return normalize_newlines(strip_ansi(text)).strip()

    def send_config(self, lines: Union[str, Sequence[str]], commit: Optional[bool] = None) -> CommandResult:
        """Run each line as a command, stopping at the first failure."""
        if isinstance(lines, str):
            lines = lines.splitlines()
        lines = [line for line in lines if line.strip()]
        joined = '\n'.join(lines)
        outputs = []
        for line in lines:
            result = self.send_command(line)
            if result.output:
                outputs.append(result.output)
            if not result.success:
                return CommandResult(joined, '\n'.join(outputs), False, f'Command "{line}" failed: {result.error}')
        return CommandResult(joined, '\n'.join(outputs), True)

    def save_config(self) -> CommandResult:
        return self.send_command(self.save_command)

    def reboot_device(self) -> CommandResult:
        command = self.reboot_command if self.root_user else f'sudo {self.reboot_command}'
        if not self.connected or self.client is None:
            return CommandResult(command, '', False, 'Not connected to device')
        try:
            self.client.exec_command(command, timeout=self.timing.reboot)
        except (paramiko.SSHException, socket.error, EOFError) as e:
            return CommandResult(command, '', False, f'Failed to run "{command}": {e}')
        logger.info(f"Reboot issued on {self.credentials.host}")
        return CommandResult(command, 'Reboot command sent', True)

    def execute_as_root(self, command: str) -> CommandResult:
        return self.send_command(command if self.root_user else f'sudo {command}')

    def get_system_info(self) -> CommandResult:
        return self.send_command('uname -a && cat /etc/os-release')

    def get_process_list(self) -> CommandResult:
        return self.send_command('ps aux')

    def get_disk_usage(self) -> CommandResult:
        return self.send_command('df -h')

    def get_memory_info(self) -> CommandResult:
        return self.send_command('free -h')

    def get_network_interfaces(self) -> CommandResult:
        return self.send_command('ip addr show')

    def get_service_status(self, service_name: str) -> CommandResult:
        return self.send_command(f'systemctl status {service_name}')

    def start_service(self, service_name: str) -> CommandResult:
        return self.execute_as_root(f'systemctl start {service_name}')

    def stop_service(self, service_name: str) -> CommandResult:
        return self.execute_as_root(f'systemctl stop {service_name}')

    def restart_service(self, service_name: str) -> CommandResult:
        return self.execute_as_root(f'systemctl restart {service_name}')
