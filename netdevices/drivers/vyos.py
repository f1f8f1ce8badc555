"""
VyOS driver.
"""

import re

from ..connections.base import BaseConnection
from ..core.types import CommandResult, DeviceType
from ..utils.errors import AppError, CommitFailed, ModeChangeError
from .registry import register_driver


@register_driver
class VyosConnection(BaseConnection):
    """VyOS routers: Junos-style configure/commit with an explicit save."""

    device_type = DeviceType.VYOS.value

    has_two_phase_commit = True

    paging_commands = ('set terminal length 0',)
    terminal_commands = ('set terminal width 512',)
    config_command = 'configure'
    exit_config_command = 'exit'
    commit_command = 'commit'
    commit_failure_patterns = ('commit failed', 'failed to generate committed config')
    running_config_command = 'show configuration commands'
    save_command = 'save'
    save_success_marker = 'Done'
    reboot_command = 'reboot'
    reboot_answer = 'y'

    error_patterns = (
        'invalid command',
        'configuration path',
        'is not valid',
        'set failed',
        'commit failed',
        'permission denied',
    )
    artifact_patterns = (
        re.compile(r'^\[edit.*\]$'),
        re.compile(r'^\[ \S.*\]$'),
    )
    config_prompt_pattern = re.compile(r'#\s*$')

    def session_preparation(self) -> None:
        self.open_shell()
        self.set_base_prompt()
        self.disable_paging()
        if not self.credentials.fast_mode:
            self.set_terminal_width()

    def derive_prompts(self) -> None:
        # vyos@vyos:~$ in operational mode, vyos@vyos# in configuration mode
        user_host = self.base_prompt.split(':', 1)[0]
        self.privileged_prompt = ''
        self.config_prompt = f'{user_host}#'
        self._refresh_prompt_patterns()

    def exit_config(self) -> None:
        if not self.in_config_mode:
            return
        read = self._execute(self.exit_config_command, self.timing.prompt_read)
        if 'Cannot exit: configuration modified' in read.text:
            read = self._execute('exit discard', self.timing.prompt_read)
        if self.check_config_mode(read.text):
            raise ModeChangeError('exec', read.text, f'Failed to exit configuration mode on {self.credentials.host}')
        self.in_config_mode = False

    def save_config(self) -> CommandResult:
        """Write the running configuration to the boot config from configuration mode."""
        if not self.connected:
            return CommandResult(self.save_command, '', False, 'Not connected to device')
        try:
            self.enter_config()
            read = self._execute(self.save_command, self.command_timeout * 3)
            output = self.sanitize_output(read.text, self.save_command)
            self.exit_config()
            if self.save_success_marker not in read.text:
                raise CommitFailed(output, f'Save failed: {output}')
        except AppError as e:
            self.recover_config_mode()
            return CommandResult(self.save_command, '', False, e.message)
        finally:
            self.touch()
        return CommandResult(self.save_command, output, True)
