"""
Palo Alto PAN-OS driver.
"""

import logging
import re
from typing import Optional

from ..connections.base import BaseConnection, SaveMode
from ..core.types import CommandResult, DeviceType
from ..utils.errors import AppError, ValidationError
from .registry import register_driver

logger = logging.getLogger(__name__)


@register_driver
class PaloAltoConnection(BaseConnection):
    """PAN-OS firewalls: candidate configuration activated by commit."""

    device_type = DeviceType.PALOALTO_PANOS.value
    prompt_terminators = '>#'

    has_two_phase_commit = True

    paging_commands = ('set cli pager off',)
    terminal_commands = ('set cli terminal width 500', 'set cli scripting-mode on')
    config_command = 'configure'
    exit_config_command = 'exit'
    discard_command = 'revert config'
    commit_command = 'commit'
    commit_success_marker = 'configuration committed successfully'
    commit_failure_patterns = ('commit failed', 'validation error')
    running_config_command = 'show config running'
    save_mode = SaveMode.AUTOMATIC
    save_command = 'commit'
    reboot_command = 'request restart system'
    reboot_answer = 'yes'

    error_patterns = (
        'invalid syntax',
        'unknown command',
        'server error',
        'validation error',
        'permission denied',
    )
    artifact_patterns = (
        re.compile(r'^\[edit.*\]$'),
    )
    config_prompt_pattern = re.compile(r'#\s*$')

    def session_preparation(self) -> None:
        super().session_preparation()
        if not self.credentials.fast_mode:
            self._execute('show system info', self.timing.setup_read)

    def derive_prompts(self) -> None:
        self.privileged_prompt = ''
        self.config_prompt = f'{self.base_prompt}#'
        self._refresh_prompt_patterns()

    def commit(
        self,
        comment: Optional[str] = None,
        force: bool = False,
        partial: bool = False,
        device_and_network: bool = False,
        policy_and_objects: bool = False,
        vsys: str = '',
        no_vsys: bool = False,
    ) -> str:
        """
        Commit the candidate configuration.

        Must be called in configuration mode.

        Raises:
            ValidationError: Partial-commit options given without partial
            CommitFailed: Success marker not reported
        """
        if (device_and_network or policy_and_objects or vsys or no_vsys) and not partial:
            raise ValidationError(
                "'partial' must be set when using device_and_network, policy_and_objects, vsys or no_vsys",
                field='partial',
            )

        command = self.commit_command
        if comment:
            command += f' description "{comment}"'
        if force:
            command += ' force'
        if partial:
            command += ' partial'
            if vsys:
                command += f' {vsys}'
            if device_and_network:
                command += ' device-and-network'
            if policy_and_objects:
                command += ' policy-and-objects'
            if no_vsys:
                command += ' no-vsys'
            command += ' excluded'

        read = self._execute(command, self.timing.commit, expected=self.commit_expected())
        output = self.sanitize_output(read.text, command)
        self.check_commit(read, output)
        logger.info(f"Configuration committed on {self.credentials.host}")
        return output

    def commit_changes(self, **options) -> CommandResult:
        """Enter configuration mode, commit, and leave again."""
        if not self.connected:
            return CommandResult('commit', '', False, 'Not connected to device')
        try:
            self.enter_config()
            output = self.commit(**options)
            self.exit_config()
        except AppError as e:
            self.recover_config_mode()
            return CommandResult('commit', '', False, e.message)
        return CommandResult('commit', output, True)
