"""
Juniper JunOS and SRX driver.

Root logins land in the FreeBSD shell; the driver switches to the CLI
before learning the prompt. Configuration is staged and committed.
"""

import logging
import re
from typing import List, Optional

from ..connections.base import BaseConnection, SaveMode
from ..connections.detector import last_nonempty_line
from ..core.types import DeviceType
from ..utils.errors import ModeChangeError
from .registry import register_driver

logger = logging.getLogger(__name__)

_SHELL_PROMPT = re.compile(r'[%$]\s*$')
_CLI_PROMPT = re.compile(r'[>#]\s*$')


@register_driver
class JuniperConnection(BaseConnection):
    """Juniper JunOS / SRX."""

    device_type = DeviceType.JUNIPER_JUNOS.value
    device_types = (DeviceType.JUNIPER_JUNOS.value, DeviceType.JUNIPER_SRX.value)

    has_two_phase_commit = True

    paging_commands = ('set cli screen-length 0', 'set cli complete-on-space off')
    terminal_commands = ('set cli screen-width 511',)
    config_command = 'configure'
    exit_config_command = 'exit configuration-mode'
    exit_config_answer = 'yes'
    discard_command = 'rollback 0'
    commit_command = 'commit'
    commit_success_marker = 'commit complete'
    commit_failure_patterns = ('error:', 'commit failed', 'configuration check-out failed')
    running_config_command = 'show configuration'
    save_mode = SaveMode.AUTOMATIC
    save_command = 'commit'
    reboot_command = 'request system reboot'
    reboot_answer = 'yes'

    error_patterns = (
        'error:',
        'syntax error',
        'unknown command',
        'missing argument',
        'invalid value',
        'is ambiguous',
    )
    artifact_patterns = (
        re.compile(r'^\[edit.*\]$'),
        re.compile(r'^Entering configuration mode$'),
        re.compile(r'^Exiting configuration mode$'),
        re.compile(r'^The configuration has been changed but not committed$'),
        re.compile(r'^Screen (?:width|length) set to \d+$'),
        re.compile(r'^Disabling complete-on-space$'),
        re.compile(r'^\{(?:master|backup|primary|secondary)(?::\w+)?\}$'),
    )

    config_prompt_pattern = re.compile(r'#\s*$')

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.in_shell_mode = False

    @property
    def prompts(self) -> List[str]:
        # Shell prompts differ from the CLI prompt; fall back to generic shapes
        if self.in_shell_mode:
            return []
        return super().prompts

    def session_preparation(self) -> None:
        self.open_shell()
        self.enter_cli_mode()
        self.set_base_prompt()
        self.disable_paging()
        if not self.credentials.fast_mode:
            self.set_terminal_width()

    def derive_prompts(self) -> None:
        self.privileged_prompt = f'{self.base_prompt}#'
        self.config_prompt = f'{self.base_prompt}#'
        self._refresh_prompt_patterns()

    def enter_cli_mode(self) -> None:
        """Start the JunOS CLI when the login landed in the shell."""
        read = self._execute('', self.timing.prompt_read)
        line = last_nonempty_line(read.text)
        if not _SHELL_PROMPT.search(line):
            self.in_shell_mode = False
            return

        self.in_shell_mode = True
        logger.debug(f"{self.credentials.host} landed in shell, starting CLI")
        read = self._execute('cli', self.timing.prompt_read)
        if not _CLI_PROMPT.search(last_nonempty_line(read.text)):
            raise ModeChangeError('cli', read.text, f'Failed to start the CLI on {self.credentials.host}')
        self.in_shell_mode = False

    def enter_shell_mode(self) -> None:
        if self.in_shell_mode:
            return
        self.exit_config()
        self.in_shell_mode = True
        read = self._execute('start shell', self.timing.prompt_read)
        if not _SHELL_PROMPT.search(last_nonempty_line(read.text)):
            self.in_shell_mode = False
            raise ModeChangeError('shell', read.text, f'Failed to start shell on {self.credentials.host}')

    def return_to_cli_mode(self) -> None:
        if not self.in_shell_mode:
            return
        self.in_shell_mode = False
        read = self._execute('exit', self.timing.prompt_read)
        if not _CLI_PROMPT.search(last_nonempty_line(read.text)):
            self.in_shell_mode = True
            raise ModeChangeError('cli', read.text, f'Failed to return to the CLI on {self.credentials.host}')

    def before_command(self, command: str) -> None:
        if self.in_shell_mode and not command.startswith('cli'):
            self.return_to_cli_mode()

    def check_config_mode(self, output: str) -> bool:
        return not self.in_shell_mode and super().check_config_mode(output)

    def build_commit_command(self, comment: Optional[str] = None) -> str:
        if comment:
            escaped = comment.replace('"', '\\"')
            return f'{self.commit_command} comment "{escaped}"'
        return self.commit_command
