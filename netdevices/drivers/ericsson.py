"""
Ericsson IPOS and MINI-LINK drivers.
"""

import logging
import re

from ..connections.base import BaseConnection
from ..core.types import DeviceType
from ..utils.errors import AuthenticationFailed
from .registry import register_driver

logger = logging.getLogger(__name__)


@register_driver
class EricssonIposConnection(BaseConnection):
    """Ericsson IPOS routers (SmartEdge / Router 6000)."""

    device_type = DeviceType.ERICSSON_IPOS.value

    has_privileged_mode = True
    requires_privileged_for_config = True

    paging_commands = ('terminal length 0',)
    terminal_commands = ('terminal width 511',)
    privileged_command = 'enable 15'
    config_command = 'configure'
    exit_config_command = 'end'
    running_config_command = 'show running-config'
    save_command = 'save config'
    save_answer = 'yes'
    reboot_command = 'reload'

    error_patterns = (
        '% invalid input',
        '% incomplete command',
        '% unknown command',
        'invalid input detected',
        'permission denied',
    )


@register_driver
class EricssonMinilinkConnection(BaseConnection):
    """
    Ericsson MINI-LINK microwave nodes.

    The SSH login is followed by a second in-shell User:/Password: dialog.
    """

    device_type = DeviceType.ERICSSON_MLTN.value

    paging_commands = ()
    terminal_commands = ()
    config_command = 'config'
    exit_config_command = 'exit'
    running_config_command = 'show running-config'
    save_command = 'write'
    reboot_command = 'reload'

    config_prompt_pattern = re.compile(r'\(config[^)]*\)\s?#\s*$')

    def after_shell_open(self) -> None:
        text = self.banner
        if 'User:' not in text:
            text += self.io.read_until_prompt(expected='User:', timeout=self.connect_timeout).text
        if 'User:' not in text:
            logger.debug(f"No in-shell login dialog on {self.credentials.host}")
            return

        self.io.write(self.credentials.username + self.newline)
        read = self.io.read_until_prompt(expected='Password:', timeout=self.timing.prompt_read)
        if 'Password:' in read.text:
            self.io.write((self.credentials.password or '') + self.newline)
            read = self.io.read_until_prompt(timeout=self.timing.prompt_read)
            if 'User:' in read.last_line or 'incorrect' in read.text.lower():
                raise AuthenticationFailed(
                    self.credentials.host,
                    f'MINI-LINK login rejected for {self.credentials.username}@{self.credentials.host}',
                )
        self.banner = text + read.text

    def derive_prompts(self) -> None:
        self.privileged_prompt = ''
        self.config_prompt = f'{self.base_prompt}(config)#'
        self._refresh_prompt_patterns()
