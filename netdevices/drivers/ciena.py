"""
Ciena SAOS driver.
"""

from ..connections.base import BaseConnection
from ..core.types import DeviceType
from .registry import register_driver


@register_driver
class CienaSaosConnection(BaseConnection):
    """Ciena SAOS switches: flat CLI with no enable or configuration mode."""

    device_type = DeviceType.CIENA_SAOS.value
    prompt_terminators = '>#$'

    has_config_mode = False

    paging_commands = ('system shell session set more off',)
    terminal_commands = ()
    running_config_command = 'configuration show'
    save_command = 'configuration save'
    reboot_command = 'chassis reboot'
    reboot_answer = 'y'

    error_patterns = (
        'shell parser failure',
        'error:',
        'invalid command',
        'permission denied',
        'unknown command',
    )

    def derive_prompts(self) -> None:
        self.privileged_prompt = ''
        self.config_prompt = ''
        self._refresh_prompt_patterns()
