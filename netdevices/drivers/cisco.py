"""
Cisco IOS, IOS-XE, NX-OS and ASA drivers.
"""

import logging
import re

from ..connections.base import BaseConnection
from ..core.types import DeviceType
from .registry import register_driver

logger = logging.getLogger(__name__)


@register_driver
class CiscoIosConnection(BaseConnection):
    """Cisco IOS and IOS-XE: enable mode, configure terminal, write memory."""

    device_type = DeviceType.CISCO_IOS.value
    device_types = (DeviceType.CISCO_IOS.value, DeviceType.CISCO_IOS_XE.value)

    has_privileged_mode = True
    requires_privileged_for_config = True

    paging_commands = ('terminal length 0',)
    terminal_commands = ('terminal width 511',)
    config_command = 'configure terminal'
    exit_config_command = 'end'
    running_config_command = 'show running-config'
    save_command = 'write memory'
    reboot_command = 'reload'

    error_patterns = (
        '% invalid input',
        '% incomplete command',
        '% ambiguous command',
        '% unknown command',
        '% invalid command',
        'invalid input detected',
        'permission denied',
        '% access denied',
    )
    artifact_patterns = (
        re.compile(r'^Building configuration\.\.\.$'),
        re.compile(r'^Current configuration : \d+ bytes$'),
        re.compile(r'^Enter configuration commands, one per line\.\s+End with CNTL/Z\.$'),
    )

    trust_fast_empty_reads = True

    def before_command(self, command: str) -> None:
        # Fast mode skips enable at login; enter it lazily for anything not read-only
        if self.credentials.fast_mode and not self.in_privileged_mode and not self.is_read_only(command):
            self.enter_privileged()


@register_driver
class CiscoNxosConnection(CiscoIosConnection):
    """Cisco NX-OS."""

    device_type = DeviceType.CISCO_NXOS.value
    device_types = (DeviceType.CISCO_NXOS.value,)

    save_command = 'copy running-config startup-config'
    save_success_marker = '100%'
    error_patterns = CiscoIosConnection.error_patterns + ('% invalid parameter', 'syntax error while parsing')


@register_driver
class CiscoAsaConnection(CiscoIosConnection):
    """Cisco ASA firewalls."""

    device_type = DeviceType.CISCO_ASA.value
    device_types = (DeviceType.CISCO_ASA.value,)

    paging_commands = ('terminal pager 0',)
    terminal_commands = ()
    error_patterns = CiscoIosConnection.error_patterns + ('error:', 'err:')
    artifact_patterns = CiscoIosConnection.artifact_patterns + (
        re.compile(r'^Cryptochecksum: [0-9a-f ]+$'),
        re.compile(r'^\d+ bytes copied in [\d.]+ secs'),
    )
