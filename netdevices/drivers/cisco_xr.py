"""
Cisco IOS-XR driver: no enable mode, two-phase commit.
"""

import re

from ..connections.base import BaseConnection, SaveMode
from ..core.types import DeviceType
from .registry import register_driver


@register_driver
class CiscoXrConnection(BaseConnection):
    """Cisco IOS-XR."""

    device_type = DeviceType.CISCO_IOS_XR.value

    has_two_phase_commit = True

    paging_commands = ('terminal length 0',)
    terminal_commands = ('terminal width 511',)
    config_command = 'configure terminal'
    exit_config_command = 'end'
    # Uncommitted changes are discarded when leaving without commit
    exit_config_answer = 'no'
    commit_command = 'commit'
    commit_failure_patterns = (
        '% failed to commit',
        'one or more commits have occurred',
        'commit failed',
    )
    running_config_command = 'show running-config'
    save_mode = SaveMode.AUTOMATIC
    save_command = 'commit'
    reboot_command = 'reload'

    error_patterns = (
        '% invalid input',
        '% incomplete command',
        '% ambiguous command',
        'invalid input detected',
        'permission denied',
    )
    artifact_patterns = (
        re.compile(r'^Building configuration\.\.\.$'),
        re.compile(r'^!! IOS XR Configuration'),
        # Timestamp line printed before each show command
        re.compile(r'^(?:Mon|Tue|Wed|Thu|Fri|Sat|Sun) \w{3}\s+\d+ [\d:.]+ \w+$'),
    )

    def sanitize_output(self, output: str, command: str = '') -> str:
        text = super().sanitize_output(output, command)
        return re.sub(r'^RP/\d+/\w+/CPU\d+:', '', text, flags=re.MULTILINE)
