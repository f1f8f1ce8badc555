"""
Cisco SG300 small-business switch driver.
"""

from ..core.types import DeviceType
from .cisco import CiscoIosConnection
from .registry import register_driver


@register_driver
class CiscoSG300Connection(CiscoIosConnection):
    """Cisco SG300: IOS-like CLI with datadump paging and Y/N dialogs."""

    device_type = DeviceType.CISCO_SG300.value
    device_types = (DeviceType.CISCO_SG300.value,)

    paging_commands = ('terminal datadump',)
    terminal_commands = ()
    config_command = 'configure'
    exit_config_command = 'end'
    save_command = 'copy running-config startup-config'
    save_answer = 'Y'
    reboot_command = 'reload'
    reboot_answer = 'Y'
    trust_fast_empty_reads = False
