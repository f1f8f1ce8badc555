"""
Fortinet FortiOS driver.

FortiGate has no separate configuration mode: "config ... / end" blocks are
typed at the normal prompt. Paging is controlled by the console output
setting, which lives under "config global" on multi-VDOM units and is
restored on disconnect.
"""

import logging
import re

from ..connections.base import BaseConnection, SaveMode
from ..connections.detector import last_nonempty_line
from ..connections.transport import AlgorithmSet, DEFAULT_ALGORITHM_SETS
from ..core.types import DeviceType
from ..utils.errors import AppError, ModeChangeError
from .registry import register_driver

logger = logging.getLogger(__name__)

FORTIGATE_ALGORITHMS = AlgorithmSet(
    name='fortigate',
    kex=(
        'diffie-hellman-group14-sha1',
        'diffie-hellman-group-exchange-sha1',
        'diffie-hellman-group-exchange-sha256',
        'diffie-hellman-group1-sha1',
    ),
    ciphers=('aes128-ctr', 'aes128-cbc', 'aes192-cbc', 'aes256-cbc'),
    digests=('hmac-sha1', 'hmac-sha2-256'),
    key_types=('ssh-rsa', 'ecdsa-sha2-nistp256'),
)

_VDOM_ENABLED = re.compile(r'virtual domain configuration:\s*(?:multiple|enable|split-task)', re.IGNORECASE)
_OUTPUT_MODE_V6 = re.compile(r'^\s+set output (\S+)\s*$', re.MULTILINE)
_OUTPUT_MODE_V7 = re.compile(r'output\s+:\s+(\S+)\s*$', re.MULTILINE)
_BLOCK_CONTEXT = re.compile(r'\([^)]*\)\s*[#$]\s*$')


@register_driver
class FortinetConnection(BaseConnection):
    """FortiGate firewalls."""

    device_type = DeviceType.FORTINET_FORTIOS.value
    prompt_terminators = '#$'

    has_config_mode = False

    paging_commands = ()
    terminal_commands = ()
    running_config_command = 'show full-configuration'
    save_mode = SaveMode.AUTOMATIC
    save_command = 'execute cfg save'
    reboot_command = 'execute reboot'
    reboot_answer = 'y'
    max_block_depth = 8

    error_patterns = (
        'command fail',
        'command parse error',
        'unknown action',
        'entry not found',
        'value parse error',
        'permission denied',
    )

    algorithm_sets = (FORTIGATE_ALGORITHMS,) + DEFAULT_ALGORITHM_SETS

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.vdoms = False
        self.os_version = 'unknown'
        self.original_output_mode = ''
        self.output_mode = ''
        self.in_config_global = False

    def after_shell_open(self) -> None:
        banner = self.banner
        if 'to accept' in banner:
            self.io.write('a' + self.newline)
            self.banner += self.io.read_for(self.timing.fast_channel_ready)
        elif 'Press any key to continue' in banner or 'Press Enter to continue' in banner:
            self.io.write(self.newline)
            self.banner += self.io.read_for(self.timing.fast_channel_ready)

    def session_preparation(self) -> None:
        self.open_shell()
        self.set_base_prompt()
        self.detect_vdoms()
        self.determine_os_version()
        self.detect_output_mode()
        self.disable_paging()

    def derive_prompts(self) -> None:
        self.privileged_prompt = ''
        self.config_prompt = ''
        self._refresh_prompt_patterns()

    def detect_vdoms(self) -> bool:
        read = self._execute('get system status | grep Virtual', self.timing.setup_read)
        self.vdoms = bool(_VDOM_ENABLED.search(read.text))
        return self.vdoms

    def determine_os_version(self) -> str:
        read = self._execute('get system status | grep Version', self.timing.setup_read)
        if re.search(r'Version: .* v[78]\.', read.text):
            self.os_version = 'v7_or_later'
        elif re.search(r'Version: .* v[654]\.', read.text):
            self.os_version = 'v6_or_earlier'
        else:
            self.os_version = 'unknown'
        return self.os_version

    def detect_output_mode(self) -> str:
        if self.os_version == 'v6_or_earlier':
            command, pattern = 'show full-configuration system console', _OUTPUT_MODE_V6
        else:
            command, pattern = 'get system console', _OUTPUT_MODE_V7

        self.enter_config_global()
        read = self._execute(command, self.timing.setup_read)
        self.exit_config_global()

        match = pattern.search(self.sanitize_output(read.text, command))
        mode = match.group(1) if match and match.group(1) in ('more', 'standard') else 'more'
        self.original_output_mode = mode
        self.output_mode = mode
        return mode

    def enter_config_global(self) -> None:
        """Enter the global context on multi-VDOM units; no-op otherwise."""
        if not self.vdoms or self.in_config_global:
            return
        read = self._execute('config global', self.timing.prompt_read)
        if read.timed_out:
            raise ModeChangeError(
                'config global',
                read.text,
                'config global access is required to change console output; '
                'alternatively set "config system console / set output standard" manually',
            )
        self.in_config_global = True

    def exit_config_global(self) -> None:
        if not self.in_config_global:
            return
        self._execute('end', self.timing.prompt_read)
        self.in_config_global = False

    def set_output_mode(self, mode: str) -> None:
        self.enter_config_global()
        self.run_setup_commands(('config system console', f'set output {mode}', 'end'))
        self.exit_config_global()
        self.output_mode = mode

    def disable_paging(self) -> None:
        if self.output_mode == 'standard':
            return
        try:
            self.set_output_mode('standard')
        except AppError as e:
            # Restricted admin profiles cannot change the console setting
            logger.warning(f"Could not disable paging on {self.credentials.host}: {e.message}")

    def recover_config_mode(self) -> None:
        """Abort out of any config/edit block left open by a failed batch."""
        if self.io is None or not self.io.is_open:
            return
        try:
            read = self._execute('', self.timing.prompt_read)
            for _ in range(self.max_block_depth):
                if not _BLOCK_CONTEXT.search(last_nonempty_line(read.text)):
                    self.in_config_global = False
                    return
                read = self._execute('abort', self.timing.prompt_read)
            logger.warning(f"{self.credentials.host} still inside a configuration block after recovery")
        except AppError as e:
            logger.warning(f"Could not leave configuration block on {self.credentials.host}: {e.message}")

    def cleanup(self) -> None:
        if self.original_output_mode == 'more' and self.output_mode != 'more':
            self.set_output_mode('more')
