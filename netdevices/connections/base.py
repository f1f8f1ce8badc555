"""
Generic connection driver.

BaseConnection owns the SSH client, the interactive shell channel, the
learned prompts and modal flags, and implements command/config execution
on top of the prompt detector. Vendor drivers override class-level data
(command strings, prompt patterns, capability flags) and a few hooks.
"""

import logging
import re
import time
from enum import Enum
from typing import List, Optional, Pattern, Sequence, Tuple, Union

import paramiko

from ..config.constants import DEFAULT_ERROR_PATTERNS, DIALOG_PATTERNS, PAGER_PATTERN, PROMPT_TERMINATORS
from ..config.settings import Settings, Timing, get_settings
from ..core.types import (
    AuthMethod,
    CommandResult,
    Credentials,
    DEVICE_TYPE_DISPLAY_NAMES,
    DeviceType,
)
from ..utils.errors import (
    AppError,
    ChannelUnavailable,
    CommitFailed,
    ConfigurationError,
    InvalidPrivateKey,
    ModeChangeError,
    PromptTimeout,
)
from .channel import ChannelIO
from .detector import (
    Expected,
    ReadResult,
    build_prompt_pattern,
    last_nonempty_line,
    normalize_newlines,
    prompt_stem,
    strip_ansi,
)
from .jump_host import JumpHostTunnel
from .transport import DEFAULT_ALGORITHM_SETS, load_private_key, open_ssh_client

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    DISCONNECTED = 'disconnected'
    CONNECTING = 'connecting'
    SESSION_PREPARING = 'session_preparing'
    READY = 'ready'
    EXECUTING_COMMAND = 'executing_command'
    ENTERING_CONFIG = 'entering_config'
    IN_CONFIG = 'in_config'
    EXITING_CONFIG = 'exiting_config'
    DISCONNECTING = 'disconnecting'


class SaveMode(str, Enum):
    COMMAND = 'command'
    AUTOMATIC = 'automatic'
    UNSUPPORTED = 'unsupported'


class BaseConnection:
    """
    Generic SSH CLI driver.

    Usage:
        connection = BaseConnection(credentials)
        connection.connect()
        result = connection.send_command('show version')
        connection.disconnect()
    """

    device_type = DeviceType.GENERIC.value
    prompt_terminators = PROMPT_TERMINATORS
    newline = '\n'

    # Capability flags
    has_privileged_mode = False
    requires_privileged_for_config = False
    has_config_mode = True
    has_two_phase_commit = False

    # Command table
    paging_commands: Tuple[str, ...] = ('terminal length 0',)
    terminal_commands: Tuple[str, ...] = ('terminal width 511',)
    privileged_command = 'enable'
    exit_privileged_command = 'disable'
    config_command = 'configure terminal'
    exit_config_command = 'exit'
    exit_config_answer: Optional[str] = None
    discard_command: Optional[str] = None
    commit_command = 'commit'
    running_config_command = 'show configuration'
    save_mode = SaveMode.COMMAND
    save_command: Optional[str] = 'save configuration'
    save_answer: Optional[str] = None
    save_success_marker: Optional[str] = None
    reboot_command = 'reboot'
    reboot_answer: Optional[str] = None

    # Output classification
    error_patterns: Tuple[str, ...] = DEFAULT_ERROR_PATTERNS
    commit_success_marker: Optional[str] = None
    commit_failure_patterns: Tuple[str, ...] = ()
    artifact_patterns: Tuple[Pattern, ...] = ()
    read_only_prefixes: Tuple[str, ...] = ('show', 'display', 'get', 'ping', 'traceroute')

    # Prompt shapes for mode checks, matched against the last output line
    privileged_prompt_pattern = re.compile(r'#\s*$')
    config_prompt_pattern = re.compile(r'\(config[^)]*\)\s?#\s*$')
    password_prompt_pattern = re.compile(r'(?i)password:?\s*$')
    dialog_patterns: Sequence[Pattern] = DIALOG_PATTERNS

    # Fast mode may trust empty or timed-out reads of read-only commands
    trust_fast_empty_reads = False

    algorithm_sets = DEFAULT_ALGORITHM_SETS

    def __init__(
        self,
        credentials: Credentials,
        timing: Optional[Timing] = None,
        settings: Optional[Settings] = None,
        pool=None,
    ):
        self.credentials = credentials
        self.settings = settings or get_settings()
        self.timing = timing or self.settings.timing()
        self.pool = pool

        self.client: Optional[paramiko.SSHClient] = None
        self.io: Optional[ChannelIO] = None
        self.tunnel: Optional[JumpHostTunnel] = None
        self.state = ConnectionState.DISCONNECTED
        self.connected = False
        self.pooled = False
        self._adopted_from: Optional['BaseConnection'] = None

        self.base_prompt = ''
        self.privileged_prompt = ''
        self.config_prompt = ''
        self.banner = ''
        self.in_privileged_mode = False
        self.in_config_mode = False
        self.last_activity = time.monotonic()

        self.connect_timeout = credentials.timeout or self.settings.connect_timeout
        if credentials.command_timeout:
            self.command_timeout = credentials.command_timeout
        elif credentials.fast_mode:
            self.command_timeout = self.timing.fast_command
        else:
            self.command_timeout = self.timing.command

        self._prompt_patterns: List[Pattern] = []

    def __repr__(self) -> str:
        return (
            f'<{self.__class__.__name__} {self.credentials.username}@'
            f'{self.credentials.host}:{self.credentials.port} {self.state.value}>'
        )

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.disconnect()

    @property
    def display_name(self) -> str:
        return DEVICE_TYPE_DISPLAY_NAMES.get(DeviceType(self.device_type), self.device_type)

    @property
    def channel(self):
        return self.io.channel if self.io is not None else None

    @property
    def prompts(self) -> List[str]:
        return [p for p in (self.base_prompt, self.privileged_prompt, self.config_prompt) if p]

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    def connect(self) -> None:
        """
        Establish the session and run session preparation.

        With connection pooling enabled, a live pooled connection for the
        same host:port:username is adopted instead of opening a new one.

        Raises:
            InvalidPrivateKey: Key could not be parsed (before any network I/O)
            AuthenticationFailed, ConnectionTimeout, HostUnreachable,
            HandshakeFailed: Transport could not be established
            ChannelUnavailable, PromptTimeout, ModeChangeError: Session
                preparation failed
        """
        if self.connected:
            return

        creds = self.credentials
        if creds.connection_pooling and self.pool is not None:
            existing = self.pool.get(creds.pool_key)
            if existing is not None and existing is not self and existing.device_type == self.device_type:
                self.adopt(existing)
                return

        password, pkey = self._auth_material()
        self.state = ConnectionState.CONNECTING
        logger.info(f"Connecting to {creds.host}:{creds.port} as {creds.username} ({self.device_type})")

        try:
            sock_factory = None
            if creds.jump_host is not None:
                self.tunnel = JumpHostTunnel(
                    creds.jump_host,
                    creds.host,
                    creds.port,
                    timeout=self.connect_timeout,
                    keepalive_interval=self._keepalive_interval(),
                )
                self.tunnel.open()
                sock_factory = self.tunnel.open_stream

            self.client = open_ssh_client(
                host=creds.host,
                port=creds.port,
                username=creds.username,
                password=password,
                pkey=pkey,
                timeout=self.connect_timeout,
                keepalive_interval=self._keepalive_interval(),
                algorithm_sets=self.algorithm_sets,
                sock_factory=sock_factory,
            )
            self.connected = True
            self.state = ConnectionState.SESSION_PREPARING
            self.session_preparation()
        except Exception:
            self.close()
            raise

        self.state = ConnectionState.READY
        self.touch()
        logger.info(f"Connected to {creds.host} ({self.display_name}), prompt '{self.base_prompt}'")

        if creds.connection_pooling and self.pool is not None:
            self.pool.add(self)
            self.pooled = True

    def adopt(self, other: 'BaseConnection') -> None:
        """Take over the live session state of a pooled connection."""
        self.client = other.client
        self.io = other.io
        self.tunnel = other.tunnel
        self.banner = other.banner
        self.base_prompt = other.base_prompt
        self.privileged_prompt = other.privileged_prompt
        self.config_prompt = other.config_prompt
        self._prompt_patterns = list(other._prompt_patterns)
        self.in_privileged_mode = other.in_privileged_mode
        self.in_config_mode = other.in_config_mode
        self.connected = True
        self.pooled = True
        self.state = ConnectionState.READY
        self._adopted_from = other
        self.touch()
        logger.info(f"Reusing pooled connection for {self.credentials.pool_key}")

    def disconnect(self) -> None:
        """
        Release the connection.

        A live pooled connection stays open, refreshes its activity time and
        hands its mode flags back to the session it adopted; the pool owns
        its teardown.
        """
        if self.pooled and self.pool is not None and self.is_alive():
            if self._adopted_from is not None:
                self._adopted_from.in_privileged_mode = self.in_privileged_mode
                self._adopted_from.in_config_mode = self.in_config_mode
            self.touch()
            logger.debug(f"Connection {self.credentials.pool_key} returned to pool")
            return
        self.close()

    def close(self) -> None:
        """Tear down channel, transport and tunnel (target first, bastion last)."""
        if self.client is None and self.io is None and self.tunnel is None:
            self.connected = False
            self.state = ConnectionState.DISCONNECTED
            return

        self.state = ConnectionState.DISCONNECTING
        if self.io is not None and self.io.is_open:
            try:
                self.cleanup()
            except AppError as e:
                logger.warning(f"Cleanup on {self.credentials.host} failed: {e.message}")

        if self.io is not None:
            self.io.close()
            self.io = None
        if self.client is not None:
            self.client.close()
            self.client = None
        if self.tunnel is not None:
            self.tunnel.close()
            self.tunnel = None

        self.connected = False
        self.in_config_mode = False
        self.in_privileged_mode = False
        self.state = ConnectionState.DISCONNECTED
        if self.pooled and self.pool is not None:
            self.pool.discard(self)
            self.pooled = False
        logger.info(f"Disconnected from {self.credentials.host}")

    def is_alive(self) -> bool:
        if not self.connected or self.client is None or self.io is None:
            return False
        transport = self.client.get_transport()
        return transport is not None and transport.is_active() and self.io.is_open

    def touch(self) -> None:
        """Record activity; a pooled session also refreshes its pool entry."""
        self.last_activity = time.monotonic()
        if self.pooled and self.pool is not None:
            self.pool.touch(self.credentials.pool_key)

    def _keepalive_interval(self) -> int:
        return self.settings.keepalive_interval if self.credentials.keep_alive else 0

    def _auth_material(self) -> Tuple[Optional[str], Optional[paramiko.PKey]]:
        creds = self.credentials
        if creds.auth_method == AuthMethod.PRIVATE_KEY:
            try:
                return None, load_private_key(creds.private_key, creds.passphrase)
            except InvalidPrivateKey as e:
                e.details['host'] = creds.host
                raise
        return creds.password, None

    # ------------------------------------------------------------------
    # Session preparation
    # ------------------------------------------------------------------

    def session_preparation(self) -> None:
        """Open the shell, learn the prompt and prepare the terminal."""
        self.open_shell()
        self.set_base_prompt()
        self.disable_paging()
        if self.credentials.fast_mode:
            return
        self.set_terminal_width()
        if self.has_privileged_mode:
            self.enter_privileged()

    def open_shell(self) -> None:
        try:
            channel = self.client.invoke_shell(term='vt100', width=511, height=1000)
        except paramiko.SSHException as e:
            raise ChannelUnavailable(f'Failed to open shell on {self.credentials.host}: {e}')
        self.io = ChannelIO(channel, self.timing)
        wait = self.timing.fast_channel_ready if self.credentials.fast_mode else self.timing.channel_ready
        self.banner = self.io.read_for(wait)
        self.after_shell_open()

    def after_shell_open(self) -> None:
        """Hook for login dialogs or banners that need an answer."""

    def cleanup(self) -> None:
        """Hook run on a live channel just before it is closed."""

    def set_base_prompt(self) -> str:
        """
        Learn the device prompt from a bare return.

        Raises:
            PromptTimeout: No prompt-looking line was received
        """
        self._require_channel()
        self.io.write(self.newline)
        read = self.io.read_until_prompt(
            timeout=self.timing.prompt_read,
            terminators=self.prompt_terminators,
        )
        line = last_nonempty_line(read.text) or last_nonempty_line(self.banner)
        prompt = self.clean_prompt(line) if line.endswith(tuple(self.prompt_terminators)) else ''
        if not prompt:
            raise PromptTimeout(
                self.timing.prompt_read,
                read.text,
                f'Unable to determine prompt on {self.credentials.host}',
            )
        self.base_prompt = prompt
        self.derive_prompts()
        logger.debug(f"Base prompt for {self.credentials.host}: '{prompt}'")
        return prompt

    def clean_prompt(self, line: str) -> str:
        return prompt_stem(line, self.prompt_terminators)

    def derive_prompts(self) -> None:
        """Fill the privileged and config prompts from the base prompt."""
        self.privileged_prompt = f'{self.base_prompt}#'
        self.config_prompt = f'{self.base_prompt}(config)#'
        self._refresh_prompt_patterns()

    def _refresh_prompt_patterns(self) -> None:
        self._prompt_patterns = [
            pattern for pattern in (
                build_prompt_pattern(prompt, self.prompt_terminators) for prompt in self.prompts
            ) if pattern is not None
        ]

    def disable_paging(self) -> None:
        self.run_setup_commands(self.paging_commands)

    def set_terminal_width(self) -> None:
        self.run_setup_commands(self.terminal_commands)

    def run_setup_commands(self, commands: Sequence[str]) -> str:
        """Send setup commands one at a time, each waiting for its prompt."""
        output = ''
        for command in commands:
            read = self._execute(command, self.timing.setup_read)
            if read.timed_out:
                logger.debug(f"Setup command '{command}' on {self.credentials.host} got no prompt")
            output += read.text
        return output

    # ------------------------------------------------------------------
    # Mode transitions
    # ------------------------------------------------------------------

    def check_privileged_mode(self, output: str) -> bool:
        line = last_nonempty_line(output)
        return bool(self.privileged_prompt_pattern.search(line)) and not self.config_prompt_pattern.search(line)

    def check_config_mode(self, output: str) -> bool:
        return bool(self.config_prompt_pattern.search(last_nonempty_line(output)))

    def enter_privileged(self) -> None:
        """
        Enter privileged (enable) mode, answering the password dialog.

        No-op for drivers without a privileged mode.

        Raises:
            ModeChangeError: Privileged prompt not reached
        """
        if not self.has_privileged_mode or self.in_privileged_mode:
            return

        read = self._execute('', self.timing.prompt_read)
        if self.check_privileged_mode(read.text):
            self.in_privileged_mode = True
            return

        dialogs = [self.password_prompt_pattern]
        read = self._execute(self.privileged_command, self.timing.prompt_read, dialogs=dialogs)
        if read.dialog:
            secret = self.credentials.enable_password or self.credentials.password or ''
            self.io.write(secret + self.newline)
            read = self._read(self.timing.prompt_read, dialogs=dialogs)

        if read.dialog or not self.check_privileged_mode(read.text):
            raise ModeChangeError('privileged', read.text, f'Failed to enter privileged mode on {self.credentials.host}')
        self.in_privileged_mode = True
        logger.debug(f"Entered privileged mode on {self.credentials.host}")

    def exit_privileged(self) -> None:
        if not self.has_privileged_mode or not self.in_privileged_mode:
            return
        self.exit_config()
        self._execute(self.exit_privileged_command, self.timing.prompt_read)
        self.in_privileged_mode = False

    def enter_config(self) -> None:
        """
        Enter configuration mode.

        Raises:
            ModeChangeError: Configuration prompt not reached
        """
        if not self.has_config_mode or self.in_config_mode:
            return
        if self.requires_privileged_for_config:
            self.enter_privileged()

        self.state = ConnectionState.ENTERING_CONFIG
        read = self._execute(self.config_command, self.timing.prompt_read)
        if not self.check_config_mode(read.text):
            self.state = ConnectionState.READY
            raise ModeChangeError('configuration', read.text, f'Failed to enter configuration mode on {self.credentials.host}')
        self.in_config_mode = True
        self.state = ConnectionState.IN_CONFIG
        logger.debug(f"Entered configuration mode on {self.credentials.host}")

    def exit_config(self) -> None:
        """
        Leave configuration mode, answering any uncommitted-changes dialog.

        Raises:
            ModeChangeError: Still in configuration mode afterwards
        """
        if not self.has_config_mode or not self.in_config_mode:
            return
        self.state = ConnectionState.EXITING_CONFIG
        read = self._run_interactive(self.exit_config_command, self.exit_config_answer, self.timing.prompt_read)
        if self.check_config_mode(read.text):
            self.state = ConnectionState.IN_CONFIG
            raise ModeChangeError('exec', read.text, f'Failed to exit configuration mode on {self.credentials.host}')
        self.in_config_mode = False
        self.state = ConnectionState.READY
        logger.debug(f"Exited configuration mode on {self.credentials.host}")

    def commit(self, comment: Optional[str] = None) -> str:
        """
        Activate staged configuration on two-phase commit devices.

        Raises:
            CommitFailed: Failure marker seen or success marker missing
        """
        if not self.has_two_phase_commit:
            return ''
        read = self._execute(self.build_commit_command(comment), self.timing.commit, expected=self.commit_expected())
        output = self.sanitize_output(read.text, self.commit_command)
        self.check_commit(read, output)
        logger.info(f"Configuration committed on {self.credentials.host}")
        return output

    def commit_expected(self) -> Optional[Expected]:
        """Marker ending a commit read: the success marker or any failure marker."""
        if not self.commit_success_marker:
            return None
        markers = (self.commit_success_marker,) + tuple(self.commit_failure_patterns)
        return re.compile('|'.join(re.escape(marker) for marker in markers), re.IGNORECASE)

    def build_commit_command(self, comment: Optional[str] = None) -> str:
        return self.commit_command

    def check_commit(self, read: ReadResult, output: str) -> None:
        lowered = read.text.lower()
        for marker in self.commit_failure_patterns:
            if marker.lower() in lowered:
                raise CommitFailed(output)
        if self.commit_success_marker:
            if self.commit_success_marker.lower() not in lowered:
                raise CommitFailed(output, f'Commit did not report "{self.commit_success_marker}": {output}')
        elif read.timed_out:
            raise CommitFailed(output, f'Commit did not complete within {self.timing.commit}s')

    # ------------------------------------------------------------------
    # Execution operations
    # ------------------------------------------------------------------

    def send_command(
        self,
        command: str,
        timeout: Optional[float] = None,
        expected: Optional[Expected] = None,
    ) -> CommandResult:
        """
        Run one command and return its sanitized output.

        Args:
            command: Command text
            timeout: Read timeout in seconds (default: command timeout)
            expected: Completion marker overriding prompt detection

        Returns:
            CommandResult; success is False on device errors or an empty
            timed-out read
        """
        if not self.connected:
            return CommandResult(command, '', False, 'Not connected to device')

        self.state = ConnectionState.EXECUTING_COMMAND
        try:
            self.before_command(command)
            read = self._execute(command, timeout or self.command_timeout, expected=expected)
            output = self.sanitize_output(read.text, command)
            error = self.classify(command, output, read, timeout or self.command_timeout)
            return CommandResult(command, output, error is None, error)
        except AppError as e:
            logger.warning(f"Command '{command}' on {self.credentials.host} failed: {e.message}")
            return CommandResult(command, '', False, e.message)
        finally:
            self.state = ConnectionState.IN_CONFIG if self.in_config_mode else ConnectionState.READY
            self.touch()

    def before_command(self, command: str) -> None:
        """Hook run before each command is written."""

    def classify(self, command: str, output: str, read: ReadResult, timeout: float) -> Optional[str]:
        """Return an error message, or None when the command succeeded."""
        fast_trusted = self.credentials.fast_mode and self.trust_fast_empty_reads and self.is_read_only(command)
        if read.timed_out:
            if fast_trusted:
                logger.warning(
                    f"Fast mode accepted a timed-out read of '{command}' on {self.credentials.host}"
                )
                return None
            if not output:
                return f'Command "{command}" timed out after {timeout}s without output'
            logger.warning(f"Prompt not seen after '{command}' on {self.credentials.host}, returning partial output")
        if fast_trusted:
            return None
        error_line = self.find_error(output)
        if error_line:
            return f'Command "{command}" failed: {error_line}'
        return None

    def is_read_only(self, command: str) -> bool:
        return command.strip().lower().startswith(self.read_only_prefixes)

    def find_error(self, output: str) -> Optional[str]:
        """Return the first output line containing an error pattern."""
        for line in output.splitlines():
            lowered = line.lower()
            if any(pattern.lower() in lowered for pattern in self.error_patterns):
                return line.strip()
        return None

    def send_config(self, lines: Union[str, Sequence[str]], commit: Optional[bool] = None) -> CommandResult:
        """
        Apply configuration lines, aborting on the first error.

        Configuration mode is always exited before returning, including on
        error.

        Args:
            lines: Configuration lines (list or newline-separated text)
            commit: Commit after the batch (default: when the device needs it)
        """
        if isinstance(lines, str):
            lines = lines.splitlines()
        lines = [line for line in lines if line.strip()]
        joined = '\n'.join(lines)

        if not self.connected:
            return CommandResult(joined, '', False, 'Not connected to device')

        outputs: List[str] = []
        try:
            if not self.has_config_mode:
                for line in lines:
                    outputs.append(self.send_config_line(line))
            else:
                self.enter_config()
                for line in lines:
                    outputs.append(self.send_config_line(line))
                if self.has_two_phase_commit if commit is None else commit:
                    outputs.append(self.commit())
                self.exit_config()
        except AppError as e:
            logger.warning(f"Configuration on {self.credentials.host} failed: {e.message}")
            self.recover_config_mode()
            return CommandResult(joined, '\n'.join(o for o in outputs if o), False, e.message)
        finally:
            self.state = ConnectionState.IN_CONFIG if self.in_config_mode else ConnectionState.READY
            self.touch()

        return CommandResult(joined, '\n'.join(o for o in outputs if o), True)

    def send_config_line(self, line: str) -> str:
        """
        Send one configuration line.

        Raises:
            ConfigurationError: Output matched an error pattern
        """
        read = self._execute(line, self.timing.config_line)
        output = self.sanitize_output(read.text, line)
        if self.find_error(output):
            raise ConfigurationError(line, output)
        return output

    def recover_config_mode(self) -> None:
        """Best-effort return to exec mode after a failed batch."""
        if not self.in_config_mode or self.io is None or not self.io.is_open:
            return
        try:
            if self.discard_command:
                self._execute(self.discard_command, self.timing.prompt_read)
            self.exit_config()
        except AppError as e:
            logger.warning(f"Could not leave configuration mode on {self.credentials.host}: {e.message}")

    def get_current_config(self) -> CommandResult:
        return self.send_command(self.running_config_command, timeout=self.command_timeout * 3)

    def save_config(self) -> CommandResult:
        """Persist the running configuration."""
        command = self.save_command or 'save'
        if self.save_mode == SaveMode.AUTOMATIC:
            return CommandResult(command, f'{self.display_name} saves configuration automatically on commit', True)
        if self.save_mode == SaveMode.UNSUPPORTED or not self.save_command:
            return CommandResult(command, '', False, f'Saving configuration is not supported on {self.display_name}')
        if not self.connected:
            return CommandResult(command, '', False, 'Not connected to device')

        try:
            self.exit_config()
            read = self._run_interactive(self.save_command, self.save_answer, self.command_timeout * 3)
            output = self.sanitize_output(read.text, self.save_command)
            error_line = self.find_error(output)
            if error_line:
                raise CommitFailed(output, f'Save failed: {error_line}')
            if self.save_success_marker and self.save_success_marker.lower() not in read.text.lower():
                raise CommitFailed(output, f'Save did not report "{self.save_success_marker}": {output}')
        except AppError as e:
            return CommandResult(command, '', False, e.message)
        finally:
            self.touch()
        logger.info(f"Configuration saved on {self.credentials.host}")
        return CommandResult(command, output, True)

    def reboot_device(self) -> CommandResult:
        """Reboot, answering confirmation dialogs; the session drops afterwards."""
        command = self.reboot_command
        if not self.connected:
            return CommandResult(command, '', False, 'Not connected to device')
        try:
            self.exit_config()
            read = self._run_interactive(command, self.reboot_answer, self.timing.reboot)
        except ChannelUnavailable:
            return CommandResult(command, 'Connection closed by device during reboot', True)
        except AppError as e:
            return CommandResult(command, '', False, e.message)

        output = self.sanitize_output(read.text, command)
        error_line = self.find_error(output)
        if error_line:
            return CommandResult(command, output, False, f'Reboot failed: {error_line}')
        logger.info(f"Reboot issued on {self.credentials.host}")
        return CommandResult(command, output or 'Reboot command sent', True)

    # ------------------------------------------------------------------
    # Output handling
    # ------------------------------------------------------------------

    def sanitize_output(self, output: str, command: str = '') -> str:
        """
        Strip echo, prompts, pager markers and vendor artifacts.

        Applying it to already-sanitized output returns it unchanged.
        """
        text = PAGER_PATTERN.sub('', normalize_newlines(strip_ansi(output)))
        command = command.strip()
        echo_pending = bool(command)
        cleaned = []
        for line in text.split('\n'):
            stripped = line.strip()
            if not stripped:
                continue
            if echo_pending and self._is_echo(stripped, command):
                echo_pending = False
                continue
            if self.is_prompt_line(stripped):
                continue
            if any(pattern.search(stripped) for pattern in self.artifact_patterns):
                continue
            cleaned.append(line.rstrip())
        return '\n'.join(cleaned).strip()

    def _is_echo(self, line: str, command: str) -> bool:
        if line == command:
            return True
        return line.endswith(command) and self.is_prompt_line(line[:-len(command)])

    def is_prompt_line(self, line: str) -> bool:
        line = line.strip()
        return bool(line) and any(pattern.search(line) for pattern in self._prompt_patterns)

    # ------------------------------------------------------------------
    # Channel helpers
    # ------------------------------------------------------------------

    def _require_channel(self) -> None:
        if self.io is None or not self.io.is_open:
            raise ChannelUnavailable(f'No active channel to {self.credentials.host}')

    def _read(
        self,
        timeout: float,
        expected: Optional[Expected] = None,
        dialogs: Sequence[Pattern] = (),
    ) -> ReadResult:
        return self.io.read_until_prompt(
            self.prompts,
            timeout=timeout,
            expected=expected,
            dialogs=dialogs,
            terminators=self.prompt_terminators,
        )

    def _execute(
        self,
        command: str,
        timeout: float,
        expected: Optional[Expected] = None,
        dialogs: Sequence[Pattern] = (),
    ) -> ReadResult:
        self._require_channel()
        self.io.clear_buffer()
        self.io.write(command + self.newline)
        return self._read(timeout, expected=expected, dialogs=dialogs)

    def _run_interactive(self, command: str, answer: Optional[str], timeout: float, max_rounds: int = 3) -> ReadResult:
        """Run a command that may ask for confirmation, answering each dialog."""
        read = self._execute(command, timeout, dialogs=self.dialog_patterns)
        texts = [read.text]
        rounds = 0
        while read.dialog and not read.closed and rounds < max_rounds:
            reply = answer if answer is not None else self.dialog_answer(read.last_line)
            logger.debug(f"Answering '{read.last_line.strip()}' with '{reply}'")
            self.io.write(reply + self.newline)
            read = self._read(timeout, dialogs=self.dialog_patterns)
            texts.append(read.text)
            rounds += 1
        return ReadResult(
            text=''.join(texts),
            timed_out=read.timed_out,
            matched=read.matched,
            closed=read.closed,
        )

    @staticmethod
    def dialog_answer(line: str) -> str:
        lowered = line.lower()
        if '[confirm]' in lowered:
            return ''
        if 'y/n' in lowered:
            return 'y'
        return 'yes'
