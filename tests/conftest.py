"""
Pytest configuration and fixtures.

FakeDevice scripts a CLI: each line written to the shell is echoed and
answered with canned output followed by the current prompt. FakeChannel
and FakeClient expose the paramiko surface the engine uses.
"""

import os
import sys
from unittest.mock import MagicMock, patch

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from netdevices.config.settings import Timing
from netdevices.core.types import Credentials


class Reply:
    """
    Scripted answer to one command.

    Args:
        output: Text printed after the echo
        prompt: Prompt to switch to once the command completes
        dialog: Question printed instead of the prompt; the next line is the answer
        after: Text printed after the dialog was answered
        more: Text held back behind a --More-- pager until a space arrives
        close: Close the channel after responding
        silent: Print nothing at all (no echo, no prompt)
    """

    def __init__(self, output='', prompt=None, dialog=None, after='', more=None, close=False, silent=False):
        self.output = output
        self.prompt = prompt
        self.dialog = dialog
        self.after = after
        self.more = more
        self.close = close
        self.silent = silent


class FakeDevice:
    """Line-oriented CLI simulator."""

    def __init__(self, prompt, responses=None, banner='', default=''):
        self.prompt = prompt
        self.responses = dict(responses or {})
        self.banner = banner
        self.default = default
        self.received = []
        self.answers = []
        self.awaiting = None
        self.pending_more = None
        self.closed = False

    def greeting(self):
        return f'{self.banner}\r\n{self.prompt}' if self.banner else self.prompt

    def on_line(self, line):
        self.received.append(line)
        if self.awaiting is not None:
            reply, self.awaiting = self.awaiting, None
            self.answers.append(line)
            if reply.prompt is not None:
                self.prompt = reply.prompt
            text = '\r\n'
            if reply.after:
                text += reply.after + '\r\n'
            if reply.close:
                self.closed = True
                return text
            return text + self.prompt

        reply = self.lookup(line)
        if reply.silent:
            return ''
        text = line + '\r\n'
        if reply.output:
            text += reply.output + '\r\n'
        if reply.dialog is not None:
            self.awaiting = reply
            return text + reply.dialog
        if reply.more is not None:
            self.pending_more = reply
            return text + ' --More-- '
        if reply.prompt is not None:
            self.prompt = reply.prompt
        if reply.close:
            self.closed = True
            return text
        return text + self.prompt

    def on_space(self):
        reply, self.pending_more = self.pending_more, None
        if reply.prompt is not None:
            self.prompt = reply.prompt
        return '\r' + reply.more + '\r\n' + self.prompt

    def lookup(self, line):
        reply = self.responses.get(line)
        if reply is None:
            reply = self.default
        if callable(reply):
            reply = reply(self, line)
        if isinstance(reply, str):
            reply = Reply(output=reply)
        return reply


class FakeChannel:
    """Interactive shell channel backed by a FakeDevice."""

    def __init__(self, device):
        self.device = device
        self.closed = False
        self.written = []
        self._outbuf = device.greeting().encode('utf-8')
        self._pending = ''

    def sendall(self, data):
        if self.closed:
            raise OSError('Socket is closed')
        text = data.decode('utf-8')
        self.written.append(text)
        if text == ' ' and self.device.pending_more is not None:
            self._emit(self.device.on_space())
            return
        self._pending += text
        while '\n' in self._pending:
            line, self._pending = self._pending.split('\n', 1)
            self._emit(self.device.on_line(line.rstrip('\r')))
            if self.device.closed:
                self.closed = True
                break

    def _emit(self, text):
        self._outbuf += text.encode('utf-8')

    def recv_ready(self):
        return bool(self._outbuf)

    def recv(self, size):
        data, self._outbuf = self._outbuf[:size], self._outbuf[size:]
        return data

    def close(self):
        self.closed = True


class FakeStream:
    def __init__(self, data=b'', exit_status=0):
        self._data = data
        self.channel = MagicMock()
        self.channel.recv_exit_status.return_value = exit_status

    def read(self):
        return self._data

    def close(self):
        pass


class FakeClient:
    """paramiko.SSHClient stand-in with one interactive shell and exec support."""

    def __init__(self, device, exec_results=None):
        self.device = device
        self.exec_results = dict(exec_results or {})
        self.executed = []
        self.channel = None
        self.closed = False
        self.transport = MagicMock()
        self.transport.is_active.side_effect = lambda: not self.closed

    def invoke_shell(self, term='vt100', width=80, height=24):
        self.channel = FakeChannel(self.device)
        return self.channel

    def exec_command(self, command, timeout=None):
        self.executed.append(command)
        stdout, stderr, status = self.exec_results.get(command, ('', '', 0))
        return (
            FakeStream(),
            FakeStream(stdout.encode('utf-8'), status),
            FakeStream(stderr.encode('utf-8'), status),
        )

    def get_transport(self):
        return self.transport

    def close(self):
        self.closed = True
        if self.channel is not None:
            self.channel.close()


@pytest.fixture
def fast_timing():
    """Millisecond timing profile so scripted sessions finish quickly."""
    return Timing(
        write_settle=0,
        debounce=0.005,
        poll_interval=0.001,
        channel_ready=0.02,
        fast_channel_ready=0.01,
        setup_read=0.2,
        prompt_read=0.2,
        command=0.3,
        fast_command=0.2,
        config_line=0.2,
        commit=0.3,
        reboot=0.2,
    )


@pytest.fixture
def make_credentials():
    """Factory for Credentials with test defaults."""
    def _make(device_type='generic', **overrides):
        values = {
            'host': '192.0.2.10',
            'username': 'admin',
            'password': 'secret',
            'device_type': device_type,
        }
        values.update(overrides)
        return Credentials(**values)
    return _make


@pytest.fixture
def fake_ssh():
    """
    Patch the SSH transport so connect() lands on a FakeClient.

    Yields a function taking a FakeDevice (and optional exec results) that
    returns the FakeClient the next connect() will receive.
    """
    clients = []

    with patch('netdevices.connections.base.open_ssh_client') as mock_open:
        def _install(device, exec_results=None):
            client = FakeClient(device, exec_results)
            clients.append(client)
            mock_open.side_effect = None
            mock_open.return_value = client
            return client

        _install.mock = mock_open
        _install.clients = clients
        yield _install


@pytest.fixture
def connect_driver(fake_ssh, fast_timing, make_credentials):
    """Build, script and connect a driver in one call."""
    from netdevices.drivers import DriverRegistry

    def _connect(device_type, device, exec_results=None, pool=None, **credential_overrides):
        client = fake_ssh(device, exec_results)
        credentials = make_credentials(device_type, **credential_overrides)
        driver_class = DriverRegistry.get_or_raise(device_type)
        connection = driver_class(credentials, timing=fast_timing, pool=pool)
        connection.connect()
        return connection, client
    return _connect


@pytest.fixture
def cisco_device():
    """A Cisco IOS router that starts in user mode."""
    return FakeDevice(
        prompt='router1>',
        banner='User Access Verification',
        responses={
            'enable': Reply(dialog='Password: ', prompt='router1#'),
            'configure terminal': Reply(
                output='Enter configuration commands, one per line.  End with CNTL/Z.',
                prompt='router1(config)#',
            ),
            'interface Gi0/1': Reply(prompt='router1(config-if)#'),
            'end': Reply(prompt='router1#'),
            'show version': Reply(
                output='Cisco IOS Software, C2900 Software, Version 15.1(4)M4\r\nrouter1 uptime is 5 weeks'
            ),
            'bogus command': Reply(output="                ^\r\n% Invalid input detected at '^' marker."),
            'write memory': Reply(output='Building configuration...\r\n[OK]'),
            'reload': Reply(dialog='Proceed with reload? [confirm]', close=True),
        },
    )
