"""
Unit tests for the connection dispatcher.
"""

from unittest.mock import patch

import pytest

from conftest import FakeDevice, Reply
from netdevices.dispatcher import (
    ConnectionDispatcher,
    classify_device_output,
    connect_handler,
    connect_handler_with_auto_detect,
)
from netdevices.drivers import CiscoIosConnection, GenericConnection, JuniperConnection
from netdevices.pool import ConnectionPool
from netdevices.utils.errors import DetectionFailed, HostUnreachable, UnsupportedDeviceType


class TestClassifyDeviceOutput:
    """Tests for banner/prompt classification."""

    @pytest.mark.parametrize('text, expected', [
        ('Cisco Nexus Operating System (NX-OS) Software', 'cisco_nxos'),
        ('Cisco Adaptive Security Appliance Software Version 9.8', 'cisco_asa'),
        ('Cisco IOS XR Software, Version 6.5.3', 'cisco_ios_xr'),
        ('Cisco IOS-XE Software, Version 16.09.03', 'cisco_ios_xe'),
        ('Cisco Small Business SG300-28', 'cisco_sg300'),
        ('Cisco IOS Software, C2900 Software', 'cisco_ios'),
        ('--- JUNOS 18.4R1.8 built 2018-12-17', 'juniper_junos'),
        ('Juniper SRX340 Services Gateway', 'juniper_srx'),
        ('Ciena SAOS 6.18', 'ciena_saos'),
        ('FortiGate-60E v7.0.12', 'fortinet_fortios'),
        ('Palo Alto Networks PA-220', 'paloalto_panos'),
        ('Welcome to VyOS', 'vyos'),
        ('Ericsson MINI-LINK 6691', 'ericsson_mltn'),
        ('Ericsson IPOS Version IPOS-16.1', 'ericsson_ipos'),
        ('Welcome to Ubuntu 22.04.3 LTS', 'linux'),
        ('admin@srv1:~$', 'linux'),
    ])
    def test_known_banners(self, text, expected):
        """Banner keywords select the device type."""
        assert classify_device_output(text) == expected

    def test_unknown(self):
        """Unrecognised output yields no result."""
        assert classify_device_output('Unauthorized access prohibited\r\nHP-2920>') is None


class TestConnectionDispatcher:
    """Tests for ConnectionDispatcher."""

    def test_create_connection(self, make_credentials, fast_timing):
        """The driver matches the device type and is not connected."""
        pool = ConnectionPool()
        dispatcher = ConnectionDispatcher(pool=pool, timing=fast_timing)
        connection = dispatcher.create_connection(make_credentials('Juniper_SRX'))

        assert isinstance(connection, JuniperConnection)
        assert connection.pool is pool
        assert not connection.connected

    def test_unsupported(self, make_credentials):
        """An unknown device type raises UnsupportedDeviceType."""
        with pytest.raises(UnsupportedDeviceType):
            ConnectionDispatcher().create_connection(make_credentials('huawei_vrp'))

    def test_connect(self, fake_ssh, make_credentials, fast_timing):
        """connect() returns a ready driver."""
        fake_ssh(FakeDevice(prompt='router1#'))
        connection = ConnectionDispatcher(timing=fast_timing).connect(make_credentials('cisco_ios'))

        assert isinstance(connection, CiscoIosConnection)
        assert connection.connected

    def test_supported_types(self):
        """Supported types, display names and options are exposed."""
        assert ConnectionDispatcher.is_supported('CISCO_IOS')
        assert not ConnectionDispatcher.is_supported('huawei_vrp')
        assert 'ericsson_mltn' in ConnectionDispatcher.supported_device_types()
        assert ConnectionDispatcher.display_name('cisco_nxos') == 'Cisco NX-OS'
        assert ConnectionDispatcher.display_name('huawei_vrp') == 'huawei_vrp'

        options = ConnectionDispatcher.device_type_options()
        assert {'name': 'Generic SSH', 'value': 'generic', 'description': 'Generic SSH connection'} in options

    def test_connect_handler(self, make_credentials):
        """connect_handler returns an unconnected driver."""
        connection = connect_handler(make_credentials('linux'))
        assert connection.device_type == 'linux'
        assert not connection.connected


class TestAutoDetect:
    """Tests for device type auto-detection."""

    def test_detects_from_banner(self, fake_ssh, make_credentials, fast_timing):
        """The probe session banner identifies the device."""
        fake_ssh(FakeDevice(prompt='admin@mx1>', banner='--- JUNOS 21.4R3 Kernel 64-bit'))
        dispatcher = ConnectionDispatcher(timing=fast_timing)

        assert dispatcher.auto_detect(make_credentials()) == 'juniper_junos'

    def test_probe_uses_generic_driver_and_closes(self, fake_ssh, make_credentials, fast_timing):
        """Detection probes with the generic driver and always closes it."""
        client = fake_ssh(FakeDevice(prompt='PA-220>', responses={'': Reply(output='Palo Alto Networks')}))

        with patch.object(GenericConnection, 'close', autospec=True, side_effect=GenericConnection.close) as mock_close:
            detected = ConnectionDispatcher(timing=fast_timing).auto_detect(make_credentials('cisco_ios'))

        assert detected == 'paloalto_panos'
        mock_close.assert_called_once()
        assert client.closed

    def test_connection_error_returns_none(self, fake_ssh, make_credentials, fast_timing):
        """Failures during detection yield no result."""
        fake_ssh.mock.side_effect = HostUnreachable('192.0.2.10', 22)
        assert ConnectionDispatcher(timing=fast_timing).auto_detect(make_credentials()) is None

    def test_connect_auto(self, fake_ssh, make_credentials, fast_timing):
        """connect_auto reconnects with the detected driver."""
        fake_ssh(FakeDevice(prompt='router1#', banner='Cisco IOS Software'))
        connection = ConnectionDispatcher(timing=fast_timing).connect_auto(make_credentials())

        assert isinstance(connection, CiscoIosConnection)
        assert connection.credentials.device_type == 'cisco_ios'
        assert fake_ssh.mock.call_count == 2

    def test_connect_auto_undetected(self, fake_ssh, make_credentials, fast_timing):
        """Nothing detected raises DetectionFailed."""
        fake_ssh(FakeDevice(prompt='HP-2920>'))
        with pytest.raises(DetectionFailed) as exc:
            ConnectionDispatcher(timing=fast_timing).connect_auto(make_credentials())
        assert exc.value.message == 'Could not auto-detect device type'

    def test_connect_handler_with_auto_detect(self, fake_ssh, make_credentials):
        """The helper returns an unconnected driver of the detected type."""
        fake_ssh(FakeDevice(prompt='SAOS-5160*>', banner='Ciena SAOS'))
        with patch('netdevices.dispatcher.ConnectionDispatcher.auto_detect', return_value='ciena_saos'):
            connection = connect_handler_with_auto_detect(make_credentials())

        assert connection.device_type == 'ciena_saos'
        assert not connection.connected
