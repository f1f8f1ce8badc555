"""
Jump-host (bastion) tunnel.

The bastion session forwards a direct-tcpip stream to the target; the
target handshake then runs over that stream instead of a TCP socket.
"""

import logging
import socket
from typing import List, Optional, Sequence

import paramiko

from ..core.types import AuthMethod, JumpHostCredentials
from ..utils.errors import ChannelUnavailable, HostUnreachable
from .transport import (
    AlgorithmSet,
    DEFAULT_ALGORITHM_SETS,
    load_private_key,
    open_ssh_client,
)

logger = logging.getLogger(__name__)


class JumpHostTunnel:
    """
    Bastion session plus the forwarded streams opened through it.

    Owned by a single connection; never pooled on its own.
    """

    def __init__(
        self,
        jump: JumpHostCredentials,
        target_host: str,
        target_port: int,
        timeout: float = 15.0,
        keepalive_interval: int = 0,
        algorithm_sets: Sequence[AlgorithmSet] = DEFAULT_ALGORITHM_SETS,
    ):
        self.jump = jump
        self.target_host = target_host
        self.target_port = target_port
        self.timeout = timeout
        self.keepalive_interval = keepalive_interval
        self.algorithm_sets = algorithm_sets
        self.client: Optional[paramiko.SSHClient] = None
        self.streams: List[paramiko.Channel] = []

    @property
    def is_open(self) -> bool:
        if self.client is None:
            return False
        transport = self.client.get_transport()
        return transport is not None and transport.is_active()

    def open(self) -> None:
        """Authenticate to the bastion with its own credentials."""
        pkey = None
        password = None
        if self.jump.auth_method == AuthMethod.PRIVATE_KEY:
            pkey = load_private_key(self.jump.private_key, self.jump.passphrase)
        else:
            password = self.jump.password

        logger.info(
            f"Connecting to jump host {self.jump.host}:{self.jump.port} "
            f"for target {self.target_host}:{self.target_port}"
        )
        self.client = open_ssh_client(
            host=self.jump.host,
            port=self.jump.port,
            username=self.jump.username,
            password=password,
            pkey=pkey,
            timeout=self.timeout,
            keepalive_interval=self.keepalive_interval,
            algorithm_sets=self.algorithm_sets,
        )

    def open_stream(self) -> paramiko.Channel:
        """
        Request a forwarded stream from the bastion to the target.

        Raises:
            ChannelUnavailable: Bastion session is not active
            HostUnreachable: Bastion refused or could not reach the target
        """
        if not self.is_open:
            raise ChannelUnavailable('Jump host session is not active')
        try:
            stream = self.client.get_transport().open_channel(
                'direct-tcpip',
                (self.target_host, self.target_port),
                ('127.0.0.1', 0),
                timeout=self.timeout,
            )
        except (paramiko.ChannelException, paramiko.SSHException, socket.error) as e:
            raise HostUnreachable(
                self.target_host,
                self.target_port,
                f'Jump host {self.jump.host} could not reach '
                f'{self.target_host}:{self.target_port}: {e}',
            )
        self.streams.append(stream)
        return stream

    def close(self) -> None:
        """Close forwarded streams, then the bastion session."""
        while self.streams:
            stream = self.streams.pop()
            try:
                stream.close()
            except (socket.error, EOFError) as e:
                logger.debug(f"Forwarded stream close raised: {e}")
        if self.client is not None:
            self.client.close()
            self.client = None
            logger.info(f"Jump host session to {self.jump.host} closed")
