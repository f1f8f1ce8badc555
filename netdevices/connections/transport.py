"""
SSH transport boundary.

Opens authenticated paramiko clients, walking an ordered list of algorithm
sets (most compatible last) and translating paramiko/socket failures into
the engine's error taxonomy. Private keys are parsed before any network
attempt so a malformed key never reaches the server.
"""

import io
import logging
import re
import socket
from dataclasses import dataclass
from functools import partial
from typing import Callable, Optional, Sequence, Tuple

import paramiko

from ..utils.errors import (
    AuthenticationFailed,
    ConnectionTimeout,
    HandshakeFailed,
    HostUnreachable,
    InvalidPrivateKey,
)

logger = logging.getLogger(__name__)

_PEM_PATTERN = re.compile(
    r'(-----BEGIN [A-Z0-9 ]*PRIVATE KEY-----)(.*?)(-----END [A-Z0-9 ]*PRIVATE KEY-----)',
    re.DOTALL,
)

_KEY_CLASSES = (paramiko.RSAKey, paramiko.ECDSAKey, paramiko.Ed25519Key)


@dataclass(frozen=True)
class AlgorithmSet:
    """Preferred algorithms for one handshake attempt."""
    name: str
    kex: Tuple[str, ...]
    ciphers: Tuple[str, ...]
    digests: Tuple[str, ...]
    key_types: Tuple[str, ...]

    def apply(self, options: paramiko.transport.SecurityOptions) -> None:
        """Restrict a transport's security options to this set."""
        for attr, wanted in (
            ('kex', self.kex),
            ('ciphers', self.ciphers),
            ('digests', self.digests),
            ('key_types', self.key_types),
        ):
            available = getattr(options, attr)
            chosen = tuple(name for name in wanted if name in available)
            if chosen:
                setattr(options, attr, chosen)


MODERN_ALGORITHMS = AlgorithmSet(
    name='modern',
    kex=(
        'curve25519-sha256@libssh.org',
        'ecdh-sha2-nistp256',
        'ecdh-sha2-nistp384',
        'diffie-hellman-group16-sha512',
        'diffie-hellman-group14-sha256',
    ),
    ciphers=('aes128-ctr', 'aes192-ctr', 'aes256-ctr'),
    digests=('hmac-sha2-256', 'hmac-sha2-512'),
    key_types=('ssh-ed25519', 'ecdsa-sha2-nistp256', 'rsa-sha2-512', 'rsa-sha2-256', 'ssh-rsa'),
)

COMPATIBLE_ALGORITHMS = AlgorithmSet(
    name='compatible',
    kex=(
        'ecdh-sha2-nistp256',
        'diffie-hellman-group-exchange-sha256',
        'diffie-hellman-group14-sha256',
        'diffie-hellman-group14-sha1',
    ),
    ciphers=('aes128-ctr', 'aes256-ctr', 'aes128-cbc', 'aes256-cbc'),
    digests=('hmac-sha2-256', 'hmac-sha1'),
    key_types=('rsa-sha2-256', 'ssh-rsa', 'ecdsa-sha2-nistp256'),
)

LEGACY_ALGORITHMS = AlgorithmSet(
    name='legacy',
    kex=(
        'diffie-hellman-group14-sha1',
        'diffie-hellman-group-exchange-sha1',
        'diffie-hellman-group1-sha1',
    ),
    ciphers=('aes128-cbc', 'aes192-cbc', 'aes256-cbc', '3des-cbc'),
    digests=('hmac-sha1', 'hmac-md5'),
    key_types=('ssh-rsa', 'ssh-dss'),
)

DEFAULT_ALGORITHM_SETS = (MODERN_ALGORITHMS, COMPATIBLE_ALGORITHMS, LEGACY_ALGORITHMS)


def normalize_private_key(key_text: str) -> str:
    """
    Restore PEM line structure for keys pasted as one line.

    Handles newlines flattened to spaces or to a literal backslash-n.
    """
    text = key_text.strip().replace('\\n', '\n').replace('\r\n', '\n')
    match = _PEM_PATTERN.search(text)
    if not match:
        raise InvalidPrivateKey('Private key is missing BEGIN/END PRIVATE KEY markers')

    header, body, footer = match.groups()
    if '\n' in body.strip():
        return text if text.endswith('\n') else text + '\n'

    headers = []
    tokens = body.split()
    # Legacy encrypted PEM carries "Proc-Type:" and "DEK-Info:" header lines
    while len(tokens) >= 2 and tokens[0].endswith(':'):
        headers.append(f'{tokens[0]} {tokens[1]}')
        tokens = tokens[2:]
    data = ''.join(tokens)
    if not data:
        raise InvalidPrivateKey('Private key body is empty')

    lines = [header] + headers + ([''] if headers else [])
    lines += [data[i:i + 64] for i in range(0, len(data), 64)]
    lines.append(footer)
    return '\n'.join(lines) + '\n'


def load_private_key(key_text: str, passphrase: Optional[str] = None) -> paramiko.PKey:
    """
    Parse a private key, trying each supported key class.

    Raises:
        InvalidPrivateKey: Markers missing, passphrase missing/wrong, or no
            key class accepts the data
    """
    if not key_text or not key_text.strip():
        raise InvalidPrivateKey('Private key is empty')

    pem = normalize_private_key(key_text)
    errors = []
    for key_class in _KEY_CLASSES:
        try:
            return key_class.from_private_key(io.StringIO(pem), password=passphrase or None)
        except paramiko.PasswordRequiredException:
            raise InvalidPrivateKey('Private key is encrypted and no passphrase was given')
        except (paramiko.SSHException, ValueError) as e:
            errors.append(f'{key_class.__name__}: {e}')

    logger.debug(f"Private key rejected by all key classes: {errors}")
    raise InvalidPrivateKey('Private key format not recognized or passphrase incorrect')


def _transport_factory(algorithms: AlgorithmSet, sock, **kwargs) -> paramiko.Transport:
    transport = paramiko.Transport(sock, **kwargs)
    algorithms.apply(transport.get_security_options())
    return transport


def open_ssh_client(
    host: str,
    port: int,
    username: str,
    password: Optional[str] = None,
    pkey: Optional[paramiko.PKey] = None,
    timeout: float = 15.0,
    keepalive_interval: int = 0,
    algorithm_sets: Sequence[AlgorithmSet] = DEFAULT_ALGORITHM_SETS,
    sock_factory: Optional[Callable[[], object]] = None,
) -> paramiko.SSHClient:
    """
    Connect and authenticate, retrying the handshake with each algorithm set.

    Args:
        host: Target hostname or address
        port: SSH port
        username: Login user
        password: Password (password auth)
        pkey: Parsed private key (key auth)
        timeout: Connect/banner/auth timeout in seconds
        keepalive_interval: Transport keepalive seconds, 0 disables
        algorithm_sets: Ordered sets to try, most compatible last
        sock_factory: Returns a fresh socket-like stream per attempt
            (jump-host tunnel); None opens a direct TCP connection

    Returns:
        Connected paramiko.SSHClient

    Raises:
        AuthenticationFailed: Server rejected the credentials
        ConnectionTimeout: No handshake within the timeout
        HostUnreachable: DNS, refused or network failure
        HandshakeFailed: Every algorithm set was rejected
    """
    attempts = []
    for algorithms in algorithm_sets:
        client = paramiko.SSHClient()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        sock = sock_factory() if sock_factory else None
        try:
            client.connect(
                hostname=host,
                port=port,
                username=username,
                password=password,
                pkey=pkey,
                timeout=timeout,
                banner_timeout=timeout,
                auth_timeout=timeout,
                look_for_keys=False,
                allow_agent=False,
                sock=sock,
                transport_factory=partial(_transport_factory, algorithms),
            )
        except paramiko.AuthenticationException as e:
            _discard(client, sock)
            raise AuthenticationFailed(host, f'Authentication failed for {username}@{host}: {e}')
        except socket.timeout:
            _discard(client, sock)
            raise ConnectionTimeout(host, timeout)
        except socket.gaierror as e:
            _discard(client, sock)
            raise HostUnreachable(host, port, f'Cannot resolve {host}: {e}')
        except paramiko.SSHException as e:
            _discard(client, sock)
            attempts.append(f'{algorithms.name}: {e}')
            logger.warning(f"SSH negotiation with {host} failed using {algorithms.name} algorithms: {e}")
            continue
        except (socket.error, EOFError) as e:
            _discard(client, sock)
            raise HostUnreachable(host, port, f'Cannot connect to {host}:{port}: {e}')

        if keepalive_interval:
            client.get_transport().set_keepalive(keepalive_interval)
        logger.info(f"SSH session established to {host}:{port} using {algorithms.name} algorithms")
        return client

    raise HandshakeFailed(host, attempts)


def _discard(client: paramiko.SSHClient, sock) -> None:
    client.close()
    if sock is not None:
        try:
            sock.close()
        except (socket.error, EOFError) as e:
            logger.debug(f"Closing stream after failed attempt raised: {e}")
