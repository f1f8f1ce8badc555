"""
Connection engine: channel I/O, prompt detection, SSH transport, the
generic driver and the jump-host tunnel.
"""

from .detector import DetectorState, PromptDetector, ReadResult
from .channel import ChannelIO
from .transport import AlgorithmSet, DEFAULT_ALGORITHM_SETS, load_private_key, open_ssh_client
from .jump_host import JumpHostTunnel
from .base import BaseConnection, ConnectionState, SaveMode

__all__ = [
    'DetectorState',
    'PromptDetector',
    'ReadResult',
    'ChannelIO',
    'AlgorithmSet',
    'DEFAULT_ALGORITHM_SETS',
    'load_private_key',
    'open_ssh_client',
    'JumpHostTunnel',
    'BaseConnection',
    'ConnectionState',
    'SaveMode',
]
