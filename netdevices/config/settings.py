"""
Engine settings and timing configuration.

Centralizes all tunables with environment variable support.
"""

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class Timing:
    """
    Timing profile used by channel reads and session preparation.

    All values are seconds. Connections accept an explicit profile so tests
    can run with millisecond windows.
    """
    write_settle: float = 0.05
    debounce: float = 0.05
    poll_interval: float = 0.01
    channel_ready: float = 0.6
    fast_channel_ready: float = 0.2
    setup_read: float = 2.0
    prompt_read: float = 3.0
    command: float = 10.0
    fast_command: float = 5.0
    config_line: float = 5.0
    commit: float = 120.0
    reboot: float = 5.0


def _float_env(name: str, default: str) -> float:
    return float(os.getenv(name, default))


class Settings:
    """
    Engine settings loaded from environment variables.

    All settings have sensible defaults and can be overridden via environment.
    """

    def __init__(self):
        # Connection settings
        self.connect_timeout: float = _float_env('NETDEV_CONNECT_TIMEOUT', '15')
        self.command_timeout: float = _float_env('NETDEV_COMMAND_TIMEOUT', '10')
        self.fast_command_timeout: float = _float_env('NETDEV_FAST_COMMAND_TIMEOUT', '5')
        self.keepalive_interval: int = int(os.getenv('NETDEV_KEEPALIVE_INTERVAL', '30'))
        self.default_port: int = int(os.getenv('NETDEV_DEFAULT_PORT', '22'))

        # Channel read settings
        self.write_settle: float = _float_env('NETDEV_WRITE_SETTLE', '0.05')
        self.prompt_debounce: float = _float_env('NETDEV_PROMPT_DEBOUNCE', '0.05')
        self.poll_interval: float = _float_env('NETDEV_POLL_INTERVAL', '0.01')
        self.channel_ready_wait: float = _float_env('NETDEV_CHANNEL_READY_WAIT', '0.6')
        self.setup_read_timeout: float = _float_env('NETDEV_SETUP_READ_TIMEOUT', '2')
        self.prompt_read_timeout: float = _float_env('NETDEV_PROMPT_READ_TIMEOUT', '3')
        self.config_line_timeout: float = _float_env('NETDEV_CONFIG_LINE_TIMEOUT', '5')
        self.commit_timeout: float = _float_env('NETDEV_COMMIT_TIMEOUT', '120')
        self.reboot_timeout: float = _float_env('NETDEV_REBOOT_TIMEOUT', '5')

        # Pool settings
        self.pool_idle_timeout: float = _float_env('NETDEV_POOL_IDLE_TIMEOUT', '300')
        self.pool_sweep_interval: float = _float_env('NETDEV_POOL_SWEEP_INTERVAL', '60')

        # Logging settings
        self.log_level: str = os.getenv('LOG_LEVEL', 'INFO')
        self.log_file = os.getenv('LOG_FILE')

    def timing(self) -> Timing:
        """Build the timing profile from the current settings."""
        return Timing(
            write_settle=self.write_settle,
            debounce=self.prompt_debounce,
            poll_interval=self.poll_interval,
            channel_ready=self.channel_ready_wait,
            fast_channel_ready=min(self.channel_ready_wait, 0.2),
            setup_read=self.setup_read_timeout,
            prompt_read=self.prompt_read_timeout,
            command=self.command_timeout,
            fast_command=self.fast_command_timeout,
            config_line=self.config_line_timeout,
            commit=self.commit_timeout,
            reboot=self.reboot_timeout,
        )

    def to_dict(self) -> dict:
        """
        Convert settings to dictionary.

        Returns:
            Dictionary of settings
        """
        return {
            'connect_timeout': self.connect_timeout,
            'command_timeout': self.command_timeout,
            'fast_command_timeout': self.fast_command_timeout,
            'keepalive_interval': self.keepalive_interval,
            'default_port': self.default_port,
            'prompt_debounce': self.prompt_debounce,
            'setup_read_timeout': self.setup_read_timeout,
            'commit_timeout': self.commit_timeout,
            'pool_idle_timeout': self.pool_idle_timeout,
            'pool_sweep_interval': self.pool_sweep_interval,
            'log_level': self.log_level,
        }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance (cached)
    """
    return Settings()
