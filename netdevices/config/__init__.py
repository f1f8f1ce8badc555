"""Engine configuration package."""

from .settings import Settings, Timing, get_settings
from .logging import RedactingFilter, init_logging, redact, setup_logging
from .constants import *

__all__ = ['Settings', 'Timing', 'get_settings', 'setup_logging', 'init_logging', 'RedactingFilter', 'redact']
