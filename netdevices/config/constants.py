"""
Shared constants for prompt detection and output cleanup.
"""

import re

# Characters a CLI prompt ends with
PROMPT_TERMINATORS = '>#$%'

# Prompt shapes used before a device prompt has been learned
GENERIC_PROMPT_PATTERNS = [
    re.compile(r'^[\w.\-]+@[\w.\-]+:[^\r\n]*[$#]\s*$'),           # user@host:~$
    re.compile(r'^[\w.\-/:]+\([\w.\-/ ]+\)\s?#\s*$'),             # router(config)#
    re.compile(r'^\[[^\]\r\n]+\]\s?[$#]\s*$'),                     # [user@host ~]$
    re.compile(r'^\[[\w.\-]+\][\w.\-/:@]+\s?[>#$%]\s*$'),             # [local]router#
    re.compile(r'^[\w.\-/:@]+\*?(?:\s\([\w.\-]+\))?\s?[>#$%]\s*$'),  # router> / FGT (global) #
]

# Confirmation dialogs that must be answered rather than taken as a prompt
DIALOG_PATTERNS = [
    re.compile(r'\[confirm\]\s*$', re.IGNORECASE),
    re.compile(r'\[yes/no\]\s*:?\s*$', re.IGNORECASE),
    re.compile(r'\[yes,no\](?:\s*\(\w+\))?\s*:?\s*$', re.IGNORECASE),
    re.compile(r'\(yes/no(?:/cancel)?\)\s*\??\s*(?:\[\w+\])?\s*:?\s*$', re.IGNORECASE),
    re.compile(r'\(y/n\)\s*(?:\[[yn]\])?\s*\??\s*:?\s*$', re.IGNORECASE),
    re.compile(r'continue\?\s*$', re.IGNORECASE),
]

# Pager markers answered with a space while reading
PAGER_PATTERN = re.compile(r'(?:--\s?More\s?--|<--- More --->|\(more\)|Press any key to continue)', re.IGNORECASE)

ANSI_ESCAPE_PATTERN = re.compile(r'\x1b\[[0-9;?]*[A-Za-z]|\x1b[()][AB012]|\x1b[=>]')

# Substrings that mark a failed command on most CLIs
DEFAULT_ERROR_PATTERNS = (
    'invalid command',
    'invalid input',
    'permission denied',
    'syntax error',
    'unknown command',
    'command not found',
    'incomplete command',
    'ambiguous command',
)

# Pool key separator (host:port:username)
POOL_KEY_FORMAT = '{host}:{port}:{username}'
