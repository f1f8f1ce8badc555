"""
Prompt and completion detection.

Devices stream unframed bytes; "done" is only visible as the shape of the
trailing line. PromptDetector is a small state machine fed with chunks and
polled with timestamps, so it can be driven by a real channel or by a test
with a fake clock.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Pattern, Sequence, Union

from ..config.constants import (
    ANSI_ESCAPE_PATTERN,
    GENERIC_PROMPT_PATTERNS,
    PROMPT_TERMINATORS,
)

# Only the tail of the buffer can hold the trailing line
_TAIL_WINDOW = 1024
_EXPECTED_OVERLAP = 256

Expected = Union[str, Pattern]


class DetectorState(str, Enum):
    WAITING = 'waiting'
    SETTLING = 'settling'
    COMPLETE = 'complete'
    TIMED_OUT = 'timed_out'


@dataclass(frozen=True)
class ReadResult:
    """Text collected by one read and how the read ended."""
    text: str
    timed_out: bool = False
    matched: Optional[str] = None
    closed: bool = False
    elapsed: float = 0.0

    @property
    def last_line(self) -> str:
        return trailing_line(self.text)

    @property
    def dialog(self) -> bool:
        return self.matched == 'dialog'


def strip_ansi(text: str) -> str:
    """Remove terminal escape sequences and NUL bytes."""
    return ANSI_ESCAPE_PATTERN.sub('', text).replace('\x00', '')


def normalize_newlines(text: str) -> str:
    return text.replace('\r\n', '\n').replace('\r', '\n')


def trailing_line(text: str) -> str:
    """Return the text after the last newline (the line a prompt sits on)."""
    cleaned = normalize_newlines(strip_ansi(text[-_TAIL_WINDOW:]))
    return cleaned.rsplit('\n', 1)[-1]


def last_nonempty_line(text: str) -> str:
    for line in reversed(normalize_newlines(strip_ansi(text)).split('\n')):
        if line.strip():
            return line.strip()
    return ''


def prompt_stem(prompt: str, terminators: str = PROMPT_TERMINATORS) -> str:
    """Strip terminators, whitespace and an unsaved-changes "*" from a prompt."""
    return prompt.strip().rstrip(terminators).rstrip().rstrip('*')


def build_prompt_pattern(prompt: str, terminators: str = PROMPT_TERMINATORS) -> Optional[Pattern]:
    """
    Compile the trailing-line pattern for a learned prompt.

    The learned text must start the line and be followed by a terminator,
    optionally after a parenthesised mode such as "(config-if)" or "(global)".
    """
    stem = prompt_stem(prompt, terminators)
    if not stem:
        return None
    return re.compile(
        r'^\s*' + re.escape(stem)
        + r'(?:\s?\([^)\r\n]*\))?\*?\s?[' + re.escape(terminators) + r']\s*$'
    )


class PromptDetector:
    """
    Decide when a device has finished responding.

    States:
        WAITING   - trailing line does not look like a prompt
        SETTLING  - trailing line matches; waiting for the debounce to expire
        COMPLETE  - matched and no bytes arrived for the debounce window
        TIMED_OUT - hard timeout reached without completion

    Args:
        prompts: Learned prompt strings (base, privileged, config)
        terminators: Characters a prompt may end with
        expected: Substring or compiled regex that overrides prompt matching
        dialogs: Confirmation patterns that also end the read
        timeout: Hard timeout in seconds
        debounce: Quiet period after a match before completing
        started_at: Clock value when the read began
    """

    def __init__(
        self,
        prompts: Iterable[str] = (),
        terminators: str = PROMPT_TERMINATORS,
        expected: Optional[Expected] = None,
        dialogs: Sequence[Pattern] = (),
        timeout: float = 10.0,
        debounce: float = 0.05,
        started_at: float = 0.0,
    ):
        self.terminators = terminators
        self.expected = expected
        self.dialogs = list(dialogs)
        self.timeout = timeout
        self.debounce = debounce
        self.started_at = started_at
        self.last_activity = started_at
        self.buffer = ''
        self.state = DetectorState.WAITING
        self.matched: Optional[str] = None
        self._expected_seen = False
        self._expected_from = 0

        self.prompt_patterns: List[Pattern] = []
        for prompt in prompts:
            if prompt:
                pattern = build_prompt_pattern(prompt, terminators)
                if pattern is not None:
                    self.prompt_patterns.append(pattern)
        if not self.prompt_patterns:
            self.prompt_patterns = list(GENERIC_PROMPT_PATTERNS)

    @property
    def done(self) -> bool:
        return self.state in (DetectorState.COMPLETE, DetectorState.TIMED_OUT)

    def feed(self, chunk: str, now: float) -> DetectorState:
        """Append a chunk and re-evaluate the trailing line."""
        if self.done or not chunk:
            return self.poll(now)

        self.buffer += chunk
        self.last_activity = now
        self.matched = self._evaluate()
        self.state = DetectorState.SETTLING if self.matched else DetectorState.WAITING
        return self.poll(now)

    def poll(self, now: float) -> DetectorState:
        """Advance timers without new data."""
        if self.done:
            return self.state
        if self.state == DetectorState.SETTLING and now - self.last_activity >= self.debounce:
            self.state = DetectorState.COMPLETE
        elif now - self.started_at >= self.timeout:
            self.state = DetectorState.TIMED_OUT
        return self.state

    def next_deadline(self) -> float:
        """Clock value at which poll() may change state next."""
        hard = self.started_at + self.timeout
        if self.state == DetectorState.SETTLING:
            return min(hard, self.last_activity + self.debounce)
        return hard

    def result(self, now: float, closed: bool = False) -> ReadResult:
        return ReadResult(
            text=self.buffer,
            timed_out=self.state == DetectorState.TIMED_OUT,
            matched=self.matched if self.state == DetectorState.COMPLETE else None,
            closed=closed,
            elapsed=now - self.started_at,
        )

    def matches_prompt(self, line: str) -> bool:
        return any(pattern.search(line) for pattern in self.prompt_patterns)

    def _evaluate(self) -> Optional[str]:
        if self.expected is not None:
            return 'expected' if self._expected_found() else None

        line = trailing_line(self.buffer)
        if not line.strip():
            return None
        for pattern in self.dialogs:
            if pattern.search(line):
                return 'dialog'
        if self.matches_prompt(line):
            return 'prompt'
        return None

    def _expected_found(self) -> bool:
        if self._expected_seen:
            return True
        window = strip_ansi(self.buffer[self._expected_from:])
        if isinstance(self.expected, str):
            found = self.expected.lower() in window.lower()
        else:
            found = self.expected.search(window) is not None
        self._expected_from = max(0, len(self.buffer) - _EXPECTED_OVERLAP)
        self._expected_seen = found
        return found
