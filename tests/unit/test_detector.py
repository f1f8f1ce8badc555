"""
Unit tests for prompt detection.
"""

import re

from netdevices.config.constants import DIALOG_PATTERNS
from netdevices.connections.detector import (
    DetectorState,
    PromptDetector,
    build_prompt_pattern,
    last_nonempty_line,
    prompt_stem,
    strip_ansi,
    trailing_line,
)


class TestPromptHelpers:
    """Tests for prompt text helpers."""

    def test_prompt_stem_strips_terminators(self):
        """Terminators, whitespace and the unsaved marker are removed."""
        assert prompt_stem('router1# ') == 'router1'
        assert prompt_stem('SAOS-5160*>') == 'SAOS-5160'
        assert prompt_stem('user@host:~$') == 'user@host:~'

    def test_learned_pattern_accepts_mode_suffix(self):
        """A learned prompt matches its config sub-modes."""
        pattern = build_prompt_pattern('router1#')
        assert pattern.search('router1#')
        assert pattern.search('router1>')
        assert pattern.search('router1(config-if)#')
        assert pattern.search('FGT (global) #') is None

    def test_learned_pattern_rejects_output_lines(self):
        """Output that merely starts with the hostname is not a prompt."""
        pattern = build_prompt_pattern('router1')
        assert pattern.search('router1 uptime is 5 weeks') is None
        assert pattern.search('interface router1#') is None

    def test_empty_prompt_has_no_pattern(self):
        """An empty prompt compiles to nothing."""
        assert build_prompt_pattern('#') is None

    def test_strip_ansi(self):
        """Escape sequences and NUL bytes are removed."""
        assert strip_ansi('\x1b[1;32mok\x1b[0m\x00') == 'ok'

    def test_trailing_line(self):
        """The trailing line is the text after the last newline."""
        assert trailing_line('line one\r\nrouter#') == 'router#'
        assert trailing_line('done\r\n') == ''

    def test_last_nonempty_line(self):
        """Blank trailing lines are skipped."""
        assert last_nonempty_line('a\n router# \n\n') == 'router#'


class TestPromptDetector:
    """Tests for the PromptDetector state machine."""

    def test_completes_after_debounce(self):
        """A matching trailing line completes once the device goes quiet."""
        detector = PromptDetector(prompts=['router1#'], timeout=5, debounce=0.05, started_at=0.0)
        assert detector.feed('show clock\r\n', 0.01) == DetectorState.WAITING
        assert detector.feed('12:00:00 UTC\r\nrouter1#', 0.02) == DetectorState.SETTLING
        assert detector.poll(0.05) == DetectorState.SETTLING
        assert detector.poll(0.08) == DetectorState.COMPLETE

        result = detector.result(0.08)
        assert result.matched == 'prompt'
        assert not result.timed_out
        assert result.text.endswith('router1#')

    def test_new_bytes_reset_settling(self):
        """Output arriving after a prompt-like line keeps the read going."""
        detector = PromptDetector(prompts=['router1#'], timeout=5, debounce=0.05, started_at=0.0)
        detector.feed('router1#', 0.01)
        assert detector.feed(' more output', 0.03) == DetectorState.WAITING
        assert detector.poll(1.0) == DetectorState.WAITING

    def test_prompt_inside_output_does_not_complete(self):
        """A prompt string echoed mid-output is not the trailing line."""
        detector = PromptDetector(prompts=['router1#'], timeout=5, debounce=0.01, started_at=0.0)
        detector.feed('router1#show run\r\nhostname router1\r\n', 0.01)
        assert detector.poll(0.5) == DetectorState.WAITING

    def test_times_out_with_partial_output(self):
        """The hard timeout returns whatever was collected."""
        detector = PromptDetector(prompts=['router1#'], timeout=1.0, debounce=0.01, started_at=0.0)
        detector.feed('partial', 0.1)
        assert detector.poll(1.0) == DetectorState.TIMED_OUT

        result = detector.result(1.0)
        assert result.timed_out
        assert result.text == 'partial'
        assert result.matched is None

    def test_generic_patterns_before_prompt_is_learned(self):
        """Without learned prompts the generic shapes are used."""
        detector = PromptDetector(timeout=1, debounce=0.0, started_at=0.0)
        assert detector.matches_prompt('admin@server:~$')
        assert detector.matches_prompt('[local]Redback#')
        assert detector.matches_prompt('FGT60E (global) #')
        assert detector.matches_prompt('SAOS-5160*>')
        assert not detector.matches_prompt('Last login: Mon Jan 1')

    def test_expected_marker_overrides_prompt(self):
        """An expected marker completes the read even without a prompt."""
        detector = PromptDetector(
            prompts=['user@srx#'], expected='commit complete', timeout=5, debounce=0.01, started_at=0.0
        )
        detector.feed('user@srx#', 0.01)
        assert detector.poll(0.5) == DetectorState.WAITING
        detector.feed('\r\ncommit complete\r\n', 0.6)
        assert detector.poll(0.7) == DetectorState.COMPLETE
        assert detector.result(0.7).matched == 'expected'

    def test_expected_regex_split_across_chunks(self):
        """A marker split over two chunks is still found."""
        detector = PromptDetector(expected=re.compile(r'\d+% complete'), timeout=5, debounce=0.0, started_at=0.0)
        detector.feed('Copy in progress... 10', 0.1)
        detector.feed('0% complete', 0.2)
        assert detector.poll(0.2) == DetectorState.COMPLETE

    def test_dialog_ends_read(self):
        """A confirmation question ends the read as a dialog."""
        detector = PromptDetector(prompts=['router1#'], dialogs=DIALOG_PATTERNS, timeout=5, debounce=0.0, started_at=0.0)
        detector.feed('reload\r\nProceed with reload? [confirm]', 0.1)
        assert detector.poll(0.1) == DetectorState.COMPLETE
        assert detector.result(0.1).dialog

    def test_next_deadline(self):
        """The deadline tracks the debounce while settling."""
        detector = PromptDetector(prompts=['r1#'], timeout=10, debounce=0.5, started_at=0.0)
        assert detector.next_deadline() == 10
        detector.feed('r1#', 1.0)
        assert detector.next_deadline() == 1.5
