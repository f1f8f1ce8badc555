"""
Channel I/O primitives.

Byte-buffered write/read over a live interactive shell channel with
timeout-bounded reads. No retries happen at this layer.
"""

import logging
import socket
import time
from typing import Callable, Iterable, Optional, Sequence, Pattern

from ..config.constants import PAGER_PATTERN, PROMPT_TERMINATORS
from ..config.settings import Timing
from ..utils.errors import ChannelUnavailable
from .detector import Expected, PromptDetector, ReadResult

logger = logging.getLogger(__name__)

RECV_SIZE = 65535


class ChannelIO:
    """
    Sequential reader/writer bound to one channel.

    The channel only needs the paramiko Channel surface used here:
    sendall(), recv_ready(), recv(), closed and close().
    """

    def __init__(
        self,
        channel,
        timing: Timing,
        encoding: str = 'utf-8',
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.channel = channel
        self.timing = timing
        self.encoding = encoding
        self.clock = clock
        self.sleep = sleep

    @property
    def is_open(self) -> bool:
        return self.channel is not None and not getattr(self.channel, 'closed', False)

    def write(self, text: str) -> None:
        """
        Send raw text and wait the settle delay.

        Raises:
            ChannelUnavailable: No channel, or the channel is closed
        """
        if not self.is_open:
            raise ChannelUnavailable('Cannot write: no active channel')
        try:
            self.channel.sendall(text.encode(self.encoding))
        except (socket.error, EOFError) as e:
            raise ChannelUnavailable(f'Channel write failed: {e}')
        if self.timing.write_settle:
            self.sleep(self.timing.write_settle)

    def read_available(self) -> str:
        """Drain whatever is buffered on the channel without waiting."""
        if not self.is_open:
            return ''
        chunks = []
        try:
            while self.channel.recv_ready():
                data = self.channel.recv(RECV_SIZE)
                if not data:
                    break
                chunks.append(data.decode(self.encoding, errors='replace'))
        except socket.timeout:
            pass
        except (socket.error, EOFError) as e:
            raise ChannelUnavailable(f'Channel read failed: {e}')
        return ''.join(chunks)

    def clear_buffer(self) -> str:
        """Discard pending output so the next read starts clean."""
        stale = self.read_available()
        if stale:
            logger.debug(f"Discarded {len(stale)} stale bytes")
        return stale

    def read_for(self, duration: float) -> str:
        """Collect everything received within a fixed window."""
        if not self.is_open:
            raise ChannelUnavailable('Cannot read: no active channel')
        output = ''
        deadline = self.clock() + duration
        while self.clock() < deadline:
            chunk = self.read_available()
            if chunk:
                output += chunk
            elif not self.is_open:
                break
            else:
                self.sleep(self.timing.poll_interval)
        return output + self.read_available()

    def read_until_prompt(
        self,
        prompts: Iterable[str] = (),
        timeout: Optional[float] = None,
        expected: Optional[Expected] = None,
        dialogs: Sequence[Pattern] = (),
        terminators: str = PROMPT_TERMINATORS,
    ) -> ReadResult:
        """
        Read until the device prompt (or expected marker) appears.

        On timeout the accumulated text is returned with timed_out set;
        callers decide whether partial output is an error.

        Raises:
            ChannelUnavailable: No channel to read from
        """
        if not self.is_open:
            raise ChannelUnavailable('Cannot read: no active channel')

        timeout = self.timing.command if timeout is None else timeout
        detector = PromptDetector(
            prompts=prompts,
            terminators=terminators,
            expected=expected,
            dialogs=dialogs,
            timeout=timeout,
            debounce=self.timing.debounce,
            started_at=self.clock(),
        )

        closed = False
        pager_answered = 0
        while not detector.done:
            chunk = self.read_available()
            now = self.clock()
            if chunk:
                detector.feed(chunk, now)
                # a marker may straddle two reads
                tail = max(pager_answered, len(detector.buffer) - len(chunk) - 64)
                pager = PAGER_PATTERN.search(detector.buffer, tail)
                if pager:
                    self.channel.sendall(b' ')
                    pager_answered = pager.end()
                continue
            if not self.is_open:
                closed = True
                break
            detector.poll(now)
            if detector.done:
                break
            self.sleep(max(0.0, min(self.timing.poll_interval, detector.next_deadline() - now)))

        result = detector.result(self.clock(), closed=closed)
        if result.timed_out:
            logger.debug(f"Prompt not seen within {timeout}s, returning {len(result.text)} bytes")
        return result

    def close(self) -> None:
        if self.channel is not None:
            try:
                self.channel.close()
            except (socket.error, EOFError) as e:
                logger.debug(f"Channel close raised: {e}")
        self.channel = None
