"""
Connection pool.

Keeps live connections keyed by host:port:username so later operations
against the same device skip the SSH handshake and session preparation.
A background thread evicts connections idle longer than the threshold.
"""

import atexit
import logging
import threading
import time
import weakref
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .config.settings import get_settings

logger = logging.getLogger(__name__)

_live_pools: 'weakref.WeakSet[ConnectionPool]' = weakref.WeakSet()


@dataclass
class PoolEntry:
    """A pooled connection and its activity time."""
    connection: object
    last_activity: float
    created_at: float = field(default_factory=time.monotonic)


class ConnectionPool:
    """
    Process-scoped pool of live connections.

    Usage:
        pool = ConnectionPool()
        pool.start()
        dispatcher = ConnectionDispatcher(pool=pool)
        ...
        pool.stop()
    """

    def __init__(
        self,
        idle_timeout: Optional[float] = None,
        sweep_interval: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        settings = get_settings()
        self.idle_timeout = settings.pool_idle_timeout if idle_timeout is None else idle_timeout
        self.sweep_interval = settings.pool_sweep_interval if sweep_interval is None else sweep_interval
        self.clock = clock
        self._entries: Dict[str, PoolEntry] = {}
        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        _live_pools.add(self)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the background idle sweep."""
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._sweep_loop, name='netdevices-pool-sweep', daemon=True)
        self._thread.start()
        logger.info(
            f"Connection pool started (idle timeout {self.idle_timeout}s, sweep every {self.sweep_interval}s)"
        )

    def stop(self, close_connections: bool = True) -> None:
        """Stop the sweep thread and optionally close every pooled connection."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=max(1.0, self.sweep_interval))
            self._thread = None
        if close_connections:
            self.close_all()
        logger.info("Connection pool stopped")

    def _sweep_loop(self) -> None:
        while not self._stop_event.wait(self.sweep_interval):
            try:
                self.sweep()
            except Exception as e:
                logger.error(f"Connection pool sweep failed: {e}")

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._entries.keys())

    def get(self, key: str):
        """
        Return the live connection for a key, or None.

        A dead entry is evicted on lookup.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.connection.is_alive():
                entry.last_activity = self.clock()
                return entry.connection
            del self._entries[key]
        logger.info(f"Pooled connection {key} is no longer alive, evicting")
        self._close(entry.connection)
        return None

    def add(self, connection) -> None:
        """Pool a connection; an existing entry for the same key is replaced and closed."""
        key = connection.credentials.pool_key
        with self._lock:
            previous = self._entries.get(key)
            self._entries[key] = PoolEntry(connection=connection, last_activity=self.clock())
        if previous is not None and previous.connection is not connection:
            self._close(previous.connection)
        logger.debug(f"Pooled connection {key}")

    def touch(self, key: str) -> None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                entry.last_activity = self.clock()

    def discard(self, connection) -> bool:
        """Drop the entry if it holds this connection; does not close it."""
        key = connection.credentials.pool_key
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.connection is connection:
                del self._entries[key]
                return True
        return False

    def sweep(self, now: Optional[float] = None) -> List[str]:
        """
        Evict and close entries idle longer than the threshold or no longer alive.

        Returns:
            Keys that were evicted
        """
        now = self.clock() if now is None else now
        expired = []
        with self._lock:
            for key, entry in list(self._entries.items()):
                if now - entry.last_activity > self.idle_timeout or not entry.connection.is_alive():
                    expired.append((key, self._entries.pop(key)))

        for key, entry in expired:
            logger.info(f"Evicting idle pooled connection {key}")
            self._close(entry.connection)
        return [key for key, _ in expired]

    def close_all(self) -> int:
        """Close every pooled connection."""
        with self._lock:
            entries = list(self._entries.values())
            self._entries.clear()
        for entry in entries:
            self._close(entry.connection)
        return len(entries)

    def _close(self, connection) -> None:
        try:
            connection.close()
        except Exception as e:
            logger.warning(f"Error closing pooled connection {connection.credentials.pool_key}: {e}")


def force_cleanup() -> int:
    """
    Stop every live pool and close all pooled connections.

    Registered with atexit; safe to call more than once.

    Returns:
        Number of connections closed
    """
    closed = 0
    for pool in list(_live_pools):
        pool._stop_event.set()
        closed += pool.close_all()
    if closed:
        logger.info(f"Force cleanup closed {closed} pooled connections")
    return closed


atexit.register(force_cleanup)
