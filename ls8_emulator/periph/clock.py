"""
LS-8 Emulator — Clock Driver

Drives the CPU by calling a tick callback at a fixed interval on a
background thread. Every call, whether from the clock thread or a direct
step(), goes through one lock, so ticks never overlap. A step() issued
from inside a running tick on the same thread raises ReentrantTick.

stop() may be called from inside the callback (HLT, invalid opcode): in
that case the clock thread is signalled but not joined, and it exits as
soon as the callback returns.
"""

import logging
import threading
from typing import Callable, Optional

from ..errors import LS8Error

log = logging.getLogger(__name__)


class ReentrantTick(LS8Error):
    """step() called from inside the tick it would wait on."""


class Clock:
    """Owned interval scheduler with start / stop / step."""

    DEFAULT_INTERVAL = 0.001  # seconds between ticks
    JOIN_TIMEOUT = 2.0

    def __init__(self, callback: Callable[[], object],
                 interval: float = DEFAULT_INTERVAL,
                 name: str = "LS8-Clock"):
        if interval < 0:
            raise ValueError(f"Clock interval must be >= 0, got {interval}")
        self._callback = callback
        self.interval = interval
        self._name = name
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._owner: Optional[threading.Thread] = None
        self.ticks: int = 0
        self.error: Optional[BaseException] = None

    @property
    def running(self) -> bool:
        return (self._thread is not None and self._thread.is_alive()
                and not self._stop_event.is_set())

    def start(self):
        """Begin ticking. No-op if already running."""
        if self.running:
            return
        previous = self._thread
        if previous is not None and previous is not threading.current_thread():
            previous.join(timeout=self.JOIN_TIMEOUT)
        self._stop_event.clear()
        self.error = None
        self._thread = threading.Thread(
            target=self._run, daemon=True, name=self._name
        )
        self._thread.start()
        log.debug("Clock started (interval=%.4fs)", self.interval)

    def stop(self):
        """Stop ticking. Safe to call repeatedly and from inside a tick."""
        if self._thread is None:
            return
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.JOIN_TIMEOUT)
            self._thread = None
        log.debug("Clock stopped after %d ticks", self.ticks)

    def step(self):
        """Run one tick under the clock lock and return its result."""
        current = threading.current_thread()
        if self._owner is current:
            raise ReentrantTick(f"{self._name}: step() called from inside a tick")
        with self._lock:
            self._owner = current
            try:
                self.ticks += 1
                return self._callback()
            finally:
                self._owner = None

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the clock thread to exit. Returns True if it has."""
        thread = self._thread
        if thread is None or thread is threading.current_thread():
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def _run(self):
        while not self._stop_event.wait(self.interval):
            try:
                self.step()
            except Exception as e:
                log.exception("Clock callback raised, stopping clock")
                self.error = e
                self._stop_event.set()
