"""
Timers for phase deadlines.

All waiting in the game is done through a Scheduler so that the server can
use real threads while tests drive a virtual clock.
"""

import heapq
import itertools
import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


class TimerHandle:
    """Handle to a scheduled callback. A cancelled handle never fires."""
    
    def __init__(self):
        self.cancelled = False
        self._timer: Optional[threading.Timer] = None
    
    def cancel(self) -> None:
        self.cancelled = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


class Scheduler(ABC):
    """Runs callbacks after a delay."""
    
    @abstractmethod
    def now(self) -> float:
        """Current time in seconds."""
        pass
    
    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run callback after delay seconds unless the handle is cancelled first."""
        pass


class ThreadingScheduler(Scheduler):
    """Scheduler backed by threading.Timer. Callbacks run under the given lock."""
    
    def __init__(self, lock=None):
        self.lock = lock or threading.RLock()
    
    def now(self) -> float:
        return time.monotonic()
    
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle()
        
        def run():
            with self.lock:
                if handle.cancelled:
                    return
                handle._timer = None
                callback()
        
        timer = threading.Timer(max(0.0, delay), run)
        timer.daemon = True
        handle._timer = timer
        timer.start()
        return handle


class ManualScheduler(Scheduler):
    """Virtual clock. Nothing fires until advance() is called."""
    
    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: List[Tuple[float, int, TimerHandle, Callable[[], None]]] = []
        self._sequence = itertools.count()
    
    def now(self) -> float:
        return self._now
    
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle()
        heapq.heappush(self._queue, (self._now + max(0.0, delay), next(self._sequence), handle, callback))
        return handle
    
    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due callbacks in order."""
        deadline = self._now + seconds
        while self._queue and self._queue[0][0] <= deadline:
            when, _, handle, callback = heapq.heappop(self._queue)
            self._now = when
            if not handle.cancelled:
                callback()
        self._now = deadline
    
    def pending(self) -> int:
        """Number of scheduled callbacks that can still fire."""
        return sum(1 for _, _, handle, _ in self._queue if not handle.cancelled)


class Countdown:
    """
    A single cancellable deadline with reminders along the way.
    
    reminders is a table of (seconds remaining, text). Only one timer is
    outstanding at any moment; each fire checks the generation it was
    scheduled under, so a fire left over from a cancelled or restarted
    countdown does nothing.
    """
    
    def __init__(self, scheduler: Scheduler, duration: float,
                 reminders: Sequence[Tuple[float, str]] = (),
                 on_reminder: Optional[Callable[[str], None]] = None,
                 on_expire: Optional[Callable[[], None]] = None):
        self.scheduler = scheduler
        self.duration = duration
        self.reminders = sorted((r for r in reminders if 0 < r[0] < duration), key=lambda r: -r[0])
        self.on_reminder = on_reminder
        self.on_expire = on_expire
        self.deadline: Optional[float] = None
        self._pending: List[Tuple[float, str]] = []
        self._generation = 0
        self._handle: Optional[TimerHandle] = None
    
    @property
    def active(self) -> bool:
        return self._handle is not None
    
    def remaining(self) -> Optional[float]:
        if self.deadline is None or not self.active:
            return None
        return max(0.0, self.deadline - self.scheduler.now())
    
    def start(self) -> "Countdown":
        self.cancel()
        self.deadline = self.scheduler.now() + self.duration
        self._pending = list(self.reminders)
        self._schedule(self._generation)
        return self
    
    def cancel(self) -> None:
        self._generation += 1
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
    
    def _schedule(self, generation: int) -> None:
        remaining = self.deadline - self.scheduler.now()
        if self._pending:
            delay = remaining - self._pending[0][0]
        else:
            delay = remaining
        self._handle = self.scheduler.call_later(max(0.0, delay), lambda: self._fire(generation))
    
    def _fire(self, generation: int) -> None:
        if generation != self._generation:
            logger.debug("Ignoring stale countdown timer")
            return
        self._handle = None
        if self._pending:
            _, text = self._pending.pop(0)
            if self.on_reminder:
                self.on_reminder(text)
            # the reminder callback may have cancelled us
            if generation == self._generation:
                self._schedule(generation)
        else:
            self._generation += 1
            if self.on_expire:
                self.on_expire()
