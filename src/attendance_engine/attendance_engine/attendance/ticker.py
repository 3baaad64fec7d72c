from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Optional, Protocol

from ..common.datetime_utils import Clock, format_hms, now_local
from ..core.constants import TICKER_INTERVAL_SECONDS, ZERO_ELAPSED
from .model import AttendanceRecord

logger = logging.getLogger(__name__)


class Timer(Protocol):
    def start(self) -> None:
        raise NotImplementedError

    def cancel(self) -> None:
        raise NotImplementedError


TimerFactory = Callable[[float, Callable[[], None]], Timer]


def format_elapsed(check_in: datetime, now: datetime) -> str:
    return format_hms(now - check_in)


def _thread_timer(interval: float, callback: Callable[[], None]) -> Timer:
    timer = threading.Timer(interval, callback)
    timer.daemon = True
    return timer


class ElapsedTimeTicker:
    """``HH:MM:SS`` view of the Active record, refreshed every interval.

    Feed it the current active record (or None) with ``observe``. The timer
    only runs while a record is Active; otherwise the display is
    ``00:00:00``.
    """

    def __init__(
        self,
        *,
        clock: Clock | None = None,
        timer_factory: TimerFactory | None = None,
        interval: float = TICKER_INTERVAL_SECONDS,
        on_tick: Optional[Callable[[str], None]] = None,
    ):
        self._clock = clock or now_local
        self._timer_factory = timer_factory or _thread_timer
        self._interval = float(interval)
        self._on_tick = on_tick
        self._lock = threading.Lock()
        self._timer: Optional[Timer] = None
        self._check_in: Optional[datetime] = None
        self.display = ZERO_ELAPSED

    @property
    def running(self) -> bool:
        return self._timer is not None

    def observe(self, record: Optional[AttendanceRecord]) -> str:
        if record is None or not record.is_active:
            self._stop()
            return self.display

        with self._lock:
            self._check_in = record.check_in_time
        self.tick()
        return self.display

    def tick(self) -> None:
        with self._lock:
            if self._check_in is None:
                return
            self.display = format_elapsed(self._check_in, self._clock())
            display = self.display
            self._schedule()
        if self._on_tick:
            self._on_tick(display)

    def close(self) -> None:
        self._stop()

    def _schedule(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self._timer_factory(self._interval, self.tick)
        self._timer.start()

    def _stop(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
                logger.debug("Elapsed-time ticker stopped")
            self._check_in = None
            self.display = ZERO_ELAPSED
        if self._on_tick:
            self._on_tick(ZERO_ELAPSED)

    def __enter__(self) -> "ElapsedTimeTicker":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
