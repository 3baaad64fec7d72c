"""Geolocation acquisition with bounded retry.

The retry chain is an explicit state object instead of nested callbacks:
attempt count, last cause, the delay currently being waited on, and a
generation number bumped by every fresh acquisition. A manual retry
interrupts the wait of the superseded chain, which then reports
``AcquisitionCancelledError`` and leaves the new chain's state alone.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from ..common.devices import scoped_device
from ..core.constants import (
    LOCATION_MAX_ATTEMPTS,
    LOCATION_TIMEOUT_RETRY_MS,
    LOCATION_UNAVAILABLE_BACKOFF_MS,
    LOCATION_UNKNOWN_RETRY_MS,
)
from ..core.enums import LocationErrorCause
from ..core.exceptions import (
    AcquisitionCancelledError,
    GeolocationUnsupportedError,
    LocationError,
    LocationTimeoutError,
    PermissionDeniedError,
    PositionUnavailableError,
    RetriesExhaustedError,
    UnknownLocationError,
)
from .model import GeolocationSample, PositionOptions

logger = logging.getLogger(__name__)

# (cancel_event, seconds) -> True when the wait was interrupted
Waiter = Callable[[threading.Event, float], bool]

_ERRORS_BY_CAUSE: dict[LocationErrorCause, type[LocationError]] = {
    LocationErrorCause.PERMISSION_DENIED: PermissionDeniedError,
    LocationErrorCause.POSITION_UNAVAILABLE: PositionUnavailableError,
    LocationErrorCause.TIMEOUT: LocationTimeoutError,
    LocationErrorCause.UNKNOWN: UnknownLocationError,
    LocationErrorCause.UNSUPPORTED: GeolocationUnsupportedError,
}

_TERMINAL_CAUSES = {LocationErrorCause.PERMISSION_DENIED, LocationErrorCause.UNSUPPORTED}


class PositionError(Exception):
    """Raised by a positioning device; mirrors the platform error codes."""

    def __init__(self, cause: LocationErrorCause, message: str = ""):
        super().__init__(message or cause.value)
        self.cause = cause


class PositioningDevice(Protocol):
    def open(self) -> None:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError

    def get_current_position(self, options: PositionOptions) -> GeolocationSample:
        """Return a fix or raise ``PositionError``."""
        raise NotImplementedError


@dataclass
class LocationRetryState:
    attempts: int = 0
    last_cause: Optional[LocationErrorCause] = None
    pending_delay: Optional[float] = None
    generation: int = 0
    skip_offered: bool = False


@dataclass(frozen=True)
class AcquisitionResult:
    position: Optional[GeolocationSample] = None
    error: Optional[LocationError] = None
    attempts: int = 0
    skip_offered: bool = False

    @property
    def ok(self) -> bool:
        return self.position is not None


def retry_delay_seconds(cause: LocationErrorCause, attempt: int) -> Optional[float]:
    """Delay before the next attempt after ``attempt`` failed, or None if terminal."""
    if cause in _TERMINAL_CAUSES:
        return None
    if cause == LocationErrorCause.POSITION_UNAVAILABLE:
        return LOCATION_UNAVAILABLE_BACKOFF_MS * attempt / 1000
    if cause == LocationErrorCause.TIMEOUT:
        return LOCATION_TIMEOUT_RETRY_MS / 1000
    return LOCATION_UNKNOWN_RETRY_MS / 1000


def _event_wait(cancel_event: threading.Event, seconds: float) -> bool:
    return cancel_event.wait(seconds)


class GeolocationAcquirer:
    def __init__(
        self,
        device: PositioningDevice,
        *,
        options: Optional[PositionOptions] = None,
        max_attempts: int = LOCATION_MAX_ATTEMPTS,
        wait: Optional[Waiter] = None,
    ):
        self._device = device
        self._options = options or PositionOptions()
        self._max_attempts = int(max_attempts)
        self._wait = wait or _event_wait
        self._lock = threading.Lock()
        self._cancel_event = threading.Event()
        self.state = LocationRetryState()
        self.last_position: Optional[GeolocationSample] = None

    def acquire(self) -> AcquisitionResult:
        """Start a fresh chain: attempt counter back to zero, older chain cancelled."""
        with self._lock:
            self._cancel_event.set()
            cancel_event = threading.Event()
            self._cancel_event = cancel_event
            state = LocationRetryState(generation=self.state.generation + 1)
            self.state = state

        with scoped_device(self._device):
            return self._run(state, cancel_event)

    def retry(self) -> AcquisitionResult:
        """Manual retry from the operator; same as a fresh ``acquire``."""
        logger.info("Manual location retry requested")
        return self.acquire()

    def cancel(self) -> None:
        self._cancel_event.set()

    def _run(self, state: LocationRetryState, cancel_event: threading.Event) -> AcquisitionResult:
        while True:
            state.attempts += 1
            try:
                position = self._device.get_current_position(self._options)
            except PositionError as exc:
                state.last_cause = exc.cause
                error = _ERRORS_BY_CAUSE[exc.cause]()
                delay = retry_delay_seconds(exc.cause, state.attempts)

                if delay is None or state.attempts >= self._max_attempts:
                    if delay is not None:
                        error = RetriesExhaustedError(error, state.attempts)
                    state.skip_offered = True
                    logger.warning(
                        "Location unavailable after %d attempt(s): %s", state.attempts, error.code.value
                    )
                    return AcquisitionResult(error=error, attempts=state.attempts, skip_offered=True)

                state.pending_delay = delay
                logger.debug(
                    "Location attempt %d failed (%s), retrying in %.1fs", state.attempts, exc.cause.value, delay
                )
                interrupted = self._wait(cancel_event, delay)
                state.pending_delay = None
                if interrupted or cancel_event.is_set():
                    logger.debug("Location retry chain %d superseded", state.generation)
                    return AcquisitionResult(error=AcquisitionCancelledError(), attempts=state.attempts)
                continue

            state.last_cause = None
            self.last_position = position
            return AcquisitionResult(position=position, attempts=state.attempts)
