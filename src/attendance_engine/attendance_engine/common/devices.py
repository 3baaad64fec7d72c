from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Protocol, TypeVar

logger = logging.getLogger(__name__)


class ManagedDevice(Protocol):
    """A single-owner device (camera stream, positioning watch)."""

    def open(self) -> None:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError


D = TypeVar("D", bound=ManagedDevice)


@contextmanager
def scoped_device(device: D) -> Iterator[D]:
    """Hold ``device`` for the duration of one flow; always released."""
    device.open()
    logger.debug("Acquired device %s", type(device).__name__)
    try:
        yield device
    finally:
        device.close()
        logger.debug("Released device %s", type(device).__name__)
