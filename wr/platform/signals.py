from __future__ import annotations

import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from types import FrameType

__all__ = ["interrupt_sets"]


@contextmanager
def interrupt_sets(event: threading.Event) -> Iterator[None]:
    """Turn Ctrl-C into ``event.set()`` for the duration of the block.

    A second Ctrl-C raises KeyboardInterrupt as usual. Outside the main
    thread signal handlers cannot be installed; the block runs unchanged.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handler(signum: int, frame: FrameType | None) -> None:
        if event.is_set():
            raise KeyboardInterrupt
        event.set()

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)
