"""
Tick scheduling decoupled from any particular host loop.

A TickScheduler owns one cancellable repeating callback. Each frame it
calls the tick callback once and, unless the callback reports that it is
done, asks the host for the next frame. Frames never overlap: the next
frame is requested only after the current callback has returned.

Hosts:
    ManualHost   -- Frames run only when ``advance`` is called (tests, offline export)
    AsyncioHost  -- Frames run on an asyncio event loop at a fixed interval
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional, Protocol

from typing_extensions import Self

FrameCallback = Callable[[], None]
TickCallback = Callable[[], bool]


class FrameHost(Protocol):
    """Protocol for hosts that run a callback on their next frame."""

    def request_frame(self, callback: FrameCallback) -> Any:
        """Schedule ``callback`` for the next frame and return a cancellable handle."""
        ...

    def cancel_frame(self, handle: Any) -> None:
        """Cancel a pending frame; unknown or spent handles are ignored."""
        ...


class ManualHost:
    """
    Frame host that only runs frames when told to.

    Example:
        host = ManualHost()
        scheduler = TickScheduler(layout.tick, host).start()
        host.advance(10)
    """

    def __init__(self) -> None:
        self._pending: dict[int, FrameCallback] = {}
        self._next_handle = 0

    @property
    def pending(self) -> int:
        """Number of frames waiting to run."""
        return len(self._pending)

    def request_frame(self, callback: FrameCallback) -> int:
        self._next_handle += 1
        self._pending[self._next_handle] = callback
        return self._next_handle

    def cancel_frame(self, handle: Any) -> None:
        self._pending.pop(handle, None)

    def advance(self, frames: int = 1) -> int:
        """
        Run up to ``frames`` frames.

        Each frame runs the callbacks that were pending when it began;
        callbacks requested during a frame wait for the next one.

        Returns:
            Number of callbacks run
        """
        ran = 0
        for _ in range(max(0, int(frames))):
            if not self._pending:
                break
            batch = sorted(self._pending.items())
            self._pending.clear()
            for _handle, callback in batch:
                callback()
                ran += 1
        return ran

    def flush(self, max_frames: int = 10_000) -> int:
        """Advance until no frame is pending or ``max_frames`` have run."""
        ran = 0
        for _ in range(max_frames):
            if not self._pending:
                break
            ran += self.advance(1)
        return ran


class AsyncioHost:
    """
    Frame host backed by an asyncio event loop.

    Args:
        loop: Event loop to schedule on; defaults to the running loop at
            request time
        interval: Seconds between frames
    """

    def __init__(
        self,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        interval: float = 1 / 60,
    ) -> None:
        self._loop = loop
        self.interval = max(0.0, float(interval))

    def request_frame(self, callback: FrameCallback) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(self.interval, callback)

    def cancel_frame(self, handle: Any) -> None:
        if handle is not None:
            handle.cancel()


class TickScheduler:
    """
    Repeating, cancellable tick callback on a frame host.

    The callback returns True when there is nothing left to do; the
    scheduler then stops requesting frames until ``start`` is called
    again.
    """

    def __init__(self, callback: TickCallback, host: FrameHost) -> None:
        self._callback: Optional[TickCallback] = callback
        self._host = host
        self._handle: Any = None
        self._running = False
        self._disposed = False
        self._in_frame = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def host(self) -> FrameHost:
        return self._host

    def start(self) -> Self:
        """
        Begin requesting frames. No effect if already running.

        Raises:
            RuntimeError: If the scheduler has been disposed
        """
        if self._disposed:
            raise RuntimeError("Cannot start a disposed TickScheduler")
        if self._running:
            return self
        self._running = True
        if not self._in_frame:
            self._request()
        return self

    def stop(self) -> Self:
        """Cancel the pending frame; ``start`` resumes."""
        self._running = False
        if self._handle is not None:
            self._host.cancel_frame(self._handle)
            self._handle = None
        return self

    def dispose(self) -> None:
        """Stop for good and release the callback."""
        self.stop()
        self._disposed = True
        self._callback = None

    def _request(self) -> None:
        self._handle = self._host.request_frame(self._on_frame)

    def _on_frame(self) -> None:
        self._handle = None
        if not self._running or self._callback is None:
            return
        if self._in_frame:
            raise RuntimeError("TickScheduler frame callback is not re-entrant")
        self._in_frame = True
        try:
            done = self._callback()
        finally:
            self._in_frame = False
        if done:
            self._running = False
        elif self._running and self._handle is None:
            self._request()


__all__ = [
    "FrameCallback",
    "TickCallback",
    "FrameHost",
    "ManualHost",
    "AsyncioHost",
    "TickScheduler",
]
