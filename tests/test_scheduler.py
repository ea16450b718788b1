"""Tests for tick scheduling."""

import asyncio

import pytest

from orgchart_layout import AsyncioHost, ManualHost, TickScheduler


def create_counter(limit):
    """Tick callback that reports done after ``limit`` calls."""
    calls = []

    def tick():
        calls.append(len(calls))
        return len(calls) >= limit

    return tick, calls


class TestManualHost:
    """Tests for ManualHost."""

    def test_advance_runs_pending(self):
        """Test advance runs callbacks pending at frame start."""
        host = ManualHost()
        ran = []
        host.request_frame(lambda: ran.append("a"))
        host.request_frame(lambda: ran.append("b"))
        assert host.pending == 2
        assert host.advance() == 2
        assert ran == ["a", "b"]
        assert host.pending == 0

    def test_requests_during_frame_wait(self):
        """Test a callback requested during a frame runs on the next one."""
        host = ManualHost()
        ran = []
        host.request_frame(lambda: host.request_frame(lambda: ran.append("later")))
        host.advance()
        assert ran == []
        assert host.pending == 1
        host.advance()
        assert ran == ["later"]

    def test_cancel(self):
        """Test a cancelled frame never runs."""
        host = ManualHost()
        ran = []
        handle = host.request_frame(lambda: ran.append("x"))
        host.cancel_frame(handle)
        host.cancel_frame(handle)
        assert host.advance() == 0
        assert ran == []

    def test_flush_bounded(self):
        """Test flush stops after max_frames."""
        host = ManualHost()

        def again():
            host.request_frame(again)

        host.request_frame(again)
        assert host.flush(max_frames=5) == 5
        assert host.pending == 1


class TestTickScheduler:
    """Tests for TickScheduler."""

    def test_runs_until_done(self):
        """Test frames repeat until the callback reports done."""
        host = ManualHost()
        tick, calls = create_counter(3)
        scheduler = TickScheduler(tick, host).start()
        assert scheduler.is_running
        host.flush()
        assert len(calls) == 3
        assert not scheduler.is_running
        assert host.pending == 0

    def test_one_frame_per_advance(self):
        """Test exactly one tick per frame."""
        host = ManualHost()
        tick, calls = create_counter(100)
        TickScheduler(tick, host).start()
        host.advance(4)
        assert len(calls) == 4
        assert host.pending == 1

    def test_start_twice_no_duplicate_frames(self):
        """Test starting a running scheduler requests nothing new."""
        host = ManualHost()
        tick, _ = create_counter(100)
        scheduler = TickScheduler(tick, host)
        scheduler.start()
        scheduler.start()
        assert host.pending == 1

    def test_stop_cancels_pending(self):
        """Test stop cancels the pending frame and start resumes."""
        host = ManualHost()
        tick, calls = create_counter(100)
        scheduler = TickScheduler(tick, host).start()
        host.advance()
        scheduler.stop()
        assert host.pending == 0
        host.advance(3)
        assert len(calls) == 1
        scheduler.start()
        host.advance(2)
        assert len(calls) == 3

    def test_restart_after_done(self):
        """Test start after completion schedules again."""
        host = ManualHost()
        tick, calls = create_counter(1)
        scheduler = TickScheduler(tick, host).start()
        host.flush()
        scheduler.start()
        host.flush()
        assert len(calls) == 2

    def test_dispose(self):
        """Test a disposed scheduler cannot restart."""
        host = ManualHost()
        tick, calls = create_counter(100)
        scheduler = TickScheduler(tick, host).start()
        scheduler.dispose()
        assert scheduler.is_disposed
        assert host.pending == 0
        with pytest.raises(RuntimeError):
            scheduler.start()
        assert calls == []

    def test_start_inside_frame_does_not_double_request(self):
        """Test restarting from inside a frame keeps a single pending frame."""
        host = ManualHost()
        scheduler = None

        def tick():
            scheduler.stop()
            scheduler.start()
            return False

        scheduler = TickScheduler(tick, host).start()
        host.advance()
        assert host.pending == 1


class TestAsyncioHost:
    """Tests for AsyncioHost."""

    def test_runs_on_event_loop(self):
        """Test frames run on the running asyncio loop until done."""
        tick, calls = create_counter(3)

        async def main():
            host = AsyncioHost(interval=0.0)
            scheduler = TickScheduler(tick, host).start()
            for _ in range(100):
                if not scheduler.is_running:
                    break
                await asyncio.sleep(0.001)
            return scheduler

        scheduler = asyncio.run(main())
        assert len(calls) == 3
        assert not scheduler.is_running

    def test_cancel(self):
        """Test a cancelled frame does not run."""
        ran = []

        async def main():
            host = AsyncioHost(interval=0.0)
            handle = host.request_frame(lambda: ran.append(1))
            host.cancel_frame(handle)
            await asyncio.sleep(0.01)

        asyncio.run(main())
        assert ran == []
