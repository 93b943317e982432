"""Tests for the frame-coalescing throttle."""

import asyncio

import pytest

from tzbands.core.throttle import FrameThrottle


class FakeHandle:
    def __init__(self, callback):
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeLoop:
    """Records call_later requests instead of running them."""

    def __init__(self):
        self.handles: list[FakeHandle] = []

    def call_later(self, delay, callback, *args):
        handle = FakeHandle(lambda: callback(*args))
        self.handles.append(handle)
        return handle

    def run_pending(self):
        for handle in list(self.handles):
            if not handle.cancelled:
                handle.cancelled = True
                handle.callback()


@pytest.fixture
def loop():
    return FakeLoop()


class TestFrameThrottle:
    def test_burst_coalesces_to_latest(self, loop):
        calls = []
        throttle = FrameThrottle(loop, lambda lat, lon: calls.append((lat, lon)))
        throttle.submit(1.0, 1.0)
        throttle.submit(2.0, 2.0)
        throttle.submit(3.0, 3.0)
        assert len(loop.handles) == 1
        assert calls == []

        loop.run_pending()
        assert calls == [(3.0, 3.0)]

    def test_new_frame_after_fire(self, loop):
        calls = []
        throttle = FrameThrottle(loop, lambda lat, lon: calls.append((lat, lon)))
        throttle.submit(1.0, 1.0)
        loop.run_pending()
        throttle.submit(2.0, 2.0)
        assert len(loop.handles) == 2
        loop.run_pending()
        assert calls == [(1.0, 1.0), (2.0, 2.0)]

    def test_cancel_drops_pending(self, loop):
        calls = []
        throttle = FrameThrottle(loop, lambda lat, lon: calls.append((lat, lon)))
        throttle.submit(1.0, 1.0)
        throttle.cancel()
        loop.run_pending()
        assert calls == []
        assert loop.handles[0].cancelled

    def test_submit_after_cancel_schedules_again(self, loop):
        calls = []
        throttle = FrameThrottle(loop, lambda lat, lon: calls.append((lat, lon)))
        throttle.submit(1.0, 1.0)
        throttle.cancel()
        throttle.submit(2.0, 2.0)
        assert len(loop.handles) == 2
        loop.run_pending()
        assert calls == [(2.0, 2.0)]

    def test_cancel_without_pending_is_noop(self, loop):
        throttle = FrameThrottle(loop, lambda lat, lon: None)
        throttle.cancel()
        assert loop.handles == []

    def test_callback_error_is_contained(self, loop):
        def boom(lat, lon):
            raise RuntimeError("boom")

        throttle = FrameThrottle(loop, boom)
        throttle.submit(1.0, 1.0)
        loop.run_pending()  # Should not raise
        throttle.submit(2.0, 2.0)
        assert len(loop.handles) == 2

    @pytest.mark.asyncio
    async def test_on_real_loop(self):
        calls = []
        throttle = FrameThrottle(asyncio.get_running_loop(), lambda lat, lon: calls.append((lat, lon)), 0.01)
        for i in range(10):
            throttle.submit(float(i), float(i))
        await asyncio.sleep(0.05)
        assert calls == [(9.0, 9.0)]
