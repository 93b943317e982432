"""Tests for the periodic Scheduler."""

import asyncio
import threading
import time

import pytest

from tzbands.core.scheduler import Scheduler


@pytest.fixture
def loop():
    """Create and run an event loop in a background thread."""
    _loop = asyncio.new_event_loop()
    t = threading.Thread(target=_loop.run_forever, daemon=True)
    t.start()
    yield _loop
    _loop.call_soon_threadsafe(_loop.stop)
    t.join(timeout=2)
    _loop.close()


class TestSchedulerRegistration:
    def test_register_task(self, loop):
        s = Scheduler(loop)
        s.register("clock", lambda: None, interval=1.0)
        assert "clock" in s._tasks

    def test_duplicate_name_raises(self, loop):
        s = Scheduler(loop)
        s.register("clock", lambda: None, interval=1.0)
        with pytest.raises(ValueError, match="already registered"):
            s.register("clock", lambda: None, interval=2.0)

    def test_non_positive_interval_raises(self, loop):
        s = Scheduler(loop)
        with pytest.raises(ValueError, match="positive interval"):
            s.register("clock", lambda: None, interval=0)


class TestSchedulerLifecycle:
    def test_start_stop(self, loop):
        s = Scheduler(loop)
        s.register("clock", lambda: None, interval=10)
        s.start()
        assert s.running
        s.stop()
        assert not s.running

    def test_stop_cancels_handles(self, loop):
        s = Scheduler(loop)
        s.register("clock", lambda: None, interval=10)
        s.start()
        time.sleep(0.05)
        s.stop()
        assert s._tasks["clock"].handle is None

    def test_double_start_is_idempotent(self, loop):
        s = Scheduler(loop)
        s.register("clock", lambda: None, interval=10)
        s.start()
        s.start()  # Should not raise
        s.stop()


class TestSchedulerExecution:
    def test_task_fires_repeatedly(self, loop):
        results = []
        s = Scheduler(loop)
        s.register("clock", lambda: results.append(1), interval=0.05)
        s.start()
        time.sleep(0.2)
        s.stop()
        assert len(results) >= 2

    def test_task_exception_does_not_kill_scheduler(self, loop):
        """A failing task should be caught and rescheduled."""
        call_count = []

        def flaky():
            call_count.append(1)
            if len(call_count) == 1:
                raise RuntimeError("boom")

        s = Scheduler(loop)
        s.register("flaky", flaky, interval=0.05)
        s.start()
        time.sleep(0.2)
        s.stop()
        assert len(call_count) >= 2

    def test_no_fire_after_stop(self, loop):
        results = []
        s = Scheduler(loop)
        s.register("clock", lambda: results.append(1), interval=0.05)
        s.start()
        time.sleep(0.12)
        s.stop()
        count = len(results)
        time.sleep(0.12)
        assert len(results) == count
