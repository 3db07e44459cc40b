from dartmacro.engine.guards import CooldownTracker, FireRateLimiter
from tests.conftest import FakeClock


class TestCooldownTracker:
    def test_zero_cooldown_never_blocks(self):
        tracker = CooldownTracker(FakeClock())
        tracker.record("k")
        assert not tracker.is_on_cooldown("k", 0)

    def test_window(self):
        clock = FakeClock()
        tracker = CooldownTracker(clock)
        tracker.record("k")
        clock.advance(499)
        assert tracker.is_on_cooldown("k", 500)
        clock.advance(1)
        assert not tracker.is_on_cooldown("k", 500)

    def test_prune_forgets_removed_keys(self):
        tracker = CooldownTracker(FakeClock())
        tracker.record("a")
        tracker.record("b")
        tracker.prune(["a"])
        assert len(tracker) == 1


class TestFireRateLimiter:
    def test_rolling_second(self):
        clock = FakeClock()
        limiter = FireRateLimiter(2, clock=clock)
        limiter.record()
        clock.advance(500)
        limiter.record()
        assert not limiter.allow()
        clock.advance(500)
        assert limiter.allow()

    def test_zero_disables(self):
        limiter = FireRateLimiter(0, clock=FakeClock())
        for _ in range(100):
            limiter.record()
        assert limiter.allow()
