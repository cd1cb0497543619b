from repos.rate_limit_repo import RateLimitRepository


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_blocks_after_max_within_window():
    clock = FakeClock()
    rl = RateLimitRepository(window_seconds=60, max_requests=2, clock=clock)
    assert rl.reserve("1.2.3.4") == (True, 1)
    assert rl.reserve("1.2.3.4") == (True, 0)
    assert rl.reserve("1.2.3.4") == (False, 0)
    # Other addresses have their own window.
    assert rl.reserve("5.6.7.8")[0] is True


def test_window_slides():
    clock = FakeClock()
    rl = RateLimitRepository(window_seconds=60, max_requests=2, clock=clock)
    rl.reserve("a")
    clock.now += 30
    rl.reserve("a")
    assert rl.reserve("a")[0] is False

    # First hit falls out of the window; second one still counts.
    clock.now += 31
    assert rl.reserve("a") == (True, 0)
    assert rl.reserve("a")[0] is False


def test_sweep_drops_idle_keys():
    clock = FakeClock()
    rl = RateLimitRepository(window_seconds=60, max_requests=5, clock=clock)
    rl.reserve("a")
    clock.now += 30
    rl.reserve("b")
    clock.now += 40
    assert rl.sweep() == 1
    assert len(rl) == 1


def test_sweep_if_due_waits_for_threshold_and_interval():
    clock = FakeClock()
    rl = RateLimitRepository(window_seconds=10, max_requests=5, clock=clock, sweep_interval_seconds=60)
    for k in ("a", "b", "c"):
        rl.reserve(k)
    clock.now += 20

    # Below the key threshold: nothing happens even though keys are idle.
    assert rl.sweep_if_due(max_keys=5) == 0
    assert len(rl) == 3

    # Over the threshold but inside the interval since construction.
    assert rl.sweep_if_due(max_keys=2) == 0

    clock.now += 45
    assert rl.sweep_if_due(max_keys=2) == 3
    assert len(rl) == 0

    # Fresh idle keys are not swept again until the interval elapses.
    for k in ("d", "e", "f"):
        rl.reserve(k)
    clock.now += 20
    assert rl.sweep_if_due(max_keys=2) == 0
    clock.now += 40
    assert rl.sweep_if_due(max_keys=2) == 3
