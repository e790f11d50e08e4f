import asyncio

import pytest

from startgg_client.ratelimit import NoopRateLimiter, RateLimiter


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now += delay


def build_limiter(rpm: int = 75) -> tuple[RateLimiter, FakeClock]:
    clock = FakeClock()
    return RateLimiter.per_minute(rpm, clock=clock, sleep=clock.sleep), clock


def test_per_minute_spacing():
    limiter, _ = build_limiter(75)
    assert limiter.min_interval == pytest.approx(0.8)


@pytest.mark.parametrize("rpm", [0, -5])
def test_per_minute_rejects_non_positive_budget(rpm):
    with pytest.raises(ValueError):
        RateLimiter.per_minute(rpm)


@pytest.mark.asyncio
async def test_consecutive_starts_are_spaced():
    limiter, clock = build_limiter(75)
    starts: list[float] = []

    async def task():
        starts.append(clock.now)
        return len(starts)

    results = [await limiter.schedule(task) for _ in range(3)]

    assert results == [1, 2, 3]
    assert starts == pytest.approx([0.0, 0.8, 1.6])


@pytest.mark.asyncio
async def test_concurrent_tasks_never_start_early():
    limiter, clock = build_limiter(60)
    starts: list[float] = []

    async def task():
        starts.append(clock.now)
        await asyncio.sleep(0)

    await asyncio.gather(*[limiter.schedule(task) for _ in range(4)])

    assert starts == pytest.approx([0.0, 1.0, 2.0, 3.0])


@pytest.mark.asyncio
async def test_no_wait_when_spacing_already_elapsed():
    limiter, clock = build_limiter(60)

    async def task():
        return None

    await limiter.schedule(task)
    clock.now += 5.0
    await limiter.schedule(task)

    assert clock.sleeps == []


@pytest.mark.asyncio
async def test_failures_propagate_to_caller():
    limiter, _ = build_limiter()

    async def task():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await limiter.schedule(task)


@pytest.mark.asyncio
async def test_noop_limiter_runs_immediately():
    async def task():
        return "done"

    assert await NoopRateLimiter().schedule(task) == "done"
