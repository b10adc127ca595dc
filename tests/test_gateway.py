"""Tests for app.services.gateway.Gateway."""

import asyncio

import pytest

from app.services.gateway import Gateway


class _Tracker:
    """Records how many tracked operations run at the same time."""

    def __init__(self) -> None:
        self.active = 0
        self.max_seen = 0
        self.started = []

    def op(self, index: int, delay: float, fail: bool = False):
        async def run():
            self.started.append(index)
            self.active += 1
            self.max_seen = max(self.max_seen, self.active)
            try:
                await asyncio.sleep(delay)
                if fail:
                    raise ValueError(f"op {index} failed")
                return index
            finally:
                self.active -= 1

        return run


class TestGatewayConcurrency:
    def test_never_more_than_max_concurrent_active(self):
        tracker = _Tracker()
        delays = [0.03, 0.01, 0.05, 0.02, 0.01, 0.04, 0.02, 0.03, 0.01, 0.02]

        async def scenario():
            gateway = Gateway(max_concurrent=3)
            return await asyncio.gather(
                *(gateway.enqueue(tracker.op(i, d)) for i, d in enumerate(delays))
            )

        results = asyncio.run(scenario())

        assert results == list(range(10))
        assert tracker.max_seen == 3

    def test_failure_only_affects_its_own_caller(self):
        tracker = _Tracker()

        async def scenario():
            gateway = Gateway(max_concurrent=3)
            results = await asyncio.gather(
                *(gateway.enqueue(tracker.op(i, 0.01, fail=(i == 4))) for i in range(10)),
                return_exceptions=True,
            )
            return gateway, results

        gateway, results = asyncio.run(scenario())

        assert isinstance(results[4], ValueError)
        assert [r for i, r in enumerate(results) if i != 4] == [0, 1, 2, 3, 5, 6, 7, 8, 9]
        assert gateway.active == 0
        assert gateway.pending == 0
        assert tracker.max_seen <= 3

    def test_admission_follows_enqueue_order(self):
        tracker = _Tracker()

        async def scenario():
            gateway = Gateway(max_concurrent=1)
            await asyncio.gather(*(gateway.enqueue(tracker.op(i, 0)) for i in range(6)))

        asyncio.run(scenario())

        assert tracker.started == [0, 1, 2, 3, 4, 5]
        assert tracker.max_seen == 1

    def test_invalid_max_concurrent(self):
        with pytest.raises(ValueError):
            Gateway(max_concurrent=0)


class TestGatewayTimeoutAndCancellation:
    def test_timeout_fails_only_the_slow_operation(self):
        async def scenario():
            gateway = Gateway(max_concurrent=2, timeout=0.05)
            return await asyncio.gather(
                gateway.enqueue(lambda: asyncio.sleep(1, result="slow")),
                gateway.enqueue(lambda: asyncio.sleep(0, result="fast")),
                return_exceptions=True,
            )

        slow, fast = asyncio.run(scenario())

        assert isinstance(slow, asyncio.TimeoutError)
        assert fast == "fast"

    def test_cancelled_waiter_does_not_leak_a_slot(self):
        async def scenario():
            gateway = Gateway(max_concurrent=1)
            release = asyncio.Event()

            async def blocker():
                await release.wait()
                return "done"

            first = asyncio.create_task(gateway.enqueue(blocker))
            await asyncio.sleep(0)
            second = asyncio.create_task(gateway.enqueue(lambda: asyncio.sleep(0, result="never")))
            await asyncio.sleep(0)
            assert gateway.pending == 1

            second.cancel()
            with pytest.raises(asyncio.CancelledError):
                await second

            release.set()
            assert await first == "done"
            assert gateway.active == 0
            return await gateway.enqueue(lambda: asyncio.sleep(0, result="ok"))

        assert asyncio.run(scenario()) == "ok"
