import asyncio
import itertools
import random
import httpx
import pytest
from app.fetch.base import FetchSuccess
from app.main import create_consumer_app, create_processor_app, create_producer_app
from app.services.poller import BackgroundPoller

class FixedRandom(random.Random):
    """Random whose randint always returns the same value"""

    def __init__(self, value):
        super().__init__()
        self.fixed = value

    def randint(self, a, b):
        return self.fixed

def chain(consumer_settings, processor_settings, producer_settings, value=42):
    """Wire producer -> processor -> consumer in-process over ASGI transports"""
    producer_app = create_producer_app(producer_settings, rng=FixedRandom(value))
    processor_app = create_processor_app(processor_settings, transport=httpx.ASGITransport(app=producer_app))
    return create_consumer_app(consumer_settings, transport=httpx.ASGITransport(app=processor_app))

class TestEndToEnd:
    """Producer, processor and consumer talking over HTTP semantics"""

    @pytest.mark.asyncio
    async def test_manual_trigger_through_chain(self, consumer_settings, processor_settings, producer_settings):
        consumer_app = chain(consumer_settings, processor_settings, producer_settings, value=42)

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=consumer_app), base_url="http://consumer") as client:
            responses = [await client.get("/consume") for _ in range(5)]

        for response in responses:
            assert response.status_code == 200
            assert response.json() == {"original": 42, "processed": 84}

    @pytest.mark.asyncio
    async def test_random_values_always_doubled(self, consumer_settings, processor_settings, producer_settings):
        producer_app = create_producer_app(producer_settings, rng=random.Random(2024))
        processor_app = create_processor_app(processor_settings, transport=httpx.ASGITransport(app=producer_app))
        consumer_app = create_consumer_app(consumer_settings, transport=httpx.ASGITransport(app=processor_app))

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=consumer_app), base_url="http://consumer") as client:
            for _ in range(20):
                data = (await client.get("/consume")).json()
                assert data["processed"] == 2 * data["original"]
                assert 1 <= data["original"] <= 100

    @pytest.mark.asyncio
    async def test_poller_through_chain(self, consumer_settings, processor_settings, producer_settings, capsys):
        producer_app = create_producer_app(producer_settings, rng=FixedRandom(42))
        processor_app = create_processor_app(processor_settings, transport=httpx.ASGITransport(app=producer_app))

        async def no_wait(seconds):
            await asyncio.sleep(0)

        poller = BackgroundPoller(consumer_settings, sleep=no_wait, transport=httpx.ASGITransport(app=processor_app))
        await poller.run(max_iterations=3)

        out = capsys.readouterr().out
        assert out.count("[CONSUME] Original: 42, Processed: 84") == 3

    @pytest.mark.asyncio
    async def test_producer_down_surfaces_as_consumer_error(self, consumer_settings, processor_settings):
        def refused(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        processor_app = create_processor_app(processor_settings, transport=httpx.MockTransport(refused))
        consumer_app = create_consumer_app(consumer_settings, transport=httpx.ASGITransport(app=processor_app))

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=consumer_app), base_url="http://consumer") as client:
            response = await client.get("/consume")
            health = await client.get("/health")

        assert response.status_code == 500
        assert "HTTP error 500" in response.json()["error"]
        assert health.status_code == 200

class TestConcurrency:

    @pytest.mark.asyncio
    async def test_fifty_simultaneous_manual_triggers(self, consumer_settings):
        counter = itertools.count(1)

        async def handler(request: httpx.Request) -> httpx.Response:
            n = next(counter)
            # Finish out of order so responses interleave
            await asyncio.sleep(random.uniform(0, 0.02))
            return httpx.Response(200, json={"original": n, "processed": n * 2})

        consumer_app = create_consumer_app(consumer_settings, transport=httpx.MockTransport(handler))

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=consumer_app), base_url="http://consumer") as client:
            responses = await asyncio.gather(*(client.get("/consume") for _ in range(50)))

        assert all(r.status_code == 200 for r in responses)
        bodies = [r.json() for r in responses]
        assert all(b["processed"] == 2 * b["original"] for b in bodies)
        assert sorted(b["original"] for b in bodies) == list(range(1, 51))

    @pytest.mark.asyncio
    async def test_manual_trigger_not_blocked_by_slow_poll(self, consumer_settings):
        release = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            if request.headers.get("x-slow"):
                await release.wait()
            return httpx.Response(200, json={"original": 1, "processed": 2})

        transport = httpx.MockTransport(handler)

        async def stuck_fetch():
            async with httpx.AsyncClient(transport=transport) as c:
                await c.get("http://processor.test:8081/process", headers={"x-slow": "1"})
            return FetchSuccess(original=1, processed=2)

        poller = BackgroundPoller(consumer_settings, fetch=stuck_fetch)
        consumer_app = create_consumer_app(consumer_settings, transport=transport, poller=poller)

        poller.start()
        try:
            await asyncio.sleep(0.01)
            async with httpx.AsyncClient(transport=httpx.ASGITransport(app=consumer_app), base_url="http://consumer") as client:
                response = await asyncio.wait_for(client.get("/consume"), timeout=2)
            assert response.json() == {"original": 1, "processed": 2}
            assert poller.iterations == 0
        finally:
            release.set()
            await poller.stop()
