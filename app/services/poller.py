import asyncio
import sys
from typing import Awaitable, Callable, Optional
import httpx
from app.core.config import ConsumerSettings
from app.fetch import upstream
from app.fetch.base import FetchFailure, FetchResult, FetchSuccess

Fetcher = Callable[[], Awaitable[FetchResult]]
Sleeper = Callable[[float], Awaitable[None]]

class BackgroundPoller:
    """
    Periodically pulls a processed value from the processor and logs it.

    The loop has no exit of its own: it runs until the task is cancelled by
    stop() (or the process ends). A failed fetch is logged and the loop goes
    on to the next iteration.
    """

    def __init__(
        self,
        settings: ConsumerSettings,
        fetch: Optional[Fetcher] = None,
        sleep: Sleeper = asyncio.sleep,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self._sleep = sleep
        if fetch is None:
            async def fetch() -> FetchResult:
                return await upstream.fetch_processed(
                    settings.processor_url, settings.request_timeout, transport
                )
        self._fetch = fetch
        self._task: Optional[asyncio.Task] = None
        self.iterations = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        if self.running:
            return self._task
        self._task = asyncio.create_task(self.run(), name="background-poller")
        return self._task

    async def stop(self) -> None:
        """Cancel the loop and wait for it to unwind."""
        if self._task is None:
            return
        self._task.cancel()
        # gather absorbs the poller's own CancelledError but still lets a
        # cancellation of the caller propagate.
        await asyncio.gather(self._task, return_exceptions=True)
        self._task = None

    async def run(self, max_iterations: Optional[int] = None) -> None:
        await self._sleep(self.settings.startup_delay)

        while max_iterations is None or self.iterations < max_iterations:
            await self.poll_once()
            self.iterations += 1
            await self._sleep(self.settings.poll_interval_seconds)

    async def poll_once(self) -> FetchResult:
        try:
            result = await self._fetch()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            result = FetchFailure(reason=f"{type(e).__name__}: {e}")

        if isinstance(result, FetchSuccess):
            print(f"[CONSUME] Original: {result.original}, Processed: {result.processed}", flush=True)
        else:
            print(f"[ERROR] Consumption failed: {result.reason}", file=sys.stderr, flush=True)
        return result
