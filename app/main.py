import argparse
import random
import sys
from contextlib import asynccontextmanager
from typing import Optional
import httpx
import uvicorn
from fastapi import FastAPI
from app.api import consumer, processor, producer
from app.api.routes import router as health_router
from app.core.config import ConfigError, ConsumerSettings, ProcessorSettings, ProducerSettings
from app.services.poller import BackgroundPoller

VERSION = "1.0.0"

def create_consumer_app(
    settings: ConsumerSettings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    poller: Optional[BackgroundPoller] = None,
) -> FastAPI:
    """
    Consumer service: background polling of the processor plus a manual
    trigger endpoint. The poller lives for as long as the app's lifespan.
    """
    poller = poller or BackgroundPoller(settings, transport=transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        print("Consumer starting...", flush=True)
        print("Consumer configuration:", flush=True)
        print(f"  Port: {settings.port}", flush=True)
        print(f"  Processor URL: {settings.processor_url}", flush=True)
        print(f"  Poll interval: {settings.poll_interval_seconds}s", flush=True)
        print(f"  Request timeout: {settings.request_timeout}s", flush=True)
        poller.start()
        print(f"Background consumption running every {settings.poll_interval_seconds} seconds", flush=True)

        yield

        # Shutdown
        print("Shutting down Consumer...", flush=True)
        await poller.stop()

    app = FastAPI(
        title="Consumer",
        description="Polls the processor and exposes a manual consume trigger",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.upstream_transport = transport
    app.state.poller = poller
    app.include_router(consumer.router)
    app.include_router(health_router)
    return app

def create_processor_app(
    settings: ProcessorSettings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        print("Processor starting...", flush=True)
        print(f"Processor listening on port {settings.port}", flush=True)
        print(f"Producer URL: {settings.producer_url}", flush=True)
        yield
        print("Shutting down Processor...", flush=True)

    app = FastAPI(
        title="Processor",
        description="Doubles values fetched from the producer",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.upstream_transport = transport
    app.include_router(processor.router)
    app.include_router(health_router)
    return app

def create_producer_app(
    settings: ProducerSettings,
    rng: Optional[random.Random] = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        print("Producer starting...", flush=True)
        print(f"Listening on http://0.0.0.0:{settings.port}", flush=True)
        yield
        print("Shutting down Producer...", flush=True)

    app = FastAPI(
        title="Producer",
        description="Generates random values",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.rng = rng or random.Random()
    app.include_router(producer.router)
    app.include_router(health_router)
    return app

FACTORIES = {
    "producer": (ProducerSettings, create_producer_app),
    "processor": (ProcessorSettings, create_processor_app),
    "consumer": (ConsumerSettings, create_consumer_app),
}

def build_app(service: str, environ=None) -> FastAPI:
    """Load settings for `service` from the environment and build its app."""
    settings_cls, factory = FACTORIES[service]
    settings = settings_cls.from_env(environ)
    return factory(settings)

def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Run one service of the polling pipeline")
    parser.add_argument("service", choices=sorted(FACTORIES))
    args = parser.parse_args(argv)

    try:
        app = build_app(args.service)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr, flush=True)
        return 2

    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
    return 0

if __name__ == "__main__":
    sys.exit(main())
