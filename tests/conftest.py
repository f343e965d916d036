import httpx
import pytest
from app.core.config import ConsumerSettings, ProcessorSettings, ProducerSettings

def _json_upstream(status_code=200, body=None, content=None):
    """Build a MockTransport that always answers with the same response"""
    def handler(request: httpx.Request) -> httpx.Response:
        if content is not None:
            return httpx.Response(status_code, content=content)
        return httpx.Response(status_code, json=body)
    return httpx.MockTransport(handler)

def _refused_upstream():
    """MockTransport simulating a connection refused by the upstream host"""
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)
    return httpx.MockTransport(handler)

@pytest.fixture
def json_upstream():
    return _json_upstream

@pytest.fixture
def refused_upstream():
    return _refused_upstream

@pytest.fixture
def consumer_settings():
    """Consumer settings with no startup delay and the shortest legal interval"""
    return ConsumerSettings(
        processor_host="processor.test",
        processor_port="8081",
        poll_interval_seconds=1,
        request_timeout=2.0,
        startup_delay=0,
    )

@pytest.fixture
def processor_settings():
    return ProcessorSettings(producer_host="producer.test", producer_port="8080", request_timeout=2.0)

@pytest.fixture
def producer_settings():
    return ProducerSettings()
