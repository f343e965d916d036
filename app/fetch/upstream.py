import asyncio
import httpx
from typing import Any, Optional
from pydantic import ValidationError
from app.fetch.base import FetchFailure, FetchResult, FetchSuccess, UpstreamError
from app.schemas import ProcessedValue, ProducedValue

async def get_json(
    base_url: str,
    path: str,
    timeout: float,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Any:
    """
    GET base_url + path and return the decoded JSON body.

    Every transport or protocol problem is raised as UpstreamError so callers
    only have one failure type to deal with.
    """
    url = f"{base_url}{path}"
    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            # httpx timeouts are per phase; wait_for bounds the whole exchange
            response = await asyncio.wait_for(client.get(url), timeout)
    except (httpx.TimeoutException, asyncio.TimeoutError):
        raise UpstreamError(f"Timeout after {timeout}s calling {url}")
    except httpx.RequestError as e:
        raise UpstreamError(f"Could not connect to {url}: {str(e) or type(e).__name__}")

    if response.status_code != 200:
        raise UpstreamError(f"HTTP error {response.status_code} from {url}")

    try:
        return response.json()
    except ValueError:
        raise UpstreamError(f"Malformed JSON body from {url}")

async def fetch_processed(
    base_url: str,
    timeout: float,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FetchResult:
    """Ask the processor for one processed value. Never raises for upstream trouble."""
    try:
        data = await get_json(base_url, "/process", timeout, transport)
        result = ProcessedValue.model_validate(data)
    except UpstreamError as e:
        return FetchFailure(reason=str(e))
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) if err["loc"] else "body" for err in e.errors())
        return FetchFailure(reason=f"Unexpected response from {base_url}/process (bad fields: {fields})")

    return FetchSuccess(original=result.original, processed=result.processed)

async def fetch_value(
    base_url: str,
    timeout: float,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> int:
    """Ask the producer for a raw value."""
    data = await get_json(base_url, "/data", timeout, transport)
    try:
        return ProducedValue.model_validate(data).value
    except ValidationError:
        raise UpstreamError(f"Unexpected response from {base_url}/data: {data!r}")
