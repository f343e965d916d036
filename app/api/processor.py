import sys
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from app.fetch import upstream
from app.fetch.base import UpstreamError
from app.schemas import ErrorResponse, ProcessedValue
from app.services.pipeline import transform

router = APIRouter()

@router.get(
    "/process",
    response_model=ProcessedValue,
    responses={500: {"model": ErrorResponse}},
)
async def process(request: Request):
    """Fetch a value from the producer and return it alongside its doubled form."""
    settings = request.app.state.settings
    try:
        value = await upstream.fetch_value(
            settings.producer_url,
            settings.request_timeout,
            request.app.state.upstream_transport,
        )
    except UpstreamError as e:
        print(f"Error: Could not reach Producer ({e})", file=sys.stderr, flush=True)
        return JSONResponse(
            status_code=500,
            content={"error": f"Failed to call Producer service: {e}"},
        )

    result = transform(value)
    print(f"Received: {result.original}, Processed: {result.processed}", flush=True)
    return result
