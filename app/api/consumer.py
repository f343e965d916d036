import sys
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from app.fetch import upstream
from app.fetch.base import FetchSuccess
from app.schemas import ErrorResponse, ProcessedValue

router = APIRouter()

@router.get(
    "/consume",
    response_model=ProcessedValue,
    responses={500: {"model": ErrorResponse}},
)
async def consume(request: Request):
    """Manually pull one processed value from the processor."""
    print("[MANUAL] Consume endpoint called", flush=True)
    settings = request.app.state.settings

    result = await upstream.fetch_processed(
        settings.processor_url,
        settings.request_timeout,
        request.app.state.upstream_transport,
    )

    if isinstance(result, FetchSuccess):
        print(f"[MANUAL] Original: {result.original}, Processed: {result.processed}", flush=True)
        return ProcessedValue(original=result.original, processed=result.processed)

    print(f"[MANUAL] Error: {result.reason}", file=sys.stderr, flush=True)
    return JSONResponse(
        status_code=500,
        content={"error": f"Failed to call Processor service: {result.reason}"},
    )
