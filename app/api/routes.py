from fastapi import APIRouter, Request
from app.schemas import HealthResponse

router = APIRouter()

@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Liveness only. Upstream reachability is not probed."""
    return HealthResponse(service=request.app.state.settings.service_name)
