from fastapi import APIRouter, Request
from app.schemas import ProducedValue
from app.services.pipeline import generate_value

router = APIRouter()

@router.get("/data", response_model=ProducedValue)
async def data(request: Request):
    value = generate_value(request.app.state.rng)
    print(f"Generated: {value}", flush=True)
    return ProducedValue(value=value)
