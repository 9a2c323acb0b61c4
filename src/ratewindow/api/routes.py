from fastapi import APIRouter, Request
from pydantic import BaseModel

from ratewindow.config import get_settings

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    strategy: str


class LimitStatus(BaseModel):
    action_id: str
    current_value: int
    remaining_time_ms: int


@router.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(
        status="healthy",
        strategy=get_settings().rate_limit_strategy.value,
    )


@router.get("/")
async def root():
    return {
        "service": get_settings().app_name,
        "message": "Rate limiting service is running",
    }


@router.get("/limits/{action_id}", response_model=LimitStatus)
async def limit_status(action_id: str, request: Request):
    result = await request.app.state.strategy.status(action_id)
    return LimitStatus(
        action_id=action_id,
        current_value=result.current_value,
        remaining_time_ms=result.remaining_time_ms,
    )
