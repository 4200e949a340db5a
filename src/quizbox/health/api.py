from __future__ import annotations

from fastapi import APIRouter

from quizbox.commons.schemas import Envelope
from quizbox.health import service
from quizbox.health.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=Envelope[HealthResponse])
async def health() -> Envelope[HealthResponse]:
    payload = HealthResponse(**(await service.get_health_payload()))
    return Envelope(success=payload.db.ok, data=payload)
