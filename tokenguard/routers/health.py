from __future__ import annotations

from typing import Any, Awaitable, Callable

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..health.aggregator import run_health_check
from ..health.report import HealthReport
from ..health.status import HealthStatus

router = APIRouter()

HealthRunner = Callable[[], Awaitable[HealthReport]]


class HealthOut(BaseModel):
    timestamp: str
    status: str
    checks: dict[str, Any]
    errors: list[str]
    warnings: list[str]


def _runner(request: Request) -> HealthRunner:
    runner = getattr(request.app.state, "health_runner", None)
    if runner is not None:
        return runner
    return run_health_check


@router.get("/healthz", response_model=HealthOut, include_in_schema=False)
async def health(request: Request):
    report = await _runner(request)()
    payload = HealthOut(**report.to_dict())
    if report.status < HealthStatus.CRITICAL:
        return payload
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=payload.model_dump(),
    )


@router.get("/health", response_model=HealthOut, include_in_schema=False)
async def health_alias(request: Request):
    return await health(request)
