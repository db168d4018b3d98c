"""
agent_credentials.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/healthz`).
- Provide readiness probe (`/readyz`) gated on a completed credential bootstrap.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(request: Request) -> dict[str, str]:
    # Ready once a client secret was resolved and the broker exists.
    if getattr(request.app.state, "broker", None) is None:
        raise HTTPException(status_code=HTTP_503_SERVICE_UNAVAILABLE, detail="not ready")
    return {"status": "ready"}
