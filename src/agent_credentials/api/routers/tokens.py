"""
agent_credentials.api.routers.tokens

Token pre-warm endpoint.

Responsibilities:
- Let a signed-in client trigger pre-acquisition of its delegated-user tokens and
  learn which resources still need consent. Token values are never returned.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from agent_credentials.api.deps import broker_from_app, get_user_session
from agent_credentials.models import UserSession
from agent_credentials.tokens.broker import TokenBroker

router = APIRouter(prefix="/v1/tokens", tags=["tokens"])


class PrewarmResponse(BaseModel):
    resources: dict[str, str]
    consent_required: list[str]


@router.post("/prewarm", response_model=PrewarmResponse)
async def prewarm(
    session: UserSession = Depends(get_user_session),
    broker: TokenBroker = Depends(broker_from_app),
) -> PrewarmResponse:
    summary = await broker.prewarm_all(session=session)
    return PrewarmResponse(
        resources=summary,
        consent_required=[name for name, status in summary.items() if status == "consent_required"],
    )
