"""
agent_credentials.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Expose the token broker created at startup (app.state).
- Turn the inbound bearer token into a `UserSession` for delegated-user acquisition.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_503_SERVICE_UNAVAILABLE

from agent_credentials.models import UserSession
from agent_credentials.tokens.broker import TokenBroker

_bearer = HTTPBearer(auto_error=False)


def broker_from_app(request: Request) -> TokenBroker:
    # Populated by the startup hook in `agent_credentials.api.app.create_app`.
    broker = getattr(request.app.state, "broker", None)
    if broker is None:
        raise HTTPException(status_code=HTTP_503_SERVICE_UNAVAILABLE, detail="Not bootstrapped")
    return broker


def get_user_session(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> UserSession:
    # The assertion is forwarded to the token issuer as-is; it is not validated here.
    if creds is None or not creds.credentials:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    return UserSession(assertion=creds.credentials)
