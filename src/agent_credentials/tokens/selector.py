"""
agent_credentials.tokens.selector

Trust-flow selection per resource.

Responsibilities:
- Route each `ResourceScope` to the delegated-user or workload-identity flow.
- Build the flows from settings once at startup (no runtime environment probing).
"""

from __future__ import annotations

import httpx

from agent_credentials.errors import ConfigurationError
from agent_credentials.models import UserSession
from agent_credentials.settings import Settings
from agent_credentials.tokens.flows import (
    OnBehalfOfFlow,
    TokenFlow,
    WorkloadIdentityFlow,
    WorkloadStrategy,
)
from agent_credentials.tokens.resources import ResourceScope, TrustFlow
from agent_credentials.tokens.results import TokenResult


class CredentialSelector:
    def __init__(
        self,
        *,
        workload: TokenFlow,
        delegated: TokenFlow | None = None,
    ) -> None:
        self._flows: dict[TrustFlow, TokenFlow | None] = {
            TrustFlow.delegated_user: delegated,
            TrustFlow.workload_identity: workload,
        }

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        http: httpx.AsyncClient,
        client_secret: str,
    ) -> CredentialSelector:
        workload = WorkloadIdentityFlow(
            strategy=WorkloadStrategy.from_env(settings.env),
            managed_identity_client_id=settings.managed_identity_client_id,
        )
        delegated: OnBehalfOfFlow | None = None
        if settings.tenant_id and settings.client_id and client_secret:
            delegated = OnBehalfOfFlow(
                http=http,
                tenant_id=settings.tenant_id,
                client_id=settings.client_id,
                client_secret=client_secret,
                authority_host=settings.authority_host,
            )
        return cls(workload=workload, delegated=delegated)

    async def acquire(
        self, resource: ResourceScope, *, session: UserSession | None = None
    ) -> TokenResult:
        flow = self._flows[resource.flow]
        if flow is None:
            raise ConfigurationError(f"no {resource.flow} flow configured for {resource.name}")
        return await flow.acquire(resource, session=session)

    async def aclose(self) -> None:
        for flow in self._flows.values():
            if flow is not None:
                await flow.aclose()
