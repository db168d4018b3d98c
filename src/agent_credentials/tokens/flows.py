"""
agent_credentials.tokens.flows

The two trust flows used to obtain access tokens.

Responsibilities:
- Delegated-user: OAuth 2.0 on-behalf-of exchange of the caller's session assertion,
  reporting consent/interaction demands as `ConsentRequired`.
- Workload-identity: non-interactive azure-identity credential, local developer chain
  or host-assigned managed identity depending on the injected strategy.
"""

from __future__ import annotations

import enum
import time
from collections.abc import Callable
from typing import Any, Protocol

import httpx
from azure.core.credentials_async import AsyncTokenCredential
from azure.core.exceptions import AzureError
from azure.identity.aio import DefaultAzureCredential, ManagedIdentityCredential

from agent_credentials.errors import ConfigurationError
from agent_credentials.models import AccessToken, UserSession
from agent_credentials.observability.logging import get_logger
from agent_credentials.tokens.resources import ResourceScope
from agent_credentials.tokens.results import (
    AcquisitionFailed,
    ConsentRequired,
    TokenAcquired,
    TokenResult,
)

log = get_logger(__name__)

_OBO_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
_CONSENT_ERRORS = frozenset({"interaction_required", "consent_required", "login_required"})
_CONSENT_SUBERRORS = frozenset({"consent_required", "basic_action", "additional_action"})
# AADSTS65001: the user or administrator has not consented to use the application.
_CONSENT_ERROR_CODES = frozenset({65001})


class TokenFlow(Protocol):
    async def acquire(
        self, resource: ResourceScope, *, session: UserSession | None = None
    ) -> TokenResult: ...

    async def aclose(self) -> None: ...


class WorkloadStrategy(enum.StrEnum):
    # Resolved once at startup from the deployment environment.
    local = "LOCAL"
    hosted = "HOSTED"

    @classmethod
    def from_env(cls, env: str) -> WorkloadStrategy:
        return cls.hosted if env == "prod" else cls.local


class OnBehalfOfFlow:
    """
    Delegated-user flow. Exchanges the caller's inbound assertion for a token carrying
    the resource's delegated scopes, using the application's own client credentials.
    """

    def __init__(
        self,
        *,
        http: httpx.AsyncClient,
        tenant_id: str,
        client_id: str,
        client_secret: str,
        authority_host: str = "https://login.microsoftonline.com",
    ) -> None:
        if not (tenant_id and client_id and client_secret):
            raise ConfigurationError(
                "tenant_id, client_id and client_secret are required for the delegated-user flow"
            )
        self._http = http
        self._client_id = client_id
        self._client_secret = client_secret
        self._token_url = f"{authority_host.rstrip('/')}/{tenant_id}/oauth2/v2.0/token"

    async def acquire(
        self, resource: ResourceScope, *, session: UserSession | None = None
    ) -> TokenResult:
        if session is None or not session.assertion:
            return AcquisitionFailed(resource.name, "no user session to act on behalf of")

        try:
            r = await self._http.post(
                self._token_url,
                data={
                    "grant_type": _OBO_GRANT,
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                    "assertion": session.assertion,
                    "scope": " ".join(resource.scopes),
                    "requested_token_use": "on_behalf_of",
                },
            )
        except httpx.TransportError as e:
            return AcquisitionFailed(resource.name, f"token endpoint unreachable: {e!r}")

        body = _json_or_empty(r)
        if r.status_code >= 400:
            return _classify_error(resource.name, r.status_code, body)

        access_token = body.get("access_token")
        if not access_token:
            return AcquisitionFailed(resource.name, "token endpoint returned no access_token")
        expires_in = int(body.get("expires_in", 3600))
        return TokenAcquired(
            resource.name,
            AccessToken(token=str(access_token), expires_on=int(time.time()) + expires_in),
        )

    async def aclose(self) -> None:
        # The httpx client belongs to the composition root.
        return None


def _json_or_empty(r: httpx.Response) -> dict[str, Any]:
    if not r.headers.get("content-type", "").startswith("application/json"):
        return {}
    try:
        body = r.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _classify_error(resource: str, status_code: int, body: dict[str, Any]) -> TokenResult:
    error = str(body.get("error", "unknown"))
    suberror = str(body.get("suberror", ""))
    description = str(body.get("error_description", f"HTTP {status_code}"))
    codes = {c for c in body.get("error_codes") or [] if isinstance(c, int)}

    if (
        error in _CONSENT_ERRORS
        or suberror in _CONSENT_SUBERRORS
        or codes & _CONSENT_ERROR_CODES
    ):
        return ConsentRequired(resource, claims=body.get("claims"), detail=description)
    return AcquisitionFailed(resource, f"{error} ({status_code}): {description}")


def build_workload_credential(
    strategy: WorkloadStrategy, managed_identity_client_id: str
) -> AsyncTokenCredential:
    if strategy is WorkloadStrategy.local:
        # Environment-variable credentials are excluded so unrelated ambient secrets
        # are never picked up on a developer machine.
        return DefaultAzureCredential(exclude_environment_credential=True)
    return ManagedIdentityCredential(client_id=managed_identity_client_id)


class WorkloadIdentityFlow:
    """
    Non-interactive flow. Both strategies request the same scopes; they differ only in
    how the credential is obtained. The credential is created on first use and reused.
    """

    def __init__(
        self,
        *,
        strategy: WorkloadStrategy,
        managed_identity_client_id: str = "",
        credential_factory: Callable[
            [WorkloadStrategy, str], AsyncTokenCredential
        ] = build_workload_credential,
    ) -> None:
        self._strategy = strategy
        self._managed_identity_client_id = managed_identity_client_id
        self._credential_factory = credential_factory
        self._credential: AsyncTokenCredential | None = None

    @property
    def strategy(self) -> WorkloadStrategy:
        return self._strategy

    def _get_credential(self) -> AsyncTokenCredential:
        if self._credential is None:
            if self._strategy is WorkloadStrategy.hosted and not self._managed_identity_client_id:
                message = (
                    "Managed identity client id is not configured. "
                    "Cannot acquire workload tokens in the hosted environment."
                )
                log.error("managed_identity_not_configured")
                raise ConfigurationError(message)
            self._credential = self._credential_factory(
                self._strategy, self._managed_identity_client_id
            )
        return self._credential

    async def acquire(
        self, resource: ResourceScope, *, session: UserSession | None = None
    ) -> TokenResult:
        credential = self._get_credential()
        log.debug(
            "workload_token_requested",
            resource=resource.name,
            strategy=str(self._strategy),
            managed_identity_client_id=self._managed_identity_client_id or None,
        )
        try:
            token = await credential.get_token(*resource.scopes)
        except AzureError as e:
            return AcquisitionFailed(resource.name, f"{type(e).__name__}: {e.message}")
        return TokenAcquired(
            resource.name, AccessToken(token=token.token, expires_on=token.expires_on)
        )

    async def aclose(self) -> None:
        if self._credential is not None:
            await self._credential.close()
            self._credential = None


# --- Module Notes -----------------------------------------------------------
# A hosted deployment without a managed identity client id is a deployment defect:
# it raises instead of falling back to the local chain.
