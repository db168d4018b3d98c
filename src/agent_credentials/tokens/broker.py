"""
agent_credentials.tokens.broker

Per-resource token acquisition.

Responsibilities:
- Look up resources by logical name and acquire tokens through the selector.
- Wrap unexpected faults as failures while letting configuration defects propagate.
- Pre-warm delegated-user resources so consent prompts surface early.
"""

from __future__ import annotations

from agent_credentials.errors import (
    ConfigurationError,
    ConsentRequiredError,
    TokenAcquisitionFailed,
)
from agent_credentials.models import AccessToken, UserSession
from agent_credentials.observability.logging import get_logger
from agent_credentials.tokens.resources import ResourceCatalog, TrustFlow
from agent_credentials.tokens.results import (
    AcquisitionFailed,
    ConsentRequired,
    TokenAcquired,
    TokenResult,
)
from agent_credentials.tokens.selector import CredentialSelector

log = get_logger(__name__)


class TokenBroker:
    def __init__(self, *, catalog: ResourceCatalog, selector: CredentialSelector) -> None:
        self._catalog = catalog
        self._selector = selector

    @property
    def catalog(self) -> ResourceCatalog:
        return self._catalog

    async def acquire(
        self, resource_name: str, *, session: UserSession | None = None
    ) -> TokenResult:
        """
        Returns a tagged result. `ConfigurationError` and `UnknownResource` are raised;
        every other fault becomes `AcquisitionFailed`.
        """

        resource = self._catalog.get(resource_name)
        try:
            result = await self._selector.acquire(resource, session=session)
        except ConfigurationError:
            raise
        except Exception as e:
            log.error("token_acquisition_error", resource=resource_name, exc_info=True)
            return AcquisitionFailed(resource_name, f"{type(e).__name__}: {e}")

        if isinstance(result, TokenAcquired):
            log.debug("token_acquired", resource=resource_name, flow=str(resource.flow))
        elif isinstance(result, ConsentRequired):
            log.warning("token_consent_required", resource=resource_name, detail=result.detail)
        else:
            log.error("token_acquisition_failed", resource=resource_name, reason=result.reason)
        return result

    async def get_token(
        self, resource_name: str, *, session: UserSession | None = None
    ) -> AccessToken:
        """
        Exception-style wrapper over `acquire`. An unknown resource name is a caller
        bug, not an acquisition fault, so `UnknownResource` is left unwrapped.
        """

        result = await self.acquire(resource_name, session=session)
        if isinstance(result, TokenAcquired):
            return result.token
        if isinstance(result, ConsentRequired):
            raise ConsentRequiredError(resource_name, claims=result.claims, detail=result.detail)
        raise TokenAcquisitionFailed(resource_name, result.reason)

    async def prewarm_all(self, *, session: UserSession | None = None) -> dict[str, str]:
        """
        Best effort: try every delegated-user resource, log and swallow failures.
        Workload-identity resources are skipped; they are cheap and acquired on use.
        """

        log.info("token_prewarm_started", resources=self._catalog.names())
        summary: dict[str, str] = {}
        for resource in self._catalog:
            if resource.flow is TrustFlow.workload_identity:
                log.info("token_prewarm_skipped", resource=resource.name, reason="on_demand")
                summary[resource.name] = "skipped"
                continue

            try:
                result = await self.acquire(resource.name, session=session)
            except Exception:
                log.warning("token_prewarm_error", resource=resource.name, exc_info=True)
                summary[resource.name] = "failed"
                continue

            if isinstance(result, TokenAcquired):
                summary[resource.name] = "acquired"
            elif isinstance(result, ConsentRequired):
                summary[resource.name] = "consent_required"
            else:
                summary[resource.name] = "failed"

        log.info("token_prewarm_completed", summary=summary)
        return summary

    async def aclose(self) -> None:
        await self._selector.aclose()


# --- Module Notes -----------------------------------------------------------
# `acquire` is the primary API; `get_token` exists for call sites that prefer exceptions
# and must still tell consent apart from other failures.
