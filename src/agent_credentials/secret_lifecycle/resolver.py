"""
agent_credentials.secret_lifecycle.resolver

Bootstrap-time client secret resolution.

Responsibilities:
- Prefer a statically configured secret when present (no directory traffic at all).
- Otherwise mint a fresh 24-hour secret scoped to the current principal, after a
  best-effort cleanup of that principal's earlier secrets.
"""

from __future__ import annotations

from agent_credentials.directory.client import DirectoryClient
from agent_credentials.errors import ConfigurationError
from agent_credentials.observability.logging import get_logger
from agent_credentials.secret_lifecycle.manager import SecretLifecycleManager
from agent_credentials.settings import Settings

log = get_logger(__name__)

SECRET_EXPIRATION_HOURS = 24


class RuntimeCredentialResolver:
    """
    Constructed once per process. Each `ensure_secret` call is a complete, independent
    attempt; the only state carried between calls is the manager's object-id cache.
    """

    def __init__(
        self,
        *,
        client_id: str,
        directory: DirectoryClient,
        static_secret: str = "",
        manager: SecretLifecycleManager | None = None,
    ) -> None:
        if not client_id:
            raise ConfigurationError("client_id not configured")
        self._client_id = client_id
        self._static_secret = static_secret
        self._directory = directory
        self._manager = manager or SecretLifecycleManager(directory=directory)

    @classmethod
    def from_settings(
        cls, settings: Settings, *, directory: DirectoryClient
    ) -> RuntimeCredentialResolver:
        return cls(
            client_id=settings.client_id,
            static_secret=settings.client_secret,
            directory=directory,
        )

    @property
    def client_id(self) -> str:
        return self._client_id

    async def ensure_secret(self) -> str:
        if self._static_secret:
            log.info("client_secret_from_configuration", client_id=self._client_id)
            return self._static_secret

        try:
            principal = await self._directory.resolve_current_principal()
            log.info(
                "user_scoped_secret_requested",
                client_id=self._client_id,
                principal_id=principal.object_id,
            )

            try:
                await self._manager.cleanup_owned_secrets(self._client_id, principal.object_id)
            except Exception:
                # Leftover secrets stay valid until their own expiry; they never block minting.
                log.warning(
                    "secret_cleanup_failed",
                    client_id=self._client_id,
                    principal_id=principal.object_id,
                    exc_info=True,
                )

            secret = await self._manager.create_user_scoped_secret(
                self._client_id, principal.object_id, SECRET_EXPIRATION_HOURS
            )
        except Exception:
            log.error("ensure_secret_failed", client_id=self._client_id, exc_info=True)
            raise

        log.info(
            "user_scoped_secret_created",
            client_id=self._client_id,
            expiration_hours=SECRET_EXPIRATION_HOURS,
        )
        return secret


# --- Module Notes -----------------------------------------------------------
# Two concurrent calls for the same principal may each mint a secret. That is accepted:
# secrets are owned-by-principal, not unique-per-principal, and expire within a day.
