"""
agent_credentials.secret_lifecycle.manager

Secret lifecycle service over the directory port.

Responsibilities:
- Resolve (and cache) the application object id for a client id.
- Remove a principal's previously minted secrets, best effort.
- Create new secrets with an expiry policy and return their material exactly once.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from agent_credentials.directory.client import DirectoryClient
from agent_credentials.errors import ApplicationNotFound, CredentialCreationFailed, NotFound
from agent_credentials.observability.logging import get_logger
from agent_credentials.secret_lifecycle.naming import encode_display_name, is_owned_by

log = get_logger(__name__)

DEFAULT_DISPLAY_NAME = "Auto-generated"
DEFAULT_EXPIRATION_HOURS = 24


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class SecretLifecycleManager:
    def __init__(
        self,
        *,
        directory: DirectoryClient,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._directory = directory
        self._clock = clock
        # client_id -> object_id; lives as long as this manager. Failures are not cached.
        self._object_ids: dict[str, str] = {}

    async def resolve_object_id(self, client_id: str) -> str:
        cached = self._object_ids.get(client_id)
        if cached is not None:
            return cached
        try:
            object_id = await self._directory.resolve_object_id(client_id)
        except NotFound as e:
            raise ApplicationNotFound(client_id) from e
        self._object_ids[client_id] = object_id
        return object_id

    async def cleanup_owned_secrets(self, client_id: str, principal_id: str) -> int:
        """
        Remove every secret whose display name decodes to `principal_id`.

        Secrets of other principals and secrets outside the naming convention are
        never touched. Individual removal failures are logged and skipped; the
        number of secrets actually removed is returned.
        """

        log.info("secret_cleanup_started", client_id=client_id, principal_id=principal_id)
        object_id = await self.resolve_object_id(client_id)

        existing = await self._directory.list_secrets(object_id)
        if not existing:
            log.info("secret_cleanup_nothing_to_remove", client_id=client_id)
            return 0

        owned = [s for s in existing if is_owned_by(s.display_name, principal_id)]
        if not owned:
            log.info(
                "secret_cleanup_no_owned_secrets",
                client_id=client_id,
                principal_id=principal_id,
                existing=len(existing),
            )
            return 0

        log.info("secret_cleanup_candidates", principal_id=principal_id, count=len(owned))
        removed = 0
        for record in owned:
            try:
                await self._directory.remove_secret(object_id, record.key_id)
            except Exception:
                log.warning(
                    "secret_remove_failed",
                    display_name=record.display_name,
                    key_id=record.key_id,
                    exc_info=True,
                )
                continue
            removed += 1
            log.info("secret_removed", display_name=record.display_name, key_id=record.key_id)

        log.info(
            "secret_cleanup_completed",
            principal_id=principal_id,
            removed=removed,
            failed=len(owned) - removed,
        )
        return removed

    async def create_secret(
        self,
        client_id: str,
        display_name: str = DEFAULT_DISPLAY_NAME,
        expiration_hours: int = DEFAULT_EXPIRATION_HOURS,
        *,
        created_at: datetime | None = None,
    ) -> str:
        if expiration_hours <= 0:
            raise ValueError("expiration_hours must be positive")

        log.info("secret_create_started", client_id=client_id, display_name=display_name)
        object_id = await self.resolve_object_id(client_id)

        expires_at = (created_at or self._clock()) + timedelta(hours=expiration_hours)
        created = await self._directory.add_secret(
            object_id, display_name=display_name, expires_at=expires_at
        )
        if not created.secret_text:
            raise CredentialCreationFailed("Failed to create client secret - no secret returned")

        log.info(
            "secret_created",
            client_id=client_id,
            object_id=object_id,
            key_id=created.record.key_id,
            expires_at=expires_at.isoformat(),
        )
        return created.secret_text

    async def create_user_scoped_secret(
        self,
        client_id: str,
        principal_id: str,
        expiration_hours: int = DEFAULT_EXPIRATION_HOURS,
    ) -> str:
        now = self._clock()
        display_name = encode_display_name(principal_id, now)
        return await self.create_secret(
            client_id, display_name, expiration_hours, created_at=now
        )


# --- Module Notes -----------------------------------------------------------
# Removals run sequentially and always finish before the caller moves on to creation,
# so the next cleanup for the same principal sees a consistent listing.
