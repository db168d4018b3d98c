"""
tests.conftest

Shared fakes for the directory port and azure-identity credentials.

Responsibilities:
- Provide an in-memory `DirectoryClient` that records every call.
- Provide a fake async token credential that counts `get_token` calls.
- Pin the clock so expiry and display-name assertions are exact.
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from azure.core.credentials import AccessToken as AzureAccessToken
from azure.core.exceptions import ClientAuthenticationError

from agent_credentials.errors import DirectoryError, NotFound, PrincipalResolutionFailed
from agent_credentials.models import NewSecret, Principal, SecretRecord

FIXED_NOW = datetime(2026, 10, 19, 12, 30, tzinfo=UTC)
CLIENT_ID = "11111111-2222-3333-4444-555555555555"
OBJECT_ID = "app-object-1"


class StubDirectoryClient:
    def __init__(self) -> None:
        self.object_ids: dict[str, str] = {CLIENT_ID: OBJECT_ID}
        self.secrets: list[SecretRecord] = []
        self.principal: Principal | None = Principal(object_id="user-1", display_name="Ada")
        self.failing_removals: set[str] = set()
        self.fail_all_removals = False
        self.fail_listing = False
        self.secret_text: str = "minted-secret"
        self.calls: list[tuple] = []
        self._next_key = 0

    def call_names(self) -> list[str]:
        return [c[0] for c in self.calls]

    async def resolve_object_id(self, client_id: str) -> str:
        self.calls.append(("resolve_object_id", client_id))
        try:
            return self.object_ids[client_id]
        except KeyError:
            raise NotFound(client_id) from None

    async def list_secrets(self, object_id: str) -> list[SecretRecord]:
        self.calls.append(("list_secrets", object_id))
        if self.fail_listing:
            raise DirectoryError("listing unavailable", status_code=503)
        return list(self.secrets)

    async def add_secret(
        self, object_id: str, *, display_name: str, expires_at: datetime
    ) -> NewSecret:
        self.calls.append(("add_secret", object_id, display_name, expires_at))
        self._next_key += 1
        record = SecretRecord(
            key_id=f"new-{self._next_key}", display_name=display_name, expires_at=expires_at
        )
        self.secrets.append(record)
        return NewSecret(record=record, secret_text=self.secret_text)

    async def remove_secret(self, object_id: str, key_id: str) -> None:
        self.calls.append(("remove_secret", object_id, key_id))
        if self.fail_all_removals or key_id in self.failing_removals:
            raise DirectoryError(f"cannot remove {key_id}", status_code=500)
        self.secrets = [s for s in self.secrets if s.key_id != key_id]

    async def resolve_current_principal(self) -> Principal:
        self.calls.append(("resolve_current_principal",))
        if self.principal is None:
            raise PrincipalResolutionFailed("Unable to retrieve current user ID")
        return self.principal


class FakeCredential:
    def __init__(self, *, token: str = "workload-token", fail: bool = False) -> None:
        self.token = token
        self.fail = fail
        self.requested_scopes: list[tuple[str, ...]] = []
        self.closed = False
        self.error: Exception | None = None

    async def get_token(self, *scopes: str, **kwargs) -> AzureAccessToken:
        self.requested_scopes.append(scopes)
        if self.error is not None:
            raise self.error
        if self.fail:
            raise ClientAuthenticationError(message="no credential available")
        return AzureAccessToken(self.token, int(FIXED_NOW.timestamp()) + 3600)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def directory() -> StubDirectoryClient:
    return StubDirectoryClient()


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def client_id() -> str:
    return CLIENT_ID


@pytest.fixture
def fake_credential() -> FakeCredential:
    return FakeCredential()


# --- Module Notes -----------------------------------------------------------
# Fakes live here rather than in a helper module so every test file gets them via fixtures.
