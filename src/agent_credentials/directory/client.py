"""
agent_credentials.directory.client

The directory port used by the secret lifecycle layer.

Responsibilities:
- Describe the five remote operations the core needs, and their failure contract.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from agent_credentials.models import NewSecret, Principal, SecretRecord


@runtime_checkable
class DirectoryClient(Protocol):
    """
    Fallible, network-backed identity directory.

    Failure contract:
    - `resolve_object_id`: `NotFound` on zero matches, `AmbiguousApplication` on several.
    - `add_secret`: `CredentialCreationFailed` when the provider returns no material.
    - `remove_secret`: `DirectoryError`; callers treat it as non-fatal.
    - `resolve_current_principal`: `PrincipalResolutionFailed`.
    """

    async def resolve_object_id(self, client_id: str) -> str: ...

    async def list_secrets(self, object_id: str) -> list[SecretRecord]: ...

    async def add_secret(
        self, object_id: str, *, display_name: str, expires_at: datetime
    ) -> NewSecret: ...

    async def remove_secret(self, object_id: str, key_id: str) -> None: ...

    async def resolve_current_principal(self) -> Principal: ...
