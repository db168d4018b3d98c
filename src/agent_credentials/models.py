"""
agent_credentials.models

Domain models shared across the directory, secret lifecycle and token layers.

Responsibilities:
- Define immutable value types (`Principal`, `SecretRecord`, `AccessToken`, ...).
- Keep secret material and bearer values out of repr output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Principal:
    """
    The authenticated actor on whose behalf secrets are minted.
    """

    object_id: str
    display_name: str = ""


@dataclass(frozen=True, slots=True)
class SecretRecord:
    # Listing never returns material; only `NewSecret` carries it.
    key_id: str
    display_name: str
    expires_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class NewSecret:
    record: SecretRecord
    secret_text: str = field(repr=False)


@dataclass(frozen=True, slots=True)
class AccessToken:
    token: str = field(repr=False)
    expires_on: int = 0


@dataclass(frozen=True, slots=True)
class UserSession:
    """
    The caller's established interactive session, expressed as the inbound bearer
    assertion that the delegated-user flow exchanges on the user's behalf.
    """

    assertion: str = field(repr=False)


# --- Module Notes -----------------------------------------------------------
# Nothing here is persisted; these types live for one request or one bootstrap cycle.
