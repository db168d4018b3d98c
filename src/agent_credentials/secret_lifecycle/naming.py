"""
agent_credentials.secret_lifecycle.naming

Display-name convention for secrets minted on behalf of a principal.

Responsibilities:
- Build `{principalId}-Auto-Generated-{YYYY-MM-DD-HH-MM}` names.
- Recover the owning principal id from a name, rejecting names outside the convention.
"""

from __future__ import annotations

from datetime import UTC, datetime

MARKER = "-Auto-Generated-"
TIMESTAMP_FORMAT = "%Y-%m-%d-%H-%M"


def encode_display_name(principal_id: str, created_at: datetime) -> str:
    if not principal_id:
        raise ValueError("principal_id must be non-empty")
    if MARKER in principal_id:
        raise ValueError(f"principal_id must not contain {MARKER!r}")
    stamp = created_at.astimezone(UTC).strftime(TIMESTAMP_FORMAT)
    return f"{principal_id}{MARKER}{stamp}"


def decode_principal_id(display_name: str) -> str | None:
    # The timestamp never contains the marker, so the last occurrence is the separator.
    principal_id, sep, stamp = display_name.rpartition(MARKER)
    if not sep or not principal_id:
        return None
    try:
        datetime.strptime(stamp, TIMESTAMP_FORMAT)
    except ValueError:
        return None
    return principal_id


def is_owned_by(display_name: str, principal_id: str) -> bool:
    return decode_principal_id(display_name) == principal_id
