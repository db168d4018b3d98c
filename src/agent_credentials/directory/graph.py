"""
agent_credentials.directory.graph

Microsoft Graph adapter for the `DirectoryClient` port.

Responsibilities:
- Attach Graph bearer tokens obtained from an azure-identity credential.
- Map application lookup, password credential add/remove/list and `/me` onto Graph v1.0.
- Translate HTTP and transport failures into the package error taxonomy.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any

import httpx
from azure.core.credentials_async import AsyncTokenCredential
from azure.core.exceptions import AzureError

from agent_credentials.errors import (
    AmbiguousApplication,
    CredentialCreationFailed,
    DirectoryError,
    NotFound,
    PrincipalResolutionFailed,
)
from agent_credentials.models import NewSecret, Principal, SecretRecord
from agent_credentials.observability.logging import get_logger

log = get_logger(__name__)

GRAPH_SCOPE = "https://graph.microsoft.com/.default"
_EXTRA_FRACTION = re.compile(r"\.(\d{6})\d+")


class GraphDirectoryClient:
    """
    The httpx client is owned by the caller (composition root or test); this adapter
    never closes it.
    """

    def __init__(
        self,
        *,
        http: httpx.AsyncClient,
        credential: AsyncTokenCredential,
        base_url: str = "https://graph.microsoft.com/v1.0",
    ) -> None:
        self._http = http
        self._credential = credential
        self._base_url = base_url.rstrip("/")

    async def _authz(self) -> dict[str, str]:
        try:
            token = await self._credential.get_token(GRAPH_SCOPE)
        except AzureError as e:
            raise DirectoryError(f"unable to obtain Graph token: {e.message}") from e
        return {"Authorization": f"Bearer {token.token}"}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        headers = await self._authz()
        try:
            r = await self._http.request(
                method, f"{self._base_url}{path}", params=params, json=json, headers=headers
            )
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise DirectoryError(
                f"{method} {path} failed: {_graph_error_message(e.response)}",
                status_code=e.response.status_code,
            ) from e
        except httpx.TransportError as e:
            raise DirectoryError(f"{method} {path} failed: {e!r}") from e
        return r

    async def resolve_object_id(self, client_id: str) -> str:
        # OData string literals escape a single quote by doubling it.
        literal = client_id.replace("'", "''")
        r = await self._request(
            "GET",
            "/applications",
            params={"$filter": f"appId eq '{literal}'", "$select": "id,appId,displayName"},
        )
        matches = _json(r).get("value") or []
        if not matches:
            log.warning("application_not_found", client_id=client_id)
            raise NotFound(f"no application with client id {client_id}")
        if len(matches) > 1:
            log.error("application_lookup_ambiguous", client_id=client_id, matches=len(matches))
            raise AmbiguousApplication(client_id, len(matches))

        app = matches[0]
        log.info(
            "application_resolved",
            client_id=client_id,
            object_id=app.get("id"),
            app_display_name=app.get("displayName"),
        )
        return str(app["id"])

    async def list_secrets(self, object_id: str) -> list[SecretRecord]:
        r = await self._request(
            "GET", f"/applications/{object_id}", params={"$select": "id,passwordCredentials"}
        )
        creds = _json(r).get("passwordCredentials") or []
        return [
            SecretRecord(
                key_id=str(c["keyId"]),
                display_name=c.get("displayName") or "",
                expires_at=_parse_graph_datetime(c.get("endDateTime")),
            )
            for c in creds
            if c.get("keyId")
        ]

    async def add_secret(
        self, object_id: str, *, display_name: str, expires_at: datetime
    ) -> NewSecret:
        r = await self._request(
            "POST",
            f"/applications/{object_id}/addPassword",
            json={
                "passwordCredential": {
                    "displayName": display_name,
                    "endDateTime": expires_at.isoformat().replace("+00:00", "Z"),
                }
            },
        )
        body = _json(r)
        secret_text = body.get("secretText")
        if not secret_text:
            raise CredentialCreationFailed("Failed to create client secret - no secret returned")

        record = SecretRecord(
            key_id=str(body.get("keyId", "")),
            display_name=body.get("displayName") or display_name,
            expires_at=_parse_graph_datetime(body.get("endDateTime")) or expires_at,
        )
        return NewSecret(record=record, secret_text=secret_text)

    async def remove_secret(self, object_id: str, key_id: str) -> None:
        await self._request(
            "POST", f"/applications/{object_id}/removePassword", json={"keyId": key_id}
        )

    async def resolve_current_principal(self) -> Principal:
        try:
            r = await self._request("GET", "/me", params={"$select": "id,displayName"})
            me = _json(r)
        except DirectoryError as e:
            raise PrincipalResolutionFailed(f"Unable to retrieve current user ID: {e}") from e

        if not me.get("id"):
            raise PrincipalResolutionFailed("Unable to retrieve current user ID")
        principal = Principal(object_id=str(me["id"]), display_name=me.get("displayName") or "")
        log.info(
            "principal_resolved",
            principal_id=principal.object_id,
            principal_name=principal.display_name,
        )
        return principal


def _json(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError as e:
        raise DirectoryError(
            f"unreadable Graph response: HTTP {response.status_code}",
            status_code=response.status_code,
        ) from e
    if not isinstance(body, dict):
        raise DirectoryError("unexpected Graph response shape", status_code=response.status_code)
    return body


def _graph_error_message(response: httpx.Response) -> str:
    # Graph error envelope: {"error": {"code": ..., "message": ...}}
    try:
        err = response.json().get("error", {})
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(err, dict) and err.get("message"):
        return f"{err.get('code', 'error')}: {err['message']}"
    return f"HTTP {response.status_code}"


def _parse_graph_datetime(raw: str | None) -> datetime | None:
    if not raw:
        return None
    # Graph may emit 7 fractional digits; datetime accepts at most 6.
    value = _EXTRA_FRACTION.sub(r".\1", raw.replace("Z", "+00:00"))
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


# --- Module Notes -----------------------------------------------------------
# Every credential or decoding fault surfaces as DirectoryError (or a subclass).
# Retries and timeouts belong to the injected httpx client; cancellation is never caught here.
