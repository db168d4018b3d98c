"""
tests.test_graph_directory

GraphDirectoryClient against a mocked Microsoft Graph (httpx.MockTransport).
"""

from __future__ import annotations

import json
from datetime import UTC, datetime

import httpx
import pytest
from azure.core.exceptions import ServiceRequestError

from agent_credentials.directory.client import DirectoryClient
from agent_credentials.directory.graph import GraphDirectoryClient
from agent_credentials.errors import (
    AmbiguousApplication,
    CredentialCreationFailed,
    DirectoryError,
    NotFound,
    PrincipalResolutionFailed,
)

BASE = "https://graph.test/v1.0"


def _client(handler, credential) -> tuple[GraphDirectoryClient, httpx.AsyncClient]:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GraphDirectoryClient(http=http, credential=credential, base_url=BASE), http


@pytest.mark.asyncio
async def test_adapter_satisfies_port(fake_credential) -> None:
    client, http = _client(lambda r: httpx.Response(200), fake_credential)
    async with http:
        assert isinstance(client, DirectoryClient)


@pytest.mark.asyncio
async def test_resolve_object_id_filters_by_app_id(fake_credential) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200, json={"value": [{"id": "obj-1", "appId": "cid", "displayName": "Agent"}]}
        )

    client, http = _client(handler, fake_credential)
    async with http:
        assert await client.resolve_object_id("cid") == "obj-1"

    req = seen[0]
    assert req.url.path == "/v1.0/applications"
    assert req.url.params["$filter"] == "appId eq 'cid'"
    assert req.headers["Authorization"] == "Bearer workload-token"
    assert fake_credential.requested_scopes == [("https://graph.microsoft.com/.default",)]


@pytest.mark.asyncio
async def test_resolve_object_id_not_found(fake_credential) -> None:
    client, http = _client(lambda r: httpx.Response(200, json={"value": []}), fake_credential)
    async with http:
        with pytest.raises(NotFound):
            await client.resolve_object_id("cid")


@pytest.mark.asyncio
async def test_resolve_object_id_ambiguous(fake_credential) -> None:
    body = {"value": [{"id": "obj-1"}, {"id": "obj-2"}]}
    client, http = _client(lambda r: httpx.Response(200, json=body), fake_credential)
    async with http:
        with pytest.raises(AmbiguousApplication) as exc:
            await client.resolve_object_id("cid")
    assert exc.value.matches == 2


@pytest.mark.asyncio
async def test_list_secrets_parses_password_credentials(fake_credential) -> None:
    body = {
        "id": "obj-1",
        "passwordCredentials": [
            {
                "keyId": "k1",
                "displayName": "user-1-Auto-Generated-2026-10-19-12-30",
                "endDateTime": "2026-10-20T12:30:00.1234567Z",
            },
            {"keyId": "k2", "displayName": None, "endDateTime": None},
        ],
    }

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v1.0/applications/obj-1"
        assert request.url.params["$select"] == "id,passwordCredentials"
        return httpx.Response(200, json=body)

    client, http = _client(handler, fake_credential)
    async with http:
        records = await client.list_secrets("obj-1")

    assert [r.key_id for r in records] == ["k1", "k2"]
    assert records[0].expires_at == datetime(2026, 10, 20, 12, 30, 0, 123456, tzinfo=UTC)
    assert records[1].display_name == ""
    assert records[1].expires_at is None


@pytest.mark.asyncio
async def test_list_secrets_empty(fake_credential) -> None:
    client, http = _client(
        lambda r: httpx.Response(200, json={"id": "obj-1", "passwordCredentials": []}),
        fake_credential,
    )
    async with http:
        assert await client.list_secrets("obj-1") == []


@pytest.mark.asyncio
async def test_add_secret_posts_display_name_and_expiry(fake_credential) -> None:
    posted: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.url.path == "/v1.0/applications/obj-1/addPassword"
        posted.append(json.loads(request.content))
        return httpx.Response(
            200,
            json={
                "keyId": "new-key",
                "displayName": "user-1-Auto-Generated-2026-10-19-12-30",
                "endDateTime": "2026-10-20T12:30:00Z",
                "secretText": "s3cr3t",
            },
        )

    expires_at = datetime(2026, 10, 20, 12, 30, tzinfo=UTC)
    client, http = _client(handler, fake_credential)
    async with http:
        created = await client.add_secret(
            "obj-1", display_name="user-1-Auto-Generated-2026-10-19-12-30", expires_at=expires_at
        )

    assert posted == [
        {
            "passwordCredential": {
                "displayName": "user-1-Auto-Generated-2026-10-19-12-30",
                "endDateTime": "2026-10-20T12:30:00Z",
            }
        }
    ]
    assert created.secret_text == "s3cr3t"
    assert created.record.key_id == "new-key"
    assert created.record.expires_at == expires_at
    assert "s3cr3t" not in repr(created)


@pytest.mark.asyncio
async def test_add_secret_without_material_fails(fake_credential) -> None:
    client, http = _client(
        lambda r: httpx.Response(200, json={"keyId": "k", "secretText": None}), fake_credential
    )
    async with http:
        with pytest.raises(CredentialCreationFailed):
            await client.add_secret(
                "obj-1", display_name="x", expires_at=datetime(2026, 1, 1, tzinfo=UTC)
            )


@pytest.mark.asyncio
async def test_remove_secret_posts_key_id(fake_credential) -> None:
    posted: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v1.0/applications/obj-1/removePassword"
        posted.append(json.loads(request.content))
        return httpx.Response(204)

    client, http = _client(handler, fake_credential)
    async with http:
        await client.remove_secret("obj-1", "k1")
    assert posted == [{"keyId": "k1"}]


@pytest.mark.asyncio
async def test_http_errors_become_directory_errors(fake_credential) -> None:
    body = {"error": {"code": "Authorization_RequestDenied", "message": "Insufficient privileges"}}
    client, http = _client(lambda r: httpx.Response(403, json=body), fake_credential)
    async with http:
        with pytest.raises(DirectoryError) as exc:
            await client.remove_secret("obj-1", "k1")
    assert exc.value.status_code == 403
    assert "Insufficient privileges" in str(exc.value)


@pytest.mark.asyncio
async def test_transport_errors_become_directory_errors(fake_credential) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client, http = _client(handler, fake_credential)
    async with http:
        with pytest.raises(DirectoryError):
            await client.list_secrets("obj-1")


@pytest.mark.asyncio
async def test_credential_failure_becomes_directory_error(fake_credential) -> None:
    fake_credential.fail = True
    client, http = _client(lambda r: httpx.Response(200, json={"value": []}), fake_credential)
    async with http:
        with pytest.raises(DirectoryError):
            await client.resolve_object_id("cid")


@pytest.mark.asyncio
async def test_resolve_current_principal(fake_credential) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v1.0/me"
        return httpx.Response(200, json={"id": "user-1", "displayName": "Ada"})

    client, http = _client(handler, fake_credential)
    async with http:
        principal = await client.resolve_current_principal()
    assert principal.object_id == "user-1"
    assert principal.display_name == "Ada"


@pytest.mark.asyncio
async def test_resolve_current_principal_failures(fake_credential) -> None:
    client, http = _client(lambda r: httpx.Response(400, json={}), fake_credential)
    async with http:
        with pytest.raises(PrincipalResolutionFailed):
            await client.resolve_current_principal()

    client, http = _client(
        lambda r: httpx.Response(200, json={"displayName": "?"}), fake_credential
    )
    async with http:
        with pytest.raises(PrincipalResolutionFailed):
            await client.resolve_current_principal()


@pytest.mark.asyncio
async def test_resolve_object_id_escapes_quotes_in_filter(fake_credential) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"value": [{"id": "obj-1"}]})

    client, http = _client(handler, fake_credential)
    async with http:
        await client.resolve_object_id("o'brien")
    assert seen[0].url.params["$filter"] == "appId eq 'o''brien'"


@pytest.mark.asyncio
async def test_unreachable_token_endpoint_fails_principal_resolution(fake_credential) -> None:
    fake_credential.error = ServiceRequestError("IMDS unreachable")
    client, http = _client(lambda r: httpx.Response(200, json={"id": "user-1"}), fake_credential)
    async with http:
        with pytest.raises(PrincipalResolutionFailed, match="IMDS unreachable"):
            await client.resolve_current_principal()


@pytest.mark.asyncio
async def test_non_json_me_body_fails_principal_resolution(fake_credential) -> None:
    client, http = _client(lambda r: httpx.Response(200, text="<html>"), fake_credential)
    async with http:
        with pytest.raises(PrincipalResolutionFailed):
            await client.resolve_current_principal()


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["<html>", "[]"])
async def test_unreadable_bodies_become_directory_errors(fake_credential, text) -> None:
    client, http = _client(lambda r: httpx.Response(200, text=text), fake_credential)
    async with http:
        with pytest.raises(DirectoryError) as exc:
            await client.list_secrets("obj-1")
        with pytest.raises(DirectoryError):
            await client.resolve_object_id("cid")
        with pytest.raises(DirectoryError):
            await client.add_secret(
                "obj-1", display_name="x", expires_at=datetime(2026, 1, 1, tzinfo=UTC)
            )
    assert exc.value.status_code == 200


# --- Module Notes -----------------------------------------------------------
# Payload shapes follow Graph v1.0 `application` / `passwordCredential` resources.
