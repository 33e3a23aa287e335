# tests/test_supabase_client.py
import json

import httpx
import pytest

from stockdesk.client import SupabaseClient, create_client
from stockdesk.domain.enums import AuthEvent
from stockdesk.schemas.common import NETWORK_ERROR_CODE, NOT_FOUND_CODE
from stockdesk.services.exceptions import ConfigurationError

BASE_URL = "https://demo.supabase.co"
TOKEN_PAYLOAD = {
    "access_token": "user-token",
    "refresh_token": "refresh-token",
    "token_type": "bearer",
    "user": {"id": "user-1", "email": "chef@example.com"},
}


class Recorder:
    """MockTransport handler that answers from a queue and keeps every request."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0) if self.responses else httpx.Response(200, json=[])
        if isinstance(response, Exception):
            raise response
        return response


def make_client(recorder: Recorder, **kwargs) -> SupabaseClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    return SupabaseClient(BASE_URL + "/", "anon-key", http_client=http, **kwargs)


@pytest.mark.asyncio
async def test_select_sends_postgrest_request():
    rows = [{"id": 1, "name": "Basmati rice"}]
    recorder = Recorder(httpx.Response(200, json=rows))
    client = make_client(recorder)

    result = await client.from_("products").select("*").eq("category_id", 1).order("name").limit(10)

    assert result.error is None
    assert result.data == rows
    request = recorder.requests[0]
    assert request.method == "GET"
    assert request.url.path == "/rest/v1/products"
    assert list(request.url.params.multi_items()) == [
        ("select", "*"),
        ("category_id", "eq.1"),
        ("order", "name.asc"),
        ("limit", "10"),
    ]
    assert request.headers["apikey"] == "anon-key"
    assert request.headers["Authorization"] == "Bearer anon-key"
    assert request.headers["Accept-Profile"] == "public"


@pytest.mark.asyncio
async def test_insert_asks_for_representation():
    created = [{"id": 3, "name": "Flour"}]
    recorder = Recorder(httpx.Response(201, json=created))
    client = make_client(recorder)

    result = await client.from_("products").insert([{"name": "Flour"}]).select().single()

    assert result.data == created[0]
    request = recorder.requests[0]
    assert request.method == "POST"
    assert request.headers["Prefer"] == "return=representation"
    assert json.loads(request.content) == [{"name": "Flour"}]
    assert ("select", "*") in list(request.url.params.multi_items())


@pytest.mark.asyncio
async def test_upsert_merges_duplicates():
    recorder = Recorder(httpx.Response(201, json=[]))
    client = make_client(recorder)

    await client.from_("categories").insert({"name": "Dairy"}, upsert=True).execute()

    assert recorder.requests[0].headers["Prefer"] == "return=representation,resolution=merge-duplicates"


@pytest.mark.asyncio
async def test_update_and_delete_use_patch_and_delete():
    recorder = Recorder(httpx.Response(200, json=[]), httpx.Response(204))
    client = make_client(recorder)

    await client.from_("products").update({"stock_quantity": 3}).eq("id", 1).execute()
    deleted = await client.from_("products").delete().eq("id", 1).execute()

    assert recorder.requests[0].method == "PATCH"
    assert json.loads(recorder.requests[0].content) == {"stock_quantity": 3}
    assert recorder.requests[1].method == "DELETE"
    assert ("id", "eq.1") in list(recorder.requests[1].url.params.multi_items())
    assert deleted.data is None
    assert deleted.error is None


@pytest.mark.asyncio
async def test_store_error_is_returned_not_raised():
    body = {
        "code": "23505",
        "message": 'duplicate key value violates unique constraint "categories_name_key"',
        "details": "Key (name)=(Dairy) already exists.",
        "hint": None,
    }
    client = make_client(Recorder(httpx.Response(409, json=body)))

    result = await client.from_("categories").insert({"name": "Dairy"}).execute()

    assert result.data is None
    assert result.error.code == "23505"
    assert result.error.details == "Key (name)=(Dairy) already exists."
    assert result.error.hint is None


@pytest.mark.asyncio
async def test_non_json_error_uses_status_code():
    client = make_client(Recorder(httpx.Response(500, text="upstream exploded")))

    result = await client.from_("products").select("*")

    assert result.error.code == "500"
    assert result.error.message == "upstream exploded"


@pytest.mark.asyncio
async def test_network_failure_is_reported_as_error():
    client = make_client(Recorder(httpx.ConnectError("connection refused")))

    result = await client.from_("products").select("*")

    assert result.data is None
    assert result.error.code == NETWORK_ERROR_CODE


@pytest.mark.asyncio
async def test_single_rejects_several_rows():
    client = make_client(Recorder(httpx.Response(200, json=[{"id": 1}, {"id": 2}])))

    result = await client.from_("products").select("*").single()

    assert result.data is None
    assert result.error.code == NOT_FOUND_CODE


@pytest.mark.asyncio
async def test_maybe_single_on_no_rows_is_null():
    client = make_client(Recorder(httpx.Response(200, json=[])))

    result = await client.from_("products").select("*").eq("id", 99).maybe_single()

    assert result.data is None
    assert result.error is None


@pytest.mark.asyncio
async def test_rpc_posts_arguments():
    recorder = Recorder(httpx.Response(200, json=12))
    client = make_client(recorder)

    result = await client.rpc("count_low_stock", {"project_id": 1})

    assert result.data == 12
    assert recorder.requests[0].url.path == "/rest/v1/rpc/count_low_stock"
    assert json.loads(recorder.requests[0].content) == {"project_id": 1}


@pytest.mark.asyncio
async def test_sign_in_switches_bearer_and_notifies_listeners():
    recorder = Recorder(
        httpx.Response(200, json=TOKEN_PAYLOAD),
        httpx.Response(200, json=[]),
        httpx.Response(204),
    )
    client = make_client(recorder)
    events = []
    subscription = client.auth.on_auth_state_change(lambda event, session: events.append(event))

    signed_in = await client.auth.sign_in_with_password({"email": "chef@example.com", "password": "secret"})
    await client.from_("products").select("*")
    await client.auth.sign_out()
    subscription.unsubscribe()

    assert signed_in.data["session"]["access_token"] == "user-token"
    assert signed_in.data["user"]["id"] == "user-1"
    token_request = recorder.requests[0]
    assert token_request.url.path == "/auth/v1/token"
    assert token_request.url.params["grant_type"] == "password"
    assert recorder.requests[1].headers["Authorization"] == "Bearer user-token"
    assert recorder.requests[2].url.path == "/auth/v1/logout"
    assert events == [AuthEvent.INITIAL_SESSION, AuthEvent.SIGNED_IN, AuthEvent.SIGNED_OUT]
    assert (await client.auth.get_session()).data == {"session": None}


@pytest.mark.asyncio
async def test_rejected_sign_in_keeps_anonymous_session():
    body = {"code": 400, "error_code": "invalid_credentials", "msg": "Invalid login credentials"}
    client = make_client(Recorder(httpx.Response(400, json=body)))

    result = await client.auth.sign_in_with_password({"email": "chef@example.com", "password": "bad"})

    assert result.data is None
    assert result.error.code == "invalid_credentials"
    assert result.error.message == "Invalid login credentials"
    assert client.auth.access_token is None


@pytest.mark.asyncio
async def test_get_user_without_session_needs_no_request():
    recorder = Recorder()
    client = make_client(recorder)

    result = await client.auth.get_user()

    assert result.error.code == "AUTH_SESSION_MISSING"
    assert recorder.requests == []


@pytest.mark.asyncio
async def test_sign_up_without_confirmation_returns_no_session():
    client = make_client(Recorder(httpx.Response(200, json={"id": "user-2", "email": "new@example.com"})))

    result = await client.auth.sign_up({"email": "new@example.com", "password": "secret"})

    assert result.data == {"user": {"id": "user-2", "email": "new@example.com"}, "session": None}


@pytest.mark.asyncio
async def test_storage_round_trip():
    recorder = Recorder(
        httpx.Response(200, json={"Key": "invoices/2024/01.pdf"}),
        httpx.Response(200, content=b"%PDF-1.7"),
        httpx.Response(200, json=[{"name": "2024/01.pdf"}]),
    )
    bucket = make_client(recorder).storage.from_("invoices")

    uploaded = await bucket.upload("2024/01.pdf", b"%PDF-1.7", content_type="application/pdf")
    downloaded = await bucket.download("2024/01.pdf")
    removed = await bucket.remove(["2024/01.pdf"])

    assert uploaded.data == {"path": "2024/01.pdf"}
    assert downloaded.data == b"%PDF-1.7"
    assert removed.error is None
    upload_request, download_request, remove_request = recorder.requests
    assert upload_request.url.path == "/storage/v1/object/invoices/2024/01.pdf"
    assert upload_request.headers["Content-Type"] == "application/pdf"
    assert download_request.method == "GET"
    assert remove_request.method == "DELETE"
    assert json.loads(remove_request.content) == {"prefixes": ["2024/01.pdf"]}


@pytest.mark.asyncio
async def test_storage_download_error():
    client = make_client(Recorder(httpx.Response(404, json={"statusCode": "404", "error": "not_found", "message": "Object not found"})))

    result = await client.storage.from_("invoices").download("missing.pdf")

    assert result.data is None
    assert result.error.message == "Object not found"
    assert result.error.code == "404"


def test_missing_configuration_raises():
    with pytest.raises(ConfigurationError):
        SupabaseClient("", "anon-key")
    with pytest.raises(ConfigurationError):
        create_client(url="", key="")


@pytest.mark.asyncio
async def test_context_manager_leaves_injected_http_client_open():
    http = httpx.AsyncClient(transport=httpx.MockTransport(Recorder()))
    async with SupabaseClient(BASE_URL, "anon-key", http_client=http):
        pass
    assert http.is_closed is False
    await http.aclose()


@pytest.mark.asyncio
async def test_token_response_without_user_is_rejected():
    client = make_client(Recorder(httpx.Response(200, json={"access_token": "user-token"})))

    result = await client.auth.sign_in_with_password({"email": "chef@example.com", "password": "secret"})

    assert result.error.code == "AUTH_MALFORMED_SESSION"
    assert client.auth.access_token is None


@pytest.mark.asyncio
async def test_empty_token_response_is_rejected():
    client = make_client(Recorder(httpx.Response(200)))

    result = await client.auth.sign_in_with_password({"email": "chef@example.com", "password": "secret"})

    assert result.data is None
    assert result.error.code == "AUTH_MALFORMED_SESSION"
    assert client.auth.access_token is None


@pytest.mark.asyncio
async def test_listener_failing_on_initial_state_is_not_kept():
    recorder = Recorder(httpx.Response(200, json=TOKEN_PAYLOAD))
    client = make_client(recorder)
    calls = []

    def broken(event, session):
        calls.append(event)
        raise RuntimeError("listener exploded")

    with pytest.raises(RuntimeError):
        client.auth.on_auth_state_change(broken)
    await client.auth.sign_in_with_password({"email": "chef@example.com", "password": "secret"})

    assert calls == [AuthEvent.INITIAL_SESSION]
