# tests/test_mock_client.py
import pytest

from stockdesk.domain.enums import AuthEvent
from stockdesk.schemas.common import NOT_FOUND_CODE, QueryResult
from stockdesk.testing import MockSupabaseClient, mock_error, mock_error_response, mock_response


@pytest.mark.asyncio
async def test_awaiting_a_handle_returns_the_whole_table_regardless_of_filters(mock_client, product_rows):
    result = await mock_client.from_("products").select("*").eq("category_id", 99).gt("stock_quantity", 1000)
    assert result.error is None
    assert result.data == product_rows


@pytest.mark.asyncio
async def test_typical_listing_chain_resolves(mock_client):
    result = await mock_client.from_("products").select("*").eq("category_id", 1).order("name").limit(10).execute()
    assert result.error is None
    assert isinstance(result.data, list)
    assert len(result.data) <= 10


@pytest.mark.asyncio
async def test_unknown_table_resolves_to_empty_list():
    result = await MockSupabaseClient().from_("recipes").select("*")
    assert result == QueryResult(data=[], error=None)


@pytest.mark.asyncio
async def test_maybe_single_on_empty_table_is_null():
    result = await MockSupabaseClient().from_("products").select("*").maybe_single()
    assert result.data is None
    assert result.error is None


@pytest.mark.asyncio
async def test_single_on_one_row_returns_that_row():
    row = {"id": 5, "name": "Olive oil"}
    client = MockSupabaseClient({"products": [row]})
    result = await client.from_("products").select("*").eq("id", 5).single()
    assert result == QueryResult(data=row, error=None)


@pytest.mark.asyncio
async def test_single_on_empty_table_reports_not_found():
    result = await MockSupabaseClient().from_("products").select("*").single()
    assert result.data is None
    assert result.error.code == NOT_FOUND_CODE


@pytest.mark.asyncio
async def test_single_on_many_rows_returns_the_first(mock_client, product_rows):
    result = await mock_client.from_("products").select("*").single()
    assert result.data == product_rows[0]


@pytest.mark.asyncio
async def test_mutations_do_not_touch_backing_rows(mock_client, product_rows):
    await mock_client.from_("products").insert([{"id": 3, "name": "Flour"}]).execute()
    await mock_client.from_("products").update({"name": "Changed"}).eq("id", 1).execute()
    await mock_client.from_("products").delete().eq("id", 2).execute()
    assert mock_client.tables["products"] == product_rows


@pytest.mark.asyncio
async def test_failed_table_returns_error_payload(mock_client):
    mock_client.fail_table("products", mock_error("permission denied", "42501"))
    result = await mock_client.from_("products").select("*")
    assert result.data is None
    assert result.error.code == "42501"
    assert result.error.details is None
    assert result.error.hint is None


@pytest.mark.asyncio
async def test_rpc_is_trivially_successful(mock_client):
    result = await mock_client.rpc("recalculate_stock", {"project_id": 1})
    assert result == QueryResult(data=None, error=None)
    assert mock_client.calls[-1].method == "recalculate_stock"


@pytest.mark.asyncio
async def test_storage_facade(mock_client):
    bucket = mock_client.storage.from_("invoices")
    uploaded = await bucket.upload("2024/01.pdf", b"%PDF")
    downloaded = await bucket.download("2024/01.pdf")
    removed = await bucket.remove(["2024/01.pdf"])
    assert uploaded.data == {"path": "mock-path"}
    assert downloaded.data == b""
    assert removed == QueryResult(data=None, error=None)


@pytest.mark.asyncio
async def test_sign_in_returns_canned_user_and_session(mock_client):
    result = await mock_client.auth.sign_in_with_password({"email": "test@example.com", "password": "x"})
    assert result.error is None
    assert result.data["user"] == {"id": "test-user-id", "email": "test@example.com"}
    assert result.data["session"]["access_token"] == "mock-access-token"
    assert result.data["session"]["refresh_token"] == "mock-refresh-token"


@pytest.mark.asyncio
async def test_session_shape_matches_the_real_client(mock_client):
    session = (await mock_client.auth.get_session()).data["session"]
    assert session == {
        "access_token": "mock-access-token",
        "user": {"id": "test-user-id", "email": "test@example.com"},
    }
    assert (await mock_client.auth.get_user()).data == {"user": {"id": "test-user-id", "email": "test@example.com"}}
    assert (await mock_client.auth.sign_up({"email": "a@b.c", "password": "x"})).error is None
    assert (await mock_client.auth.sign_out()) == QueryResult(data=None, error=None)


def test_on_auth_state_change_emits_synchronously(mock_client):
    events = []
    subscription = mock_client.auth.on_auth_state_change(lambda event, session: events.append((event, session)))

    assert len(events) == 1
    event, session = events[0]
    assert event == AuthEvent.SIGNED_IN
    assert event == "SIGNED_IN"
    assert session["user"]["id"] == "test-user-id"

    subscription.unsubscribe()
    subscription.unsubscribe()
    assert subscription.active is False
    assert len(events) == 1


def test_response_helpers():
    assert mock_response([1]) == QueryResult(data=[1], error=None)
    failed = mock_error_response("boom")
    assert failed.data is None
    assert failed.error.code == "MOCK_ERROR"
    assert failed.error.message == "boom"
