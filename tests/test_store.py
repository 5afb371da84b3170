"""Tests for the row store client."""

import json

import httpx
import pytest

from questlog.store import StoreClient, StoreError


def recording_client(responses: list[httpx.Response] | None = None):
    """A client whose requests are recorded and answered from a list."""
    sent: list[httpx.Request] = []
    queue = list(responses or [])

    def handler(request: httpx.Request) -> httpx.Response:
        sent.append(request)
        return queue.pop(0) if queue else httpx.Response(200, json=[])

    client = StoreClient(
        url="https://example.supabase.co/",
        api_key="secret",
        transport=httpx.MockTransport(handler),
    )
    return client, sent


class TestConfiguration:
    def test_missing_url(self, monkeypatch):
        monkeypatch.delenv("QUESTLOG_STORE_URL", raising=False)
        with pytest.raises(StoreError, match="QUESTLOG_STORE_URL"):
            StoreClient(api_key="secret")

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("QUESTLOG_STORE_KEY", raising=False)
        with pytest.raises(StoreError, match="QUESTLOG_STORE_KEY"):
            StoreClient(url="https://example.supabase.co")

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("QUESTLOG_STORE_URL", "https://env.supabase.co")
        monkeypatch.setenv("QUESTLOG_STORE_KEY", "env-key")
        client = StoreClient()
        assert client.url == "https://env.supabase.co"
        assert client.api_key == "env-key"


class TestQueries:
    def test_select_with_filters_order_and_limit(self):
        client, sent = recording_client()

        (
            client.table("user_games")
            .select("id, hours_played, games:game_id(id, title)")
            .eq("user_id", "u1")
            .order("last_played", desc=True)
            .limit(2)
            .execute()
        )

        request = sent[0]
        assert request.method == "GET"
        assert request.url.path == "/rest/v1/user_games"
        params = request.url.params
        assert params["select"] == "id,hours_played,games:game_id(id,title)"
        assert params["user_id"] == "eq.u1"
        assert params["order"] == "last_played.desc.nullslast"
        assert params["limit"] == "2"
        assert request.headers["apikey"] == "secret"
        assert request.headers["authorization"] == "Bearer secret"

    def test_order_nulls_first_and_multiple_columns(self):
        client, sent = recording_client()
        (
            client.table("user_games")
            .select()
            .order("last_played", desc=True, nulls_first=True)
            .order("id")
            .execute()
        )
        assert sent[0].url.params["order"] == "last_played.desc.nullsfirst,id.asc.nullslast"

    def test_in_filter_quotes_values(self):
        client, sent = recording_client()
        client.table("achievements").select().in_("game_id", ["g1", "g,2"]).execute()
        assert sent[0].url.params["game_id"] == 'in.("g1","g,2")'

    def test_eq_none_and_bool(self):
        client, sent = recording_client()
        client.table("user_games").select().eq("last_played", None).eq("done", True).execute()
        params = sent[0].url.params
        assert params["last_played"] == "is.null"
        assert params["done"] == "eq.true"

    def test_exact_count_head_request(self):
        client, sent = recording_client([httpx.Response(200, headers={"content-range": "*/7"})])

        result = client.table("user_achievements").select("id", count="exact", head=True).execute()

        assert sent[0].method == "HEAD"
        assert "count=exact" in sent[0].headers["prefer"]
        assert result.count == 7
        assert result.data is None

    def test_single_insert(self):
        client, sent = recording_client([httpx.Response(201, json={"id": "g1", "title": "Hades"})])

        result = client.table("games").insert({"title": "Hades"}).select().single().execute()

        request = sent[0]
        assert request.method == "POST"
        assert request.headers["accept"] == "application/vnd.pgrst.object+json"
        assert "return=representation" in request.headers["prefer"]
        assert json.loads(request.content) == {"title": "Hades"}
        assert result.data == {"id": "g1", "title": "Hades"}

    def test_update_and_delete_carry_filters(self):
        client, sent = recording_client()

        client.table("user_games").update({"hours_played": 3}).eq("id", "ug1").execute()
        client.table("user_achievements").delete().eq("user_id", "u1").eq("achievement_id", "a1").execute()

        assert sent[0].method == "PATCH"
        assert sent[0].url.params["id"] == "eq.ug1"
        assert sent[1].method == "DELETE"
        assert sent[1].url.params["user_id"] == "eq.u1"
        assert sent[1].url.params["achievement_id"] == "eq.a1"


class TestErrors:
    def test_error_response_raises(self):
        client, _ = recording_client(
            [httpx.Response(400, json={"message": "column games.nope does not exist"})]
        )
        with pytest.raises(StoreError, match="does not exist") as excinfo:
            client.table("games").select("nope").execute()
        assert excinfo.value.status_code == 400

    def test_non_json_error(self):
        client, _ = recording_client([httpx.Response(503, text="upstream down")])
        with pytest.raises(StoreError, match="503"):
            client.table("games").select().execute()

    def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = StoreClient(
            url="https://example.supabase.co",
            api_key="secret",
            transport=httpx.MockTransport(handler),
        )
        with pytest.raises(StoreError, match="connection refused"):
            client.table("games").select().execute()
