"""Shared fixtures: an in-memory stand-in for the REST row store."""

import json
import os
import tempfile
import uuid
from datetime import datetime, timedelta, timezone

# Keep session files out of the real home directory and skip the sign-in delay
os.environ.setdefault("QUESTLOG_DATA_DIR", tempfile.mkdtemp(prefix="questlog-test-"))
os.environ["QUESTLOG_AUTH_DELAY"] = "0"

import httpx
import pytest

from questlog.services import LibraryService
from questlog.store import StoreClient

USER_ID = "user-1"
NOW = datetime(2024, 4, 15, 12, 0, tzinfo=timezone.utc)


def _split_top_level(text: str) -> list[str]:
    """Split a select list on commas that are not inside parentheses."""
    parts, depth, current = [], 0, ""
    for ch in text:
        if ch == "," and depth == 0:
            parts.append(current)
            current = ""
            continue
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        current += ch
    if current:
        parts.append(current)
    return parts


def parse_select(text: str) -> list:
    items = []
    for part in _split_top_level(text):
        if "(" in part:
            head, inner = part.split("(", 1)
            alias, fk = head.split(":")
            items.append((alias, fk, parse_select(inner[:-1])))
        else:
            items.append(part)
    return items


class FakeRestStore:
    """Just enough PostgREST to serve the queries Questlog sends."""

    def __init__(self):
        self.tables: dict[str, list[dict]] = {
            "games": [],
            "user_games": [],
            "achievements": [],
            "user_achievements": [],
            "profiles": [],
        }
        self.failing: set[str] = set()
        self.requests: list[httpx.Request] = []

    # -- helpers -------------------------------------------------------------

    def _matches(self, row: dict, filters: list[tuple[str, str]]) -> bool:
        for column, expr in filters:
            value = row.get(column)
            if expr == "is.null":
                if value is not None:
                    return False
            elif expr.startswith("eq."):
                if str(value) != expr[3:]:
                    return False
            elif expr.startswith("in.("):
                wanted = [v.strip('"') for v in expr[4:-1].split(",") if v]
                if str(value) not in wanted:
                    return False
        return True

    def _project(self, row: dict, items: list) -> dict:
        out = {}
        for item in items:
            if item == "*":
                out.update(row)
            elif isinstance(item, tuple):
                alias, fk, sub = item
                target = next((r for r in self.tables[alias] if r["id"] == row.get(fk)), None)
                out[alias] = self._project(target, sub) if target else None
            else:
                out[item] = row.get(item)
        return out

    @staticmethod
    def _order(rows: list[dict], ordering: str) -> list[dict]:
        for clause in reversed(ordering.split(",")):
            column, direction, *_ = clause.split(".")
            present = [r for r in rows if r.get(column) is not None]
            missing = [r for r in rows if r.get(column) is None]
            present.sort(key=lambda r: r[column], reverse=direction == "desc")
            rows = present + missing
        return rows

    # -- transport -----------------------------------------------------------

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        table = request.url.path.rsplit("/", 1)[-1]
        if table in self.failing:
            return httpx.Response(500, json={"message": f"{table} is unavailable"})

        params = request.url.params.multi_items()
        select = next((v for k, v in params if k == "select"), "*")
        order = next((v for k, v in params if k == "order"), None)
        limit = next((int(v) for k, v in params if k == "limit"), None)
        filters = [(k, v) for k, v in params if k not in ("select", "order", "limit")]
        rows = self.tables[table]

        if request.method == "POST":
            body = json.loads(request.content)
            new_rows = body if isinstance(body, list) else [body]
            affected = []
            for row in new_rows:
                row = {"id": str(uuid.uuid4()), **row}
                rows.append(row)
                affected.append(row)
        elif request.method == "PATCH":
            values = json.loads(request.content)
            affected = [r for r in rows if self._matches(r, filters)]
            for r in affected:
                r.update(values)
        elif request.method == "DELETE":
            affected = [r for r in rows if self._matches(r, filters)]
            self.tables[table] = [r for r in rows if r not in affected]
        else:
            affected = [r for r in rows if self._matches(r, filters)]
            if order:
                affected = self._order(affected, order)
            if limit is not None:
                affected = affected[:limit]

        data = [self._project(r, parse_select(select)) for r in affected]

        headers = {}
        if "count=exact" in request.headers.get("prefer", ""):
            headers["content-range"] = f"0-{len(data) - 1}/{len(data)}" if data else "*/0"

        if request.method == "HEAD":
            return httpx.Response(200, headers=headers)
        if request.headers.get("accept") == "application/vnd.pgrst.object+json":
            if len(data) != 1:
                return httpx.Response(406, json={"message": "JSON object requested, multiple (or no) rows returned"})
            return httpx.Response(200, json=data[0], headers=headers)
        return httpx.Response(200, json=data, headers=headers)


@pytest.fixture
def fake_store():
    return FakeRestStore()


@pytest.fixture
def store_client(fake_store):
    client = StoreClient(
        url="https://example.supabase.co",
        api_key="test-key",
        transport=httpx.MockTransport(fake_store.handler),
    )
    yield client
    client.close()


@pytest.fixture
def library(store_client):
    return LibraryService(store_client)


@pytest.fixture
def seeded_store(fake_store):
    """Two games in the library (80h and 112h), three achievements, one earned."""
    fake_store.tables["profiles"].append(
        {"id": USER_ID, "username": "GamerPro123", "created_at": "2023-01-05T10:00:00+00:00"}
    )
    fake_store.tables["games"].extend(
        [
            {"id": "g1", "title": "Elden Ring", "platform": "PC", "genre": "RPG",
             "publisher": "Bandai Namco", "release_year": 2022},
            {"id": "g2", "title": "Baldur's Gate 3", "platform": "PC", "genre": "Strategy",
             "publisher": None, "release_year": None},
        ]
    )
    fake_store.tables["user_games"].extend(
        [
            {"id": "ug1", "user_id": USER_ID, "game_id": "g1", "hours_played": 80,
             "last_played": (NOW - timedelta(hours=2)).isoformat(), "status": "in_progress"},
            {"id": "ug2", "user_id": USER_ID, "game_id": "g2", "hours_played": 112,
             "last_played": (NOW - timedelta(days=3)).isoformat(), "status": "in_progress"},
            {"id": "ug3", "user_id": "someone-else", "game_id": "g1", "hours_played": 5,
             "last_played": None, "status": "not_started"},
        ]
    )
    fake_store.tables["achievements"].extend(
        [
            {"id": "a1", "game_id": "g1", "name": "Legend of the East",
             "description": "Attain 100% completion.", "xp_value": 100},
            {"id": "a2", "game_id": "g1", "name": "Speed Runner", "description": None, "xp_value": 30},
            {"id": "a3", "game_id": "g2", "name": "Master Tactician",
             "description": "Win a battle without taking any damage.", "xp_value": 50},
        ]
    )
    fake_store.tables["user_achievements"].append(
        {"id": "ua1", "user_id": USER_ID, "achievement_id": "a1",
         "achieved_at": (NOW - timedelta(days=1)).isoformat()}
    )
    return fake_store
