"""
End-to-end tests through the HTTP API.
"""

import asyncio
import logging
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from auth.dependencies import get_currency_converter
from core.exceptions import ConversionFailedError
from main import app

COFFEE = {
    "description": "Coffee",
    "category": "Food",
    "value": 10,
    "currency": "BRL",
    "date": "2024-05-01T09:30:00",
}


async def _register_and_login(client, username: str, password: str = "secret-pw") -> dict:
    resp = await client.post("/api/auth/register", json={"username": username, "password": password})
    assert resp.status_code == 200
    resp = await client.post("/api/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200
    return resp.json()


def _bearer(tokens: dict) -> dict:
    return {"Authorization": f"Bearer {tokens['accessToken']}"}


class TestSystem:
    @pytest.mark.asyncio
    async def test_healthcheck(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_healthcheck_is_timed_but_not_logged(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="api.middleware"):
            health = await client.get("/health")
            await client.post("/api/auth/login", json={"username": "nobody", "password": "x"})

        assert "X-Process-Time" in health.headers
        access_lines = [r.getMessage() for r in caplog.records if r.name == "api.middleware"]
        assert len(access_lines) == 1
        assert access_lines[0].startswith("POST /api/auth/login -> 401")


class TestAuthApi:
    @pytest.mark.asyncio
    async def test_register_twice_is_bad_request(self, client):
        body = {"username": "alice", "password": "secret-pw"}
        first = await client.post("/api/auth/register", json=body)
        second = await client.post("/api/auth/register", json=body)

        assert first.status_code == 200
        assert first.json()["success"] is True
        assert second.status_code == 400
        assert second.json()["success"] is False

    @pytest.mark.asyncio
    async def test_login_returns_tokens(self, client):
        tokens = await _register_and_login(client, "alice")
        assert tokens["accessToken"]
        assert tokens["refreshToken"]

    @pytest.mark.asyncio
    async def test_bad_credentials_are_unauthorized(self, client):
        await _register_and_login(client, "alice")
        wrong = await client.post("/api/auth/login", json={"username": "alice", "password": "nope"})
        unknown = await client.post("/api/auth/login", json={"username": "bob", "password": "nope"})

        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json() == unknown.json()

    @pytest.mark.asyncio
    async def test_refresh_rotates_and_rejects_replay(self, client):
        tokens = await _register_and_login(client, "alice")

        rotated = await client.post("/api/auth/refresh", json=tokens["refreshToken"])
        assert rotated.status_code == 200
        assert rotated.json()["refreshToken"] != tokens["refreshToken"]

        replay = await client.post("/api/auth/refresh", json=tokens["refreshToken"])
        assert replay.status_code == 401

        resp = await client.get("/api/expense/1", headers=_bearer(rotated.json()))
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_refresh_with_unknown_token_is_unauthorized(self, client):
        resp = await client.post("/api/auth/refresh", json="not-a-real-token")
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_missing_fields_are_bad_request(self, client):
        resp = await client.post("/api/auth/register", json={"username": "alice"})
        assert resp.status_code == 400
        assert "password" in resp.json()["message"]

    @pytest.mark.asyncio
    async def test_single_character_username_and_short_password(self, client):
        resp = await client.post("/api/auth/register", json={"username": "a", "password": "abc"})
        assert resp.status_code == 200

        login = await client.post("/api/auth/login", json={"username": "a", "password": "abc"})
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_username_longer_than_column_is_bad_request(self, client):
        resp = await client.post("/api/auth/register", json={"username": "u" * 65, "password": "abc"})
        assert resp.status_code == 400
        assert "username" in resp.json()["message"]

    @pytest.mark.asyncio
    async def test_simultaneous_registrations_of_one_name(self, concurrent_client):
        body = {"username": "alice", "password": "secret-pw"}
        responses = await asyncio.gather(
            concurrent_client.post("/api/auth/register", json=body),
            concurrent_client.post("/api/auth/register", json=body),
        )

        assert sorted(r.status_code for r in responses) == [200, 400]
        loser = next(r for r in responses if r.status_code == 400)
        assert loser.json() == {"success": False, "message": "Username already exists", "data": None}

    @pytest.mark.asyncio
    async def test_simultaneous_refreshes_rotate_once(self, concurrent_client):
        tokens = await _register_and_login(concurrent_client, "alice")

        responses = await asyncio.gather(
            *(concurrent_client.post("/api/auth/refresh", json=tokens["refreshToken"]) for _ in range(4))
        )

        statuses = [r.status_code for r in responses]
        assert statuses.count(200) == 1
        assert statuses.count(401) == 3


class TestExpenseApi:
    @pytest.mark.asyncio
    async def test_expense_routes_require_token(self, client):
        assert (await client.get("/api/expense")).status_code == 401
        resp = await client.get("/api/expense", headers={"Authorization": "Bearer garbage"})
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_create_then_filter_case_insensitively(self, client):
        user1 = _bearer(await _register_and_login(client, "user1"))
        user2 = _bearer(await _register_and_login(client, "user2"))

        created = await client.post("/api/expense", json=COFFEE, headers=user1)
        assert created.status_code == 201
        expense = created.json()
        assert created.headers["location"].endswith(f"/api/expense/{expense['id']}")
        assert expense["description"] == "Coffee"
        assert expense["value"] == 10
        assert "userId" in expense

        mine = await client.get("/api/expense", params={"category": "food"}, headers=user1)
        assert mine.status_code == 200
        assert [e["id"] for e in mine.json()] == [expense["id"]]

        theirs = await client.get("/api/expense", params={"category": "food"}, headers=user2)
        assert theirs.status_code == 404
        assert theirs.json()["success"] is False

    @pytest.mark.asyncio
    async def test_list_sorting_and_date_range(self, client):
        headers = _bearer(await _register_and_login(client, "alice"))
        for description, value, date in [
            ("A", 30, "2024-05-01T00:00:00"),
            ("B", 10, "2024-05-02T00:00:00"),
            ("C", 20, "2024-05-03T00:00:00"),
        ]:
            body = dict(COFFEE, description=description, value=value, date=date)
            assert (await client.post("/api/expense", json=body, headers=headers)).status_code == 201

        resp = await client.get(
            "/api/expense",
            params={"sortBy": "value", "order": "desc", "startDate": "2024-05-02T00:00:00"},
            headers=headers,
        )
        assert resp.status_code == 200
        assert [e["description"] for e in resp.json()] == ["C", "B"]

    @pytest.mark.asyncio
    async def test_get_by_id_uses_envelope(self, client):
        headers = _bearer(await _register_and_login(client, "alice"))
        expense_id = (await client.post("/api/expense", json=COFFEE, headers=headers)).json()["id"]

        resp = await client.get(f"/api/expense/{expense_id}", headers=headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["data"]["description"] == "Coffee"

    @pytest.mark.asyncio
    async def test_other_users_expense_is_not_found(self, client):
        owner = _bearer(await _register_and_login(client, "owner"))
        intruder = _bearer(await _register_and_login(client, "intruder"))
        expense_id = (await client.post("/api/expense", json=COFFEE, headers=owner)).json()["id"]

        assert (await client.get(f"/api/expense/{expense_id}", headers=intruder)).status_code == 404
        updated = await client.put(f"/api/expense/{expense_id}", json=COFFEE, headers=intruder)
        assert updated.status_code == 404
        assert (await client.delete(f"/api/expense/{expense_id}", headers=intruder)).status_code == 404
        assert (await client.get(f"/api/expense/{expense_id}", headers=owner)).status_code == 200

    @pytest.mark.asyncio
    async def test_update_and_delete_own_expense(self, client):
        headers = _bearer(await _register_and_login(client, "alice"))
        expense_id = (await client.post("/api/expense", json=COFFEE, headers=headers)).json()["id"]

        updated = await client.put(
            f"/api/expense/{expense_id}",
            json=dict(COFFEE, description="Espresso", currency="USD"),
            headers=headers,
        )
        assert updated.status_code == 200
        assert updated.json()["description"] == "Espresso"
        assert updated.json()["currency"] == "USD"

        deleted = await client.delete(f"/api/expense/{expense_id}", headers=headers)
        assert deleted.status_code == 204
        assert (await client.delete(f"/api/expense/{expense_id}", headers=headers)).status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "override",
        [{"value": 0}, {"value": -5}, {"currency": "EURO"}, {"description": None}, {"date": "yesterday"}],
    )
    async def test_invalid_expense_is_bad_request(self, client, override):
        headers = _bearer(await _register_and_login(client, "alice"))
        resp = await client.post("/api/expense", json=dict(COFFEE, **override), headers=headers)
        assert resp.status_code == 400
        assert resp.json()["success"] is False


class TestConvertApi:
    @pytest.mark.asyncio
    async def test_convert_returns_envelope(self, client):
        headers = _bearer(await _register_and_login(client, "alice"))
        converter = AsyncMock()
        converter.convert = AsyncMock(return_value=Decimal("52.5"))
        app.dependency_overrides[get_currency_converter] = lambda: converter

        resp = await client.get(
            "/api/expense/convert", params={"from": "EUR", "to": "BRL", "amount": "10"}, headers=headers
        )

        assert resp.status_code == 200
        assert resp.json() == {"success": True, "data": 52.5, "message": None}

    @pytest.mark.asyncio
    async def test_conversion_failure_is_bad_request(self, client):
        headers = _bearer(await _register_and_login(client, "alice"))
        converter = AsyncMock()
        converter.convert = AsyncMock(side_effect=ConversionFailedError())
        app.dependency_overrides[get_currency_converter] = lambda: converter

        resp = await client.get(
            "/api/expense/convert", params={"from": "EUR", "to": "BRL", "amount": "10"}, headers=headers
        )

        assert resp.status_code == 400
        assert resp.json()["success"] is False
