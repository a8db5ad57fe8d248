"""心情接口测试"""

import pytest


class TestMoodRoutes:
    async def test_create_mood(self, client, fake_telegram):
        resp = await client.post("/mood", json={"username": "bittu", "value": "7"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["mood"]["value"] == 7
        assert isinstance(data["mood"]["id"], int)
        assert "7/10" in fake_telegram.payloads("sendMessage")[0]["text"]

    @pytest.mark.parametrize(
        ("value", "message"),
        [
            (11, "value must be 0-10"),
            (6.5, "value must be a whole number"),
            ("high", "value must be a number"),
            (True, "value must be a number"),
            (None, "value required"),
        ],
    )
    async def test_invalid_value(self, client, fake_telegram, value, message):
        resp = await client.post("/mood", json={"username": "bittu", "value": value})

        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == message
        assert fake_telegram.calls == []

    async def test_list_newest_first(self, client):
        for value in (1, 2, 3):
            await client.post("/mood", json={"username": "bittu", "value": value})

        resp = await client.get("/moods")

        assert [m["value"] for m in resp.json()] == [3, 2, 1]

    async def test_latest_for_user(self, client):
        await client.post("/mood", json={"username": "bittu", "value": 4})
        await client.post("/mood", json={"username": "other", "value": 9})
        await client.post("/mood", json={"username": "bittu", "value": 6})

        resp = await client.get("/mood/latest", params={"username": "bittu"})

        assert resp.json()["value"] == 6

    async def test_latest_none(self, client):
        resp = await client.get("/mood/latest", params={"username": "nobody"})

        assert resp.status_code == 200
        assert resp.json() is None

    async def test_latest_requires_username(self, client):
        resp = await client.get("/mood/latest")

        assert resp.status_code == 400
        assert resp.json()["error"]["field"] == "username"
