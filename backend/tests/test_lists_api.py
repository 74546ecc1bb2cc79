"""
Todo API - List Endpoint Tests
==============================

What:  /api/lists endpoints against a real (SQLite) database.

What we test:
    ✅ Create returns the list with an empty task array
    ✅ GET returns only the caller's lists, oldest first, with tasks
    ✅ Rename/delete by a non-owner → 403 and nothing changes
    ✅ Delete removes the list and all of its tasks, or nothing if it fails midway
    ✅ Titles are trimmed; blank or oversized titles → 422
    ✅ Unknown ids → 404, malformed ids → 422
"""

import uuid

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession


async def _create_list(client, headers, title="Groceries"):
    response = await client.post("/api/lists", json={"title": title}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


async def _add_task(client, headers, list_id, content="milk"):
    response = await client.post(
        f"/api/lists/{list_id}/tasks", json={"content": content}, headers=headers
    )
    assert response.status_code == 200, response.text
    return response.json()


class TestCreateList:

    @pytest.mark.asyncio
    async def test_create_list_returns_empty_tasks(self, client, alice):
        body = await _create_list(client, alice, "Groceries")

        assert body["title"] == "Groceries"
        assert body["tasks"] == []
        uuid.UUID(body["id"])
        uuid.UUID(body["user_id"])
        assert "created_at" in body

    @pytest.mark.asyncio
    async def test_title_is_trimmed(self, client, alice):
        body = await _create_list(client, alice, "  Chores  ")
        assert body["title"] == "Chores"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title", ["", "   ", "x" * 201])
    async def test_invalid_title_rejected(self, client, alice, title):
        response = await client.post("/api/lists", json={"title": title}, headers=alice)

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["details"][0]["field"] == "title"

    @pytest.mark.asyncio
    async def test_missing_title_rejected(self, client, alice):
        response = await client.post("/api/lists", json={}, headers=alice)
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unsynced_user_gets_404(self, client, make_headers):
        response = await client.post(
            "/api/lists", json={"title": "Groceries"}, headers=make_headers("user_never_synced")
        )

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_requires_token(self, client):
        response = await client.post("/api/lists", json={"title": "Groceries"})

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"


class TestGetLists:

    @pytest.mark.asyncio
    async def test_empty_for_new_user(self, client, alice):
        response = await client.get("/api/lists", headers=alice)

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_only_callers_lists_oldest_first(self, client, alice, bob):
        first = await _create_list(client, alice, "Groceries")
        second = await _create_list(client, alice, "Chores")
        bobs = await _create_list(client, bob, "Bob's list")

        alice_lists = (await client.get("/api/lists", headers=alice)).json()
        bob_lists = (await client.get("/api/lists", headers=bob)).json()

        assert [l["id"] for l in alice_lists] == [first["id"], second["id"]]
        assert [l["id"] for l in bob_lists] == [bobs["id"]]

    @pytest.mark.asyncio
    async def test_lists_include_tasks_in_creation_order(self, client, alice):
        todo_list = await _create_list(client, alice)
        await _add_task(client, alice, todo_list["id"], "milk")
        await _add_task(client, alice, todo_list["id"], "eggs")

        lists = (await client.get("/api/lists", headers=alice)).json()

        assert [t["content"] for t in lists[0]["tasks"]] == ["milk", "eggs"]
        assert all(t["list_id"] == todo_list["id"] for t in lists[0]["tasks"])


class TestRenameList:

    @pytest.mark.asyncio
    async def test_rename(self, client, alice):
        todo_list = await _create_list(client, alice)
        await _add_task(client, alice, todo_list["id"], "milk")

        response = await client.put(
            f"/api/lists/{todo_list['id']}", json={"title": "Weekend"}, headers=alice
        )

        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Weekend"
        assert body["id"] == todo_list["id"]
        assert [t["content"] for t in body["tasks"]] == ["milk"]

    @pytest.mark.asyncio
    async def test_non_owner_gets_403_and_title_unchanged(self, client, alice, bob):
        todo_list = await _create_list(client, alice, "Groceries")

        response = await client.put(
            f"/api/lists/{todo_list['id']}", json={"title": "Hijacked"}, headers=bob
        )

        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"
        lists = (await client.get("/api/lists", headers=alice)).json()
        assert lists[0]["title"] == "Groceries"

    @pytest.mark.asyncio
    async def test_unknown_list_404(self, client, alice):
        response = await client.put(
            f"/api/lists/{uuid.uuid4()}", json={"title": "Nope"}, headers=alice
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_malformed_id_422(self, client, alice):
        response = await client.put(
            "/api/lists/not-a-uuid", json={"title": "Nope"}, headers=alice
        )

        assert response.status_code == 422
        assert response.json()["details"][0]["field"] == "path.list_id"


class TestDeleteList:

    @pytest.mark.asyncio
    async def test_delete_removes_list_and_tasks(self, client, alice):
        todo_list = await _create_list(client, alice)
        task = await _add_task(client, alice, todo_list["id"], "milk")

        response = await client.delete(f"/api/lists/{todo_list['id']}", headers=alice)

        assert response.status_code == 204
        assert response.content == b""
        assert (await client.get("/api/lists", headers=alice)).json() == []
        # The task went with its list
        orphan = await client.put(
            f"/api/tasks/{task['id']}", json={"completed": True}, headers=alice
        )
        assert orphan.status_code == 404

    @pytest.mark.asyncio
    async def test_non_owner_gets_403_and_list_survives(self, client, alice, bob):
        todo_list = await _create_list(client, alice)
        await _add_task(client, alice, todo_list["id"], "milk")

        response = await client.delete(f"/api/lists/{todo_list['id']}", headers=bob)

        assert response.status_code == 403
        lists = (await client.get("/api/lists", headers=alice)).json()
        assert len(lists) == 1
        assert len(lists[0]["tasks"]) == 1

    @pytest.mark.asyncio
    async def test_unknown_list_404(self, client, alice):
        response = await client.delete(f"/api/lists/{uuid.uuid4()}", headers=alice)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_failed_list_delete_keeps_tasks(self, client, alice, monkeypatch):
        todo_list = await _create_list(client, alice, "Groceries")
        await _add_task(client, alice, todo_list["id"], "milk")
        await _add_task(client, alice, todo_list["id"], "eggs")

        original_execute = AsyncSession.execute

        async def execute(self, statement, *args, **kwargs):
            # The tasks DELETE has already run when the list DELETE fails
            if str(statement).startswith("DELETE FROM todo_lists"):
                raise OperationalError(str(statement), {}, Exception("disk I/O error"))
            return await original_execute(self, statement, *args, **kwargs)

        monkeypatch.setattr(AsyncSession, "execute", execute)

        response = await client.delete(f"/api/lists/{todo_list['id']}", headers=alice)

        assert response.status_code == 500
        assert response.json()["error"] == "server_error"

        [survivor] = (await client.get("/api/lists", headers=alice)).json()
        assert survivor["id"] == todo_list["id"]
        assert [t["content"] for t in survivor["tasks"]] == ["milk", "eggs"]


class TestGroceriesScenario:

    @pytest.mark.asyncio
    async def test_create_add_toggle_delete(self, client, alice):
        todo_list = await _create_list(client, alice, "Groceries")
        task = await _add_task(client, alice, todo_list["id"], "milk")

        lists = (await client.get("/api/lists", headers=alice)).json()
        assert len(lists) == 1
        assert lists[0]["title"] == "Groceries"
        assert [(t["content"], t["completed"]) for t in lists[0]["tasks"]] == [("milk", False)]

        toggled = await client.put(
            f"/api/tasks/{task['id']}", json={"completed": True}, headers=alice
        )
        assert toggled.status_code == 200
        assert toggled.json()["completed"] is True
        assert toggled.json()["content"] == "milk"

        deleted = await client.delete(f"/api/lists/{todo_list['id']}", headers=alice)
        assert deleted.status_code == 204
        assert (await client.get("/api/lists", headers=alice)).json() == []
