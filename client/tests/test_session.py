"""
Todo Client - Session Controller Tests
======================================

Runs TodoSession against the in-memory FakeBackend.

What we test:
    ✅ sign_in loads lists; failure surfaces the error with an empty mirror
    ✅ Success paths patch the mirror and post a notice
    ✅ Failures leave the mirror unchanged and revert drafts
    ✅ Blank / unchanged input makes no request
    ✅ A second submission while one is in flight is ignored
"""

import asyncio
import json

import pytest
import pytest_asyncio

from todo_client.session import ERROR, SUCCESS, Notice


@pytest_asyncio.fixture
async def signed_in(session, backend):
    backend.seed_list("Groceries", (("milk", False), ("eggs", True)))
    assert await session.sign_in()
    return session


def _groceries(session):
    [todo_list] = [l for l in session.store.state.lists if l.title == "Groceries"]
    return todo_list


class TestSignIn:

    @pytest.mark.asyncio
    async def test_loads_lists(self, signed_in, backend):
        state = signed_in.store.state

        assert state.loaded is True
        assert [t.content for t in _groceries(signed_in).tasks] == ["milk", "eggs"]
        assert [r.url.path for r in backend.requests] == ["/api/sync-user", "/api/lists"]

    @pytest.mark.asyncio
    async def test_failure_shows_error_and_empty_mirror(self, session, backend):
        backend.fail_next(500, "An internal error occurred")

        assert await session.sign_in() is False

        state = session.store.state
        assert state.loaded is True
        assert state.lists == ()
        assert state.error == "An internal error occurred"
        assert session.notices == [Notice(ERROR, "An internal error occurred")]


class TestLists:

    @pytest.mark.asyncio
    async def test_create_list_prepends(self, signed_in):
        created = await signed_in.create_list("  Chores ")

        assert created.title == "Chores"
        assert [l.title for l in signed_in.store.state.lists] == ["Chores", "Groceries"]
        assert signed_in.notices[-1] == Notice(SUCCESS, "List created")

    @pytest.mark.asyncio
    async def test_blank_title_makes_no_request(self, signed_in, backend):
        before = len(backend.requests)

        assert await signed_in.create_list("   ") is None

        assert len(backend.requests) == before

    @pytest.mark.asyncio
    async def test_create_failure_leaves_mirror(self, signed_in, backend):
        before = signed_in.store.state.lists
        backend.fail_next(422, "Request validation failed")

        assert await signed_in.create_list("x") is None

        assert signed_in.store.state.lists == before
        assert signed_in.store.state.error == "Request validation failed"

    @pytest.mark.asyncio
    async def test_rename(self, signed_in):
        groceries = _groceries(signed_in)

        title = await signed_in.rename_list(groceries.id, " Weekend ")

        assert title == "Weekend"
        assert signed_in.store.state.lists[0].title == "Weekend"
        assert [t.content for t in signed_in.store.state.lists[0].tasks] == ["milk", "eggs"]

    @pytest.mark.asyncio
    async def test_rename_failure_reverts_draft(self, signed_in, backend):
        groceries = _groceries(signed_in)
        backend.fail_next(403, "You do not have access to this list")

        title = await signed_in.rename_list(groceries.id, "Weekend")

        assert title == "Groceries"
        assert _groceries(signed_in) == groceries
        assert signed_in.notices[-1].level == ERROR

    @pytest.mark.asyncio
    @pytest.mark.parametrize("draft", ["", "   ", "Groceries", " Groceries "])
    async def test_rename_noop_drafts(self, signed_in, backend, draft):
        before = len(backend.requests)

        assert await signed_in.rename_list(_groceries(signed_in).id, draft) == "Groceries"

        assert len(backend.requests) == before

    @pytest.mark.asyncio
    async def test_delete_list(self, signed_in):
        assert await signed_in.delete_list(_groceries(signed_in).id)

        assert signed_in.store.state.lists == ()
        assert signed_in.notices[-1] == Notice(SUCCESS, "List deleted")

    @pytest.mark.asyncio
    async def test_unknown_list_is_a_key_error(self, signed_in):
        with pytest.raises(KeyError):
            await signed_in.delete_list("no-such-list")


class TestTasks:

    @pytest.mark.asyncio
    async def test_add_task_appends(self, signed_in):
        groceries = _groceries(signed_in)

        task = await signed_in.add_task(groceries.id, " bread ")

        assert task.content == "bread"
        assert task.completed is False
        assert [t.content for t in _groceries(signed_in).tasks] == ["milk", "eggs", "bread"]
        assert signed_in.notices[-1] == Notice(SUCCESS, "Task added")

    @pytest.mark.asyncio
    async def test_toggle(self, signed_in, backend):
        milk = _groceries(signed_in).tasks[0]

        updated = await signed_in.toggle_task(milk.list_id, milk.id)

        assert updated.completed is True
        assert _groceries(signed_in).tasks[0].completed is True
        assert json.loads(backend.requests[-1].content) == {"completed": True}

    @pytest.mark.asyncio
    async def test_toggle_failure_leaves_task(self, signed_in, backend):
        milk = _groceries(signed_in).tasks[0]
        backend.fail_next(500, "An internal error occurred. Please try again later.")

        assert await signed_in.toggle_task(milk.list_id, milk.id) is None

        assert _groceries(signed_in).tasks[0] == milk

    @pytest.mark.asyncio
    async def test_edit_task(self, signed_in):
        milk = _groceries(signed_in).tasks[0]

        content = await signed_in.edit_task(milk.list_id, milk.id, "oat milk")

        assert content == "oat milk"
        edited = _groceries(signed_in).tasks[0]
        assert (edited.content, edited.completed) == ("oat milk", False)

    @pytest.mark.asyncio
    async def test_edit_failure_reverts_draft(self, signed_in, backend):
        milk = _groceries(signed_in).tasks[0]
        backend.fail_next(404, "task was not found")

        assert await signed_in.edit_task(milk.list_id, milk.id, "oat milk") == "milk"
        assert _groceries(signed_in).tasks[0].content == "milk"
        assert signed_in.store.state.error == "task was not found"

    @pytest.mark.asyncio
    async def test_edit_blank_draft_is_noop(self, signed_in, backend):
        milk = _groceries(signed_in).tasks[0]
        before = len(backend.requests)

        assert await signed_in.edit_task(milk.list_id, milk.id, "  ") == "milk"
        assert len(backend.requests) == before

    @pytest.mark.asyncio
    async def test_delete_task(self, signed_in):
        milk = _groceries(signed_in).tasks[0]

        assert await signed_in.delete_task(milk.list_id, milk.id)

        assert [t.content for t in _groceries(signed_in).tasks] == ["eggs"]

    @pytest.mark.asyncio
    async def test_second_add_while_in_flight_is_ignored(self, signed_in, backend):
        groceries = _groceries(signed_in)
        backend.latency = 0.01

        first, second = await asyncio.gather(
            signed_in.add_task(groceries.id, "bread"),
            signed_in.add_task(groceries.id, "bread"),
        )

        assert first is not None
        assert second is None
        assert [t.content for t in _groceries(signed_in).tasks] == ["milk", "eggs", "bread"]
        assert not signed_in.is_in_flight("add_task", groceries.id)


class TestSignOut:

    @pytest.mark.asyncio
    async def test_sign_out_clears_everything(self, signed_in):
        signed_in.sign_out()

        assert signed_in.store.state.lists == ()
        assert signed_in.store.state.loaded is False
        assert signed_in.notices == []
