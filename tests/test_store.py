import asyncio

import pytest

from gina.services.store import RecordStore


@pytest.mark.asyncio
async def test_unknown_user_has_no_records(store):
    assert await store.get_intake("nobody") is None
    assert await store.get_facts("nobody") is None
    assert await store.get_latest_conversation("nobody") is None
    assert await store.get_latest_history("nobody") is None


@pytest.mark.asyncio
async def test_intake_upsert_keeps_fields_missing_from_update(store, user_id):
    await store.upsert_intake(user_id, {"full_name": "Sam", "age": 29, "goals": "sleep"})
    updated = await store.upsert_intake(user_id, {"goals": "run a 5k", "age": None})

    assert updated["full_name"] == "Sam"
    assert updated["age"] == 29
    assert updated["goals"] == "run a 5k"
    assert (await store.get_intake(user_id))["goals"] == "run a 5k"


@pytest.mark.asyncio
async def test_merge_facts_is_shallow(store, user_id):
    await store.replace_facts(user_id, {"pet": "dog", "support": ["sister"]})

    merged = await store.merge_facts(user_id, {"pet": "cat", "city": "Leeds"})

    assert merged == {"pet": "cat", "support": ["sister"], "city": "Leeds"}


@pytest.mark.asyncio
async def test_concurrent_merges_keep_every_key(store, user_id):
    await asyncio.gather(*[
        store.merge_facts(user_id, {f"key{i}": i}) for i in range(8)
    ])

    facts = await store.get_facts(user_id)
    assert facts == {f"key{i}": i for i in range(8)}


@pytest.mark.asyncio
async def test_replace_facts_overwrites(store, user_id):
    await store.replace_facts(user_id, {"pet": "dog"})
    await store.replace_facts(user_id, {"city": "Leeds"})

    assert await store.get_facts(user_id) == {"city": "Leeds"}


@pytest.mark.asyncio
async def test_history_is_replaced_in_place(store, user_id, session_factory):
    await store.replace_history(user_id, [{"role": "user", "content": "one"}])
    await store.replace_history(user_id, [
        {"role": "user", "content": "one"},
        {"role": "assistant", "content": "two"},
    ])

    convo = await store.get_latest_conversation(user_id)
    assert [t["content"] for t in convo["history"]] == ["one", "two"]
    assert convo["updated_at"] is not None


@pytest.mark.asyncio
async def test_clear_history(store, user_id):
    await store.replace_history(user_id, [{"role": "user", "content": "one"}])

    await store.clear_history(user_id)

    assert await store.get_latest_history(user_id) is None


@pytest.mark.asyncio
async def test_records_are_per_user(session_factory, user_id):
    from gina.models import User

    async with session_factory() as db:
        other = User(email="alex@example.com", password_hash="x")
        db.add(other)
        await db.commit()
        other_id = other.id

    store = RecordStore(session_factory)
    await store.merge_facts(user_id, {"pet": "cat"})
    await store.merge_facts(other_id, {"pet": "dog"})

    assert (await store.get_facts(user_id))["pet"] == "cat"
    assert (await store.get_facts(other_id))["pet"] == "dog"


@pytest.mark.asyncio
async def test_sequential_merges_accumulate(store, user_id):
    await store.merge_facts(user_id, {"a": 1})
    await store.merge_facts(user_id, {"b": 2})

    assert await store.get_facts(user_id) == {"a": 1, "b": 2}
