"""Tests for dal.case_dal."""

import json

import pytest

from dal.case_dal import CaseDAL
from dal.kv_store import CASES_KEY, InMemoryKeyValueStore
from models.errors import CaseNotFound


class TestCaseDAL:
    @pytest.mark.asyncio
    async def test_empty(self, case_dal):
        assert await case_dal.list_all() == []

    @pytest.mark.asyncio
    async def test_upsert_prepends(self, case_dal, make_case):
        await case_dal.upsert(make_case("c1"))
        await case_dal.upsert(make_case("c2"))
        assert [c.case_id for c in await case_dal.list_all()] == ["c2", "c1"]

    @pytest.mark.asyncio
    async def test_upsert_same_id_replaces_once(self, case_dal, make_case):
        await case_dal.upsert(make_case("c1", summary="first"))
        await case_dal.upsert(make_case("c2"))
        await case_dal.upsert(make_case("c1", summary="second"))

        cases = await case_dal.list_all()
        assert [c.case_id for c in cases].count("c1") == 1
        assert len(cases) == 2
        assert (await case_dal.get("c1")).doctor_dashboard.summary == "second"

    @pytest.mark.asyncio
    async def test_list_sorted_by_timestamp_desc_missing_last(self, case_dal, make_case):
        await case_dal.upsert(make_case("old", timestamp="2024-01-01T10:00:00.000Z"))
        await case_dal.upsert(make_case("none"))
        await case_dal.upsert(make_case("new", timestamp="2024-06-01T10:00:00.000Z"))
        await case_dal.upsert(make_case("mid", timestamp="2024-03-01T10:00:00+00:00"))

        assert [c.case_id for c in await case_dal.list_all()] == ["new", "mid", "old", "none"]

    @pytest.mark.asyncio
    async def test_update_in_place(self, case_dal, make_case):
        await case_dal.upsert(make_case("c1", timestamp="2024-01-01T00:00:00Z"))
        changed = make_case("c1", timestamp="2024-01-01T00:00:00Z", summary="edited")
        assert await case_dal.update(changed) is True
        assert (await case_dal.get("c1")).doctor_dashboard.summary == "edited"

    @pytest.mark.asyncio
    async def test_update_unknown_is_noop(self, case_dal, make_case, store):
        await case_dal.upsert(make_case("c1"))
        before = await store.get_item(CASES_KEY)
        assert await case_dal.update(make_case("ghost")) is False
        assert await store.get_item(CASES_KEY) == before

    @pytest.mark.asyncio
    async def test_double_toggle_restores_state(self, case_dal, make_case):
        original = make_case("c1", timestamp="2024-01-01T00:00:00Z")
        await case_dal.upsert(original)

        first = await case_dal.toggle_flag("c1")
        assert first.isManuallyFlagged is True
        await case_dal.toggle_flag("c1")

        assert await case_dal.get("c1") == original

    @pytest.mark.asyncio
    async def test_toggle_unknown(self, case_dal):
        with pytest.raises(CaseNotFound):
            await case_dal.toggle_flag("ghost")

    @pytest.mark.asyncio
    async def test_list_for_user(self, case_dal, make_case):
        await case_dal.upsert(make_case("c1", user_email="a@x.com"))
        await case_dal.upsert(make_case("c2", user_email="b@x.com"))
        assert [c.case_id for c in await case_dal.list_for_user("A@X.com")] == ["c1"]

    @pytest.mark.asyncio
    async def test_corrupt_store_reads_empty(self):
        dal = CaseDAL(InMemoryKeyValueStore({CASES_KEY: "]]"}))
        assert await dal.list_all() == []

    @pytest.mark.asyncio
    async def test_invalid_entries_skipped(self, make_case):
        good = make_case("good").model_dump(exclude_none=True)
        dal = CaseDAL(InMemoryKeyValueStore({CASES_KEY: json.dumps([{"junk": True}, good])}))
        assert [c.case_id for c in await dal.list_all()] == ["good"]

    @pytest.mark.asyncio
    async def test_stored_as_camel_case_json(self, case_dal, make_case, store):
        await case_dal.upsert(make_case("c1", timestamp="2024-01-01T00:00:00Z", flagged=True))
        stored = json.loads(await store.get_item(CASES_KEY))
        assert stored[0]["isManuallyFlagged"] is True
        assert stored[0]["doctor_dashboard"]["case_id"] == "c1"

    @pytest.mark.asyncio
    async def test_upsert_keeps_unreadable_entries(self, case_dal, make_case, store):
        unreadable = dict(make_case("old").model_dump(exclude_none=True), isManuallyFlagged=None)
        await store.write_json(CASES_KEY, [unreadable])

        await case_dal.upsert(make_case("new"))

        stored = await store.read_json(CASES_KEY, [])
        assert [item["doctor_dashboard"]["case_id"] for item in stored] == ["new", "old"]
        assert stored[1] == unreadable
        assert [c.case_id for c in await case_dal.list_all()] == ["new"]

    @pytest.mark.asyncio
    async def test_update_keeps_unreadable_entries(self, case_dal, make_case, store):
        unreadable = {"doctor_dashboard": {"case_id": "broken"}}
        await store.write_json(CASES_KEY, [make_case("c1").model_dump(exclude_none=True), unreadable])

        await case_dal.toggle_flag("c1")

        stored = await store.read_json(CASES_KEY, [])
        assert stored[0]["isManuallyFlagged"] is True
        assert stored[1] == unreadable
