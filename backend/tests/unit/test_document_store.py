"""
Unit tests for the SQL-backed document store.
"""
import pytest

from app.services.document_store import ASCENDING, DESCENDING
from app.utils.exceptions import NotFoundError

SITES = "users/u1/sites"


class TestGetSet:
    """Test reads and writes of single records."""

    @pytest.mark.asyncio
    async def test_get_missing_record(self, store):
        with pytest.raises(NotFoundError) as exc_info:
            await store.get(SITES, "nope")
        assert exc_info.value.identifier == f"{SITES}/nope"

    @pytest.mark.asyncio
    async def test_set_then_get(self, store):
        await store.set(SITES, "a", {"title": "A", "meta": {"seoTitle": "T"}})

        assert await store.get(SITES, "a") == {"title": "A", "meta": {"seoTitle": "T"}}

    @pytest.mark.asyncio
    async def test_set_without_merge_replaces(self, store):
        await store.set(SITES, "a", {"title": "A", "status": "draft"})
        await store.set(SITES, "a", {"title": "B"})

        assert await store.get(SITES, "a") == {"title": "B"}

    @pytest.mark.asyncio
    async def test_merge_keeps_unwritten_fields(self, store):
        await store.set(SITES, "a", {"title": "A", "status": "published", "createdAt": "2024"})
        await store.set(SITES, "a", {"status": "draft"}, merge=True)

        assert await store.get(SITES, "a") == {"title": "A", "status": "draft", "createdAt": "2024"}

    @pytest.mark.asyncio
    async def test_merge_is_deep_for_nested_maps(self, store):
        await store.set(SITES, "a", {"meta": {"seoTitle": "T", "seoDescription": "D"}})
        await store.set(SITES, "a", {"meta": {"seoTitle": "T2"}}, merge=True)

        assert (await store.get(SITES, "a"))["meta"] == {"seoTitle": "T2", "seoDescription": "D"}

    @pytest.mark.asyncio
    async def test_merge_creates_missing_record(self, store):
        await store.set(SITES, "new", {"title": "N"}, merge=True)

        assert await store.get(SITES, "new") == {"title": "N"}

    @pytest.mark.asyncio
    async def test_same_id_in_different_collections(self, store):
        await store.set("users/u1/sites", "x", {"owner": "u1"})
        await store.set("users/u2/sites", "x", {"owner": "u2"})

        assert (await store.get("users/u1/sites", "x"))["owner"] == "u1"
        assert (await store.get("users/u2/sites", "x"))["owner"] == "u2"

    @pytest.mark.asyncio
    async def test_returned_dict_is_a_copy(self, store):
        await store.set(SITES, "a", {"title": "A"})
        data = await store.get(SITES, "a")
        data["title"] = "mutated"

        assert (await store.get(SITES, "a"))["title"] == "A"


class TestDelete:
    """Test record deletion."""

    @pytest.mark.asyncio
    async def test_delete_existing(self, store):
        await store.set(SITES, "a", {"title": "A"})
        await store.delete(SITES, "a")

        with pytest.raises(NotFoundError):
            await store.get(SITES, "a")

    @pytest.mark.asyncio
    async def test_delete_missing_is_not_an_error(self, store):
        await store.delete(SITES, "never-existed")
        await store.delete(SITES, "never-existed")


class TestList:
    """Test ordered listing."""

    @pytest.mark.asyncio
    async def test_list_descending(self, store):
        await store.set(SITES, "a", {"id": "a", "updatedAt": "2024-01-01T00:00:00.000000+00:00"})
        await store.set(SITES, "b", {"id": "b", "updatedAt": "2024-03-01T00:00:00.000000+00:00"})
        await store.set(SITES, "c", {"id": "c", "updatedAt": "2024-02-01T00:00:00.000000+00:00"})

        records = await store.list(SITES, order_by="updatedAt", direction=DESCENDING)

        assert [r["id"] for r in records] == ["b", "c", "a"]

    @pytest.mark.asyncio
    async def test_list_ascending(self, store):
        await store.set(SITES, "a", {"id": "a", "rank": 3})
        await store.set(SITES, "b", {"id": "b", "rank": 1})
        await store.set(SITES, "c", {"id": "c", "rank": 2})

        records = await store.list(SITES, order_by="rank", direction=ASCENDING)

        assert [r["id"] for r in records] == ["b", "c", "a"]

    @pytest.mark.asyncio
    async def test_records_without_sort_field_come_last(self, store):
        await store.set(SITES, "a", {"id": "a"})
        await store.set(SITES, "b", {"id": "b", "rank": 1})

        for direction in (ASCENDING, DESCENDING):
            records = await store.list(SITES, order_by="rank", direction=direction)
            assert [r["id"] for r in records] == ["b", "a"]

    @pytest.mark.asyncio
    async def test_list_only_returns_the_collection(self, store):
        await store.set(SITES, "a", {"id": "a"})
        await store.set("users/u2/sites", "b", {"id": "b"})
        await store.set("publicSites", "a", {"id": "a"})

        records = await store.list(SITES)

        assert records == [{"id": "a"}]

    @pytest.mark.asyncio
    async def test_list_empty_collection(self, store):
        assert await store.list(SITES, order_by="updatedAt") == []

    @pytest.mark.asyncio
    async def test_invalid_direction(self, store):
        with pytest.raises(ValueError):
            await store.list(SITES, order_by="updatedAt", direction="sideways")
