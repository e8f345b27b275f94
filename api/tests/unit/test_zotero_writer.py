"""
Tests unitarios para ZoteroWriter (particion de respuestas y colecciones).
"""
from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest

from app.application.services.collection_catalog import PARENT_COLLECTIONS
from app.domain.entities.video import CollectionParent, PreparedItem
from app.infrastructure.external.zotero.zotero_client import ZoteroApiError
from app.infrastructure.external.zotero.zotero_writer import ZoteroWriter
from app.shared.exceptions.domain import UnknownCollectionParentException, ValidationException


def _items(n: int):
    return [PreparedItem(record_id=f"rec{i:014d}", payload={"title": f"Video {i}"}) for i in range(n)]


def _zotero_response(n: int, failed: set, unchanged: set = frozenset()) -> dict:
    """Respuesta estilo Zotero indexada por posicion."""
    successful, failed_map, unchanged_map = {}, {}, {}
    for i in range(n):
        if i in failed:
            failed_map[str(i)] = {"key": "", "code": 412, "message": "Item has been modified since specified version"}
        elif i in unchanged:
            unchanged_map[str(i)] = f"KEY{i:05d}"
        else:
            successful[str(i)] = {
                "key": f"KEY{i:05d}",
                "version": 100 + i,
                "data": {"key": f"KEY{i:05d}", "version": 100 + i, "title": f"Video {i}"},
            }
    return {
        "successful": successful,
        "success": {k: v["key"] for k, v in successful.items()},
        "unchanged": unchanged_map,
        "failed": failed_map,
    }


@pytest.fixture
def client() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def writer(client, tmp_path) -> ZoteroWriter:
    return ZoteroWriter(
        client,
        parent_collections=PARENT_COLLECTIONS,
        failed_items_path=tmp_path / "failed.json",
    )


class TestWriteItems:

    @pytest.mark.asyncio
    async def test_partition_maps_positions_to_record_ids(self, writer, client) -> None:
        items = _items(6)
        client.post_items = AsyncMock(return_value=_zotero_response(6, failed={1, 4}, unchanged={2}))

        result = await writer.write_items(items)

        assert [w.record_id for w in result.successful] == [items[0].record_id, items[3].record_id, items[5].record_id]
        assert [(w.key, w.version) for w in result.successful] == [("KEY00000", 100), ("KEY00003", 103), ("KEY00005", 105)]
        assert result.unchanged == [items[2].record_id]
        assert [f.record_id for f in result.failed] == [items[1].record_id, items[4].record_id]
        client.post_items.assert_awaited_once_with([item.payload for item in items])

    @pytest.mark.asyncio
    async def test_failed_items_land_in_artifact(self, writer, client) -> None:
        items = _items(5)
        client.post_items = AsyncMock(return_value=_zotero_response(5, failed={0, 3}))

        result = await writer.write_items(items)

        entries = json.loads(writer.failed_items_path.read_text(encoding="utf-8"))
        assert len(entries) == 2
        assert [e["recordId"] for e in entries] == [items[0].record_id, items[3].record_id]
        assert entries[0]["code"] == 412
        assert entries[0]["payload"] == items[0].payload
        assert len(result.successful) == 3

    @pytest.mark.asyncio
    async def test_artifact_is_overwritten(self, writer, client) -> None:
        client.post_items = AsyncMock(return_value=_zotero_response(3, failed={0, 1, 2}))
        await writer.write_items(_items(3))
        client.post_items = AsyncMock(return_value=_zotero_response(3, failed={2}))
        await writer.write_items(_items(3))

        entries = json.loads(writer.failed_items_path.read_text(encoding="utf-8"))
        assert len(entries) == 1

    @pytest.mark.asyncio
    async def test_no_artifact_without_failures(self, writer, client) -> None:
        client.post_items = AsyncMock(return_value=_zotero_response(2, failed=set()))

        await writer.write_items(_items(2))

        assert not writer.failed_items_path.exists()

    @pytest.mark.asyncio
    async def test_empty_batch_raises_without_calling_zotero(self, writer, client) -> None:
        with pytest.raises(ValidationException):
            await writer.write_items([])
        client.post_items.assert_not_called()

    @pytest.mark.asyncio
    async def test_oversize_batch_raises_without_calling_zotero(self, writer, client) -> None:
        with pytest.raises(ValidationException):
            await writer.write_items(_items(51))
        client.post_items.assert_not_called()


class TestCreateCollection:

    @pytest.mark.asyncio
    async def test_creates_under_series_parent(self, writer, client) -> None:
        client.post_collections = AsyncMock(return_value={"success": {"0": "NEWCOL01"}, "failed": {}})

        key = await writer.create_collection("Nature's Fury", CollectionParent.SERIES)

        assert key == "NEWCOL01"
        client.post_collections.assert_awaited_once_with(
            [{"name": "Nature's Fury", "parentCollection": "HYQEFRGR"}]
        )

    @pytest.mark.asyncio
    async def test_accepts_parent_as_string(self, writer, client) -> None:
        client.post_collections = AsyncMock(return_value={"success": {"0": "NEWCOL02"}})

        assert await writer.create_collection("Glaciers", "topics") == "NEWCOL02"
        assert client.post_collections.await_args.args[0][0]["parentCollection"] == "EGB8TQZ8"

    @pytest.mark.asyncio
    async def test_unknown_parent_fails_without_calling_zotero(self, writer, client) -> None:
        with pytest.raises(UnknownCollectionParentException) as exc_info:
            await writer.create_collection("Algo", "playlists")

        assert exc_info.value.details["valid_parents"] == ["series", "topics"]
        client.post_collections.assert_not_called()

    @pytest.mark.asyncio
    async def test_zotero_rejection_raises(self, writer, client) -> None:
        client.post_collections = AsyncMock(
            return_value={"success": {}, "failed": {"0": {"code": 400, "message": "Collection name too long"}}}
        )

        with pytest.raises(ZoteroApiError, match="Collection name too long"):
            await writer.create_collection("x" * 300, CollectionParent.SERIES)
