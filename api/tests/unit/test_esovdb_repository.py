"""
Tests unitarios para EsovdbRepository (listado paginado con cache y updates por lotes).
"""
from __future__ import annotations

import math
from datetime import datetime, timezone

import pytest

from app.domain.entities.video import RecordUpdate, VideoQuery
from app.infrastructure.cache import build_cache_key
from app.infrastructure.external.airtable.airtable_client import AirtableApiError
from app.infrastructure.external.airtable.esovdb_repository import EsovdbRepository, build_filter_formula
from app.shared.exceptions.domain import ValidationException


class TestListVideos:

    @pytest.mark.asyncio
    async def test_page_two_of_five_rows(self, repository, fake_airtable, response_cache) -> None:
        """pageSize=2, page=2 -> filas 3 y 4; se recorren y cachean las 3 paginas."""
        query = VideoQuery.from_request(page=2, page_size=2)

        result = await repository.list_videos(query)

        assert [row["title"] for row in result.rows] == ["Video 3", "Video 4"]
        assert result.total_records == 5
        assert result.from_cache is False
        assert len(fake_airtable.list_calls) == 3

        cached = response_cache.read(build_cache_key(query.route_path, query.cache_params()))
        assert [row["title"] for row in cached] == [f"Video {i}" for i in range(1, 6)]

    @pytest.mark.asyncio
    async def test_repeat_query_hits_cache(self, repository, fake_airtable) -> None:
        query = VideoQuery.from_request(page=2, page_size=2)

        first = await repository.list_videos(query)
        calls_after_first = len(fake_airtable.list_calls)
        second = await repository.list_videos(query)

        assert len(fake_airtable.list_calls) == calls_after_first
        assert second.from_cache is True
        assert second.rows == first.rows

    @pytest.mark.asyncio
    async def test_queries_differing_in_one_filter_do_not_share_cache(self, repository, fake_airtable) -> None:
        cursor = datetime(2021, 1, 1, tzinfo=timezone.utc)

        await repository.list_videos(VideoQuery.from_request(modified_after=cursor))
        await repository.list_videos(VideoQuery.from_request(created_after=cursor))

        assert len(fake_airtable.list_calls) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page_size, max_records", [(2, 3), (2, 10), (1, 4), (3, None), (100, None)])
    async def test_returned_rows_and_page_requests(
        self, repository, fake_airtable, page_size, max_records
    ) -> None:
        """Se retornan min(M, total) filas en ceil(filas / P) requests."""
        query = VideoQuery.from_request(page_size=page_size, max_records=max_records)

        result = await repository.list_videos(query)

        expected = min(max_records or 5, 5)
        assert len(result.rows) == expected
        assert len(fake_airtable.list_calls) == math.ceil(expected / query.page_size)

    @pytest.mark.asyncio
    async def test_max_records_enforced_even_if_upstream_ignores_it(
        self, airtable_factory, make_record, fast_limiter, response_cache
    ) -> None:
        client = airtable_factory([make_record(i) for i in range(1, 8)])
        client.list_page_original = client.list_page

        def ignore_max_records(table_name, **kwargs):
            kwargs["max_records"] = None
            return client.list_page_original(table_name, **kwargs)

        client.list_page = ignore_max_records
        repository = EsovdbRepository(client, fast_limiter, response_cache)

        result = await repository.list_videos(VideoQuery.from_request(page_size=2, max_records=3))

        assert len(result.rows) == 3
        assert len(client.list_calls) == 2

    @pytest.mark.asyncio
    async def test_page_error_propagates_without_cache_write(
        self, airtable_factory, five_videos, fast_limiter, response_cache
    ) -> None:
        client = airtable_factory(five_videos, fail_on_call=2)
        repository = EsovdbRepository(client, fast_limiter, response_cache)
        query = VideoQuery.from_request(page_size=2)

        with pytest.raises(AirtableApiError):
            await repository.list_videos(query)

        assert response_cache.read(build_cache_key(query.route_path, query.cache_params())) is None
        assert not list(response_cache.cache_dir.glob("*.json"))

    @pytest.mark.asyncio
    async def test_request_options(self, repository, fake_airtable) -> None:
        await repository.list_videos(VideoQuery.from_request(page_size=5))

        call = fake_airtable.list_calls[0]
        assert call["table"] == "Videos"
        assert call["view"] == "All Online Videos"
        assert call["sort"] == [{"field": "Modified", "direction": "desc"}]
        assert "Zotero Key" in call["fields"]
        assert "Presenter First Name" in call["fields"]
        assert call["filter_formula"] is None

    @pytest.mark.asyncio
    async def test_projection(self, airtable_factory, make_record, fast_limiter, response_cache) -> None:
        client = airtable_factory([make_record(3, Topic="The Anthropocene")])
        repository = EsovdbRepository(client, fast_limiter, response_cache, tz=timezone.utc)

        result = await repository.list_videos(VideoQuery.from_request())
        row = result.rows[0]

        assert row["runningTime"] == "3:05"
        assert row["presenters"] == [{"firstName": "Jane", "lastName": "Doe"}]
        assert row["accessDate"] == "2020-12-07 21:55:43"
        assert row["topic"] == "The Anthropocene"
        assert row["learnMore"] is None
        assert row["zoteroKey"] == ""
        assert row["recordId"] == "rec00000000000003"


class TestFilterFormula:

    def test_modified_after(self) -> None:
        query = VideoQuery.from_request(modified_after=datetime(2021, 1, 1, tzinfo=timezone.utc))
        assert build_filter_formula(query) == (
            "IS_AFTER({Modified}, DATETIME_PARSE('2021-01-01T00:00:00Z'))"
        )

    def test_created_after_wins_when_both_given(self) -> None:
        query = VideoQuery.from_request(
            modified_after=datetime(2021, 1, 1, tzinfo=timezone.utc),
            created_after=datetime(2022, 2, 2, tzinfo=timezone.utc),
        )
        assert build_filter_formula(query) == (
            "IS_AFTER(CREATED_TIME(), DATETIME_PARSE('2022-02-02T00:00:00Z'))"
        )

    def test_no_filters(self) -> None:
        assert build_filter_formula(VideoQuery.from_request()) is None


class TestUpdateRecords:

    @pytest.mark.asyncio
    async def test_chunks_of_fifty_in_order(self, repository, fake_airtable) -> None:
        updates = [RecordUpdate(id=f"rec{i:014d}", fields={"Zotero Version": i}) for i in range(120)]

        updated = await repository.update_records("Videos", updates)

        sizes = [len(call["updates"]) for call in fake_airtable.update_calls]
        assert sizes == [50, 50, 20]
        sent_ids = [u["id"] for call in fake_airtable.update_calls for u in call["updates"]]
        assert sent_ids == [u.id for u in updates]
        assert [r.record_id for r in updated] == [u.id for u in updates]

    @pytest.mark.asyncio
    async def test_accepts_plain_dicts(self, repository, fake_airtable) -> None:
        await repository.update_records("Videos", [{"id": "rec1", "fields": {"Title": "X"}}])

        assert fake_airtable.update_calls[0]["updates"] == [{"id": "rec1", "fields": {"Title": "X"}}]

    @pytest.mark.asyncio
    async def test_empty_updates_raise(self, repository, fake_airtable) -> None:
        with pytest.raises(ValidationException):
            await repository.update_records("Videos", [])
        assert fake_airtable.update_calls == []

    @pytest.mark.asyncio
    async def test_malformed_update_raises(self, repository) -> None:
        with pytest.raises(ValidationException):
            await repository.update_records("Videos", [{"fields": {"Title": "X"}}])

    @pytest.mark.asyncio
    async def test_update_series_collection(self, repository, fake_airtable) -> None:
        await repository.update_series_collection("recSERIES000000001", "ABCD1234")

        assert fake_airtable.update_calls == [
            {
                "table": "Series",
                "updates": [{"id": "recSERIES000000001", "fields": {"Zotero Key": "ABCD1234"}}],
            }
        ]
