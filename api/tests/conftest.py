"""
Configuración de fixtures para pytest.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from app.infrastructure.cache import ResponseCache
from app.infrastructure.concurrency import RateLimiter
from app.infrastructure.external.airtable.esovdb_repository import EsovdbRepository
from app.infrastructure.external.airtable.types import AirtablePage, AirtableRecord


def make_video_record(index: int, **fields: Any) -> AirtableRecord:
    """Registro de la tabla Videos con fields minimos y realistas."""
    base: Dict[str, Any] = {
        "Title": f"Video {index}",
        "URL": f"https://youtu.be/video{index}",
        "Year": 2000 + index,
        "Running Time": 60 * index + 5,
        "Record ID": f"rec{index:014d}",
        "ESOVDBID": index,
        "Presenter First Name": ["Jane"],
        "Presenter Last Name": ["Doe"],
        "ISO Added": "2020-12-07T21:55:43.000Z",
        "Modified": f"2021-01-{index:02d}T00:00:00.000Z",
    }
    base.update(fields)
    return AirtableRecord(record_id=f"rec{index:014d}", fields=base)


class FakeAirtableClient:
    """
    Cliente Airtable en memoria.

    Pagina `records` con el page_size pedido y respeta maxRecords como la
    API real. `fail_on_call` hace fallar la llamada N (1-based) de list_page.
    """

    def __init__(self, records: List[AirtableRecord], fail_on_call: Optional[int] = None):
        self.records = records
        self.fail_on_call = fail_on_call
        self.list_calls: List[Dict[str, Any]] = []
        self.update_calls: List[Dict[str, Any]] = []

    def list_page(self, table_name: str, **kwargs: Any) -> AirtablePage:
        self.list_calls.append({"table": table_name, **kwargs})
        if self.fail_on_call is not None and len(self.list_calls) == self.fail_on_call:
            from app.infrastructure.external.airtable.airtable_client import AirtableApiError
            raise AirtableApiError("Airtable request falló 422: INVALID_REQUEST", status_code=422)

        pool = self.records
        if kwargs.get("max_records"):
            pool = pool[: kwargs["max_records"]]
        start = int(kwargs.get("offset") or 0)
        end = start + kwargs["page_size"]
        offset = str(end) if end < len(pool) else None
        return AirtablePage(records=pool[start:end], offset=offset)

    def update_records(self, table_name: str, updates: List[Dict[str, Any]]) -> List[AirtableRecord]:
        self.update_calls.append({"table": table_name, "updates": updates})
        return [AirtableRecord(record_id=u["id"], fields=u["fields"]) for u in updates]


@pytest.fixture
def fast_limiter() -> RateLimiter:
    """Limitador sin espera entre llamadas."""
    return RateLimiter(0, name="test")


@pytest.fixture
def response_cache(tmp_path) -> ResponseCache:
    return ResponseCache(tmp_path / "cache")


@pytest.fixture
def five_videos() -> List[AirtableRecord]:
    return [make_video_record(i) for i in range(1, 6)]


@pytest.fixture
def fake_airtable(five_videos) -> FakeAirtableClient:
    return FakeAirtableClient(five_videos)


@pytest.fixture
def repository(fake_airtable, fast_limiter, response_cache) -> EsovdbRepository:
    return EsovdbRepository(
        fake_airtable,
        fast_limiter,
        response_cache,
        videos_table="Videos",
        series_table="Series",
        view="All Online Videos",
    )


@pytest.fixture
def make_record():
    """Fabrica de registros de Videos (ver make_video_record)."""
    return make_video_record


@pytest.fixture
def airtable_factory():
    """Fabrica de FakeAirtableClient para escenarios a medida."""
    return FakeAirtableClient
