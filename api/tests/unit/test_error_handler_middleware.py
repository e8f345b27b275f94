"""
Tests unitarios para ErrorHandlerMiddleware y el manejador global de AppException.
"""
from __future__ import annotations

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.api.middlewares.error_handler import ErrorHandlerMiddleware


def _app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(ErrorHandlerMiddleware)

    @app.get("/boom")
    async def boom():
        raise RuntimeError("fallo {inesperado}")

    @app.get("/ok")
    async def ok():
        return {"ok": True}

    return app


@pytest.mark.asyncio
async def test_unhandled_error_becomes_500_json() -> None:
    transport = ASGITransport(app=_app())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/boom")

    assert response.status_code == 500
    assert response.json()["error"] == "INTERNAL_SERVER_ERROR"


@pytest.mark.asyncio
async def test_successful_request_passes_through() -> None:
    transport = ASGITransport(app=_app())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/ok")

    assert response.status_code == 200
    assert response.json() == {"ok": True}


@pytest.mark.asyncio
async def test_health_reports_integrations() -> None:
    from main import create_application

    transport = ASGITransport(app=create_application())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert set(data["integrations"]) == {"airtable", "zotero", "discord"}
