"""
Cliente mínimo de Airtable REST API (sin SDKs externos).

Requisitos cubiertos:
- requests
- paginación por offset, una página por llamada
- rate-limit/backoff (429, 5xx)
- actualización parcial (PATCH) de registros

El cliente es síncrono: el repositorio lo ejecuta en un thread a través
del RateLimiter de Airtable para no bloquear el event loop.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Optional

import requests

from app.shared.exceptions.domain import UpstreamApiException

from .types import AirtablePage, AirtableRecord


@dataclass(frozen=True)
class AirtableCredentials:
    token: str
    base_id: str


class AirtableApiError(UpstreamApiException):
    """Error de integración con Airtable."""

    service = "airtable"


class AirtableClient:
    """
    Cliente HTTP de Airtable.

    Importante:
    - No hace cast de tipos de campos: eso se decide en video_mappings.
    - No aplica rate limiting propio: el espaciado lo impone el RateLimiter
      compartido; aquí solo se reintenta ante 429/5xx.
    """

    def __init__(
        self,
        credentials: AirtableCredentials,
        *,
        session: Optional[requests.Session] = None,
        base_url: str = "https://api.airtable.com/v0",
        timeout_s: int = 30,
        max_retries: int = 6,
        min_backoff_s: float = 0.8,
        max_backoff_s: float = 20.0,
    ) -> None:
        self._creds = credentials
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._max_retries = max_retries
        self._min_backoff_s = min_backoff_s
        self._max_backoff_s = max_backoff_s
        self._session = session or requests.Session()

    def _table_url(self, table_name: str) -> str:
        return f"{self._base_url}/{self._creds.base_id}/{table_name}"

    def list_page(
        self,
        table_name: str,
        *,
        page_size: int = 100,
        offset: Optional[str] = None,
        view: Optional[str] = None,
        fields: Optional[list[str]] = None,
        sort: Optional[list[dict[str, str]]] = None,
        filter_formula: Optional[str] = None,
        max_records: Optional[int] = None,
    ) -> AirtablePage:
        """
        Obtiene una página de registros.

        El caller continúa la paginación pasando el `offset` de la página previa.
        """
        query: list[tuple[str, Any]] = [("pageSize", page_size)]
        if offset:
            query.append(("offset", offset))
        if view:
            query.append(("view", view))
        if filter_formula:
            query.append(("filterByFormula", filter_formula))
        if max_records:
            query.append(("maxRecords", max_records))

        # Serialización manual de 'sort' para evitar "sort=field&sort=direction"
        for i, s in enumerate(sort or []):
            query.append((f"sort[{i}][field]", s["field"]))
            query.append((f"sort[{i}][direction]", s.get("direction", "asc")))

        # Airtable permite repetir "fields[]" en querystring.
        for f in fields or []:
            query.append(("fields[]", f))

        payload = self._request_json("GET", self._table_url(table_name), query=query)
        records = [self._to_record(rec) for rec in payload.get("records") or []]
        return AirtablePage(records=records, offset=payload.get("offset"))

    def update_records(self, table_name: str, updates: list[dict[str, Any]]) -> list[AirtableRecord]:
        """
        Actualiza registros de forma no destructiva (PATCH).

        Args:
            updates: [{"id": "recXXXX", "fields": {"Field": valor, ...}}, ...]

        Returns:
            Los registros actualizados tal como los devuelve Airtable.
        """
        body = {
            "records": [{"id": u["id"], "fields": u["fields"]} for u in updates],
        }
        payload = self._request_json("PATCH", self._table_url(table_name), json_body=body)
        return [self._to_record(rec) for rec in payload.get("records") or []]

    @staticmethod
    def _to_record(rec: dict[str, Any]) -> AirtableRecord:
        rec_id = rec.get("id")
        if not rec_id:
            # Caso raro; preferimos fallar temprano y visible.
            raise AirtableApiError("Airtable devolvió un record sin 'id'")
        return AirtableRecord(
            record_id=rec_id,
            fields=rec.get("fields") or {},
            created_time=rec.get("createdTime"),
        )

    def _request_json(
        self,
        method: str,
        url: str,
        *,
        query: Optional[list[tuple[str, Any]]] = None,
        json_body: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """
        Request HTTP con backoff para 429/5xx.

        Estrategia:
        - 429: respeta Retry-After si existe, si no exponencial con jitter simple.
        - 5xx: exponencial con jitter.
        - 4xx (no 429): error inmediato (config/auth mal).
        - Error de red: se trata como recuperable.
        """
        headers = {
            "Authorization": f"Bearer {self._creds.token}",
            "Content-Type": "application/json",
        }

        for attempt in range(self._max_retries + 1):
            try:
                resp = self._session.request(
                    method=method,
                    url=url,
                    params=query,
                    json=json_body,
                    headers=headers,
                    timeout=self._timeout_s,
                )
            except requests.RequestException as e:
                if attempt >= self._max_retries:
                    raise AirtableApiError(
                        f"Airtable no respondió tras {attempt} reintentos: {e}"
                    ) from e
                time.sleep(self._backoff(attempt))
                continue

            if 200 <= resp.status_code < 300:
                try:
                    return resp.json()
                except ValueError as e:
                    # Ej: pagina HTML de un proxy con status 200
                    raise AirtableApiError(
                        f"Respuesta de Airtable no es JSON: {e}",
                        status_code=resp.status_code,
                    ) from e

            # Errores recuperables
            if resp.status_code == 429 or 500 <= resp.status_code < 600:
                if attempt >= self._max_retries:
                    raise AirtableApiError(
                        f"Airtable error {resp.status_code} tras {attempt} reintentos: {resp.text}",
                        status_code=resp.status_code,
                    )

                retry_after = resp.headers.get("Retry-After")
                if retry_after:
                    try:
                        sleep_s = float(retry_after)
                    except ValueError:
                        sleep_s = self._min_backoff_s
                else:
                    sleep_s = self._backoff(attempt)

                time.sleep(sleep_s)
                continue

            # Errores no recuperables
            raise AirtableApiError(
                f"Airtable request falló {resp.status_code}: {resp.text}",
                status_code=resp.status_code,
            )

        raise AirtableApiError("Airtable request agotó los reintentos")

    def _backoff(self, attempt: int) -> float:
        # Exponencial simple + jitter proporcional
        base = min(self._max_backoff_s, self._min_backoff_s * (2**attempt))
        return base + (0.15 * base)
