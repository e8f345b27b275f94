"""
Endpoints de la tabla Videos de la ESOVDB.

- GET  /videos/list[/{page}]  listado paginado (con cache en disco)
- POST|PUT /videos/update     actualizacion por lotes
- DELETE /videos/cache        vacia la cache de respuestas
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from loguru import logger

from app.application.dto.video_dto import RecordUpdateDTO
from app.application.use_cases.video_use_cases import VideoUseCases
from app.api.v1.dependencies.use_case_deps import get_video_use_cases
from app.domain.entities.video import VideoQuery
from app.shared.exceptions.domain import ValidationException
from app.shared.utils.datetime_utils import DateTimeUtils


router = APIRouter(prefix="/videos", tags=["Videos"])


def _parse_int(raw: Optional[str]) -> Optional[int]:
    """Los parametros numericos invalidos se ignoran, como si no vinieran."""
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def _parse_date(raw: Optional[str], name: str) -> Optional[datetime]:
    if not raw:
        return None
    parsed = DateTimeUtils.from_iso_string(raw)
    if parsed is None:
        logger.warning(f"Parametro {name} invalido ('{raw}'), se ignora")
    return parsed


async def _list(
    page: Optional[str],
    page_size: Optional[str],
    max_records: Optional[str],
    created_after: Optional[str],
    modified_after: Optional[str],
    use_cases: VideoUseCases,
) -> List[Dict[str, Any]]:
    query = VideoQuery.from_request(
        page=_parse_int(page),
        page_size=_parse_int(page_size),
        max_records=_parse_int(max_records),
        created_after=_parse_date(created_after, "createdAfter"),
        modified_after=_parse_date(modified_after, "modifiedAfter"),
    )
    result = await use_cases.list_videos(query)
    return result.rows


@router.get("/list", summary="Listar videos de la ESOVDB")
async def list_videos(
    page_size: Optional[str] = Query(None, alias="pageSize"),
    max_records: Optional[str] = Query(None, alias="maxRecords"),
    created_after: Optional[str] = Query(None, alias="createdAfter"),
    modified_after: Optional[str] = Query(None, alias="modifiedAfter"),
    use_cases: VideoUseCases = Depends(get_video_use_cases),
) -> List[Dict[str, Any]]:
    """
    Retorna todos los videos (o hasta maxRecords), ordenados por Modified desc.
    """
    return await _list(None, page_size, max_records, created_after, modified_after, use_cases)


@router.get("/list/{page}", summary="Listar una pagina de videos de la ESOVDB")
async def list_videos_page(
    page: str,
    page_size: Optional[str] = Query(None, alias="pageSize"),
    max_records: Optional[str] = Query(None, alias="maxRecords"),
    created_after: Optional[str] = Query(None, alias="createdAfter"),
    modified_after: Optional[str] = Query(None, alias="modifiedAfter"),
    use_cases: VideoUseCases = Depends(get_video_use_cases),
) -> List[Dict[str, Any]]:
    """
    Retorna solo las filas de la pagina indicada (1-based). La consulta
    completa igual se recorre y se guarda en cache.
    """
    return await _list(page, page_size, max_records, created_after, modified_after, use_cases)


@router.api_route("/update", methods=["POST", "PUT"], summary="Actualizar videos en la ESOVDB")
async def update_videos(
    updates: List[RecordUpdateDTO],
    use_cases: VideoUseCases = Depends(get_video_use_cases),
) -> List[Dict[str, Any]]:
    """
    Aplica parches {id, fields} a la tabla Videos, en lotes de 50.
    Retorna el mismo arreglo una vez aplicado.
    """
    if not updates:
        raise ValidationException("No hay registros para actualizar", field="updates")
    return await use_cases.update_videos(updates)


@router.delete("/cache", summary="Vaciar la cache de listados")
async def clear_cache(
    use_cases: VideoUseCases = Depends(get_video_use_cases),
) -> Dict[str, int]:
    return {"cleared": use_cases.clear_cache()}
