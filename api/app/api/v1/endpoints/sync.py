"""
Endpoint de sincronizacion ESOVDB -> Zotero.

POST /sync crea items nuevos (y los anuncia en Discord); PUT /sync
actualiza items existentes. El cuerpo es un video o una lista de videos.
"""
from typing import List, Union

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from app.application.dto.video_dto import VideoSyncRecordDTO
from app.application.use_cases.zotero_sync_use_cases import ZoteroSyncUseCases
from app.api.v1.dependencies.use_case_deps import get_zotero_sync_use_cases
from app.domain.entities.video import SyncOperation, SyncStatus


router = APIRouter(prefix="/sync", tags=["Sync"])


@router.api_route("", methods=["POST", "PUT"], summary="Sincronizar videos con Zotero")
async def sync_videos(
    request: Request,
    body: Union[List[VideoSyncRecordDTO], VideoSyncRecordDTO],
    use_cases: ZoteroSyncUseCases = Depends(get_zotero_sync_use_cases),
):
    """
    Ejecuta una pasada completa de sync.

    Respuestas:
    - 200: lista de {id, fields} con los tokens guardados en la ESOVDB
    - 404: Zotero no acepto ningun item
    - 502: Zotero acepto items pero la ESOVDB no se pudo actualizar
    """
    records = body if isinstance(body, list) else [body]
    operation = SyncOperation.CREATE if request.method == "POST" else SyncOperation.UPDATE

    result = await use_cases.sync_all(records, operation)

    if result.has_changes:
        return JSONResponse(content=[p.to_dict() for p in result.synced])
    if result.status == SyncStatus.BACK_SYNC_FAILED:
        return PlainTextResponse(
            "Zotero acepto los items pero no se pudo sincronizar la ESOVDB.",
            status_code=status.HTTP_502_BAD_GATEWAY,
        )
    return PlainTextResponse(
        "Ningun item fue escrito en Zotero.",
        status_code=status.HTTP_404_NOT_FOUND,
    )
