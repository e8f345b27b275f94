"""
Escritura de items y colecciones en la biblioteca Zotero.

Zotero responde a una escritura masiva con objetos indexados por la
posicion del item en el lote enviado ("0", "1", ...). Esa posicion es la
que permite volver al video de origen (`PreparedItem.record_id`).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from loguru import logger

from app.domain.entities.video import (
    CollectionParent,
    FailedItem,
    PreparedItem,
    WriteResult,
    WrittenItem,
)
from app.shared.exceptions.domain import UnknownCollectionParentException, ValidationException
from app.shared.utils.batching import MAX_BATCH_SIZE

from .zotero_client import ZoteroApiError, ZoteroClient


def _plural(n: int, word: str = "item") -> str:
    return f"{n} {word}{'' if n == 1 else 's'}"


class ZoteroWriter:
    """
    TargetWriter sobre Zotero.

    - write_items: exactamente un POST por llamada, max 50 items
    - create_collection: crea una coleccion hija bajo un padre fijo
    """

    def __init__(
        self,
        client: ZoteroClient,
        *,
        parent_collections: Mapping[CollectionParent, str],
        failed_items_path: str | Path = "failed.json",
        max_batch_size: int = MAX_BATCH_SIZE,
    ) -> None:
        self._client = client
        self._parents = dict(parent_collections)
        self._failed_path = Path(failed_items_path)
        self._max_batch_size = max_batch_size

    @property
    def failed_items_path(self) -> Path:
        return self._failed_path

    async def get_template(self) -> dict[str, Any]:
        return await self._client.get_template()

    async def write_items(self, items: Sequence[PreparedItem]) -> WriteResult:
        """
        Crea/actualiza un lote de items y particiona la respuesta.

        Items sin `key`/`version` se crean; con ambos se actualizan (Zotero
        rechaza la escritura si la version esta desactualizada).

        Raises:
            ValidationException: Lote vacio o mayor que el maximo.
            ZoteroApiError: Fallo de la request completa.
        """
        if not items:
            raise ValidationException("No hay items para escribir en Zotero", field="items")
        if len(items) > self._max_batch_size:
            raise ValidationException(
                f"Un lote admite como maximo {self._max_batch_size} items (recibidos {len(items)})",
                field="items",
            )

        response = await self._client.post_items([item.payload for item in items])
        result = self._partition(items, response)

        if result.successful:
            logger.success(f"{_plural(len(result.successful))} escritos en Zotero")
        if result.unchanged:
            logger.info(f"{_plural(len(result.unchanged))} sin cambios")
        if result.failed:
            logger.error(f"Fallaron {_plural(len(result.failed))} en Zotero")
            self.write_failed_artifact(result.failed)

        return result

    def _partition(self, items: Sequence[PreparedItem], response: Mapping[str, Any]) -> WriteResult:
        result = WriteResult()

        def _item_at(index: str) -> Optional[PreparedItem]:
            try:
                return items[int(index)]
            except (ValueError, IndexError):
                logger.warning(f"Zotero devolvio un indice desconocido: {index}")
                return None

        for index, obj in sorted((response.get("successful") or {}).items(), key=lambda kv: int(kv[0])):
            item = _item_at(index)
            if item is None:
                continue
            data = obj.get("data") or {}
            result.successful.append(
                WrittenItem(
                    record_id=item.record_id,
                    key=obj.get("key") or data.get("key"),
                    version=obj.get("version", data.get("version")),
                    data=data,
                )
            )

        for index in sorted((response.get("unchanged") or {}).keys(), key=int):
            item = _item_at(index)
            if item is not None:
                result.unchanged.append(item.record_id)

        for index, obj in sorted((response.get("failed") or {}).items(), key=lambda kv: int(kv[0])):
            item = _item_at(index)
            if item is None:
                continue
            result.failed.append(
                FailedItem(
                    record_id=item.record_id,
                    code=obj.get("code"),
                    message=obj.get("message", ""),
                    payload=item.payload,
                )
            )

        return result

    def write_failed_artifact(self, failed: Sequence[FailedItem]) -> None:
        """Sobrescribe el archivo forense con los items fallidos indicados."""
        entries = [
            {
                "recordId": f.record_id,
                "code": f.code,
                "message": f.message,
                "payload": f.payload,
            }
            for f in failed
        ]
        try:
            if self._failed_path.parent != Path(""):
                self._failed_path.parent.mkdir(parents=True, exist_ok=True)
            self._failed_path.write_text(json.dumps(entries, ensure_ascii=False, indent=2), encoding="utf-8")
            logger.info(f"Items fallidos guardados en {self._failed_path}")
        except OSError as e:
            logger.error(f"No se pudo escribir {self._failed_path}: {e}")

    async def create_collection(self, name: str, parent: CollectionParent | str) -> str:
        """
        Crea la coleccion `name` bajo el padre fijo indicado.

        Returns:
            Key de la nueva coleccion.

        Raises:
            UnknownCollectionParentException: Padre no reconocido (no se llama a Zotero).
            ZoteroApiError: Zotero no creo la coleccion.
        """
        valid = [p.value for p in self._parents]
        try:
            parent_kind = CollectionParent(parent)
        except ValueError:
            raise UnknownCollectionParentException(parent, valid)
        parent_key = self._parents.get(parent_kind)
        if not parent_key:
            raise UnknownCollectionParentException(parent, valid)

        logger.info(f"No existe la coleccion '{name}' en {parent_kind.value}, creandola...")
        response = await self._client.post_collections([{"name": name, "parentCollection": parent_key}])

        success = response.get("success") or {}
        if success:
            key = success.get("0") or next(iter(success.values()))
            logger.success(f"Coleccion '{name}' creada en {parent_kind.value} ({key})")
            return key

        failed = list((response.get("failed") or {}).values())
        message = failed[0].get("message", "") if failed else ""
        raise ZoteroApiError(
            f"No se pudo crear la coleccion '{name}'" + (f" ({message})" if message else "")
        )
