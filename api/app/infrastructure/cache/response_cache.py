"""
Cache en disco de resultados completos de consultas a Airtable.

Diseño:
- Clave = firma normalizada de la consulta (ruta + query params ordenados).
  Dos consultas que difieren en un solo filtro nunca comparten entrada.
- Valor = el resultado completo, ya proyectado, serializado como JSON.
- Sin TTL ni politica de desalojo: una entrada solo se reemplaza cuando la
  misma consulta se repite y termina sin errores.
- Solo se escribe un resultado completo; nunca uno parcial.

Lectura y escritura son sincronas respecto de la request que atienden.
"""

from __future__ import annotations

import hashlib
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Mapping, Optional
from urllib.parse import urlencode

from loguru import logger


def build_cache_key(path: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """
    Construye la firma normalizada de una consulta.

    - Descarta parametros con valor None
    - Ordena por nombre de parametro
    - Serializa como query string

    Ejemplo:
        build_cache_key("/videos/list/2", {"pageSize": 2, "maxRecords": None})
        -> '/videos/list/2?pageSize=2'
    """
    normalized_path = "/" + path.strip("/")
    items = sorted(
        (str(k), str(v)) for k, v in (params or {}).items() if v is not None
    )
    if not items:
        return normalized_path
    return f"{normalized_path}?{urlencode(items)}"


class ResponseCache:
    """
    Almacen clave -> resultado en disco, un archivo JSON por clave.
    """

    def __init__(self, cache_dir: str | Path) -> None:
        self._dir = Path(cache_dir)

    @property
    def cache_dir(self) -> Path:
        return self._dir

    def path_for(self, key: str) -> Path:
        """Archivo asociado a una clave (hash estable de la firma)."""
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self._dir / f"{digest}.json"

    def read(self, key: str) -> Optional[list[Any]]:
        """
        Retorna el resultado cacheado para `key`, o None si no existe.

        Una entrada ilegible se trata como miss (se registra y se ignora).
        """
        path = self.path_for(key)
        if not path.is_file():
            return None
        try:
            with path.open("r", encoding="utf-8") as fh:
                payload = json.load(fh)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Entrada de cache ilegible para {key}: {e}")
            return None

        if not isinstance(payload, dict) or payload.get("key") != key:
            logger.warning(f"Entrada de cache inconsistente para {key}, se ignora")
            return None
        return payload.get("data")

    def write(self, key: str, data: list[Any]) -> None:
        """
        Guarda el resultado completo para `key`, reemplazando el anterior.

        La escritura es atomica: se escribe a un archivo temporal y luego se
        reemplaza el destino, de modo que un lector nunca ve un JSON a medias.
        """
        self._dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        fd, tmp_name = tempfile.mkstemp(dir=self._dir, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump({"key": key, "data": data}, fh, ensure_ascii=False)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug(f"Cache escrita para {key} ({len(data)} registros)")

    def clear(self) -> int:
        """Elimina todas las entradas. Retorna cuantas se borraron."""
        if not self._dir.is_dir():
            return 0
        removed = 0
        for entry in self._dir.glob("*.json"):
            entry.unlink(missing_ok=True)
            removed += 1
        logger.info(f"Cache vaciada: {removed} entrada(s) eliminada(s)")
        return removed
