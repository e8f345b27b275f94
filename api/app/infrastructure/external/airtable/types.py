"""
Tipos y utilidades puras para la integracion con Airtable.

Se mantienen libres de I/O para poder testearlos fácilmente.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from app.shared.utils.datetime_utils import DateTimeUtils


def build_modified_after_formula(modified_field: str, cursor: datetime) -> str:
    """Fórmula Airtable: registros modificados después de `cursor`."""
    return f"IS_AFTER({{{modified_field}}}, DATETIME_PARSE('{DateTimeUtils.to_iso_z(cursor)}'))"


def build_created_after_formula(cursor: datetime) -> str:
    """Fórmula Airtable: registros creados después de `cursor`."""
    return f"IS_AFTER(CREATED_TIME(), DATETIME_PARSE('{DateTimeUtils.to_iso_z(cursor)}'))"


@dataclass(frozen=True)
class AirtableRecord:
    """Registro Airtable tal como llega de la API."""

    record_id: str
    fields: dict[str, Any]
    created_time: Optional[str] = None

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)


@dataclass(frozen=True)
class AirtablePage:
    """Una página de resultados y el offset para pedir la siguiente (None = fin)."""

    records: list[AirtableRecord] = field(default_factory=list)
    offset: Optional[str] = None


Transform = Callable[[Any], Any]


@dataclass(frozen=True)
class FieldMapping:
    """
    Define la proyección de un field Airtable a una clave de la fila JSON.

    - airtable_field: nombre del field en Airtable
    - key: clave en la fila devuelta por /videos/list
    - transform: función opcional aplicada al valor crudo
    - default: valor cuando el field falta o viene vacío
    """

    airtable_field: str
    key: str
    transform: Optional[Transform] = None
    default: Any = ""
