"""
DTOs de los endpoints de videos y sync.

Los nombres de los campos siguen el JSON que envian las automatizaciones
de Airtable (camelCase); en Python se usan en snake_case via alias.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

Scalar = Union[str, int, float]


class RecordUpdateDTO(BaseModel):
    """Parche para un registro de Airtable: {id, fields}."""

    id: str = Field(..., min_length=1, description="Id del registro (recXXXXXXXXXXXXXX)")
    fields: Dict[str, Any] = Field(..., description="Fields a actualizar")


class VideoSyncRecordDTO(BaseModel):
    """
    Video de la ESOVDB tal como llega a /sync.

    Un registro con `zoteroKey` y `zoteroVersion` produce una actualizacion
    en Zotero; sin ambos, una creacion.
    """

    record_id: str = Field(..., alias="recordId", min_length=1)
    title: Optional[str] = None
    url: Optional[str] = None
    year: Optional[Scalar] = None
    desc: Optional[str] = None
    running_time: Optional[Scalar] = Field(None, alias="runningTime", description="Duracion en segundos")
    format: Optional[str] = None
    topic: Optional[str] = None
    tags_list: Optional[str] = Field(None, alias="tagsList")
    learn_more: Optional[str] = Field(None, alias="learnMore")
    series: Optional[str] = None
    series_count: Optional[Scalar] = Field(None, alias="seriesCount")
    vol: Optional[Scalar] = None
    no: Optional[Scalar] = None
    publisher: Optional[str] = None
    presenters_first_name: List[str] = Field(default_factory=list, alias="presentersFirstName")
    presenters_last_name: List[str] = Field(default_factory=list, alias="presentersLastName")
    language: Optional[str] = None
    location: Optional[str] = None
    plus_code: Optional[str] = Field(None, alias="plusCode")
    provider: Optional[str] = None
    esovdb_id: Optional[Scalar] = Field(None, alias="esovdbId")
    access_date: Optional[str] = Field(None, alias="accessDate", description="Fecha ISO-8601")
    zotero_key: Optional[str] = Field(None, alias="zoteroKey")
    zotero_version: Optional[int] = Field(None, alias="zoteroVersion")
    zotero_series: Optional[str] = Field(None, alias="zoteroSeries", description="Key de la coleccion de la serie")
    series_id: Optional[str] = Field(None, alias="seriesId", description="Id del registro en la tabla Series")

    class Config:
        populate_by_name = True
        extra = "ignore"

    @field_validator(
        "title", "desc", "format", "topic", "tags_list", "learn_more", "series", "publisher",
        "language", "location", "plus_code", "provider", "access_date", "zotero_key",
        "zotero_series", "series_id",
        mode="before",
    )
    @classmethod
    def unwrap_lookup(cls, v: Any) -> Any:
        """Los lookups de Airtable llegan como listas de un elemento."""
        if isinstance(v, list):
            v = v[0] if v else None
        if v == "":
            return None
        return v

    @field_validator("zotero_version", mode="before")
    @classmethod
    def empty_version_is_none(cls, v: Any) -> Any:
        if isinstance(v, list):
            v = v[0] if v else None
        return None if v == "" else v

    @field_validator("presenters_first_name", "presenters_last_name", mode="before")
    @classmethod
    def presenters_as_list(cls, v: Any) -> Any:
        if v is None or v == "":
            return []
        if isinstance(v, str):
            return [v]
        return v

    @property
    def has_zotero_token(self) -> bool:
        return bool(self.zotero_key) and bool(self.zotero_version)
