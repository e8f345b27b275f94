"""
Catalogo de colecciones Zotero de la ESOVDB.

Jerarquia de dos niveles:
- Padres fijos: 'series' y 'topics'
- Hijos de 'topics': predefinidos, mapeados por nombre de topic
- Hijos de 'series': se crean la primera vez que aparece la serie y su key
  se guarda en la tabla Series para no volver a crearla
"""
from __future__ import annotations

from typing import Dict, Optional

from loguru import logger

from app.domain.entities.video import CollectionParent
from app.infrastructure.concurrency import KeyedLock
from app.infrastructure.external.airtable.esovdb_repository import EsovdbRepository
from app.infrastructure.external.zotero.zotero_writer import ZoteroWriter
from app.shared.exceptions.base import AppException


PARENT_COLLECTIONS: Dict[CollectionParent, str] = {
    CollectionParent.SERIES: "HYQEFRGR",
    CollectionParent.TOPICS: "EGB8TQZ8",
}

# Topic de la ESOVDB -> key de su coleccion en Zotero
TOPIC_COLLECTIONS: Dict[str, str] = {
    "Mantle Geodynamics, Geochemistry, Convection, Rheology, & Seismic Imaging and Modeling": "5XQD67DA",
    "Igneous & Metamorphic Petrology, Volcanism, & Hydrothermal Systems": "L6JMIGTE",
    "Alluvial, Pluvial & Terrestrial Sedimentology, Erosion & Weathering, Geomorphology, Karst, Groundwater & Provenance": "BV7G3CIC",
    "Early Earth, Life's Origins, Deep Biosphere, and the Formation of the Planet": "9DK53U7F",
    "Geological Stories, News, Tours, & Field Trips": "XDFHQTC3",
    "History, Education, Careers, Field Work, Economic Geology, & Technology": "M4NKIHBK",
    "Glaciation, Atmospheric Science, Carbon Cycle, & Climate": "AD997U4T",
    "The Anthropocene": "P2WNJD9N",
    "Geo-Archaeology": "UJDCHPB5",
    "Paleoclimatology, Isotope Geochemistry, Radiometric Dating, Deep Time, & Snowball Earth": "L4PLXHN8",
    "Seafloor Spreading, Oceanography, Paleomagnetism, & Geodesy": "NPDV3BHH",
    "Tectonics, Terranes, Structural Geology, & Dynamic Topography": "U3JYUDHI",
    "Seismology, Mass Wasting, Tsunamis, & Natural Disasters": "63TE3Y26",
    "Minerals, Mining & Resources, Crystallography, & Solid-state Chemistry": "YY5W7DB8",
    "Marine & Littoral Sedimentology, Sequence Stratigraphy, Carbonates, Evaporites, Coal, Petroleum, and Mud Volcanism": "37J3LYFL",
    "Planetary Geology, Impact Events, Astronomy, & the Search for Extraterrestrial Life": "HLV7WMZQ",
    "Paleobiology, Mass Extinctions, Fossils, & Evolution": "VYWX6R2B",
}


def topic_collection(topic: Optional[str]) -> Optional[str]:
    """Key de la coleccion del topic, o None si el topic no esta mapeado."""
    if not topic:
        return None
    return TOPIC_COLLECTIONS.get(topic)


class SeriesCollectionResolver:
    """
    Resuelve (y crea si hace falta) la coleccion Zotero de una serie.

    Varias corrutinas de formateo pueden pedir la misma serie a la vez:
    el lock por nombre de serie y el memo nombre -> key garantizan que
    cada serie se crea una sola vez por resolver.

    Uso:
        resolver = SeriesCollectionResolver(writer, repository)
        key = await resolver.resolve("Nature's Fury", series_id="recXXXX")
    """

    def __init__(self, writer: ZoteroWriter, repository: EsovdbRepository) -> None:
        self._writer = writer
        self._repository = repository
        self._locks = KeyedLock(name="series")
        self._known: Dict[str, str] = {}

    def remember(self, series: str, collection_key: str) -> None:
        """Registra una key ya conocida (ej: la que trae el registro)."""
        if series and collection_key:
            self._known.setdefault(series, collection_key)

    async def resolve(self, series: str, series_id: Optional[str] = None) -> Optional[str]:
        """
        Retorna la key de la coleccion de la serie, creandola si no existe.

        Args:
            series: Nombre de la serie
            series_id: Id del registro en la tabla Series (para guardar la key)

        Returns:
            La key, o None si no se pudo crear la coleccion (el item se
            formatea igual, sin la coleccion de serie).
        """
        if not series:
            return None
        if series in self._known:
            return self._known[series]

        async with self._locks.lock(series):
            # Otra corrutina pudo crearla mientras esperabamos el lock
            key = self._known.get(series)
            if key is None:
                try:
                    key = await self._writer.create_collection(series, CollectionParent.SERIES)
                except AppException as e:
                    logger.error(f"No se pudo crear la coleccion de la serie '{series}': {e.message}")
                    return None

                self._known[series] = key
                await self._save_series_key(series, series_id, key)

        # Con la key memorizada ya no hace falta serializar esta serie
        self._locks.remove_lock(series)
        return key

    async def _save_series_key(self, series: str, series_id: Optional[str], key: str) -> None:
        if not series_id:
            logger.warning(f"La serie '{series}' no trae seriesId; la key {key} no se guarda en la ESOVDB")
            return
        try:
            await self._repository.update_series_collection(series_id, key)
            logger.success(f"Key de la coleccion '{series}' guardada en la ESOVDB")
        except AppException as e:
            logger.error(
                f"No se pudo guardar la key {key} de la serie '{series}' ({series_id}) en la ESOVDB: {e.message}"
            )
