"""
Servicios de aplicacion.

Contiene la logica de negocio reutilizable que no pertenece
a un caso de uso especifico.
"""
from app.application.services.collection_catalog import (
    PARENT_COLLECTIONS,
    TOPIC_COLLECTIONS,
    SeriesCollectionResolver,
    topic_collection,
)
from app.application.services.item_formatter import ItemFormatter

__all__ = [
    # Colecciones de Zotero
    "PARENT_COLLECTIONS",
    "TOPIC_COLLECTIONS",
    "SeriesCollectionResolver",
    "topic_collection",
    # Transformacion ESOVDB -> Zotero
    "ItemFormatter",
]
