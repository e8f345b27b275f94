"""
Particion de lotes para APIs con tamaño maximo de escritura.
"""
from typing import Iterator, List, Sequence, TypeVar

T = TypeVar("T")

# Tamaño maximo de lote aceptado por Airtable/Zotero en una sola escritura
MAX_BATCH_SIZE = 50


def chunked(items: Sequence[T], size: int = MAX_BATCH_SIZE) -> Iterator[List[T]]:
    """
    Divide `items` en lotes de como maximo `size`, preservando el orden.

    Ejemplo:
        list(chunked([1, 2, 3, 4, 5], 2)) -> [[1, 2], [3, 4], [5]]
    """
    if size < 1:
        raise ValueError("size debe ser >= 1")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


def describe_range(index: int, chunk_len: int, total: int, size: int = MAX_BATCH_SIZE) -> str:
    """
    Texto para logs del rango de un lote, ej: '51-100 de 120'.
    """
    first = index * size + 1
    if chunk_len == 1:
        return f"{first} de {total}"
    return f"{first}-{first + chunk_len - 1} de {total}"
