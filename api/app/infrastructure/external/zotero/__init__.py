"""
Integracion con la biblioteca Zotero (destino de los items).

- zotero_client: cliente httpx de la Web API v3
- zotero_writer: escritura masiva particionada y creacion de colecciones
"""
