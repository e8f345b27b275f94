"""
Integracion con la ESOVDB en Airtable (origen de los videos).

- airtable_client: cliente HTTP minimo (requests) con backoff para 429/5xx
- video_mappings: whitelist de fields y proyeccion de un record a fila JSON
- esovdb_repository: lectura paginada con cache + actualizaciones por lotes
"""
