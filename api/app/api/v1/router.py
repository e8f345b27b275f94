"""
Router principal de la API v1.
Agrupa todos los endpoints de la version 1.
"""
from fastapi import APIRouter

from app.api.v1.endpoints import sync, videos


# Router principal de la API v1 (montado en la raiz, como las rutas
# que ya consumen las automatizaciones de Airtable)
api_router = APIRouter()

# Incluir routers de endpoints especificos
api_router.include_router(videos.router)
api_router.include_router(sync.router)
