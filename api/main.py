"""
Punto de entrada de la API de sincronizacion ESOVDB -> Zotero.

Rutas:
- /videos/...  lectura y actualizacion de la tabla Videos (Airtable)
- /sync        escritura de videos en Zotero y back-sync de sus tokens
- /health      estado del proceso y de la configuracion de integraciones
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from app.core.config import settings, get_cors_origins
from app.core.events import startup_handler, shutdown_handler
from app.api.v1.router import api_router
from app.api.middlewares.error_handler import ErrorHandlerMiddleware
from app.api.middlewares.ip_whitelist import IPWhitelistMiddleware
from app.shared.exceptions.base import AppException


def _register_middlewares(application: FastAPI) -> None:
    # Starlette ejecuta primero el ultimo agregado: errores -> lista blanca -> CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(settings.CORS_ORIGINS),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(IPWhitelistMiddleware, patterns=settings.IP_WHITELIST)
    application.add_middleware(ErrorHandlerMiddleware)


def _register_exception_handlers(application: FastAPI) -> None:
    @application.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        logger.warning(f"{request.method} {request.url.path} -> {exc.status_code} {exc.error_code}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_application() -> FastAPI:
    """
    Factory para crear y configurar la aplicación FastAPI.

    Returns:
        FastAPI: Instancia configurada de la aplicación
    """
    application = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Sincronización de la ESOVDB (Airtable) con Zotero",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    _register_middlewares(application)
    _register_exception_handlers(application)

    application.add_event_handler("startup", startup_handler(application))
    application.add_event_handler("shutdown", shutdown_handler(application))

    # Las rutas viven en la raiz, sin prefijo /api
    application.include_router(api_router)

    @application.get("/health", tags=["Health"])
    async def health_check():
        """Estado de la aplicación y de qué integraciones están configuradas."""
        return {
            "status": "healthy",
            "app_name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "integrations": {
                "airtable": bool(settings.AIRTABLE_API_KEY and settings.AIRTABLE_BASE_ID),
                "zotero": bool(settings.ZOTERO_API_KEY),
                "discord": bool(settings.DISCORD_WEBHOOK_URL),
            },
        }

    return application


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
