"""
Middleware para manejo centralizado de errores no previstos.

Las AppException las resuelve el manejador global de main.py; aqui solo
llegan los errores que nadie convirtio (bugs, fallos de librerias).
"""
import time

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from loguru import logger

INTERNAL_ERROR_BODY = {
    "error": "INTERNAL_SERVER_ERROR",
    "message": "Ha ocurrido un error interno del servidor",
    "details": {},
}


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Convierte excepciones no manejadas en un 500 JSON y registra cada request."""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        route = f"{request.method} {request.url.path}"
        try:
            response = await call_next(request)
        except Exception as exc:
            # loguru interpreta llaves en el mensaje
            error_msg = str(exc).replace("{", "{{").replace("}", "}}")
            logger.opt(exception=exc).error(f"Error no manejado en {route}: {error_msg}")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=dict(INTERNAL_ERROR_BODY),
            )

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug(f"{route} -> {response.status_code} ({elapsed_ms:.0f} ms)")
        return response
