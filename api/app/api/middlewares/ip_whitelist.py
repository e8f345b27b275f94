"""
Middleware de lista blanca de IPs.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from loguru import logger

from app.shared.utils.ip_patterns import is_ip_allowed, patterns_to_regex

# Rutas que no se restringen
OPEN_PATHS = {"/health"}


class IPWhitelistMiddleware(BaseHTTPMiddleware):
    """Rechaza con 403 las requests de IPs fuera de la lista blanca."""

    def __init__(self, app, patterns: str = ""):
        super().__init__(app)
        self.whitelist = patterns_to_regex(patterns)

    async def dispatch(self, request: Request, call_next):
        if self.whitelist is None or request.url.path in OPEN_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else None
        if not is_ip_allowed(client_ip, self.whitelist):
            logger.warning(f"Request rechazada desde IP no permitida: {client_ip}")
            return JSONResponse(
                status_code=status.HTTP_403_FORBIDDEN,
                content={
                    "error": "FORBIDDEN",
                    "message": "Acceso prohibido",
                    "details": {}
                }
            )
        return await call_next(request)
