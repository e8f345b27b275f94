"""
Excepciones relacionadas con la lógica de dominio y las integraciones externas.
"""
from typing import Any, Dict, Optional

from app.shared.exceptions.base import AppException


class DomainException(AppException):
    """Excepción base para errores de dominio."""

    def __init__(self, message: str, error_code: str = "DOMAIN_ERROR", details=None):
        super().__init__(
            message=message,
            status_code=400,
            error_code=error_code,
            details=details
        )


class ValidationException(DomainException):
    """Excepción para errores de validación (lotes vacíos, lotes demasiado grandes)."""

    def __init__(self, message: str, field: str = None):
        details = {"field": field} if field else None
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details=details
        )


class UnknownCollectionParentException(DomainException):
    """Excepción cuando se pide crear una colección bajo un padre no reconocido."""

    def __init__(self, parent: Any, valid_parents: list[str]):
        super().__init__(
            message=f"Colección padre no reconocida: '{parent}'",
            error_code="UNKNOWN_COLLECTION_PARENT",
            details={
                "parent_provided": str(parent),
                "valid_parents": valid_parents
            }
        )


class UpstreamApiException(AppException):
    """
    Error de integración con una API externa (Airtable, Zotero).

    Se responde con 400 para mantener el contrato del endpoint de listado:
    un fallo aguas arriba llega al cliente como JSON de error.
    """

    service: str = "upstream"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        merged: Dict[str, Any] = {"service": self.service}
        if status_code is not None:
            merged["upstream_status"] = status_code
        merged.update(details or {})
        super().__init__(
            message=message,
            status_code=400,
            error_code="UPSTREAM_ERROR",
            details=merged,
        )
        self.upstream_status = status_code
