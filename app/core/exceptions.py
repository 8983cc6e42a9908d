"""
Excepciones de dominio del portal.

Los servicios lanzan estas excepciones; los handlers registrados en
app.main las convierten en respuestas JSON con status 404/403/400/409/503:

    {"detail": "Documento con id '7' no encontrado", "code": "DOCUMENTO_NOT_FOUND"}

Nunca se devuelve al cliente el mensaje crudo de la base de datos.
"""
from typing import Any

from fastapi import status


class ErrorPortal(Exception):
    """Base de todos los errores de dominio."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: str = "ERROR_INTERNO",
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.details:
            data["details"] = self.details
        return data


class RecursoNoEncontrado(ErrorPortal):
    """El periodo, formato, documento o proceso referido no existe."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, recurso: str, identificador: Any, message: str | None = None):
        super().__init__(
            message or f"{recurso} con id '{identificador}' no encontrado",
            code=f"{recurso.upper()}_NOT_FOUND",
            details={"recurso": recurso, "id": str(identificador)},
        )


class AccesoNoAutorizado(ErrorPortal):
    """El usuario no tiene el rol o la propiedad requerida."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "No tienes permiso para realizar esta acción"):
        super().__init__(message, code="ACCESO_NO_AUTORIZADO")


class ErrorValidacion(ErrorPortal):
    """Falta un campo obligatorio o la operación no es válida en el estado actual."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, campo: str | None = None):
        super().__init__(
            message,
            code="ERROR_VALIDACION",
            details={"campo": campo} if campo else None,
        )


class ErrorAlmacenamiento(ErrorPortal):
    """Falla de E/S en la base de datos o en el almacenamiento de archivos."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, message: str = "Error temporal de almacenamiento. Intente de nuevo."):
        super().__init__(message, code="ERROR_ALMACENAMIENTO")


class CicloEnCurso(ErrorPortal):
    """Ya hay una ejecución del ciclo de periodos en curso."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str = "El ciclo de periodos ya se está ejecutando; intente más tarde"):
        super().__init__(message, code="CICLO_EN_CURSO")
